"""Logging shared by the main process and the workers.

Records are stamped with the id of the entry being processed, so that the
messages coming out of a worker pool can be traced back to their entry.
Workers hand their records over a queue to the main process, which alone
writes them out.
"""
import logging
from logging.handlers import QueueHandler, QueueListener
import sys


log = logging.getLogger('lsparse')

FORMAT = '%(levelname)s:[%(entry)s] %(message)s'

current_entry = ''


class EntryFilter(logging.Filter):
    def filter(self, record):
        record.entry = current_entry
        return True


log.addFilter(EntryFilter())


def set_entry(entry_id: str | None):
    """Set the entry that the following records are about."""
    global current_entry
    current_entry = entry_id or ''


def init_logging(queue, level):
    """Sends the records of this process to the main one."""
    log.setLevel(level)
    log.handlers.clear()
    log.propagate = False
    log.addHandler(QueueHandler(queue))


def init_main_logging(queue) -> QueueListener:
    """Writes out the records of all processes to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    listener = QueueListener(queue, handler)
    listener.start()
    return listener
