import argparse
import logging
from multiprocessing import Queue, Pool
import sys
from typing import Iterator

import regex

import abbreviations
from dictionary import process_entry
from errors import EmptyOrthError, ParseError
from lexer import extract_entries
import logger
from logger import log
from output import outline_to_dict, output_keys, output_raw, output_yaml
import parser


LINE_WIDTH = 72

def report_error(err: ParseError):
    total_length = len(err.fragment)
    left = max(
        min(err.index - LINE_WIDTH//2, total_length - LINE_WIDTH),
        0)
    right = min(
        max(left+LINE_WIDTH, err.index + LINE_WIDTH//2),
        total_length)
    text = err.fragment[left:right].replace('\n', ' ')
    log.error('Expected %s\n  %s\n  %s^',
              err.expected, text, ' '*(err.index-left))


OUTPUT_FUNCTIONS = {
    'yaml': output_yaml,
    'raw': output_raw,
    'keys': output_keys,
}


def worker_init(abbreviations_path: str | None, log_queue, log_level):
    logger.init_logging(log_queue, log_level)
    if abbreviations_path:
        abbreviations.AUTHORS.configure(abbreviations_path)


def worker_fn(fragment: str) -> dict:
    logger.set_entry(None)
    try:
        root = parser.parse_entry(fragment)
        keys, data = process_entry(root)
    except ParseError as ex:
        report_error(ex)
        raise
    except EmptyOrthError:
        log.error('Entry without any orth')
        raise
    return {
        'id': data.entry_id,
        'keys': keys,
        'n': data.n,
        'outline': outline_to_dict(data.outline),
        'entry': data.entry.to_string(),
    }


def execute_multi_process(jobs, entries, output_fn, *args):
    """Processes the entries in the specified number of concurrent
    processes."""
    counter = 0
    with Pool(processes=jobs,
              initializer=worker_init,
              initargs=args) as pool:
        for result in pool.imap(worker_fn, entries):
            counter += 1
            output_fn(result)
    print('%d entries processed' % counter, file=sys.stderr)


def execute_single_process(entries, output_fn, *args):
    """Processes the entries in a single process."""
    worker_init(*args)
    for entry in entries:
        output_fn(worker_fn(entry))


def select_entry(entries: Iterator[str], entry_id: str) -> Iterator[str]:
    """Keep only the entry with the given id."""
    pattern = regex.compile(r'\bid=["\']' + regex.escape(entry_id) + r'["\']')
    for entry in entries:
        if pattern.search(entry.split('>', 1)[0]):
            yield entry
            return


def main(args: argparse.Namespace):
    output_fn = OUTPUT_FUNCTIONS[args.format]

    entries = extract_entries(args.infile)
    if args.entry is not None:
        entries = select_entry(entries, args.entry)

    log_queue = Queue()
    log_level = logging.DEBUG if args.verbose else logging.INFO
    listener = logger.init_main_logging(log_queue)

    try:
        if args.jobs:
            execute_multi_process(
                args.jobs,
                entries, output_fn,
                args.abbreviations, log_queue, log_level)
        else:
            execute_single_process(
                entries, output_fn,
                args.abbreviations, log_queue, log_level)
    except (ParseError, EmptyOrthError) as ex:
        listener.stop()
        print('Processing aborted: %s' % ex, file=sys.stderr)
        sys.exit(1)

    listener.stop()


if __name__ == "__main__":
    p = argparse.ArgumentParser(
        description='Process Lewis & Short entries from a Perseus XML file')
    p.add_argument(
        'infile',
        type=argparse.FileType('r', encoding='utf-8'),
        help='the Perseus XML file')
    p.add_argument(
        '--entry',
        help='process only the entry with the id ENTRY')
    p.add_argument(
        '--format',
        help='the output format (default is YAML)',
        choices=list(OUTPUT_FUNCTIONS),
        default='yaml')
    p.add_argument(
        '--abbreviations',
        help=f'''the author abbreviation list (default: the
        {abbreviations.AUTHORS_PATH_VAR} environment variable or the bundled
        list)''')
    p.add_argument(
        '-j', '--jobs',
        type=int,
        default=0,
        help='use this number of processes')
    p.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='also log debugging messages')
    main(p.parse_args())
