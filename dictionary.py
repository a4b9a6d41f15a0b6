"""Processing Lewis & Short into key/payload pairs, and looking them up.

Each entry is stored under the comma separated list of its lookup keys,
along with an encoded payload holding its display tree and outline.  The
storage itself is not handled here: anything implementing `EntryStore`
will do.
"""
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from display import display_entry_free
from errors import MissingAttributeError
import logger
from logger import log
from model import XmlNode
from orths import extract_keys
from outline import EntryOutline, extract_outline
from output import (
    decode_payload,
    encode_payload,
    outline_from_dict,
    outline_to_dict,
)
from parser import parse


KEY_SEPARATOR = ','

PROGRESS_INTERVAL = 1000


@dataclass
class RawDictEntry:
    keys: str
    entry: str


@dataclass
class EntryResult:
    entry: XmlNode
    outline: EntryOutline | None


@dataclass
class StoredEntryData:
    entry: XmlNode
    """The display tree of the entry."""
    outline: EntryOutline | None
    n: str | None = None
    """The disambiguation number for entries sharing a headword."""
    entry_id: str | None = None

    def encode(self) -> str:
        return encode_payload({
            'id': self.entry_id,
            'n': self.n,
            'outline': outline_to_dict(self.outline),
            'entry': self.entry,
        })

    @staticmethod
    def from_encoded(message: str) -> 'StoredEntryData':
        data = decode_payload(message)
        return StoredEntryData(
            entry=data['entry'],
            outline=outline_from_dict(data['outline']),
            n=data['n'],
            entry_id=data.get('id'))

    def to_entry_result(self) -> EntryResult:
        return EntryResult(entry=self.entry, outline=self.outline)


def to_raw_dict_entry(keys: list[str], data: StoredEntryData) -> RawDictEntry:
    if any(KEY_SEPARATOR in key for key in keys):
        raise ValueError(f'Keys should not contain {KEY_SEPARATOR!r}: {keys}')
    return RawDictEntry(keys=KEY_SEPARATOR.join(keys), entry=data.encode())


def outline_or_none(root: XmlNode) -> EntryOutline | None:
    try:
        return extract_outline(root)
    except (MissingAttributeError, ValueError) as ex:
        log.error('Cannot outline the entry: %s', ex)
        return None


def process_entry(root: XmlNode) -> tuple[list[str], StoredEntryData]:
    """Compute the keys and the stored data of one entry."""
    logger.set_entry(root.get_attr('id'))
    keys = extract_keys(root)
    data = StoredEntryData(
        entry=display_entry_free(root),
        outline=outline_or_none(root),
        n=root.get_attr('n'),
        entry_id=root.get_attr('id'))
    return keys, data


def extract_entry_data(source: str | Iterable[str]) -> Iterator[RawDictEntry]:
    """Lazily process every entry of a Perseus XML source."""
    for handled, root in enumerate(parse(source)):
        if handled % PROGRESS_INTERVAL == 0:
            log.debug('Processed %d', handled)
        yield to_raw_dict_entry(*process_entry(root))


def process_perseus_xml(source: str | Iterable[str]) -> list[RawDictEntry]:
    return list(extract_entry_data(source))


class EntryStore(Protocol):
    """Storage for processed entries."""

    def save(self, entries: Iterable[RawDictEntry], destination: str) -> None:
        ...

    def retrieve(self, key: str) -> list[str]:
        """Return the payloads of all entries stored under `key`."""
        ...


class LewisAndShort:
    def __init__(self, store: EntryStore):
        self.store = store

    def get_entry(self, key: str) -> list[EntryResult]:
        """Return the entries stored under exactly `key`."""
        results = []
        seen = set()
        for payload in self.store.retrieve(key):
            data = StoredEntryData.from_encoded(payload)
            if data.entry_id is not None:
                if data.entry_id in seen:
                    continue
                seen.add(data.entry_id)
            results.append(data.to_entry_result())
        return results
