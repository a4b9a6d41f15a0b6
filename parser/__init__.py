"""Parsing raw markup into `XmlNode` trees.

Dictionary sources are parsed record by record: `parse` splits the input
with `lexer.extract_entries` and lazily yields one root per record.  Whole
documents (the TEI library works, the abbreviation list) go through
`parse_xml` instead.
"""
from collections.abc import Iterable, Iterator
import os

import parsy

from errors import ParseError
from lexer import DEFAULT_RECORD, extract_entries
from model import XmlNode
from parser.helpers import document, element, whitespace


def _run(grammar: parsy.Parser, fragment: str) -> XmlNode:
    try:
        return grammar.parse(fragment)
    except parsy.ParseError as ex:
        expected = ', '.join(sorted(ex.expected))
        raise ParseError(fragment, ex.index, expected) from ex


def parse_entry(fragment: str) -> XmlNode:
    """Parse the markup of a single element."""
    return _run(whitespace >> element << whitespace, fragment)


def parse_entries(fragments: Iterable[str]) -> Iterator[XmlNode]:
    for fragment in fragments:
        yield parse_entry(fragment)


def parse(
        source: str | Iterable[str],
        tag: str = DEFAULT_RECORD) -> Iterator[XmlNode]:
    """Lazily yield a root node for each `tag` record in `source`.

    The first malformed record raises `ParseError` and ends the sequence.
    """
    return parse_entries(extract_entries(source, tag))


def parse_file(
        path: str | os.PathLike,
        tag: str = DEFAULT_RECORD) -> Iterator[XmlNode]:
    """Like `parse`, but streams the records from a UTF-8 file."""
    with open(path, encoding='utf-8') as f:
        yield from parse(f, tag)


def parse_xml(raw: str | bytes) -> XmlNode:
    """Parse a complete document, prolog included, into its root node."""
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8')
    return _run(document, raw.removeprefix('\ufeff'))
