"""Splitting raw dictionary markup into the records that get parsed.

A Perseus dictionary file is a long document holding a flat sequence of
entry elements.  Instead of building the whole document tree at once, the
input is scanned in a single forward pass and the markup of every record is
handed out as soon as its closing tag has been seen.
"""
from collections.abc import Iterable, Iterator

import regex

from errors import ParseError


DEFAULT_RECORD = 'entryFree'


def record_pattern(tag: str) -> regex.Pattern:
    """Return a pattern matching one complete, non-nested `tag` record."""
    name = regex.escape(tag)
    return regex.compile(
        rf'<{name}(?:\s[^>]*)?>.*?</{name}\s*>',
        regex.DOTALL)


def stray_pattern(tag: str) -> regex.Pattern:
    """Return a pattern for markup that may not appear between records.

    Comments are matched as a whole so that their contents are skipped; the
    offending markup itself is captured in the first group.
    """
    name = regex.escape(tag)
    return regex.compile(
        rf'<!--.*?-->|(</{name}\s*>|<(?![A-Za-z_/!?]))',
        regex.DOTALL)


# Markup cut off at the end of a chunk
TRAILING = regex.compile(r'<!--(?:(?!-->).)*\Z|<[^>]*\Z', regex.DOTALL)


def check_between(text: str, stray: regex.Pattern, tag: str):
    """Raise a `ParseError` if `text`, found between records, is malformed."""
    for match in stray.finditer(text):
        if match.group(1) is not None:
            raise ParseError(text, match.start(1), f'<{tag}>')


def extract_entries(
        source: str | Iterable[str],
        tag: str = DEFAULT_RECORD) -> Iterator[str]:
    """Yield the raw markup of each `tag` record found in `source`.

    `source` is either the whole text or any iterable of text chunks (for
    instance, an open file, which yields its lines).  Other markup outside
    of the records is skipped, but a stray closing `tag` or a `<` that does
    not start any markup raises a `ParseError`, as does a record that is
    opened but never closed.
    """
    if isinstance(source, str):
        source = [source]

    pattern = record_pattern(tag)
    stray = stray_pattern(tag)
    opening = regex.compile(rf'<{regex.escape(tag)}[\s>]')
    buf = ''
    for chunk in source:
        buf += chunk
        end = 0
        for match in pattern.finditer(buf):
            check_between(buf[end:match.start()], stray, tag)
            yield match.group()
            end = match.end()
        buf = buf[end:]
        # Nothing before a pending opening tag is ever needed again
        pending = opening.search(buf) or TRAILING.search(buf)
        keep = pending.start() if pending else len(buf)
        check_between(buf[:keep], stray, tag)
        buf = buf[keep:]

    pending = opening.search(buf)
    if pending:
        raise ParseError(buf[pending.start():], 0, f'</{tag}>')
    check_between(buf, stray, tag)
