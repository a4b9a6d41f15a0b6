"""Outlines of the sense hierarchy of an entry.

Senses appear in the markup as a flat sequence of `<sense>` elements, each
carrying its depth in the `level` attribute and its label (I, A, 1, a...)
in `n`.  `nest_by_level` recovers the nesting, which is then used both for
the numbered lists of the display and for the outline.
"""
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import regex

from errors import MissingAttributeError
from model import XmlChild, XmlNode
from orths import get_orths, merge_vowel_markers


type Nested[T] = list[T | Nested[T]]

BLURB_LENGTH = 80

BLURB_END = regex.compile(r'[:;]')
SPACES = regex.compile(r'\s+')


@dataclass
class SectionOutline:
    level: int
    label: str
    sense_id: str
    text: str
    children: list['SectionOutline'] = field(default_factory=list)


@dataclass
class EntryOutline:
    main_orth: str
    main_section: SectionOutline
    senses: list[SectionOutline] = field(default_factory=list)


def required_attr(node: XmlNode, key: str) -> str:
    value = node.get_attr(key)
    if value is None:
        raise MissingAttributeError(node.name, key)
    return value


def sense_level(sense: XmlNode) -> int:
    return int(required_attr(sense, 'level'))


def nest_by_level[T](
        items: Iterable[T],
        level_of: Callable[[T], int]) -> Nested[T]:
    """Nest a flat sequence of items according to their levels.

    A list is kept open for every level between the first item and the
    current one.  A deeper item opens a single nested list, however many
    levels it skips.  A shallower item closes lists until it finds its
    level, opening one if it falls between two open lists.  An item
    shallower than everything open so far continues the outermost list.

    >>> nest_by_level('IJAaB', {'I': 1, 'J': 1, 'A': 2, 'a': 3, 'B': 2}.get)
    ['I', 'J', ['A', ['a'], 'B']]
    """
    root: Nested[T] = []
    stack: list[tuple[int, Nested[T]]] = []
    for item in items:
        level = level_of(item)
        if not stack:
            stack.append((level, root))
        elif level > stack[-1][0]:
            nested: Nested[T] = []
            stack[-1][1].append(nested)
            stack.append((level, nested))
        else:
            while len(stack) > 1 and stack[-1][0] > level:
                stack.pop()
            top_level, top = stack[-1]
            if top_level > level:
                stack[-1] = (level, top)
            elif top_level < level:
                nested = []
                top.append(nested)
                stack.append((level, nested))
        stack[-1][1].append(item)
    return root


def blurb(children: Iterable[XmlChild]) -> str:
    """Short plain text summary of some content, notes left out."""
    parts = []
    for child in children:
        if isinstance(child, str):
            parts.append(child)
        elif child.name != 'note':
            parts.append(blurb(child.children))
    text = SPACES.sub(' ', ''.join(parts))
    text = BLURB_END.split(text, maxsplit=1)[0].strip(' ,')
    if len(text) > BLURB_LENGTH:
        text = text[:BLURB_LENGTH-1].rstrip() + '…'
    return text


def sense_outline(sense: XmlNode) -> SectionOutline:
    return SectionOutline(
        level=sense_level(sense),
        label=sense.get_attr('n') or '',
        sense_id=required_attr(sense, 'id'),
        text=blurb(sense.children))


def to_tree(nested: Nested[XmlNode]) -> list[SectionOutline]:
    """Attach every nested list to the item preceding it."""
    result: list[SectionOutline] = []
    for item in nested:
        if isinstance(item, list):
            children = to_tree(item)
            if result:
                result[-1].children.extend(children)
            else:
                result.extend(children)
        else:
            result.append(sense_outline(item))
    return result


def extract_outline(entry: XmlNode) -> EntryOutline:
    """Build the outline of a dictionary entry."""
    orths = merge_vowel_markers(get_orths(entry))
    header = []
    for child in entry.children:
        if isinstance(child, XmlNode) and child.name == 'sense':
            break
        header.append(child)

    main_section = SectionOutline(
        level=0,
        label='',
        sense_id=required_attr(entry, 'id'),
        text=blurb(header))
    senses = nest_by_level(entry.find_children('sense'), sense_level)
    return EntryOutline(
        main_orth=orths[0] if orths else '',
        main_section=main_section,
        senses=to_tree(senses))
