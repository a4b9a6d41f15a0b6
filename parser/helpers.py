"""Building blocks of the markup grammar.

The grammar covers the subset of XML found in the dictionary and library
sources: elements with attributes, mixed text content, comments, CDATA
sections, processing instructions and a document type declaration.  The
last three are accepted and dropped.
"""
import re

from parsy import Parser, fail, generate, regex, string

from model import XmlChild, XmlNode
from parser.markup import unescape


whitespace = regex(r'\s*')

name = regex(r'[A-Za-z_][\w.:-]*').desc('element name')

quoted = (
    regex(r'"([^"<]*)"', group=1)
    | regex(r"'([^'<]*)'", group=1)
).desc('quoted attribute value')

attribute = regex(r'\s+') >> name.bind(
    lambda key: (regex(r'\s*=\s*') >> quoted).map(
        lambda value: (key, unescape(value))))

comment = regex(r'<!--.*?-->', flags=re.DOTALL).desc('comment')

instruction = regex(r'<\?.*?\?>', flags=re.DOTALL).desc('processing instruction')

doctype = regex(r'<!DOCTYPE(?:[^\[>]|\[[^\]]*\])*>').desc('document type')

cdata = regex(r'<!\[CDATA\[(.*?)\]\]>', flags=re.DOTALL, group=1)

text = regex(r'[^<]+').map(unescape)


def merge_text(children: list[XmlChild | None]) -> list[XmlChild]:
    """Drop skipped items and join the text runs they used to separate."""
    merged: list[XmlChild] = []
    for child in children:
        if child is None or child == '':
            continue
        if isinstance(child, str) and merged and isinstance(merged[-1], str):
            merged[-1] += child
        else:
            merged.append(child)
    return merged


def closing_tag(tag: str) -> Parser:
    return regex(rf'</{re.escape(tag)}\s*>').desc(f'</{tag}>')


@generate
def element():
    yield string('<')
    tag = yield name
    attrs = yield attribute.many()
    yield whitespace

    keys = [key for key, _ in attrs]
    if len(set(keys)) != len(keys):
        yield fail(f'unique attribute names on <{tag}>')

    self_closing = yield string('/>').result(True) | string('>').result(False)
    if self_closing:
        return XmlNode(tag, attrs)

    children = yield content
    yield closing_tag(tag)
    return XmlNode(tag, attrs, merge_text(children))


content = (
    element
    | cdata
    | text
    | (comment | instruction).result(None)
).many()

misc = whitespace >> (comment | instruction | doctype)

document = misc.many() >> whitespace >> element << misc.many() << whitespace
