"""Turning entry markup into display markup.

The display tree is made of `span`s (plus `ol`, `li`, `b` and `div` for the
sense lists) whose `class` attributes select the styling and whose `title`
attributes hold the text shown on hover.  Each source element is handled by
the function registered for its name in `HANDLERS`; everything else becomes
a plain `span` around its displayed children.
"""
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from abbreviations import (
    EXPANDED_FROM,
    SCHOLAR_ABBREVIATIONS,
    AuthorAbbreviation,
    Expander,
    authors,
    expand_text,
    expanders_for,
    whole_match,
)
from errors import MissingAttributeError
from logger import log
from model import XmlChild, XmlNode
from outline import Nested, nest_by_level, required_attr, sense_level


# Title of authors missing from the abbreviation list
UNRESOLVED_TITLE = 'undefined'

SENSE_LIST = [('class', 'lsSenseList')]


@dataclass(frozen=True)
class Context:
    """Where a node is being displayed.

    `parent` is the name of the source element holding the node.  With
    `expand_text`, abbreviations are also expanded in running text.
    """
    parent: str | None = None
    expand_text: bool = False

    def inside(self, node: XmlNode) -> 'Context':
        return Context(node.name, self.expand_text)


PLAIN = Context()


def display(node: XmlNode, context: Context = PLAIN) -> XmlNode:
    handler = HANDLERS.get(node.name, default_display)
    return handler(node, context)


def display_children(
        node: XmlNode,
        context: Context,
        expanders: list[Expander] | None = None) -> list[XmlChild]:
    """Display the children of `node`.

    Text is expanded with `expanders` or, when the context asks for it,
    with the expanders registered for `node`.
    """
    if expanders is None:
        expanders = (
            expanders_for(node.name, context.parent)
            if context.expand_text else [])
    inner = context.inside(node)
    result: list[XmlChild] = []
    for child in node.children:
        if isinstance(child, str):
            result.extend(expand_text(child, expanders))
        else:
            result.append(display(child, inner))
    return result


def default_display(node: XmlNode, context: Context = PLAIN) -> XmlNode:
    return XmlNode('span', [], display_children(node, context))


def display_orth(orth: XmlNode, context: Context = PLAIN) -> XmlNode:
    return XmlNode('span', [('class', 'lsOrth')], display_children(orth, context))


def display_note(note: XmlNode, context: Context = PLAIN) -> XmlNode:
    return XmlNode('span')


def display_emph(hi: XmlNode, context: Context = PLAIN) -> XmlNode:
    if hi.get_attr('rend') != 'ital':
        return default_display(hi, context)
    return XmlNode('span', [('class', 'lsEmph')], [default_display(hi, context)])


def display_quote(quote: XmlNode, context: Context = PLAIN) -> XmlNode:
    return XmlNode('span', [('class', 'lsQuote')], display_children(quote, context))


def display_grammar(node: XmlNode, context: Context = PLAIN) -> XmlNode:
    """Display a grammatical abbreviation such as `<gen>f.</gen>`.

    When the whole element is a single abbreviation, its expansion node is
    returned directly, or wrapped along with the whitespace around it.
    """
    expanders = expanders_for(node.name, context.parent)
    if len(node.children) == 1 and isinstance(node.children[0], str):
        raw = node.children[0]
        text = raw.strip()
        for expander in expanders:
            match = whole_match(text, expander.trie)
            if not match:
                continue
            expansion = expander.render(match)
            if text == raw:
                return expansion
            lead = raw[:len(raw) - len(raw.lstrip())]
            trail = raw[len(raw.rstrip()):]
            return XmlNode('span', [], [s for s in (lead, expansion, trail) if s])
    return XmlNode('span', [], display_children(node, context, expanders))


def display_usg(usg: XmlNode, context: Context = PLAIN) -> XmlNode:
    expanders = expanders_for(usg.name, context.parent)
    return XmlNode('span', [], display_children(usg, context, expanders))


def resolve_author(
        key: str,
        citation: str | None) -> tuple[str, AuthorAbbreviation | None]:
    """Find the author abbreviated as `key`.

    Returns the title to show and the author, if a single one was found.
    When several authors share the abbreviation, the one with a work matching
    the `citation` text following the author is chosen.
    """
    candidates = authors().get(key, [])
    if not candidates:
        log.debug('Unresolved author %s', key)
        return UNRESOLVED_TITLE, None
    if len(candidates) == 1:
        return candidates[0].expanded, candidates[0]
    if citation:
        start = len(citation) - len(citation.lstrip())
        for candidate in candidates:
            if candidate.works_trie.longest_match(citation, start):
                return candidate.expanded, candidate
    return ' OR '.join(c.expanded for c in candidates), None


def display_work(citation: str, author: AuthorAbbreviation) -> list[XmlChild]:
    """Expand the work abbreviation at the start of `citation`."""
    start = len(citation) - len(citation.lstrip())
    match = author.works_trie.longest_match(citation, start)
    if match is None:
        return [citation]
    result: list[XmlChild] = []
    if start:
        result.append(citation[:start])
    attrs = [('title', EXPANDED_FROM.format(match.original)), ('class', 'lsWork')]
    result.append(XmlNode('span', attrs, [match.expansion]))
    if match.end < len(citation):
        result.append(citation[match.end:])
    return result


def display_bibl(bibl: XmlNode, context: Context = PLAIN) -> XmlNode:
    """Display a citation, expanding its author and work."""
    inner = context.inside(bibl)
    children = list(bibl.children)
    result: list[XmlChild] = []
    while children and isinstance(children[0], str) and not children[0].strip():
        result.append(children.pop(0))

    if not children or isinstance(children[0], str) or children[0].name != 'author':
        return XmlNode('span', [], result + display_children(
            XmlNode(bibl.name, bibl.attrs, children), context))

    author = children.pop(0)
    key = author.text_content().strip()
    citation = children[0] if children and isinstance(children[0], str) else None
    author_children = display_children(author, inner)
    if key in SCHOLAR_ABBREVIATIONS:
        result.append(XmlNode('span', [('class', 'lsScholar')], author_children))
    else:
        title, data = resolve_author(key, citation)
        result.append(XmlNode(
            'span', [('title', title), ('class', 'lsAuthor')], author_children))
        if data is not None and citation is not None:
            result.extend(display_work(citation, data))
            children.pop(0)

    for child in children:
        result.append(child if isinstance(child, str) else display(child, inner))
    return XmlNode('span', [], result)


def sense_bullet(sense: XmlNode, label: str) -> XmlNode:
    return XmlNode(
        'span',
        [('class', 'lsSenseBullet'), ('senseid', required_attr(sense, 'id'))],
        [f' {label}. '])


def display_sense_item(
        sense: XmlNode,
        link_ids: bool,
        context: Context) -> XmlNode:
    label = sense.get_attr('n') or ''
    bullet = XmlNode('b', [], [f'{label}. '])
    if link_ids:
        try:
            bullet = sense_bullet(sense, label)
        except MissingAttributeError as ex:
            log.warning('%s, using an unlinked bullet', ex)
    return XmlNode('li', [], [bullet, default_display(sense, context)])


def display_sense_list(
        nested: Nested[XmlNode],
        link_ids: bool,
        context: Context) -> XmlNode:
    items: list[XmlChild] = []
    for item in nested:
        if isinstance(item, list):
            items.append(display_sense_list(item, link_ids, context))
        else:
            items.append(display_sense_item(item, link_ids, context))
    return XmlNode('ol', SENSE_LIST, items)


def format_sense_list(
        senses: Iterable[XmlNode],
        link_ids: bool = False,
        context: Context = PLAIN) -> XmlNode:
    """Display senses as numbered lists nested by their `level`.

    With `link_ids`, the bullets carry the sense ids so they can be linked
    to.  Raises `MissingAttributeError` if a sense has no level.
    """
    return display_sense_list(
        nest_by_level(senses, sense_level), link_ids, context)


def split_senses(
        entry: XmlNode) -> tuple[list[XmlChild], list[XmlNode], list[XmlChild]]:
    """Split the children of an entry into the header before the first sense,
    the senses and whatever else follows the first sense."""
    header: list[XmlChild] = []
    senses: list[XmlNode] = []
    trailer: list[XmlChild] = []
    for child in entry.children:
        if isinstance(child, XmlNode) and child.name == 'sense':
            senses.append(child)
        elif not senses:
            header.append(child)
        elif isinstance(child, XmlNode) or child.strip():
            trailer.append(child)
    return header, senses, trailer


def display_entry_free(entry: XmlNode) -> XmlNode:
    """Display a whole dictionary entry.

    Abbreviations are expanded in the running text, and the senses are
    shown as nested numbered lists.
    """
    context = Context(expand_text=True)
    header, senses, trailer = split_senses(entry)

    def part(children: Sequence[XmlChild]) -> XmlNode:
        return default_display(XmlNode(entry.name, entry.attrs, children), context)

    if not senses:
        return part(header)

    inner = context.inside(entry)
    try:
        sense_list = format_sense_list(senses, link_ids=True, context=inner)
    except (MissingAttributeError, ValueError) as ex:
        log.error('Cannot number the senses: %s', ex)
        sense_list = XmlNode(
            'div', [], [default_display(sense, inner) for sense in senses])

    parts = [part(header), sense_list]
    if trailer:
        parts.append(part(trailer))
    return XmlNode('div', [], parts)


render = display_entry_free


HANDLERS: dict[str, Callable[[XmlNode, Context], XmlNode]] = {
    'orth': display_orth,
    'note': display_note,
    'hi': display_emph,
    'quote': display_quote,
    'gen': display_grammar,
    'pos': display_grammar,
    'number': display_grammar,
    'mood': display_grammar,
    'case': display_grammar,
    'lbl': display_usg,
    'usg': display_usg,
    'bibl': display_bibl,
}
