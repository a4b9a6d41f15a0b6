"""Reading the structure of TEI encoded library works.

Perseus texts declare how their passages are cited in a `refsDecl` with
CTS reference patterns, e.g. a Section is addressed as book.chapter.section
and found at `/TEI/text/body/div/div[@n='$1']/div[@n='$2']/div[@n='$3']`.
"""
from dataclasses import dataclass
from typing import NamedTuple

import regex

from model import XmlNode


class IdInfo(NamedTuple):
    key: str
    index: int


class PathStep(NamedTuple):
    name: str
    id_info: IdInfo | None = None


@dataclass
class CtsPatternInfo:
    name: str
    id_size: int
    node_path: list[PathStep]


@dataclass
class TeiInfo:
    title: str
    author: str


@dataclass
class TeiDocument:
    info: TeiInfo
    text_parts: list[str]
    content: XmlNode


type DescendantNode = tuple[XmlNode, list[XmlNode]]

XPATH = regex.compile(r'^#xpath\((.*)\)$')
STEP = regex.compile(
    r'^(?:tei:)?([\w.-]+)(?:\[@(?:tei:)?([\w.-]+)=[\'"]\$(\d+)[\'"]\])?$')


def child_path(root: XmlNode, *names: str) -> XmlNode:
    """Follow the first child of each of the given `names` from `root`."""
    node = root
    for name in names:
        found = next(node.find_children(name), None)
        if found is None:
            raise ValueError(f'<{node.name}> has no <{name}> child')
        node = found
    return node


def parse_node_path(pattern: str) -> list[PathStep]:
    """Turn a CTS replacement pattern into the steps of its path."""
    match = XPATH.match(pattern.strip())
    if match is None:
        raise ValueError(f'Unsupported replacement pattern {pattern}')
    steps = []
    for part in match.group(1).strip('/').split('/'):
        step = STEP.match(part)
        if step is None:
            raise ValueError(f'Unsupported path step {part} in {pattern}')
        name, key, index = step.groups()
        id_info = IdInfo(key, int(index)) if key else None
        steps.append(PathStep(name, id_info))
    return steps


def find_cts_encoding(root: XmlNode) -> list[CtsPatternInfo]:
    """Return the CTS reference patterns declared in a TEI document, in
    declaration order."""
    for refs in root.find_descendants('refsDecl'):
        if refs.get_attr('n') != 'CTS':
            continue
        result = []
        for pattern in refs.find_children('cRefPattern'):
            node_path = parse_node_path(pattern.get_attr('replacementPattern') or '')
            id_size = sum(1 for step in node_path if step.id_info)
            result.append(CtsPatternInfo(
                name=pattern.get_attr('n') or '',
                id_size=id_size,
                node_path=node_path))
        return result
    raise ValueError('No CTS reference declaration found')


def cts_path_test(
        descendant: DescendantNode,
        path: list[PathStep]) -> list[str] | None:
    """Match a node and its ancestors against a CTS path.

    Returns the ids read along the path, ordered by their index, or `None`
    if the node is not at that path.
    """
    node, ancestors = descendant
    nodes = ancestors + [node]
    if len(nodes) != len(path):
        return None
    ids: list[tuple[int, str]] = []
    for current, step in zip(nodes, path):
        if current.name != step.name:
            return None
        if step.id_info is None:
            continue
        value = current.get_attr(step.id_info.key)
        if value is None:
            return None
        ids.append((step.id_info.index, value))
    return [value for _, value in sorted(ids)]


def parse_tei_xml(root: XmlNode) -> TeiDocument:
    """Extract the metadata and the edition text of a TEI document."""
    title_stmt = child_path(root, 'teiHeader', 'fileDesc', 'titleStmt')
    info = TeiInfo(
        title=child_path(title_stmt, 'title').text_content().strip(),
        author=child_path(title_stmt, 'author').text_content().strip())

    patterns = sorted(find_cts_encoding(root), key=lambda p: p.id_size)
    text_parts = [p.name.lower() for p in patterns]

    body = child_path(root, 'text', 'body')
    content = next(
        (div for div in body.find_children('div')
         if div.get_attr('type') == 'edition'),
        None) or child_path(body, 'div')
    return TeiDocument(info=info, text_parts=text_parts, content=content)
