"""The tree that every stage of the processing works on.

A node has a name, an ordered list of attributes and an ordered list of
children, each child being either a plain string or another node.  Nodes are
immutable, so subtrees can be shared freely between the source tree and the
trees derived from it.
"""
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import html


type XmlChild = str | XmlNode


def escape_text(text: str) -> str:
    return html.escape(text, quote=False)


def escape_attr(value: str) -> str:
    return html.escape(value, quote=False).replace('"', '&quot;')


@dataclass(frozen=True, slots=True)
class XmlNode:
    name: str
    attrs: tuple[tuple[str, str], ...] = ()
    children: tuple[XmlChild, ...] = ()

    def __init__(
            self,
            name: str,
            attrs: Iterable[tuple[str, str]] = (),
            children: Iterable[XmlChild] = ()):
        object.__setattr__(self, 'name', name)
        object.__setattr__(self, 'attrs', tuple(tuple(a) for a in attrs))
        object.__setattr__(self, 'children', tuple(children))

    def get_attr(self, key: str) -> str | None:
        """Return the value of the attribute `key`, `None` if absent."""
        for k, v in self.attrs:
            if k == key:
                return v
        return None

    def find_children(self, name: str) -> Iterator['XmlNode']:
        for child in self.children:
            if isinstance(child, XmlNode) and child.name == name:
                yield child

    def find_descendants(self, name: str) -> Iterator['XmlNode']:
        """Yield every node below this one called `name`, in document
        order."""
        for child in self.children:
            if isinstance(child, str):
                continue
            if child.name == name:
                yield child
            yield from child.find_descendants(name)

    def text_content(self) -> str:
        """Concatenate all the text below this node, dropping the markup."""
        return ''.join(
            c if isinstance(c, str) else c.text_content()
            for c in self.children)

    def to_string(self) -> str:
        """Serialize the node back into markup.

        The closing tag is always explicit, even for childless nodes.
        """
        attrs = ''.join(f' {k}="{escape_attr(v)}"' for k, v in self.attrs)
        inner = ''.join(
            escape_text(c) if isinstance(c, str) else c.to_string()
            for c in self.children)
        return f'<{self.name}{attrs}>{inner}</{self.name}>'

    def __str__(self) -> str:
        return self.to_string()


def assert_is_node(child: XmlChild, name: str | None = None) -> XmlNode:
    """Check that a child is a node (called `name`, if given) and return it."""
    if not isinstance(child, XmlNode):
        raise TypeError(f'Expected a node but got text {child!r}')
    if name is not None and child.name != name:
        raise TypeError(f'Expected <{name}> but got <{child.name}>')
    return child


def get_sole_text(node: XmlNode) -> str:
    """Return the text of a node that holds exactly one text child."""
    if len(node.children) != 1 or not isinstance(node.children[0], str):
        raise TypeError(f'Expected <{node.name}> to hold only text: {node}')
    return node.children[0]


def depth(child: XmlChild) -> int:
    """Height of the tree rooted at `child`; text counts as zero."""
    if isinstance(child, str):
        return 0
    return 1 + max((depth(c) for c in child.children), default=0)
