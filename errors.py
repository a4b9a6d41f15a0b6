"""Errors raised while processing dictionary markup.

All of them can cross process boundaries, since entries may be processed
in a worker pool.
"""


class ParseError(ValueError):
    """The input markup is malformed.

    Carries the raw `fragment` that failed, the `index` inside it where
    parsing stopped and a description of what was `expected` there.
    """

    def __init__(self, fragment: str, index: int = 0, expected: str = ''):
        self.fragment = fragment
        self.index = index
        self.expected = expected
        super().__init__(
            f'Expected {expected} at {index}: {fragment[index:index+40]!r}')

    def __reduce__(self):
        return (self.__class__, (self.fragment, self.index, self.expected))


class EmptyOrthError(AssertionError):
    """An entry yielded no lookup keys."""

    def __init__(self, entry: str):
        self.entry = entry
        super().__init__(f'Expected > 0 orths\n{entry}')

    def __reduce__(self):
        return (self.__class__, (self.entry,))


class MissingAttributeError(LookupError):
    """A node lacks an attribute the renderer depends on."""

    def __init__(self, node_name: str, attr: str):
        self.node_name = node_name
        self.attr = attr
        super().__init__(f'<{node_name}> must have the `{attr}` attribute')

    def __reduce__(self):
        return (self.__class__, (self.node_name, self.attr))
