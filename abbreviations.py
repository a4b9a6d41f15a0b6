"""Abbreviations used throughout Lewis & Short and their expansions.

The tables are matched against entry text with `AbbreviationTrie`, a prefix
tree over whitespace separated tokens.  The same short token can mean
different things in different places ("f." is feminine in a `<gen>` but
folio elsewhere), so which tables apply is decided by the element that is
being displayed; see `CONTEXT_EXPANDERS`.

Author and work abbreviations come from a separate list document that is
parsed on first use.
"""
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
import threading
from typing import Callable, NamedTuple

import regex

from logger import log
from model import XmlChild, XmlNode, assert_is_node, get_sole_text
import parser


DEFAULT_AUTHORS_PATH = Path(__file__).parent / 'data' / 'ls_abbreviations.html'
AUTHORS_PATH_VAR = 'LS_ABBREVIATIONS_PATH'

# Punctuation that may follow the last token of an abbreviation
TRAILING = ',;:)]'

TOKEN = regex.compile(r'\S+')
GAP = regex.compile(r'\s+')


class Match(NamedTuple):
    start: int
    end: int
    original: str
    expansion: str


class TrieNode:
    __slots__ = ('children', 'expansion')

    def __init__(self):
        self.children: dict[str, TrieNode] = {}
        self.expansion: str | None = None

    def step(self, raw: str) -> tuple['TrieNode', int, bool] | None:
        """Follow the raw token `raw` from this node.

        The token matches either as a whole or with trailing punctuation
        removed.  Returns the child reached, the number of characters
        consumed and whether punctuation had to be dropped.
        """
        cut = len(raw)
        while cut > 0:
            child = self.children.get(raw[:cut])
            if child is not None:
                return child, cut, cut < len(raw)
            if raw[cut-1] not in TRAILING:
                return None
            cut -= 1
        return None


class AbbreviationTrie:
    """Prefix tree of abbreviations, keyed by whitespace separated tokens.

    Tokens are compared verbatim, so matching is sensitive to both case and
    punctuation.
    """

    def __init__(self):
        self.root = TrieNode()

    def add(self, phrase: str, expansion: str):
        tokens = phrase.split()
        if not tokens:
            raise ValueError('Cannot add an empty abbreviation')
        node = self.root
        for token in tokens:
            node = node.children.setdefault(token, TrieNode())
        node.expansion = expansion

    def longest_match(self, text: str, start: int = 0) -> Match | None:
        """Return the longest registered phrase of `text` beginning at
        `start`, or `None` if there is no such phrase.

        Tokens are consumed one at a time for as long as the path through
        the tree continues; the last complete phrase seen along the way is
        the result.  A token matched by dropping trailing punctuation ends
        the phrase.
        """
        node = self.root
        pos = start
        best = None
        while True:
            if node is not self.root:
                gap = GAP.match(text, pos)
                if gap is None:
                    break
                pos = gap.end()
            token = TOKEN.match(text, pos)
            if token is None:
                break
            step = node.step(token.group())
            if step is None:
                break
            node, length, truncated = step
            end = pos + length
            if node.expansion is not None:
                best = Match(start, end, text[start:end], node.expansion)
            if truncated:
                break
            pos = end
        return best

    @classmethod
    def for_map(cls, mapping: Mapping[str, str]) -> 'AbbreviationTrie':
        trie = cls()
        for phrase, expansion in mapping.items():
            trie.add(phrase, expansion)
        return trie


POET_LAT_REL = (
    'Poetarum Latinorum Hostii, Laevii, C. Licinii Calvi, C. Helvii Cinnae, '
    'C. Valgii Rufi, Domitii Marsi Aliorumque Vitae Et Carminum Reliquiae')
ROM_LIT = 'Romanische Literaturen'
LIT_GESCH = 'Geschichte der Römischen Literatur'

SCHOLAR_ABBREVIATIONS = {'Rib.', 'Schneid.'}

NUMBER_ABBREVIATIONS: Mapping[str, str] = {
    'sing.': 'singular',
    'plur.': 'plural',
}

MOOD_ABBREVIATIONS: Mapping[str, str] = {
    'Part.': 'Participle',
}

CASE_ABBREVIATIONS: Mapping[str, str] = {
    'nom.': 'nominative',
    'acc.': 'accusative',
    'dat.': 'dative',
    'gen.': 'genitive',
    'abl.': 'ablative',
    'voc.': 'vocative',
}

LBL_ABBREVIATIONS: Mapping[str, Mapping[str, str]] = {
    'sense': {'dim.': 'diminutive'},
    'entryFree': {'dim.': 'diminutive'},
    'etym': {'dim.': 'diminutive'},
    'xr': {'v.': 'see'},
}

GEN_ABBREVIATIONS: Mapping[str, str] = {
    'f.': 'feminine',
    'm.': 'masculine',
    'n.': 'neuter',
    'com.': 'common gender',
    'comm.': 'common gender',
}

POS_ABBREVIATIONS: Mapping[str, str] = {
    'prep.': 'preposition',
    'interj.': 'interjection',
    'adj.': 'adjective',
    'v. n.': 'verb (active only)',
    'v. a.': 'verb (active and passive)',
    'v. a. and n.':
        'verb (depending on sense: active only, or active and passive)',
    'v. freq. a.': 'verb (frequentative; active and passive forms)',
    'v. freq. a. and n.':
        'verb (frequentative; depending on sense: active only, '
        'or active and passive)',
    'adv.': 'adverb',
    'P. a.': 'participal adjective',
    'v. dep.': 'verb [deponent]',
    'Adj.': 'Adjective',
    'Subst.': 'Substantive',
    'adv. num.': 'adverb [numeral]',
    'num. adj.': 'adjective [numeral]',
    'pron. adj.': 'adjective [pronoun]',
}

USG_ABBREVIATIONS: Mapping[str, str] = {
    'poet.': 'poetically',
    'Transf.': 'Transferred',
    'Lit.': 'Literally',
    'Absol.': 'Absolutely [without case or adjunct]',
    'Trop.': 'Tropical [tropical or figurative sense]',
    'Polit. t. t.': 'Political [technical term]',
    'Meton.': 'By Metonymy',
    'Poet.': 'Poetically',
    'Medic. t. t.': 'Medical [technical term]',
    'Milit. t. t.': 'Military [technical term]',
    'Mercant. t. t.': 'Mercantile [technical term]',
}

EDGE_CASE_ABBREVIATIONS: Mapping[str, str] = {
    'Gesch. Rom. Lit.': LIT_GESCH,
    'Lit. Gesch.': LIT_GESCH,
    'Gesch. d. Röm. Lit.': LIT_GESCH,
    'Bähr, Röm. Lit.': LIT_GESCH,
    'Röm. Lit. Gesch.': LIT_GESCH,
    'Poet. Lat.': POET_LAT_REL,
    'Poët. Lat.': POET_LAT_REL,
    'Poët. Latin.': POET_LAT_REL,
    'Poët. Lat. Rel.': POET_LAT_REL,
    'Röm. Lit.': ROM_LIT,
    'Rom. Lit.': ROM_LIT,
    'Roem. Lit.': ROM_LIT,
    'Rö. Lit.': ROM_LIT,
}

GENERIC_HOVER_ABBREVIATIONS: Mapping[str, str] = {
    'ad loc.': 'ad locum (comment on this passage)',
    'a. h. l.': 'ad hunc locum (comment on this passage). ',
    'ad h. l.': 'ad hunc locum (comment on this passage). ',
    'ad h.l.': 'ad hunc locum (comment on this passage). ',
    'al.': 'alii or alia, others or other.',
    'e. g.': 'exempli gratia.',
    'etc.': 'et cetera (and so on).',
    'h.l.': 'hic locus (this passage).',
    'h. l.': 'hic locus (this passage).',
    'ib.': 'at the same place / citation',
    'i. e.': 'id est (that is, namely)',
    'i.e.': 'id est (that is, namely)',
    'i.q.': 'idem quod (the same as).',
    'i. q.': 'idem quod (the same as).',
    'id.': 'the same author',
    'rhet.': 'rhetoric, -al; in rhetoric.',
    's. h. v.': 'sub hac voce. (in this entry)',
    'signif.': 'signifies, -cation.',
    'sq.': 'sequens (the following);',
    'sqq.': 'sequentes (and the following).',
    'subj.': 'subjunctive; or subject, subjective(ly).',
    'subject.': 'subject, subjective(ly).',
    'sup.': 'superlative or supine.',
    'Sup.': 'superlative or supine.',
    'tab.': 'tabula (table, plate).',
    'temp.': 'tense or temporal.',
    'trag.': 'tragicus, tragic, or in tragedy.',
    'trans.': 'translated, -tion.',
    'trop.': 'in a tropical or figurative sense.',
    'var. lect.': 'varia lectio (different reading).',
    'v. h. v.': 'vide hanc vocem. (see this entry)',
}

# Several abbreviations of the printed table (e.g. "c.", "l.", "v.") are
# left out: they collide with ordinary text too often.
GENERIC_EXPANSION_ABBREVIATIONS: Mapping[str, str] = {
    'abstr.': 'abstract',
    'access.': 'accessory',
    'agric.': 'agricultural',
    'agricult.': 'agricultural',
    'amplif.': 'amplificative',
    'analog.': 'analogous(ly)',
    'ap.': 'apud (in)',
    'appel.': 'appellative',
    'Arab.': 'Arabic',
    'cf.': 'compare',
    'collect.': 'collective(ly)',
    'concr.': 'concrete(ly).',
    'corresp.': 'corresponding.',
    'decl.': 'declension.',
    'dub.': 'doubtful',
    'eccl.': 'ecclesiastical.',
    'elsewh.': 'elsewhere.',
    'epit.': 'epitaph.',
    'etym.': 'etymology',
    'In gen.': 'In general',
    'in gen.': 'in general',
    'inf.': 'infinitive',
    'intr.': 'intransitive',
    'Ital.': 'Italian',
    'jurid.': 'juridical',
    'kindr.': 'kindred',
    'Lat.': 'Latin.',
    'Lith.': 'Lithuanian.',
    'meton.': 'by metonymy',
    'onomatop.': 'onomatopoeia',
    'patr.': 'patronymic',
    'perh.': 'perhaps',
    'pleon.': 'pleonastically',
    'qs.': 'quasi',
    'saep.': 'saepe.',
    'saepis.': 'saepissime.',
    'sc.': 'scilicet.',
    'simp.': 'simple',
    'Span.': 'Spanish',
    'specif.': 'specifically.',
    'subst.': 'substantive(ly).',
    'suff.': 'suffix.',
    'syll.': 'syllable.',
    'syn.': 'synonym(ous).',
    'sync.': 'syncopated',
    't. t.': 'technical term.',
    'transf.': 'transferred.',
    'trisyl.': 'trisyllable(-abic)',
    'usu.': 'usual(-ly).',
    'vb.': 'verb',
    'voc.': 'vocative.',
    'Weich.': 'Weichert',
}

NUMBER_TRIE = AbbreviationTrie.for_map(NUMBER_ABBREVIATIONS)
MOOD_TRIE = AbbreviationTrie.for_map(MOOD_ABBREVIATIONS)
CASE_TRIE = AbbreviationTrie.for_map(CASE_ABBREVIATIONS)
GEN_TRIE = AbbreviationTrie.for_map(GEN_ABBREVIATIONS)
POS_TRIE = AbbreviationTrie.for_map(POS_ABBREVIATIONS)
USG_TRIE = AbbreviationTrie.for_map(USG_ABBREVIATIONS)
EDGE_CASE_HOVERS = AbbreviationTrie.for_map(EDGE_CASE_ABBREVIATIONS)
GENERIC_HOVERS = AbbreviationTrie.for_map(GENERIC_HOVER_ABBREVIATIONS)
GENERIC_EXPANSIONS = AbbreviationTrie.for_map(GENERIC_EXPANSION_ABBREVIATIONS)
LBL_TRIES: Mapping[str, AbbreviationTrie] = {
    parent: AbbreviationTrie.for_map(table)
    for parent, table in LBL_ABBREVIATIONS.items()
}


EXPANDED_FROM = 'Expanded from: {}'


@dataclass(frozen=True)
class Expander:
    """How the matches of a trie are displayed.

    A hover keeps the abbreviation visible and shows the expansion on
    hover.  Otherwise the expansion replaces the abbreviation, which can be
    seen on hover instead.
    """
    trie: AbbreviationTrie
    hover: bool = False
    css: str | None = None

    def render(self, match: Match) -> XmlNode:
        if self.hover:
            attrs = [('title', match.expansion), ('class', self.css or 'lsHover')]
            return XmlNode('span', attrs, [match.original])
        attrs = [('title', EXPANDED_FROM.format(match.original))]
        if self.css:
            attrs.append(('class', self.css))
        return XmlNode('span', attrs, [match.expansion])


HOVER_TEXT = 'lsHoverText'

GENERIC_TEXT = [
    Expander(EDGE_CASE_HOVERS, hover=True),
    Expander(GENERIC_HOVERS, hover=True),
    Expander(GENERIC_EXPANSIONS, css=HOVER_TEXT),
]

# Keyed by (element, parent element); a `None` parent applies anywhere.
CONTEXT_EXPANDERS: dict[tuple[str, str | None], list[Expander]] = {
    ('sense', None): GENERIC_TEXT,
    ('etym', None): GENERIC_TEXT,
    ('entryFree', None): GENERIC_TEXT,
    ('usg', None): [Expander(USG_TRIE)],
    ('gen', None): [Expander(GEN_TRIE, css=HOVER_TEXT)],
    ('pos', None): [Expander(POS_TRIE, css=HOVER_TEXT)],
    ('number', None): [Expander(NUMBER_TRIE, css=HOVER_TEXT)],
    ('mood', None): [Expander(MOOD_TRIE, css=HOVER_TEXT)],
    ('case', None): [Expander(CASE_TRIE, css=HOVER_TEXT)],
    **{
        ('lbl', parent): [Expander(trie, css=HOVER_TEXT)]
        for parent, trie in LBL_TRIES.items()
    },
}


def expanders_for(element: str, parent: str | None = None) -> list[Expander]:
    """Return the expanders that apply to text directly inside `element`."""
    if (element, parent) in CONTEXT_EXPANDERS:
        return CONTEXT_EXPANDERS[(element, parent)]
    return CONTEXT_EXPANDERS.get((element, None), [])


def can_start(text: str, pos: int) -> bool:
    if text[pos].isspace():
        return False
    return pos == 0 or text[pos-1].isspace() or text[pos-1] in '(['


def find_match(
        text: str,
        pos: int,
        expanders: Iterable[Expander]) -> tuple[Expander, Match] | None:
    """Return the longest match at `pos` among all the `expanders`.

    On equal lengths, the expander listed first wins.
    """
    found = None
    for expander in expanders:
        match = expander.trie.longest_match(text, pos)
        if match and (found is None or match.end > found[1].end):
            found = (expander, match)
    return found


def expand_text(text: str, expanders: list[Expander]) -> list[XmlChild]:
    """Replace the abbreviations in `text` with expansion nodes."""
    if not expanders:
        return [text] if text else []
    result: list[XmlChild] = []
    last = 0
    pos = 0
    while pos < len(text):
        found = find_match(text, pos, expanders) if can_start(text, pos) else None
        if found is None:
            pos += 1
            continue
        expander, match = found
        if pos > last:
            result.append(text[last:pos])
        result.append(expander.render(match))
        pos = last = match.end
    if last < len(text):
        result.append(text[last:])
    return result


def whole_match(text: str, trie: AbbreviationTrie) -> Match | None:
    """Return the match of `trie` covering all of `text`, if any."""
    match = trie.longest_match(text)
    if match and match.end == len(text):
        return match
    return None


# Author abbreviations

@dataclass
class AuthorAbbreviation:
    key: str
    expanded: str
    works: dict[str, str] = field(default_factory=dict)
    works_trie: AbbreviationTrie = field(
        default_factory=AbbreviationTrie, repr=False, compare=False)


def clean_item(text: str) -> str:
    return text.strip().strip(',').strip()


def parse_list_item(
        root: XmlNode,
        on_list: Callable[[XmlNode], None]) -> dict[str, str]:
    """Read one `<li>` of the abbreviation list.

    An item opens with one or more keys in `<b>`, separated by " or ",
    followed by the expansion.  A nested `<ul>` is handed to `on_list`.
    """
    if root.name != 'li':
        raise ValueError(f'Expected <li> but got <{root.name}>')
    children = root.children
    keys = []
    i = 0
    while i < len(children):
        keys.append(get_sole_text(assert_is_node(children[i], 'b')))
        i += 1
        if i < len(children) and children[i] == ' or ':
            i += 1
            continue
        break

    expanded = ''
    for child in children[i:]:
        if isinstance(child, str):
            expanded += child
        elif child.name == 'ul':
            on_list(child)
        else:
            expanded += child.text_content()
    expanded = clean_item(expanded)
    return {clean_item(key): expanded for key in keys}


def list_items(root: XmlNode) -> list[XmlNode]:
    items = []
    for child in root.children:
        if isinstance(child, str):
            if child.strip():
                raise ValueError(f'Unexpected text in <{root.name}>: {child!r}')
            continue
        items.append(child)
    return items


def parse_author_abbreviations(
        path: str | os.PathLike = DEFAULT_AUTHORS_PATH
) -> list[AuthorAbbreviation]:
    """Read the author list document at `path`."""
    with open(path, encoding='utf-8') as f:
        root = parser.parse_xml(f.read())

    entries = []
    for author in list_items(root):
        works: dict[str, str] = {}

        def read_works(works_list: XmlNode):
            for work in list_items(works_list):
                works.update(parse_list_item(work, nested_list))

        for key, expanded in parse_list_item(author, read_works).items():
            entries.append(AuthorAbbreviation(key, expanded, works))
    return entries


def nested_list(node: XmlNode):
    raise ValueError(f'Works cannot have sub-lists: {node}')


class AuthorAbbreviations:
    """Process-wide table of author abbreviations, loaded on first use.

    Keys map to lists since some abbreviations are shared by several
    authors.
    """

    def __init__(self, path: str | os.PathLike | None = None):
        self._path = path
        self._lock = threading.Lock()
        self._authors: dict[str, list[AuthorAbbreviation]] | None = None

    def configure(self, path: str | os.PathLike):
        with self._lock:
            if self._authors is not None:
                raise RuntimeError('Author abbreviations are already loaded')
            self._path = path

    def path(self) -> str | os.PathLike:
        return self._path or os.environ.get(AUTHORS_PATH_VAR) or DEFAULT_AUTHORS_PATH

    def authors(self) -> dict[str, list[AuthorAbbreviation]]:
        if self._authors is None:
            with self._lock:
                if self._authors is None:
                    self._authors = self._load()
        return self._authors

    def _load(self) -> dict[str, list[AuthorAbbreviation]]:
        path = self.path()
        log.debug('Loading author abbreviations from %s', path)
        authors: dict[str, list[AuthorAbbreviation]] = {}
        for datum in parse_author_abbreviations(path):
            for work, title in datum.works.items():
                datum.works_trie.add(work, title)
            authors.setdefault(datum.key, []).append(datum)
        return authors


AUTHORS = AuthorAbbreviations()


def authors() -> dict[str, list[AuthorAbbreviation]]:
    return AUTHORS.authors()
