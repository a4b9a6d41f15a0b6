import pytest

import abbreviations
from abbreviations import (
    GENERIC_TEXT,
    HOVER_TEXT,
    POET_LAT_REL,
    AbbreviationTrie,
    AuthorAbbreviations,
    Expander,
    Match,
    expand_text,
    expanders_for,
    parse_author_abbreviations,
    parse_list_item,
    whole_match,
)
from model import XmlNode


def trie(*phrases: str) -> AbbreviationTrie:
    return AbbreviationTrie.for_map({p: p.upper() for p in phrases})


class TestAbbreviationTrie:
    def test_longest_match_prefers_longer_phrases(self):
        t = trie('v. a.', 'v. a. and n.', 'v. n.')
        assert t.longest_match('v. a. and n. foo') == Match(0, 12, 'v. a. and n.', 'V. A. AND N.')
        assert t.longest_match('v. a. or n.') == Match(0, 5, 'v. a.', 'V. A.')

    def test_no_match(self):
        t = trie('v. a.')
        assert t.longest_match('v. dep.') is None
        assert t.longest_match('') is None
        assert t.longest_match('   ') is None

    def test_start_offset(self):
        t = trie('C.', 'C. S.')
        assert t.longest_match('Hor. C. S. 5', 5) == Match(5, 10, 'C. S.', 'C. S.')
        assert t.longest_match('Hor. C. 1, 12', 5) == Match(5, 7, 'C.', 'C.')

    def test_trailing_punctuation(self):
        t = trie('Mil.')
        assert t.longest_match('Mil., 4') == Match(0, 4, 'Mil.', 'MIL.')
        assert t.longest_match('Mil.;') == Match(0, 4, 'Mil.', 'MIL.')
        assert t.longest_match('(Mil.)', 1) == Match(1, 5, 'Mil.', 'MIL.')

    def test_punctuation_ends_the_phrase(self):
        t = trie('a.', 'a. b.')
        assert t.longest_match('a.; b.') == Match(0, 2, 'a.', 'A.')

    def test_matching_is_case_and_punctuation_sensitive(self):
        t = trie('f.')
        assert t.longest_match('F.') is None
        assert t.longest_match('f') is None

    def test_tokens_must_match_whole(self):
        assert trie('ib.').longest_match('ibid.') is None

    def test_whitespace_between_tokens_is_free(self):
        assert trie('t. t.').longest_match('t.\n  t.').expansion == 'T. T.'

    def test_add_rejects_empty_phrases(self):
        with pytest.raises(ValueError):
            AbbreviationTrie().add('  ', 'nothing')

    def test_whole_match(self):
        t = trie('v. a.')
        assert whole_match('v. a.', t).expansion == 'V. A.'
        assert whole_match('v. a. x', t) is None


def test_expanders_for_context():
    assert expanders_for('sense') is GENERIC_TEXT
    assert expanders_for('sense', 'entryFree') is GENERIC_TEXT
    assert expanders_for('hi', 'sense') == []
    assert expanders_for('lbl', 'xr')[0].trie.longest_match('v.').expansion == 'see'
    assert expanders_for('lbl', 'sense')[0].trie.longest_match('v.') is None
    assert expanders_for('lbl') == []


def test_expander_render():
    match = Match(0, 2, 'f.', 'feminine')
    t = AbbreviationTrie()
    assert Expander(t, css=HOVER_TEXT).render(match) == XmlNode(
        'span',
        [('title', 'Expanded from: f.'), ('class', HOVER_TEXT)],
        ['feminine'])
    assert Expander(t).render(match) == XmlNode(
        'span', [('title', 'Expanded from: f.')], ['feminine'])
    assert Expander(t, hover=True).render(match) == XmlNode(
        'span', [('title', 'feminine'), ('class', 'lsHover')], ['f.'])


def test_expand_text():
    result = expand_text('cf. ib., etc.', GENERIC_TEXT)
    assert result == [
        XmlNode('span', [('title', 'Expanded from: cf.'), ('class', HOVER_TEXT)], ['compare']),
        ' ',
        XmlNode('span', [('title', 'at the same place / citation'), ('class', 'lsHover')], ['ib.']),
        ', ',
        XmlNode('span', [('title', 'et cetera (and so on).'), ('class', 'lsHover')], ['etc.']),
    ]


def test_expand_text_only_at_word_starts():
    assert expand_text('xcf. y', GENERIC_TEXT) == ['xcf. y']
    result = expand_text('(cf. y)', GENERIC_TEXT)
    assert result[0] == '('
    assert result[1].children == ('compare',)
    assert result[2] == ' y)'


def test_expand_text_prefers_longest_match():
    result = expand_text('Poet. Lat. 3', GENERIC_TEXT)
    assert result[0] == XmlNode(
        'span', [('title', POET_LAT_REL), ('class', 'lsHover')], ['Poet. Lat.'])
    assert result[1:] == [' 3']


def test_expand_text_without_expanders():
    assert expand_text('cf. x', []) == ['cf. x']
    assert expand_text('', []) == []
    assert expand_text('', GENERIC_TEXT) == []


class TestAuthorList:
    def test_parse_list_item_with_alternative_keys(self):
        item = XmlNode('li', [], [
            XmlNode('b', [], ['Quint.']),
            ' or ',
            XmlNode('b', [], ['Quintil.']),
            ' M. Fabius Quintilianus, rhetorician, ',
        ])
        assert parse_list_item(item, print) == {
            'Quint.': 'M. Fabius Quintilianus, rhetorician',
            'Quintil.': 'M. Fabius Quintilianus, rhetorician',
        }

    def test_parse_list_item_hands_out_sub_lists(self):
        works = XmlNode('ul', [], [XmlNode('li', [], [XmlNode('b', [], ['C.']), ' Carmina.'])])
        item = XmlNode('li', [], [XmlNode('b', [], ['Hor.']), ' Horace\n', works, '\n'])
        seen = []
        assert parse_list_item(item, seen.append) == {'Hor.': 'Horace'}
        assert seen == [works]

    def test_parse_list_item_checks_structure(self):
        with pytest.raises(ValueError):
            parse_list_item(XmlNode('ul'), print)
        with pytest.raises(TypeError):
            parse_list_item(XmlNode('li', [], ['Hor. Horace']), print)

    def test_bundled_list(self):
        authors = abbreviations.authors()
        [plautus] = authors['Plaut.']
        assert plautus.expanded == 'T. Maccius Plautus, writer of comedy. ob. B.C. 184'
        assert plautus.works['Mil.'] == 'Miles Gloriosus.'
        assert plautus.works_trie.longest_match('Mil. 4, 4').expansion == 'Miles Gloriosus.'

    def test_bundled_list_alternative_keys(self):
        authors = abbreviations.authors()
        assert authors['Quint.'][0].expanded == authors['Quintil.'][0].expanded
        assert authors['Verg.'][0].works == authors['Virg.'][0].works

    def test_bundled_list_shared_keys(self):
        plinies = abbreviations.authors()['Plin.']
        assert len(plinies) == 2
        assert 'major' in plinies[0].expanded
        assert 'minor' in plinies[1].expanded

    def test_nested_work_lists_are_rejected(self, tmp_path):
        path = tmp_path / 'list.html'
        path.write_text(
            '<ul><li><b>A.</b> Author<ul>'
            '<li><b>W.</b> Work<ul><li><b>x</b> y</li></ul></li>'
            '</ul></li></ul>',
            encoding='utf-8')
        with pytest.raises(ValueError):
            parse_author_abbreviations(path)


def write_list(path, name: str):
    path.write_text(f'<ul><li><b>Ath.</b> {name}</li></ul>', encoding='utf-8')


def test_author_table_from_path(tmp_path):
    path = tmp_path / 'list.html'
    write_list(path, 'Athenaeus')
    table = AuthorAbbreviations(path)
    assert table.authors()['Ath.'][0].expanded == 'Athenaeus'
    assert 'Plaut.' not in table.authors()


def test_author_table_from_environment(tmp_path, monkeypatch):
    path = tmp_path / 'list.html'
    write_list(path, 'Athenaeus of Naucratis')
    monkeypatch.setenv(abbreviations.AUTHORS_PATH_VAR, str(path))
    assert AuthorAbbreviations().authors()['Ath.'][0].expanded == 'Athenaeus of Naucratis'


def test_author_table_configure(tmp_path):
    path = tmp_path / 'list.html'
    write_list(path, 'Athenaeus')
    table = AuthorAbbreviations()
    table.configure(path)
    assert list(table.authors()) == ['Ath.']
    with pytest.raises(RuntimeError):
        table.configure(path)
