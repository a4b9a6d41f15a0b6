import logging

import pytest

from errors import EmptyOrthError
from model import XmlNode
from orths import (
    extract_keys,
    get_orths,
    is_regular_orth,
    merge_vowel_markers,
    normalize_vowel_markers,
    strip_diacritics,
)


def orth(text: str, *attrs: tuple[str, str]) -> XmlNode:
    return XmlNode('orth', attrs, [text])


def entry(*children) -> XmlNode:
    return XmlNode('entryFree', [('id', 'n1')], children)


def test_full_orths_win_over_alts():
    e = entry(orth('arruo', ('extent', 'full')), ' (', orth('adr-'), ')')
    assert get_orths(e) == ['arruo']


def test_alts_used_when_no_full_orth():
    assert get_orths(entry(orth('abs-', ('extent', 'part')))) == ['abs-']


def test_nested_orths_are_found():
    e = entry(XmlNode('sense', [], [orth('quīs', ('extent', 'full'))]))
    assert get_orths(e) == ['quīs']


def test_excluded_orth_types():
    e = entry(
        orth('foo', ('extent', 'full'), ('type', 'editorial')),
        orth('bar', ('extent', 'full'), ('type', 'suppletive')),
        orth('baz', ('extent', 'full')))
    assert get_orths(e) == ['baz']


def test_blank_orths_are_skipped():
    assert get_orths(entry(orth('  ', ('extent', 'full')))) == []


@pytest.mark.parametrize('text, regular', [
    ('amo', True),
    ('abs-', False),
    ('-que', False),
    ('ab-s', True),
])
def test_is_regular_orth(text, regular):
    assert is_regular_orth(text) == regular


def test_normalize_vowel_markers():
    assert normalize_vowel_markers('a_mo') == 'āmo'
    assert normalize_vowel_markers('a_mo^r') == 'āmŏr'
    assert normalize_vowel_markers('qui^s') == 'quĭs'
    assert normalize_vowel_markers('plain') == 'plain'


def test_strip_diacritics():
    assert strip_diacritics('cānăba') == 'canaba'
    assert strip_diacritics('quīs') == 'quis'


def test_merge_vowel_markers_drops_duplicates():
    assert merge_vowel_markers(['a_mo', 'āmo', 'amo']) == ['āmo', 'amo']


def test_merge_vowel_markers_keeps_distinct_marks(caplog):
    with caplog.at_level(logging.DEBUG):
        result = merge_vowel_markers(['quis', 'quĭs', 'quīs'])
    assert result == ['quis', 'quĭs', 'quīs']
    assert 'quis' in caplog.text


def test_extract_keys_full_orths():
    e = entry(
        orth('adtango', ('extent', 'full')), ' or ',
        orth('attango', ('extent', 'full')))
    assert extract_keys(e) == ['adtango', 'attango']


def test_extract_keys_prefers_regular_orths():
    e = entry(orth('a-', ('extent', 'full')), orth('ab', ('extent', 'full')))
    assert extract_keys(e) == ['ab']


def test_extract_keys_keeps_affixes_when_nothing_else():
    assert extract_keys(entry(orth('abs-'))) == ['abs-']
    assert extract_keys(entry(orth('-que'))) == ['-que']


def test_extract_keys_normalizes_markers():
    assert extract_keys(entry(orth('ca^no', ('extent', 'full')))) == ['căno']


def test_extract_keys_without_orths():
    with pytest.raises(EmptyOrthError) as info:
        extract_keys(entry('nothing here'))
    assert 'nothing here' in info.value.entry


def test_extract_keys_rejects_commas():
    with pytest.raises(ValueError):
        extract_keys(entry(orth('a,b', ('extent', 'full'))))
