"""Lookup keys for dictionary entries.

Every entry is stored under the spellings ("orths") of its headword.  An
entry may list complete spellings (`extent="full"`) along with abbreviated
alternatives such as `abs-`; the complete ones are preferred whenever there
are any.  Vowel length is significant, so keys keep their diacritics.
"""
import unicodedata

import regex

from errors import EmptyOrthError
from logger import log
from model import XmlNode


EXCLUDED_TYPES = {'editorial', 'suppletive'}

MACRON = '\u0304'
BREVE = '\u0306'

VOWEL_MARKER = regex.compile(r'([aeiouyAEIOUY])([_^])')
DIACRITICS = regex.compile(r'\p{Mn}')


def orth_text(orth: XmlNode) -> str:
    return orth.text_content().strip()


def get_orths(entry: XmlNode) -> list[str]:
    """Return the spellings of an entry in document order.

    Alternative spellings are only returned when the entry has no complete
    one.
    """
    full: list[str] = []
    alts: list[str] = []
    for orth in entry.find_descendants('orth'):
        if orth.get_attr('type') in EXCLUDED_TYPES:
            continue
        text = orth_text(orth)
        if not text:
            continue
        if orth.get_attr('extent') == 'full':
            full.append(text)
        else:
            alts.append(text)
    return full if full else alts


def is_regular_orth(orth: str) -> bool:
    """Whether `orth` is a complete word rather than a prefix or suffix."""
    return not orth.startswith('-') and not orth.endswith('-')


def normalize_vowel_markers(orth: str) -> str:
    """Merge `_` (long) and `^` (short) markers into the preceding vowel.

    >>> normalize_vowel_markers('a_mo^r')
    'āmŏr'
    """
    def combine(match: regex.Match) -> str:
        vowel, marker = match.groups()
        return vowel + (MACRON if marker == '_' else BREVE)

    return unicodedata.normalize('NFC', VOWEL_MARKER.sub(combine, orth))


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return unicodedata.normalize('NFC', DIACRITICS.sub('', decomposed))


def merge_vowel_markers(orths: list[str]) -> list[str]:
    """Normalize vowel markers and drop the resulting duplicates.

    Spellings that only differ in their diacritics are all kept: `quis`,
    `quĭs` and `quīs` are three different keys.
    """
    merged: list[str] = []
    bases: dict[str, list[str]] = {}
    for orth in map(normalize_vowel_markers, orths):
        if orth in merged:
            continue
        merged.append(orth)
        bases.setdefault(strip_diacritics(orth), []).append(orth)

    for base, variants in bases.items():
        if len(variants) > 1:
            log.debug('Keeping %d marked variants of %s: %s',
                      len(variants), base, ', '.join(variants))
    return merged


def extract_keys(entry: XmlNode) -> list[str]:
    """Return the keys under which `entry` should be looked up.

    Fails with `EmptyOrthError` if the entry has no spelling at all.
    """
    orths = merge_vowel_markers(get_orths(entry))
    if not orths:
        raise EmptyOrthError(entry.to_string())
    regulars = [orth for orth in orths if is_regular_orth(orth)]
    keys = regulars if regulars else orths
    for key in keys:
        if ',' in key:
            raise ValueError(f'Key {key!r} should not contain a comma')
    return keys
