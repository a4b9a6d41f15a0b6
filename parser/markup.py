"""Character references in raw markup."""
from typing import Mapping

import regex


NAMED_ENTITIES: Mapping[str, str] = {
    'amp': '&',
    'lt': '<',
    'gt': '>',
    'quot': '"',
    'apos': "'",
}

ENTITY = regex.compile(r'&(?:#x([0-9a-fA-F]+)|#([0-9]+)|([A-Za-z]+));')


def _replace_entity(match: regex.Match) -> str:
    hex_code, dec_code, name = match.groups()
    if hex_code:
        return chr(int(hex_code, 16))
    if dec_code:
        return chr(int(dec_code))
    # Unknown named entities are kept as they are
    return NAMED_ENTITIES.get(name, match.group())


def unescape(text: str) -> str:
    """Decode the predefined XML entities and numeric character references."""
    if '&' not in text:
        return text
    return ENTITY.sub(_replace_entity, text)
