from pathlib import Path

import pytest

from model import XmlNode
import parser


TESTDATA = Path(__file__).parent / 'testdata'

LS_SUBSET = TESTDATA / 'ls_subset.xml'
TEI_SAMPLE = TESTDATA / 'tei_sample.xml'


@pytest.fixture
def ls_subset() -> Path:
    return LS_SUBSET


@pytest.fixture
def tei_root() -> XmlNode:
    return parser.parse_xml(TEI_SAMPLE.read_bytes())


@pytest.fixture
def entries() -> dict[str, XmlNode]:
    """The entries of the dictionary excerpt, by id."""
    return {e.get_attr('id'): e for e in parser.parse_file(LS_SUBSET)}
