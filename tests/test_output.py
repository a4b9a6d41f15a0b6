import logging

import pytest
import yaml

from errors import ParseError
import logger
from main import report_error, select_entry, worker_fn
from model import XmlNode
from output import (
    decode_payload,
    encode_payload,
    outline_from_dict,
    outline_to_dict,
    output_keys,
    output_yaml,
    prepare_for_output,
)


CAMUS = (
    '<entryFree id="n6600" type="main" key="camus">'
    '<orth extent="full" lang="la">cāmus</orth>, <gen>m.</gen>, '
    '<sense id="n6600.0" n="I" level="1"><hi rend="ital">A muzzle</hi></sense>'
    '</entryFree>')


def test_prepare_for_output():
    result = prepare_for_output({
        'entry': 'x',
        '_private': 1,
        'n': None,
        'keys': ['a'],
        'id': 'n1',
        'outline': {'senses': [], 'main_orth': 'a'},
    })
    assert list(result) == ['id', 'keys', 'outline', 'entry']
    assert result['outline'] == {'main_orth': 'a'}


def test_payload_keeps_trees():
    tree = XmlNode('span', [('class', 'lsOrth')], ['cāmus'])
    message = encode_payload({'entry': tree, 'n': None})
    assert '!xml' in message
    assert decode_payload(message) == {'entry': tree, 'n': None}


def test_payload_loader_is_safe():
    with pytest.raises(yaml.constructor.ConstructorError):
        decode_payload('!!python/object/apply:os.system ["true"]')


def test_worker_fn():
    result = worker_fn(CAMUS)
    assert result['id'] == 'n6600'
    assert result['keys'] == ['cāmus']
    assert result['n'] is None
    assert result['outline']['senses'][0]['text'] == 'A muzzle'
    assert result['entry'].startswith('<div>')


def test_worker_fn_outline_is_readable():
    outline = outline_from_dict(worker_fn(CAMUS)['outline'])
    assert outline.main_orth == 'cāmus'
    assert outline_to_dict(outline) == worker_fn(CAMUS)['outline']


def test_worker_fn_reports_parse_errors(caplog):
    with caplog.at_level(logging.ERROR), pytest.raises(ParseError):
        worker_fn('<entryFree id="n1"><orth></entryFree>')
    assert 'Expected' in caplog.text


def test_report_error_points_at_failure(caplog):
    with caplog.at_level(logging.ERROR):
        report_error(ParseError('<a><b></a>', 6, '</b>'))
    lines = caplog.records[0].getMessage().split('\n')
    assert lines[1] == '  <a><b></a>'
    assert lines[2] == '  ' + ' ' * 6 + '^'


def test_output_keys(capsys):
    output_keys({'id': 'n1004', 'keys': ['adtango', 'attango']})
    assert capsys.readouterr().out == 'n1004\tadtango,attango\n'


def test_output_yaml(capsys):
    output_yaml(worker_fn(CAMUS))
    document = capsys.readouterr().out
    assert document.startswith('---')
    data = yaml.safe_load(document)
    assert list(data)[:2] == ['id', 'keys']
    assert data['keys'] == ['cāmus']


def test_select_entry():
    entries = [
        '<entryFree id="n1">a</entryFree>',
        '<entryFree id="n10">b</entryFree>',
        "<entryFree key='x' id='n100'>c</entryFree>",
    ]
    assert list(select_entry(iter(entries), 'n10')) == [entries[1]]
    assert list(select_entry(iter(entries), 'n100')) == [entries[2]]
    assert list(select_entry(iter(entries), 'n2')) == []


def test_entry_filter_stamps_records():
    record = logging.LogRecord('lsparse', logging.INFO, __file__, 1, 'msg', (), None)
    logger.set_entry('n42')
    try:
        assert logger.EntryFilter().filter(record)
        assert record.entry == 'n42'
    finally:
        logger.set_entry(None)
    assert logger.current_entry == ''
