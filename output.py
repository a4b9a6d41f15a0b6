"""Serializing processing results.

Stored entries are encoded as YAML documents in which display trees are
kept as markup strings tagged with `!xml`.  The CLI output uses plain YAML
instead, meant to be read by people.
"""
from dataclasses import asdict
from pprint import pprint
import sys
from typing import Any

import yaml

from model import XmlNode
from outline import EntryOutline, SectionOutline
import parser


XML_TAG = '!xml'

FIELD_ORDER = {
    # entry
    'id': 0,
    'keys': 1,
    'n': 2,
    'outline': 3,
    'entry': 4,

    # outline
    'main_orth': 0,
    'main_section': 1,
    'senses': 2,

    # section
    'level': 0,
    'label': 1,
    'sense_id': 2,
    'text': 3,
    'children': 4,
}

DEFAULT_ORDER = 100


def prepare_for_output(obj):
    """Prepares the processing result for output.

    Keys that begin with an underscore and keys with falsy values are
    removed.  Keys are sorted for the user's convenience.
    """
    if isinstance(obj, dict):
        pairs = [
            (k, prepare_for_output(v))
            for k, v in obj.items()
            if not k.startswith('_') and v
        ]
        pairs.sort(key=lambda kv: FIELD_ORDER.get(kv[0], DEFAULT_ORDER))
        return dict(pairs)
    elif isinstance(obj, list):
        return [prepare_for_output(x) for x in obj]
    else:
        return obj


def markup_representer(dumper: yaml.Dumper, node: XmlNode):
    return dumper.represent_str(node.to_string())

yaml.add_representer(XmlNode, markup_representer)


class PayloadDumper(yaml.Dumper):
    pass


class PayloadLoader(yaml.SafeLoader):
    pass


def xml_representer(dumper: yaml.Dumper, node: XmlNode):
    return dumper.represent_scalar(XML_TAG, node.to_string())


def xml_constructor(loader: yaml.Loader, node: yaml.Node) -> XmlNode:
    return parser.parse_xml(loader.construct_scalar(node))

PayloadDumper.add_representer(XmlNode, xml_representer)
PayloadLoader.add_constructor(XML_TAG, xml_constructor)


def encode_payload(data: dict[str, Any]) -> str:
    return yaml.dump(
        data,
        Dumper=PayloadDumper,
        allow_unicode=True,
        sort_keys=False)


def decode_payload(message: str) -> dict[str, Any]:
    return yaml.load(message, Loader=PayloadLoader)


def outline_to_dict(outline: EntryOutline | None) -> dict | None:
    return asdict(outline) if outline is not None else None


def section_from_dict(data: dict) -> SectionOutline:
    return SectionOutline(
        level=data['level'],
        label=data['label'],
        sense_id=data['sense_id'],
        text=data['text'],
        children=[section_from_dict(c) for c in data.get('children', [])])


def outline_from_dict(data: dict | None) -> EntryOutline | None:
    if data is None:
        return None
    return EntryOutline(
        main_orth=data['main_orth'],
        main_section=section_from_dict(data['main_section']),
        senses=[section_from_dict(s) for s in data.get('senses', [])])


def output_raw(result: dict):
    pprint(result, sys.stdout, compact=True)

def output_yaml(result: dict):
    clean = prepare_for_output(result)
    yaml.dump(clean,
              stream=sys.stdout,
              allow_unicode=True,
              sort_keys=False,
              explicit_start=True)

def output_keys(result: dict):
    print(result['id'], ','.join(result['keys']), sep='\t')
