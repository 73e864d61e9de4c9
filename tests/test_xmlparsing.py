import json

import pytest

from gonkey.xmlparsing import parse

PERSON_XML = (
    '\n  <?xml version="1.0" encoding="UTF-8"?>\n'
    "<Person>"
    "<Company><![CDATA[Hogwarts School of Witchcraft and Wizardry]]></Company>\n"
    "  <FullName>Harry Potter</FullName>\n"
    '  <Email where="work">[email]</Email>\n'
    '  <Email where="home">[email]</Email>\n'
    "  <Addr>4 Privet Drive</Addr>\n"
    "  <Group>\n    <Value>Hexes</Value>\n    <Value>Jinxes</Value>\n  </Group>\n"
    "</Person>\n"
)

PERSON_EXPECTED = {
    "Person": {
        "Company": "Hogwarts School of Witchcraft and Wizardry",
        "FullName": "Harry Potter",
        "Email": [
            {"-attrs": {"where": "work"}, "content": "[email]"},
            {"-attrs": {"where": "home"}, "content": "[email]"},
        ],
        "Addr": "4 Privet Drive",
        "Group": {"Value": ["Hexes", "Jinxes"]},
    }
}


@pytest.mark.parametrize(
    ("raw_xml", "expected"),
    [
        (PERSON_XML, PERSON_EXPECTED),
        (
            "<ns1:person>\n <ns2:name>Eddie</ns2:name>\n <ns2:surname>Dean</ns2:surname>\n</ns1:person>",
            {"ns1:person": {"ns2:name": "Eddie", "ns2:surname": "Dean"}},
        ),
        ("<body><emptytag/></body>", {"body": {"emptytag": ""}}),
        (
            '<body><tag attr1="attr1_value" attr2="attr2_value"/></body>',
            {
                "body": {
                    "tag": {
                        "-attrs": {"attr1": "attr1_value", "attr2": "attr2_value"},
                        "content": "",
                    }
                }
            },
        ),
    ],
    ids=["person", "namespaces", "emptytag", "onlyattributes"],
)
def test_parse_cases(raw_xml, expected):
    assert parse(raw_xml) == expected


def test_parse_result_serializes_to_json():
    data = parse(PERSON_XML)
    assert json.loads(json.dumps(data)) == data


def test_attributes_and_children_are_combined():
    result = parse('<r><a k="v"><b>1</b></a></r>')
    assert result == {"r": {"a": {"b": "1", "-attrs": {"k": "v"}}}}


def test_declared_namespace_is_resolved():
    result = parse('<a xmlns:x="urn:x"><x:b>1</x:b></a>')
    assert result == {"a": {"urn:x:b": "1", "-attrs": {"xmlns:x": "urn:x"}}}


def test_malformed_document_raises():
    with pytest.raises(ValueError):
        parse("<a><b></a>")


def test_empty_document_raises():
    with pytest.raises(ValueError):
        parse("")