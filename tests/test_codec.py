# tests/test_codec.py

import copy
from pathlib import Path

import pytest

import sfflow.codec.flow as flow_codec
from sfflow.codec.flow import parse, parse_from_file, stringify, stringify_to_file
from sfflow.codec.xml import escape_text_quotes, expand_self_closing
from sfflow.errors import FlowError, FlowFileNotFoundError, FlowParseError, FlowPermissionError, FlowRootError
from sfflow.schema.table import DEFAULT_SCHEMA

FIXTURES = Path(__file__).parent / "fixtures"
HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
ROOT = '<Flow xmlns="http://soap.sforce.com/2006/04/metadata">'


def _fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


# ---------------- parse ----------------
def test_parse_reads_scalar_fields():
    flow = parse(_fixture("single_decision.xml"))
    assert flow["apiVersion"] == "58.0"
    assert float(flow["apiVersion"]) == 58.0
    assert flow["label"] == "Test Flow"
    assert flow["status"] == "Active"


def test_parse_wraps_single_elements_in_lists():
    flow = parse("<Flow><decisions><name>D1</name><rules><name>R1</name></rules></decisions></Flow>")

    assert isinstance(flow["decisions"], list)
    assert len(flow["decisions"]) == 1
    decision = flow["decisions"][0]
    assert decision["name"] == "D1"
    assert isinstance(decision["rules"], list)
    assert decision["rules"][0]["name"] == "R1"
    assert decision["rules"][0]["conditions"] == []


def test_parsed_flow_satisfies_the_list_invariant():
    flow = parse(_fixture("single_decision.xml"))

    for name in DEFAULT_SCHEMA.array_fields:
        assert isinstance(flow[name], list), name
    rule = flow["decisions"][0]["rules"][0]
    assert rule["name"] == "YESrun"
    assert rule["conditions"][0]["operator"] == "EqualTo"
    assert rule["conditions"][0]["leftValueReference"] == "Bypass_Logic.Should_Run"
    assert isinstance(flow["start"], dict)
    assert flow["start"]["scheduledPaths"] == []
    assert flow["subflows"][0]["inputAssignments"][0]["name"] == "recordId"


@pytest.mark.parametrize("xml", ["<invalid>XML</invalid>", "<NotAFlow></NotAFlow>", "<Flow></Flow>"])
def test_parse_requires_a_flow_root(xml):
    with pytest.raises(FlowRootError, match="XML does not contain a Flow element"):
        parse(xml)


@pytest.mark.parametrize("xml", ["", "<Flow><label>unterminated</Flow>", "not xml at all"])
def test_parse_wraps_decoder_errors(xml):
    with pytest.raises(FlowParseError, match="Failed to parse XML") as info:
        parse(xml)
    assert info.value.__cause__ is not None
    assert isinstance(info.value, FlowError)


# ---------------- stringify ----------------
@pytest.mark.parametrize("name", ["canonical_flow.xml", "single_decision.xml", "quoted_text.xml"])
def test_round_trip_is_byte_stable_for_canonical_documents(name):
    text = _fixture(name)
    assert stringify(parse(text)) == text


def test_stringify_writes_header_namespace_and_trailing_newline():
    xml = stringify({"apiVersion": 58.0, "label": "Test Flow", "status": "Active", "processMetadataValues": []})

    lines = xml.split("\n")
    assert lines[0] == HEADER
    assert lines[1] == ROOT
    assert "    <apiVersion>58.0</apiVersion>" in lines
    assert "    <label>Test Flow</label>" in lines
    assert xml.endswith("</Flow>\n")
    assert not xml.endswith("\n\n")


def test_stringify_sorts_without_mutating_the_flow():
    flow = parse(
        "<Flow>"
        "<label>Unsorted</label>"
        "<variables><name>zeta</name></variables>"
        "<variables><name>Alpha</name></variables>"
        "<decisions><name>D</name>"
        "<rules><name>Second</name></rules><rules><name>First</name></rules>"
        "</decisions>"
        "</Flow>"
    )
    before = copy.deepcopy(flow)

    xml = stringify(flow)

    assert xml.index("<name>Alpha</name>") < xml.index("<name>zeta</name>")
    assert xml.index("<name>First</name>") < xml.index("<name>Second</name>")
    assert flow == before
    assert [v["name"] for v in flow["variables"]] == ["zeta", "Alpha"]


def test_stringify_never_emits_self_closing_tags():
    xml = stringify({"label": "Empty", "description": None, "start": {"locationX": "0", "object": ""}})
    assert "/>" not in xml
    assert "    <description></description>\n" in xml
    assert "        <object></object>\n" in xml


def test_stringify_keeps_entities_escaped():
    xml = stringify({"description": "A & B <c>"})
    assert "<description>A &amp; B &lt;c&gt;</description>" in xml
    assert parse(xml)["description"] == "A & B <c>"


def test_stringify_writes_quotes_in_text_as_entities():
    flow = parse(ROOT + "<description>Say &quot;hi&quot; it&apos;s ok</description></Flow>")
    assert flow["description"] == "Say \"hi\" it's ok"

    xml = stringify(flow)

    assert "    <description>Say &quot;hi&quot; it&apos;s ok</description>\n" in xml
    # attribute quoting untouched
    assert xml.split("\n")[1] == ROOT


def test_escape_text_quotes_only_touches_text_nodes():
    xml = '<a x="1">it\'s "q"</a>\n<b y=\'2\'></b>'
    assert escape_text_quotes(xml) == '<a x="1">it&apos;s &quot;q&quot;</a>\n<b y=\'2\'></b>'


def test_expand_self_closing():
    assert expand_self_closing("<a/>\n<b x=\"1\"/>\n") == "<a></a>\n<b x=\"1\"></b>\n"
    # only at line ends
    assert expand_self_closing("<a/>") == "<a/>"


# ---------------- file variants ----------------
def test_parse_from_file(tmp_path):
    path = tmp_path / "temp-flow.xml"
    path.write_text(_fixture("single_decision.xml"), encoding="utf-8")

    flow = parse_from_file(path)
    assert flow["label"] == "Test Flow"
    assert parse_from_file(str(path)) == flow


def test_parse_from_file_missing_file():
    with pytest.raises(FlowFileNotFoundError, match="File not found: /non/existent/file.xml") as info:
        parse_from_file("/non/existent/file.xml")
    assert info.value.path == "/non/existent/file.xml"
    assert isinstance(info.value, FileNotFoundError)


def test_parse_from_file_permission_denied(monkeypatch):
    def deny(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(flow_codec, "read_text", deny)
    with pytest.raises(FlowPermissionError, match="Permission denied to read file: locked.xml"):
        parse_from_file("locked.xml")


def test_parse_from_file_keeps_other_errors(tmp_path):
    with pytest.raises(IsADirectoryError):
        parse_from_file(tmp_path)


def test_stringify_to_file(tmp_path):
    path = tmp_path / "output-flow.xml"
    flow = parse(_fixture("canonical_flow.xml"))

    stringify_to_file(flow, path)

    assert path.read_text(encoding="utf-8") == _fixture("canonical_flow.xml")
    assert not (tmp_path / "output-flow.xml.tmp").exists()


def test_stringify_to_file_missing_directory(tmp_path):
    target = tmp_path / "missing" / "file.xml"
    with pytest.raises(FlowFileNotFoundError, match="Directory not found for file"):
        stringify_to_file(parse(_fixture("single_decision.xml")), target)
    assert not target.parent.exists()


def test_stringify_to_file_permission_denied(monkeypatch, tmp_path):
    def deny(path, text):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(flow_codec, "write_text", deny)
    with pytest.raises(FlowPermissionError, match="Permission denied to write file"):
        stringify_to_file({"label": "x"}, tmp_path / "out.xml")
