from __future__ import annotations

import struct

import pytest
from rdflib import XSD, BNode, Literal, URIRef

from tests.support.binary_results import BinaryTableWriter, encode_results
from triplesync.adapters.sparql import ResponseDecodeError, parse_binary_results
from triplesync.adapters.sparql.binary_results import MAGIC, ErrorType, RecordType

EX = "http://example.com/"


def _chunked(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


@pytest.mark.parametrize("version", [1, 2, 3, 4])
def test_parses_each_format_version(version: int) -> None:
    body = encode_results(
        ["s", "label"],
        [{"s": URIRef(EX + "a"), "label": Literal("first")}],
        version=version,
    )

    result = parse_binary_results([body])

    assert result.binding_names == ("s", "label")
    assert len(result) == 1
    assert result[0] == {"s": URIRef(EX + "a"), "label": Literal("first")}


def test_parses_every_value_kind() -> None:
    row = {
        "uri": URIRef(EX + "thing"),
        "bnode": BNode("b0"),
        "plain": Literal("plain"),
        "lang": Literal("chat", lang="fr"),
        "typed": Literal("42", datatype=XSD.integer),
    }

    result = parse_binary_results([encode_results(list(row), [row])])

    parsed = result[0]
    assert parsed["uri"] == URIRef(EX + "thing")
    assert parsed["bnode"] == BNode("b0")
    assert parsed["plain"] == Literal("plain")
    assert parsed["lang"].language == "fr"  # type: ignore[union-attr]
    assert parsed["typed"].toPython() == 42  # type: ignore[union-attr]


def test_unbound_values_are_left_out_of_the_row() -> None:
    body = encode_results(["a", "b"], [{"a": Literal("x"), "b": None}])

    row = parse_binary_results([body])[0]

    assert "b" not in row
    assert row.get("b") is None
    assert list(row) == ["a"]


def test_qnames_resolve_against_declared_namespaces() -> None:
    writer = BinaryTableWriter(["s", "o"])
    writer.write_namespace(0, EX)
    writer.write_qname(0, "subject")
    writer.write_byte(RecordType.DATATYPE_LITERAL)
    writer.write_string("2015-06-07T08:09:10Z")
    writer.write_byte(RecordType.URI)
    writer.write_string(str(XSD.dateTime))

    result = parse_binary_results([writer.finish()])

    assert result[0]["s"] == URIRef(EX + "subject")
    assert result[0]["o"] == Literal("2015-06-07T08:09:10Z", datatype=XSD.dateTime)


def test_datatype_can_be_a_qname() -> None:
    writer = BinaryTableWriter(["o"])
    writer.write_namespace(7, str(XSD))
    writer.write_byte(RecordType.DATATYPE_LITERAL)
    writer.write_string("3")
    writer.write_qname(7, "integer")

    result = parse_binary_results([writer.finish()])

    assert result[0]["o"] == Literal("3", datatype=XSD.integer)


def test_repeat_copies_value_from_previous_row() -> None:
    writer = BinaryTableWriter(["s", "o"])
    writer.write_value(URIRef(EX + "a"))
    writer.write_value(Literal("one"))
    writer.write_byte(RecordType.REPEAT)
    writer.write_value(Literal("two"))

    result = parse_binary_results([writer.finish()])

    assert [row["s"] for row in result] == [URIRef(EX + "a"), URIRef(EX + "a")]
    assert [row["o"] for row in result] == [Literal("one"), Literal("two")]


def test_repeat_without_previous_row_is_rejected() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_byte(RecordType.REPEAT)

    with pytest.raises(ResponseDecodeError, match="REPEAT"):
        parse_binary_results([writer.finish()])


def test_empty_rows_for_tables_without_columns() -> None:
    body = encode_results([], [{}, {}])

    result = parse_binary_results([body])

    assert result.binding_names == ()
    assert len(result) == 2
    assert all(len(row) == 0 for row in result)


def test_table_without_rows() -> None:
    result = parse_binary_results([encode_results(["x"], [])])

    assert result.binding_names == ("x",)
    assert list(result) == []


def test_parses_input_split_into_tiny_chunks() -> None:
    rows = [{"s": URIRef(EX + str(i)), "o": Literal(f"value {i}", lang="en")} for i in range(5)]
    body = encode_results(["s", "o"], rows)

    result = parse_binary_results(_chunked(body, 3))

    assert [dict(row) for row in result] == rows


def test_version_one_uses_modified_utf8() -> None:
    name = b"x"
    # NUL as C0 80, U+1F600 as a surrogate pair of 3-byte sequences
    value = b"a\xc0\x80b\xed\xa0\xbd\xed\xb8\x80"
    body = b"".join(
        [
            MAGIC,
            struct.pack(">i", 1),
            struct.pack(">i", 1),
            struct.pack(">H", len(name)),
            name,
            struct.pack(">b", RecordType.PLAIN_LITERAL),
            struct.pack(">H", len(value)),
            value,
            struct.pack(">b", RecordType.TABLE_END),
        ]
    )

    result = parse_binary_results([body])

    assert str(result[0]["x"]) == "a\x00b\U0001f600"


def test_error_record_is_raised() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_error(ErrorType.QUERY_EVALUATION, "boom")

    with pytest.raises(ResponseDecodeError, match="query evaluation error: boom"):
        parse_binary_results([writer.partial()])


def test_malformed_query_error_record() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_error(ErrorType.MALFORMED_QUERY, "bad syntax")

    with pytest.raises(ResponseDecodeError, match="malformed query: bad syntax"):
        parse_binary_results([writer.partial()])


def test_truncated_stream_is_rejected() -> None:
    body = encode_results(["s"], [{"s": URIRef(EX + "a")}])

    with pytest.raises(ResponseDecodeError, match="Unexpected end"):
        parse_binary_results([body[:-3]])


def test_missing_table_end_is_rejected() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_value(URIRef(EX + "a"))

    with pytest.raises(ResponseDecodeError, match="Unexpected end"):
        parse_binary_results([writer.partial()])


def test_partial_row_before_table_end_is_rejected() -> None:
    writer = BinaryTableWriter(["s", "o"])
    writer.write_value(URIRef(EX + "a"))

    with pytest.raises(ResponseDecodeError, match="middle of a row"):
        parse_binary_results([writer.finish()])


def test_bad_magic_is_rejected() -> None:
    with pytest.raises(ResponseDecodeError, match="magic"):
        parse_binary_results([b"RTRB" + struct.pack(">i", 3)])


@pytest.mark.parametrize("version", [0, 5])
def test_unsupported_versions_are_rejected(version: int) -> None:
    with pytest.raises(ResponseDecodeError, match="version"):
        parse_binary_results([MAGIC + struct.pack(">i", version)])


def test_unknown_marker_is_rejected() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_byte(42)

    with pytest.raises(ResponseDecodeError, match="Unknown record type marker: 42"):
        parse_binary_results([writer.finish()])


def test_quoted_triples_are_not_supported() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_byte(RecordType.TRIPLE)

    with pytest.raises(ResponseDecodeError, match="Quoted triple"):
        parse_binary_results([writer.finish()])


def test_unknown_namespace_is_rejected() -> None:
    writer = BinaryTableWriter(["s"])
    writer.write_qname(3, "local")

    with pytest.raises(ResponseDecodeError, match="Unknown namespace id: 3"):
        parse_binary_results([writer.finish()])


def test_invalid_utf8_is_reported_as_decode_error() -> None:
    body = MAGIC + struct.pack(">i", 3) + struct.pack(">i", 1) + struct.pack(">i", 1) + b"\xff"

    with pytest.raises(ResponseDecodeError, match="Invalid string"):
        parse_binary_results([body])
