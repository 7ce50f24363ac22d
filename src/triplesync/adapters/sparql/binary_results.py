"""
Decoder for the binary RDF results table format.

This is the ``application/x-binary-rdf-results-table`` tuple format spoken by
Sesame/RDF4J-derived stores such as Blazegraph.

Format:
    Header:
        Magic: "BRTR" (4 bytes)
        Version: int32, 1 to 4
        Flags: int32, only present in version 2
        Column count: int32
        Column names: one string each

    Strings:
        version 1: uint16 length + modified UTF-8 (Java ``writeUTF``)
        later versions: int32 byte length + UTF-8

    Records, each introduced by a one-byte marker:
        0 NULL, 1 REPEAT, 2 NAMESPACE, 3 QNAME, 4 URI, 5 BNODE,
        6 PLAIN_LITERAL, 7 LANG_LITERAL, 8 DATATYPE_LITERAL, 9 EMPTY_ROW,
        10 TRIPLE, 126 ERROR, 127 TABLE_END

    A row is complete once it holds one value per column. All integers are
    big-endian.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, NoReturn, overload

from rdflib import BNode, Literal, URIRef

from .errors import ResponseDecodeError

if TYPE_CHECKING:
    from triplesync.domain.statements import Term

MAGIC = b"BRTR"
MAX_FORMAT_VERSION = 4

_INT = struct.Struct(">i")
_SHORT = struct.Struct(">H")
_BYTE = struct.Struct(">b")


class RecordType(IntEnum):
    NULL = 0
    REPEAT = 1
    NAMESPACE = 2
    QNAME = 3
    URI = 4
    BNODE = 5
    PLAIN_LITERAL = 6
    LANG_LITERAL = 7
    DATATYPE_LITERAL = 8
    EMPTY_ROW = 9
    TRIPLE = 10
    ERROR = 126
    TABLE_END = 127


class ErrorType(IntEnum):
    MALFORMED_QUERY = 1
    QUERY_EVALUATION = 2


class BindingSet(Mapping[str, "Term"]):
    """One result row; unbound variables are simply absent."""

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Mapping[str, Term] | None = None) -> None:
        self._bindings: dict[str, Term] = dict(bindings or {})

    def __getitem__(self, name: str) -> Term:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"BindingSet({self._bindings!r})"


@dataclass(slots=True)
class TupleQueryResult:
    """Rows of a SELECT query, in the order the store sent them."""

    binding_names: tuple[str, ...]
    rows: list[BindingSet] = field(default_factory=list)

    def __iter__(self) -> Iterator[BindingSet]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @overload
    def __getitem__(self, index: int) -> BindingSet: ...

    @overload
    def __getitem__(self, index: slice) -> list[BindingSet]: ...

    def __getitem__(self, index: int | slice) -> BindingSet | list[BindingSet]:
        return self.rows[index]


class _ChunkReader:
    """Pulls exact byte counts out of an iterator of arbitrarily sized chunks."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._buffer = bytearray()

    def read(self, size: int) -> bytes:
        while len(self._buffer) < size:
            chunk = next(self._chunks, None)
            if chunk is None:
                raise ResponseDecodeError("Unexpected end of binary results stream")
            self._buffer += chunk
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def read_int(self) -> int:
        return _INT.unpack(self.read(_INT.size))[0]

    def read_byte(self) -> int:
        return _BYTE.unpack(self.read(_BYTE.size))[0]


def _decode_modified_utf8(data: bytes) -> str:
    # Java's writeUTF encodes NUL as C0 80 and astral characters as surrogate pairs
    text = data.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="surrogatepass")
    return text.encode("utf-16", errors="surrogatepass").decode("utf-16")


class BinaryResultsParser:
    """Parses one results table from a byte stream."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._reader = _ChunkReader(chunks)
        self._version = 0
        self._namespaces: dict[int, str] = {}

    def parse(self) -> TupleQueryResult:
        try:
            return self._parse()
        except UnicodeDecodeError as exc:
            raise ResponseDecodeError(f"Invalid string in binary results: {exc}") from exc

    def _parse(self) -> TupleQueryResult:
        magic = self._reader.read(len(MAGIC))
        if magic != MAGIC:
            raise ResponseDecodeError(f"Invalid binary results magic: {magic!r}")

        self._version = self._reader.read_int()
        if not 1 <= self._version <= MAX_FORMAT_VERSION:
            raise ResponseDecodeError(f"Unsupported binary results version: {self._version}")
        if self._version == 2:  # noqa: PLR2004
            self._reader.read_int()  # flags, unused

        column_count = self._reader.read_int()
        if column_count < 0:
            raise ResponseDecodeError(f"Negative column count: {column_count}")
        names = tuple(self._read_string() for _ in range(column_count))
        result = TupleQueryResult(binding_names=names)

        previous: list[Term | None] | None = None
        values: list[Term | None] = []
        while True:
            marker = self._reader.read_byte()
            if marker == RecordType.TABLE_END:
                break
            if marker == RecordType.ERROR:
                self._raise_store_error()
            if marker == RecordType.NAMESPACE:
                namespace_id = self._reader.read_int()
                self._namespaces[namespace_id] = self._read_string()
                continue
            if marker == RecordType.EMPTY_ROW:
                result.rows.append(BindingSet())
                continue

            if marker == RecordType.REPEAT:
                if previous is None:
                    raise ResponseDecodeError("REPEAT record without a previous row")
                value = previous[len(values)]
            else:
                value = self._read_value(marker)
            values.append(value)

            if len(values) == column_count:
                result.rows.append(
                    BindingSet(
                        {name: v for name, v in zip(names, values, strict=True) if v is not None}
                    )
                )
                previous = values
                values = []

        if values:
            raise ResponseDecodeError("Binary results table ended in the middle of a row")
        return result

    def _read_value(self, marker: int) -> Term | None:
        match marker:
            case RecordType.NULL:
                return None
            case RecordType.QNAME:
                return self._read_qname()
            case RecordType.URI:
                return URIRef(self._read_string())
            case RecordType.BNODE:
                return BNode(self._read_string())
            case RecordType.PLAIN_LITERAL | RecordType.LANG_LITERAL | RecordType.DATATYPE_LITERAL:
                return self._read_literal(marker)
            case RecordType.TRIPLE:
                raise ResponseDecodeError("Quoted triple values are not supported")
            case _:
                raise ResponseDecodeError(f"Unknown record type marker: {marker}")

    def _read_qname(self) -> URIRef:
        namespace_id = self._reader.read_int()
        local_name = self._read_string()
        try:
            namespace = self._namespaces[namespace_id]
        except KeyError:
            raise ResponseDecodeError(f"Unknown namespace id: {namespace_id}") from None
        return URIRef(namespace + local_name)

    def _read_literal(self, marker: int) -> Literal:
        label = self._read_string()
        if marker == RecordType.LANG_LITERAL:
            return Literal(label, lang=self._read_string())
        if marker == RecordType.DATATYPE_LITERAL:
            datatype_marker = self._reader.read_byte()
            if datatype_marker == RecordType.QNAME:
                datatype = self._read_qname()
            elif datatype_marker == RecordType.URI:
                datatype = URIRef(self._read_string())
            else:
                raise ResponseDecodeError(
                    f"Illegal record type marker for literal datatype: {datatype_marker}"
                )
            return Literal(label, datatype=datatype)
        return Literal(label)

    def _read_string(self) -> str:
        if self._version == 1:
            length = _SHORT.unpack(self._reader.read(_SHORT.size))[0]
            return _decode_modified_utf8(self._reader.read(length))
        length = self._reader.read_int()
        if length < 0:
            raise ResponseDecodeError(f"Negative string length: {length}")
        return self._reader.read(length).decode("utf-8")

    def _raise_store_error(self) -> NoReturn:
        error_type = self._reader.read_byte()
        message = self._read_string()
        if error_type == ErrorType.MALFORMED_QUERY:
            raise ResponseDecodeError(f"Store reported a malformed query: {message}")
        raise ResponseDecodeError(f"Store reported a query evaluation error: {message}")


def parse_binary_results(chunks: Iterable[bytes]) -> TupleQueryResult:
    return BinaryResultsParser(chunks).parse()


__all__ = [
    "MAGIC",
    "BindingSet",
    "BinaryResultsParser",
    "ErrorType",
    "RecordType",
    "TupleQueryResult",
    "parse_binary_results",
]
