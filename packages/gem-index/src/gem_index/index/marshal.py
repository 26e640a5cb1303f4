# SPDX-License-Identifier: MIT
"""Ruby Marshal 4.8 serialization.

The legacy gem index files and the dependency API are Ruby ``Marshal.dump``
output, so they must be byte-compatible with Ruby's reader. This module
covers the subset of the format those payloads use:

- ``0`` nil, ``T`` true, ``F`` false: ``None``, ``True``, ``False``
- ``i`` fixnum (31-bit signed range) and ``l`` bignum: ``int``
- ``"`` string: ``str`` when wrapped in ``I`` with an encoding ivar,
  otherwise ``bytes``
- ``:`` symbol and ``;`` symbol back-reference: ``Symbol``
- ``[`` array: ``list`` (``tuple`` is accepted on dump)
- ``{`` hash: ``dict``
- ``U`` user-marshalled object: ``UserMarshal``
- ``@`` object back-reference: the referenced value

Ruby shares repeated objects through an object table indexed by the order
in which non-immediate objects are first written (the top-level value is
index 0). Python strings carry no useful identity, so the encoder keys the
table by string *value*: an equal string written twice becomes an ``@``
link to the first one. Arrays, hashes and user objects always get a fresh
index.
"""

from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass
from typing import Any

MAJOR_VERSION = 4
MINOR_VERSION = 8
HEADER = bytes([MAJOR_VERSION, MINOR_VERSION])

TYPE_NIL = b"0"
TYPE_TRUE = b"T"
TYPE_FALSE = b"F"
TYPE_FIXNUM = b"i"
TYPE_BIGNUM = b"l"
TYPE_STRING = b'"'
TYPE_SYMBOL = b":"
TYPE_SYMLINK = b";"
TYPE_IVAR = b"I"
TYPE_ARRAY = b"["
TYPE_HASH = b"{"
TYPE_USRMARSHAL = b"U"
TYPE_LINK = b"@"

FIXNUM_MIN = -(2**30)
FIXNUM_MAX = 2**30 - 1

ENCODING_IVAR = "E"
ENCODING_NAME_IVAR = "encoding"


class EncodingFailure(Exception):
    """A value could not be serialized, or a payload could not be parsed."""


class Symbol(str):
    """A Ruby symbol. Compares equal to the plain string of the same name."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Symbol({str.__repr__(self)})"


@dataclass(frozen=True)
class UserMarshal:
    """An object dumped through ``marshal_dump``, e.g. ``Gem::Version``.

    Attributes:
        class_name: Ruby class path, such as ``"Gem::Version"``
        data: The value returned by the object's ``marshal_dump``
    """

    class_name: str
    data: Any


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_long(value: int) -> bytes:
    """Encode an integer with Ruby's ``w_long`` scheme.

    Small values take one byte with a +/-5 offset; larger ones a signed
    byte count followed by that many little-endian bytes.
    """
    if value == 0:
        return b"\x00"
    if 0 < value < 123:
        return bytes([value + 5])
    if -124 < value < 0:
        return bytes([(value - 5) & 0xFF])
    if not -(2**31) <= value < 2**31:
        raise EncodingFailure(f"Length or fixnum out of range: {value}")

    out = bytearray()
    for i in range(1, 5):
        out.append(value & 0xFF)
        value >>= 8
        if value == 0:
            return bytes([i]) + bytes(out)
        if value == -1:
            return bytes([(-i) & 0xFF]) + bytes(out)
    raise EncodingFailure("unreachable fixnum width")


class _Writer:
    def __init__(self) -> None:
        self.out = bytearray(HEADER)
        self.symbols: dict[str, int] = {}
        self.objects = 0
        self.strings: dict[tuple[type, str | bytes], int] = {}

    def _remember(self) -> int:
        index = self.objects
        self.objects += 1
        return index

    def _write_bytes(self, data: bytes) -> None:
        self.out += encode_long(len(data))
        self.out += data

    def write_symbol(self, name: str) -> None:
        index = self.symbols.get(name)
        if index is not None:
            self.out += TYPE_SYMLINK
            self.out += encode_long(index)
            return

        self.symbols[name] = len(self.symbols)
        if name.isascii():
            self.out += TYPE_SYMBOL
            self._write_bytes(name.encode("ascii"))
        else:
            self.out += TYPE_IVAR + TYPE_SYMBOL
            self._write_bytes(name.encode("utf-8"))
            self.out += encode_long(1)
            self.write_symbol(ENCODING_IVAR)
            self.out += TYPE_TRUE

    def _write_link_or_remember(self, key: tuple[type, str | bytes]) -> bool:
        index = self.strings.get(key)
        if index is not None:
            self.out += TYPE_LINK
            self.out += encode_long(index)
            return True
        self.strings[key] = self._remember()
        return False

    def write_string(self, value: str) -> None:
        if self._write_link_or_remember((str, value)):
            return
        self.out += TYPE_IVAR + TYPE_STRING
        self._write_bytes(value.encode("utf-8"))
        self.out += encode_long(1)
        self.write_symbol(ENCODING_IVAR)
        self.out += TYPE_TRUE

    def write_binary(self, value: bytes) -> None:
        if self._write_link_or_remember((bytes, value)):
            return
        self.out += TYPE_STRING
        self._write_bytes(value)

    def write_integer(self, value: int) -> None:
        if FIXNUM_MIN <= value <= FIXNUM_MAX:
            self.out += TYPE_FIXNUM
            self.out += encode_long(value)
            return

        self._remember()
        self.out += TYPE_BIGNUM
        self.out += b"+" if value >= 0 else b"-"
        magnitude = abs(value)
        byte_length = (magnitude.bit_length() + 7) // 8
        shorts = (byte_length + 1) // 2
        self.out += encode_long(shorts)
        self.out += magnitude.to_bytes(shorts * 2, "little")

    def write(self, obj: Any) -> None:
        if obj is None:
            self.out += TYPE_NIL
        elif obj is True:
            self.out += TYPE_TRUE
        elif obj is False:
            self.out += TYPE_FALSE
        elif isinstance(obj, int):
            self.write_integer(obj)
        elif isinstance(obj, Symbol):
            self.write_symbol(obj)
        elif isinstance(obj, str):
            self.write_string(obj)
        elif isinstance(obj, (bytes, bytearray)):
            self.write_binary(bytes(obj))
        elif isinstance(obj, (list, tuple)):
            self._remember()
            self.out += TYPE_ARRAY
            self.out += encode_long(len(obj))
            for item in obj:
                self.write(item)
        elif isinstance(obj, dict):
            self._remember()
            self.out += TYPE_HASH
            self.out += encode_long(len(obj))
            for key, value in obj.items():
                self.write(key)
                self.write(value)
        elif isinstance(obj, UserMarshal):
            self._remember()
            self.out += TYPE_USRMARSHAL
            self.write_symbol(obj.class_name)
            self.write(obj.data)
        else:
            raise EncodingFailure(f"Cannot marshal value of type {type(obj).__name__}")


def dumps(obj: Any) -> bytes:
    """Serialize a value to Marshal 4.8 bytes.

    Raises:
        EncodingFailure: If the value contains an unsupported type
    """
    writer = _Writer()
    try:
        writer.write(obj)
    except RecursionError as e:
        raise EncodingFailure("Value nested too deeply") from e
    return bytes(writer.out)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class _Reader:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self.symbols: list[str] = []
        self.objects: list[Any] = []

    def _take(self, count: int) -> bytes:
        end = self.pos + count
        if count < 0 or end > len(self.data):
            raise EncodingFailure(f"Truncated marshal data at offset {self.pos}")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def read_byte(self) -> int:
        return self._take(1)[0]

    def read_long(self) -> int:
        c = self.read_byte()
        if c > 127:
            c -= 256
        if c == 0:
            return 0
        if c > 0:
            if 4 < c < 128:
                return c - 5
            return int.from_bytes(self._take(c), "little")
        if -129 < c < -4:
            return c + 5
        width = -c
        raw = self._take(width)
        value = -1
        for i, byte in enumerate(raw):
            value &= ~(0xFF << (8 * i))
            value |= byte << (8 * i)
        return value

    def read_bytes(self) -> bytes:
        return self._take(self.read_long())

    def _register(self, obj: Any) -> int:
        self.objects.append(obj)
        return len(self.objects) - 1

    def _symbol_body(self, tag: bytes) -> str:
        if tag == TYPE_SYMLINK:
            index = self.read_long()
            try:
                return self.symbols[index]
            except IndexError as e:
                raise EncodingFailure(f"Bad symbol link {index}") from e
        if tag == TYPE_SYMBOL:
            name = self.read_bytes().decode("utf-8", errors="surrogateescape")
            self.symbols.append(name)
            return name
        if tag == TYPE_IVAR and self._take(1) == TYPE_SYMBOL:
            raw = self.read_bytes()
            slot = len(self.symbols)
            self.symbols.append("")
            encoding = self._read_encoding_ivars()
            name = raw.decode(encoding or "utf-8", errors="surrogateescape")
            self.symbols[slot] = name
            return name
        raise EncodingFailure(f"Expected symbol at offset {self.pos - 1}")

    def read_symbol(self) -> Symbol:
        return Symbol(self._symbol_body(self._take(1)))

    def _read_encoding_ivars(self) -> str | None:
        encoding = None
        for _ in range(self.read_long()):
            name = self.read_symbol()
            value = self.read()
            if name == ENCODING_IVAR:
                encoding = "utf-8" if value is True else "ascii"
            elif name == ENCODING_NAME_IVAR:
                encoding = value.decode("ascii") if isinstance(value, bytes) else str(value)
        return encoding

    def read(self) -> Any:
        tag = self._take(1)

        if tag == TYPE_NIL:
            return None
        if tag == TYPE_TRUE:
            return True
        if tag == TYPE_FALSE:
            return False
        if tag == TYPE_FIXNUM:
            return self.read_long()
        if tag in (TYPE_SYMBOL, TYPE_SYMLINK):
            return Symbol(self._symbol_body(tag))

        if tag == TYPE_LINK:
            index = self.read_long()
            try:
                return self.objects[index]
            except IndexError as e:
                raise EncodingFailure(f"Bad object link {index}") from e

        if tag == TYPE_BIGNUM:
            sign = self._take(1)
            magnitude = int.from_bytes(self._take(self.read_long() * 2), "little")
            value = -magnitude if sign == b"-" else magnitude
            self._register(value)
            return value

        if tag == TYPE_STRING:
            value = self.read_bytes()
            self._register(value)
            return value

        if tag == TYPE_IVAR:
            inner = self._take(1)
            if inner == TYPE_SYMBOL:
                self.pos -= 2
                return self.read_symbol()
            if inner != TYPE_STRING:
                raise EncodingFailure(f"Unsupported instance-variable target {inner!r}")
            raw = self.read_bytes()
            slot = self._register(raw)
            encoding = self._read_encoding_ivars()
            if encoding is None:
                return raw
            try:
                value = raw.decode(encoding)
            except (LookupError, UnicodeDecodeError):
                return raw
            self.objects[slot] = value
            return value

        if tag == TYPE_ARRAY:
            items: list[Any] = []
            self._register(items)
            for _ in range(self.read_long()):
                items.append(self.read())
            return items

        if tag == TYPE_HASH:
            table: dict[Any, Any] = {}
            self._register(table)
            for _ in range(self.read_long()):
                key = self.read()
                try:
                    table[key] = self.read()
                except TypeError as e:
                    raise EncodingFailure(f"Unhashable hash key {key!r}") from e
            return table

        if tag == TYPE_USRMARSHAL:
            class_name = self.read_symbol()
            slot = self._register(None)
            value = UserMarshal(str(class_name), self.read())
            self.objects[slot] = value
            return value

        raise EncodingFailure(f"Unsupported marshal type {tag!r} at offset {self.pos - 1}")


def loads(data: bytes) -> Any:
    """Deserialize Marshal 4.8 bytes.

    Raises:
        EncodingFailure: On a bad header, truncated data or unsupported types
    """
    if data[:2] != HEADER:
        raise EncodingFailure(f"Unsupported marshal header {bytes(data[:2])!r}")
    reader = _Reader(bytes(data))
    reader.pos = 2
    try:
        value = reader.read()
    except RecursionError as e:
        raise EncodingFailure("Marshal data nested too deeply") from e
    if reader.pos != len(reader.data):
        raise EncodingFailure(f"Trailing bytes after offset {reader.pos}")
    return value


def dumps_gzip(obj: Any) -> bytes:
    """Marshal a value and gzip it.

    The gzip header timestamp is pinned to zero so identical values always
    produce identical bytes.
    """
    return gzip.compress(dumps(obj), mtime=0)


def loads_gzip(data: bytes) -> Any:
    """Inverse of dumps_gzip."""
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise EncodingFailure(f"Invalid gzip data: {e}") from e
    return loads(raw)
