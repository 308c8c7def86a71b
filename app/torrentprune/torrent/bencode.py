"""Bencode decoding and canonical encoding.

This module implements the binary encoding used by torrent descriptors.
Decoded data is represented by a closed set of frozen value types
(BencodeInt, BencodeBytes, BencodeList, BencodeDict) so that callers
projecting it into fixed-shape models can check every variant explicitly.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

# Nesting limit for lists and dictionaries
MAX_DEPTH = 256

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1

# Bare "0" or an optionally negative number without leading zeros ("-0" is invalid)
_INTEGER_PATTERN = re.compile(rb"0|-?[1-9][0-9]*")

_TOKEN_INT = ord("i")
_TOKEN_LIST = ord("l")
_TOKEN_DICT = ord("d")
_TOKEN_END = ord("e")
_TOKEN_COLON = ord(":")


class DecodeError(Exception):
    """Base exception for bencode decoding errors.

    Attributes:
        position: Byte offset in the input where the problem was detected.
    """

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} (at byte {position})")
        self.position = position


class TruncatedError(DecodeError):
    """Raised when the input ends before the current value is complete."""


class MalformedError(DecodeError):
    """Raised when the input contains an unexpected or invalid token."""


class InvalidLengthError(DecodeError):
    """Raised when a byte string length prefix is not a valid decimal."""


@dataclass(frozen=True, slots=True)
class BencodeInt:
    """Bencoded signed 64-bit integer."""

    value: int


@dataclass(frozen=True, slots=True)
class BencodeBytes:
    """Bencoded raw byte string."""

    value: bytes

    def text(self) -> str:
        """Decode the byte string as UTF-8.

        Raises:
            UnicodeDecodeError: If the bytes are not valid UTF-8.
        """
        return self.value.decode("utf-8")


@dataclass(frozen=True, slots=True)
class BencodeList:
    """Bencoded ordered list of values."""

    items: tuple[BencodeValue, ...] = ()

    def __iter__(self) -> Iterator[BencodeValue]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True, slots=True)
class BencodeDict:
    """Bencoded dictionary with byte string keys.

    Keys keep the order in which they were decoded. Encoding always
    emits them sorted.
    """

    entries: dict[bytes, BencodeValue] = field(default_factory=dict)

    def get(self, key: bytes) -> BencodeValue | None:
        """Return the value for key, or None if absent."""
        return self.entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)


BencodeValue = BencodeInt | BencodeBytes | BencodeList | BencodeDict


def decode(data: bytes | bytearray | memoryview) -> BencodeValue:
    """Decode a complete bencoded document.

    Args:
        data: Raw bencoded bytes holding exactly one top-level value.

    Returns:
        The decoded value tree.

    Raises:
        TruncatedError: If the input ends inside a value (or is empty).
        MalformedError: If an invalid token, duplicate key or trailing data is found.
        InvalidLengthError: If a byte string length prefix is invalid.
    """
    decoder = _Decoder(bytes(data))
    value = decoder.read_value()
    if decoder.pos != len(decoder.data):
        raise MalformedError("Trailing data after top-level value", decoder.pos)
    return value


def encode(value: BencodeValue) -> bytes:
    """Encode a value tree using the canonical encoding.

    Dictionary keys are written in sorted order.

    Args:
        value: Value tree to encode.

    Returns:
        Canonical bencoded bytes.

    Raises:
        TypeError: If the tree contains an object that is not a bencode value.
    """
    parts: list[bytes] = []
    _encode_into(value, parts)
    return b"".join(parts)


def _encode_into(value: BencodeValue, out: list[bytes]) -> None:
    if isinstance(value, BencodeInt):
        out.append(b"i%de" % value.value)
    elif isinstance(value, BencodeBytes):
        out.append(b"%d:" % len(value.value))
        out.append(value.value)
    elif isinstance(value, BencodeList):
        out.append(b"l")
        for item in value.items:
            _encode_into(item, out)
        out.append(b"e")
    elif isinstance(value, BencodeDict):
        out.append(b"d")
        for key in sorted(value.entries):
            out.append(b"%d:" % len(key))
            out.append(key)
            _encode_into(value.entries[key], out)
        out.append(b"e")
    else:
        msg = f"Cannot encode object of type {type(value).__name__}"
        raise TypeError(msg)


class _Decoder:
    """Recursive-descent decoder over an in-memory buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self._depth = 0

    def read_value(self) -> BencodeValue:
        if self.pos >= len(self.data):
            raise TruncatedError("Unexpected end of input", self.pos)

        token = self.data[self.pos]
        if token == _TOKEN_INT:
            return self._read_int()
        if token == _TOKEN_LIST:
            return self._read_list()
        if token == _TOKEN_DICT:
            return self._read_dict()
        if _is_digit(token):
            return self._read_bytes()

        raise MalformedError(f"Unexpected byte {bytes([token])!r}", self.pos)

    def _read_int(self) -> BencodeInt:
        start = self.pos
        end = self.data.find(b"e", start + 1)
        if end == -1:
            raise TruncatedError("Unterminated integer", start)

        digits = self.data[start + 1 : end]
        if not _INTEGER_PATTERN.fullmatch(digits):
            raise MalformedError(f"Invalid integer {digits!r}", start)

        number = int(digits)
        if not (_INT_MIN <= number <= _INT_MAX):
            raise MalformedError("Integer out of 64-bit range", start)

        self.pos = end + 1
        return BencodeInt(number)

    def _read_bytes(self) -> BencodeBytes:
        start = self.pos
        index = start
        while index < len(self.data) and _is_digit(self.data[index]):
            index += 1

        if index >= len(self.data):
            raise TruncatedError("Unterminated byte string length", start)
        if self.data[index] != _TOKEN_COLON:
            raise InvalidLengthError("Byte string length must be followed by ':'", index)

        length_digits = self.data[start:index]
        if len(length_digits) > 1 and length_digits.startswith(b"0"):
            raise InvalidLengthError(f"Leading zero in length {length_digits!r}", start)

        length = int(length_digits)
        begin = index + 1
        end = begin + length
        if end > len(self.data):
            available = len(self.data) - begin
            raise TruncatedError(
                f"Byte string declares {length} bytes but only {available} remain", start
            )

        self.pos = end
        return BencodeBytes(self.data[begin:end])

    def _read_list(self) -> BencodeList:
        start = self.pos
        self._enter(start)
        self.pos += 1

        items: list[BencodeValue] = []
        while True:
            if self.pos >= len(self.data):
                raise TruncatedError("Unterminated list", start)
            if self.data[self.pos] == _TOKEN_END:
                self.pos += 1
                break
            items.append(self.read_value())

        self._depth -= 1
        return BencodeList(tuple(items))

    def _read_dict(self) -> BencodeDict:
        start = self.pos
        self._enter(start)
        self.pos += 1

        entries: dict[bytes, BencodeValue] = {}
        while True:
            if self.pos >= len(self.data):
                raise TruncatedError("Unterminated dictionary", start)
            token = self.data[self.pos]
            if token == _TOKEN_END:
                self.pos += 1
                break
            if not _is_digit(token):
                raise MalformedError("Dictionary key must be a byte string", self.pos)

            key_pos = self.pos
            key = self._read_bytes().value
            if key in entries:
                raise MalformedError(f"Duplicate dictionary key {key!r}", key_pos)
            if self.pos >= len(self.data):
                raise TruncatedError(f"Missing value for key {key!r}", key_pos)
            entries[key] = self.read_value()

        self._depth -= 1
        return BencodeDict(entries)

    def _enter(self, position: int) -> None:
        self._depth += 1
        if self._depth > MAX_DEPTH:
            raise MalformedError(f"Nesting deeper than {MAX_DEPTH} levels", position)


def _is_digit(token: int) -> bool:
    return 0x30 <= token <= 0x39
