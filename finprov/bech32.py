"""Bech32 encoding and decoding of chain addresses."""

from __future__ import annotations

from typing import Iterable

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_INDEX = {char: index for index, char in enumerate(CHARSET)}
_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_CHECKSUM_LENGTH = 6
_MIN_LENGTH = 8


class Bech32Error(ValueError):
    """Raised when a bech32 string or its data part is malformed."""


def _polymod(values: Iterable[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 25
        checksum = ((checksum & 0x1FFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATORS):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(char) >> 5 for char in hrp] + [0] + [ord(char) & 31 for char in hrp]


def decode(address: str, limit: int) -> tuple[str, bytes]:
    """Decode a bech32 string no longer than ``limit`` characters.

    Returns the lower-cased human-readable part and the 5-bit data values
    without the checksum.
    """
    length = len(address)
    if length < _MIN_LENGTH or length > limit:
        raise Bech32Error(f"invalid bech32 string length {length}")

    for char in address:
        if not 33 <= ord(char) <= 126:
            raise Bech32Error(f"invalid character in string: {char!r}")

    lowered = address.lower()
    if address != lowered and address != address.upper():
        raise Bech32Error("string not all lowercase or all uppercase")

    separator = lowered.rfind("1")
    if separator < 1 or separator + _CHECKSUM_LENGTH + 1 > length:
        raise Bech32Error(f"invalid separator index {separator}")

    hrp = lowered[:separator]
    try:
        values = [_CHARSET_INDEX[char] for char in lowered[separator + 1 :]]
    except KeyError as exc:
        raise Bech32Error(
            f"invalid character not part of charset: {exc.args[0]!r}"
        ) from None

    if _polymod(_hrp_expand(hrp) + values) != 1:
        raise Bech32Error(f"invalid checksum for {address!r}")

    return hrp, bytes(values[:-_CHECKSUM_LENGTH])


def encode(hrp: str, data: Iterable[int]) -> str:
    """Encode 5-bit ``data`` under the human-readable part ``hrp``."""
    if not hrp:
        raise Bech32Error("empty human-readable part")
    hrp = hrp.lower()
    values = list(data)
    for value in values:
        if not 0 <= value < 32:
            raise Bech32Error(f"invalid data byte: {value}")

    polymod = _polymod(_hrp_expand(hrp) + values + [0] * _CHECKSUM_LENGTH) ^ 1
    checksum = [(polymod >> 5 * (5 - position)) & 31 for position in range(_CHECKSUM_LENGTH)]
    return hrp + "1" + "".join(CHARSET[value] for value in values + checksum)


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> bytes:
    """Regroup ``data`` from groups of ``from_bits`` bits into groups of ``to_bits``."""
    if not 1 <= from_bits <= 8 or not 1 <= to_bits <= 8:
        raise Bech32Error("only bit groups between 1 and 8 allowed")

    accumulator = 0
    bits = 0
    result = bytearray()
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error(f"invalid data range: {value}")
        accumulator = (accumulator << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((accumulator >> bits) & max_value)

    if pad:
        if bits:
            result.append((accumulator << (to_bits - bits)) & max_value)
    elif bits >= from_bits or (accumulator << (to_bits - bits)) & max_value:
        raise Bech32Error("invalid incomplete group")

    return bytes(result)