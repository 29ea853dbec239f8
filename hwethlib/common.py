"""
Common Classes and Utilities
****************************

Small conversions between the hex strings used by Ethereum tooling and the
bytes and integers the device protocol works with.
"""

import binascii

from typing import Union


def strip_hex_prefix(s: str) -> str:
    """
    Remove a leading ``0x`` or ``0X`` from a hex string.

    :param s: The hex string
    :return: The hex string without prefix
    """
    if s[:2].lower() == "0x":
        return s[2:]
    return s


def is_hex_string(value: object) -> bool:
    """
    Whether the value is a ``0x`` prefixed hex string.
    """
    if not isinstance(value, str) or value[:2].lower() != "0x":
        return False
    try:
        hex_to_bytes(value)
    except ValueError:
        return False
    return True


def hex_to_bytes(s: Union[str, bytes]) -> bytes:
    """
    Decode a hex string, with or without ``0x`` prefix.
    Odd length strings are padded with a leading zero nibble.

    :param s: The hex string. Bytes are returned unchanged.
    :return: The decoded bytes
    :raises ValueError: if the string is not valid hex
    """
    if isinstance(s, (bytes, bytearray)):
        return bytes(s)
    s = strip_hex_prefix(s)
    if len(s) % 2:
        s = "0" + s
    try:
        return binascii.unhexlify(s)
    except binascii.Error as e:
        raise ValueError("Invalid hex string: {}".format(s)) from e


def bytes_to_hex(b: bytes, prefix: bool = True) -> str:
    """
    Encode bytes as a lower case hex string.

    :param b: The bytes
    :param prefix: Whether to add ``0x``
    :return: The hex string
    """
    return ("0x" if prefix else "") + b.hex()


def to_int(value: Union[int, str, bytes, None]) -> int:
    """
    Convert an integer given as int, decimal string, ``0x`` hex string or big endian bytes.
    ``None`` and the empty string are zero.

    :param value: The value
    :return: The integer
    :raises ValueError: if the value can not be interpreted as an integer
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        if value == "":
            return 0
        if value[:2].lower() == "0x":
            return int(value, 16) if len(value) > 2 else 0
        return int(value, 10)
    raise ValueError("Can not convert {!r} to an integer".format(value))


def int_to_big_endian(value: int, size: int = 0) -> bytes:
    """
    Encode a non-negative integer as big endian bytes.

    With ``size`` 0 the shortest encoding is used and zero becomes the empty byte string,
    which is how the device expects unset numeric transaction fields.

    :param value: The integer
    :param size: The fixed byte length, or 0 for the minimal length
    :return: The encoded bytes
    """
    if value < 0:
        raise ValueError("Negative values can not be encoded: {}".format(value))
    if size == 0:
        return value.to_bytes((value.bit_length() + 7) // 8, "big")
    return value.to_bytes(size, "big")
