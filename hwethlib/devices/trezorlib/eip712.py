# This file is part of the Trezor project.
#
# Copyright (C) 2012-2018 SatoshiLabs and contributors
#
# This library is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License version 3
# as published by the Free Software Foundation.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the License along with this library.
# If not, see <https://www.gnu.org/licenses/lgpl-3.0.html>.

"""
EIP-712 typed data for the device's incremental signing dialogue.

The device never receives the whole document. It asks for the members of
one struct type at a time and for single values addressed by a member
path, a list of child indices starting with 0 (domain) or 1 (message).
:class:`TypedDataConverter` builds the addressable tree once and answers
both kinds of request.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from ...common import hex_to_bytes, is_hex_string
from . import messages
from .exceptions import DataPathError, UnexpectedMessageError

LOG = logging.getLogger(__name__)

DOMAIN_TYPE = "EIP712Domain"
REQUIRED_KEYS = ("types", "primaryType", "domain", "message")

# width used for uint/int without an explicit size
DEFAULT_INT_SIZE = 32
MAX_ARRAY_LENGTH = 0xFFFF

INT_RE = re.compile(r"(u?int)(\d*)")
BYTES_RE = re.compile(r"bytes(\d*)")

DataType = messages.EthereumDataType


@dataclass(frozen=True)
class Leaf:
    type_name: str
    value: Any


@dataclass(frozen=True)
class Array:
    type_name: str
    entry_type: str
    children: Tuple["PathEntry", ...]


@dataclass(frozen=True)
class Struct:
    type_name: str
    children: Tuple["PathEntry", ...]


PathEntry = Union[Leaf, Array, Struct]


def split_array_type(type_name: str) -> Tuple[str, int]:
    """
    Split ``T[N]`` or ``T[]`` into the entry type and the fixed size (0 for dynamic arrays).
    """
    rest, size = type_name[:-1].rsplit("[", 1)
    if size and not size.isdigit():
        raise ValueError("Invalid array type: {}".format(type_name))
    return rest, int(size) if size else 0


def field_type(type_name: str) -> messages.EthereumFieldType:
    """
    Describe a Solidity type string the way the device expects it.
    """
    if type_name.endswith("]"):
        entry_type, size = split_array_type(type_name)
        ft = messages.EthereumFieldType(data_type=DataType.ARRAY)
        ft.entry_type.CopyFrom(field_type(entry_type))
        if size:
            ft.size = size
        return ft

    m = INT_RE.fullmatch(type_name)
    if m:
        ft = messages.EthereumFieldType(data_type=DataType.UINT if m.group(1) == "uint" else DataType.INT)
        if m.group(2):
            bits = int(m.group(2))
            if bits == 0 or bits > 256 or bits % 8:
                raise ValueError("Invalid integer type: {}".format(type_name))
            ft.size = bits // 8
        return ft

    m = BYTES_RE.fullmatch(type_name)
    if m:
        ft = messages.EthereumFieldType(data_type=DataType.BYTES)
        if m.group(1):
            size = int(m.group(1))
            if size == 0 or size > 32:
                raise ValueError("Invalid bytes type: {}".format(type_name))
            ft.size = size
        return ft

    if type_name == "string":
        return messages.EthereumFieldType(data_type=DataType.STRING)
    if type_name == "bool":
        return messages.EthereumFieldType(data_type=DataType.BOOL)
    if type_name == "address":
        return messages.EthereumFieldType(data_type=DataType.ADDRESS)

    return messages.EthereumFieldType(data_type=DataType.STRUCT, struct_name=type_name)


def encode_int(value: Any, size: int, signed: bool) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if is_hex_string(value):
        return hex_to_bytes(value)
    if isinstance(value, bool):
        value = int(value)
    elif isinstance(value, str):
        value = int(value, 10)
    if not isinstance(value, int):
        raise ValueError("Invalid integer value: {!r}".format(value))
    try:
        return value.to_bytes(size, "big", signed=signed)
    except OverflowError:
        raise ValueError("Value {} does not fit in {} bytes".format(value, size)) from None


def encode_bool(value: Any) -> bytes:
    if isinstance(value, str):
        if value.lower() not in ("true", "false"):
            raise ValueError("Invalid bool value: {!r}".format(value))
        value = value.lower() == "true"
    return b"\x01" if value else b"\x00"


def encode_value(type_name: str, value: Any) -> bytes:
    """
    Encode a primitive value for a value request.

    Integers are big endian of the declared size (signed for ``int``), and a
    ``0x`` hex string is taken as the already encoded bytes. ``bytes`` and
    ``address`` are the raw bytes of the hex string, ``string`` is UTF-8 and
    ``bool`` is a single byte.
    """
    ft = field_type(type_name)
    if ft.data_type in (DataType.UINT, DataType.INT):
        return encode_int(value, ft.size or DEFAULT_INT_SIZE, ft.data_type == DataType.INT)
    if ft.data_type in (DataType.BYTES, DataType.ADDRESS):
        if isinstance(value, str) and value == "":
            return b""
        return hex_to_bytes(value)
    if ft.data_type == DataType.STRING:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        return str(value).encode("utf-8")
    if ft.data_type == DataType.BOOL:
        return encode_bool(value)
    raise ValueError("{} is not a primitive type".format(type_name))


def parse_document(data: Union[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Accept a typed data document as a mapping or a JSON string and check its top level shape.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise ValueError("Typed data is not valid JSON: {}".format(e)) from e
    if not isinstance(data, Mapping):
        raise ValueError("Typed data must be an object")
    for key in REQUIRED_KEYS:
        if key not in data:
            raise ValueError("Typed data is missing {}".format(key))
    types = data["types"]
    if not isinstance(types, Mapping):
        raise ValueError("Typed data types must be an object")
    if DOMAIN_TYPE not in types:
        raise ValueError("Typed data does not define {}".format(DOMAIN_TYPE))
    if data["primaryType"] not in types:
        raise ValueError("Primary type {} is not defined".format(data["primaryType"]))
    return dict(data)


class TypedDataConverter:
    """Answers the device's struct and value requests for one typed data document."""

    def __init__(self, data: Union[str, Mapping[str, Any]]) -> None:
        doc = parse_document(data)
        self.types: Mapping[str, List[Mapping[str, str]]] = doc["types"]
        self.primary_type: str = doc["primaryType"]
        self.roots: Tuple[PathEntry, ...] = (
            self._build(DOMAIN_TYPE, doc["domain"], "domain"),
            self._build(self.primary_type, doc["message"], "message"),
        )

    def _build(self, type_name: str, value: Any, where: str) -> PathEntry:
        if type_name.endswith("]"):
            entry_type, size = split_array_type(type_name)
            if not isinstance(value, (list, tuple)):
                raise ValueError("{} must be an array".format(where))
            if size and len(value) != size:
                raise ValueError("{} must have {} entries, got {}".format(where, size, len(value)))
            if len(value) > MAX_ARRAY_LENGTH:
                raise ValueError("{} has too many entries".format(where))
            children = tuple(
                self._build(entry_type, v, "{}[{}]".format(where, i)) for i, v in enumerate(value)
            )
            return Array(type_name, entry_type, children)

        if field_type(type_name).data_type != DataType.STRUCT:
            return Leaf(type_name, value)

        if type_name not in self.types:
            raise ValueError("Type {} is not defined".format(type_name))
        if not isinstance(value, Mapping):
            raise ValueError("{} must be an object".format(where))
        children = []
        for member in self.types[type_name]:
            name = member["name"]
            if name not in value:
                raise ValueError("{} is missing {}".format(where, name))
            children.append(self._build(member["type"], value[name], "{}.{}".format(where, name)))
        return Struct(type_name, tuple(children))

    def struct_members(self, name: str) -> List[messages.EthereumStructMember]:
        if name not in self.types:
            raise UnexpectedMessageError("Device requested unknown struct {}".format(name))
        LOG.debug("describing struct {}".format(name))
        return [
            messages.EthereumStructMember(name=member["name"], type=field_type(member["type"]))
            for member in self.types[name]
        ]

    def resolve(self, path: Sequence[int]) -> PathEntry:
        if not path:
            raise DataPathError(path, "empty path")
        children: Tuple[PathEntry, ...] = self.roots
        node = None
        for depth, index in enumerate(path):
            if children is None:
                raise DataPathError(path, "depth {} is below a primitive value".format(depth))
            if index >= len(children):
                raise DataPathError(path, "index {} out of range at depth {}".format(index, depth))
            node = children[index]
            children = None if isinstance(node, Leaf) else node.children
        return node

    def value_at(self, path: Sequence[int]) -> bytes:
        node = self.resolve(path)
        if isinstance(node, Struct):
            raise DataPathError(path, "points to struct {}".format(node.type_name))
        if isinstance(node, Array):
            return len(node.children).to_bytes(2, "big")
        try:
            return encode_value(node.type_name, node.value)
        except ValueError as e:
            raise ValueError("Invalid value at {}: {}".format(list(path), e)) from e
