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
Wire schema registry.

Message definitions live in several schema files, each owning one protobuf
package (its namespace prefix). The registry loads them into a single
descriptor pool and resolves fully qualified names against the file that
owns the longest matching prefix. Wire codes come from the ``MessageType``
enum, whose values are named ``MessageType_<message name>``.

Schema files are described in Python with the helpers below instead of
``.proto`` sources, so that no ``protoc`` step is needed.
"""

import logging
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Type

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, Message
from google.protobuf.internal.enum_type_wrapper import EnumTypeWrapper

from .exceptions import SchemaError

LOG = logging.getLogger(__name__)

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

SCALAR_TYPES = {
    "uint32": FieldDescriptorProto.TYPE_UINT32,
    "uint64": FieldDescriptorProto.TYPE_UINT64,
    "sint32": FieldDescriptorProto.TYPE_SINT32,
    "bool": FieldDescriptorProto.TYPE_BOOL,
    "string": FieldDescriptorProto.TYPE_STRING,
    "bytes": FieldDescriptorProto.TYPE_BYTES,
}


def field(number: int, name: str, field_type: str, repeated: bool = False, enum: bool = False) -> FieldDescriptorProto:
    """Describe one field. Non-scalar types are fully qualified message (or, with ``enum``, enum) names."""
    proto = FieldDescriptorProto(
        name=name,
        number=number,
        label=FieldDescriptorProto.LABEL_REPEATED if repeated else FieldDescriptorProto.LABEL_OPTIONAL,
    )
    if field_type in SCALAR_TYPES:
        proto.type = SCALAR_TYPES[field_type]
    else:
        proto.type = FieldDescriptorProto.TYPE_ENUM if enum else FieldDescriptorProto.TYPE_MESSAGE
        proto.type_name = field_type if field_type.startswith(".") else "." + field_type
    return proto


def enum(name: str, values: Mapping[str, int]) -> descriptor_pb2.EnumDescriptorProto:
    return descriptor_pb2.EnumDescriptorProto(
        name=name,
        value=[descriptor_pb2.EnumValueDescriptorProto(name=k, number=v) for k, v in values.items()],
    )


def message(
    name: str,
    fields: Iterable[FieldDescriptorProto] = (),
    nested: Iterable[descriptor_pb2.DescriptorProto] = (),
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
) -> descriptor_pb2.DescriptorProto:
    return descriptor_pb2.DescriptorProto(
        name=name, field=list(fields), nested_type=list(nested), enum_type=list(enums)
    )


def schema_file(
    name: str,
    package: str,
    messages: Iterable[descriptor_pb2.DescriptorProto] = (),
    enums: Iterable[descriptor_pb2.EnumDescriptorProto] = (),
    dependencies: Iterable[str] = (),
) -> descriptor_pb2.FileDescriptorProto:
    return descriptor_pb2.FileDescriptorProto(
        name=name,
        package=package,
        syntax="proto2",
        dependency=list(dependencies),
        message_type=list(messages),
        enum_type=list(enums),
    )


class WireMessageType(NamedTuple):
    code: int
    name: str
    message_class: Type[Message]


class SchemaRoot(NamedTuple):
    prefix: str
    file: descriptor_pb2.FileDescriptorProto


class SchemaRegistry:
    """Resolves symbolic message names to wire codes and message classes.

    ``files`` must be given in dependency order. Resolved entries are cached
    for the lifetime of the registry and shared read-only.
    """

    def __init__(
        self,
        files: Iterable[descriptor_pb2.FileDescriptorProto],
        message_type_enum: str,
        type_prefix: str = "MessageType_",
    ) -> None:
        files = list(files)
        self.pool = descriptor_pool.DescriptorPool()
        for f in files:
            self.pool.AddSerializedFile(f.SerializeToString())
        # longest prefix first, ties keep the given order
        self.roots: List[SchemaRoot] = sorted(
            (SchemaRoot(f.package, f) for f in files),
            key=lambda r: len(r.prefix),
            reverse=True,
        )
        self.message_type_enum = message_type_enum
        self.type_prefix = type_prefix

        self._short_names: Dict[str, str] = {}
        for root in self.roots:
            for m in root.file.message_type:
                self._short_names.setdefault(m.name, root.prefix + "." + m.name)

        self._resolved: Dict[str, WireMessageType] = {}
        self._by_code: Dict[int, WireMessageType] = {}
        self._enums: Dict[str, EnumTypeWrapper] = {}

    def _root_for(self, full_name: str) -> SchemaRoot:
        for root in self.roots:
            if full_name.startswith(root.prefix + "."):
                return root
        raise SchemaError("No schema root claims {}".format(full_name))

    def resolve_class(self, full_name: str) -> Type[Message]:
        """Message class for a fully qualified name, including nested types without a wire code."""
        root = self._root_for(full_name)
        try:
            desc = self.pool.FindMessageTypeByName(full_name)
        except KeyError:
            raise SchemaError("Message {} not found".format(full_name)) from None
        if desc.file.name != root.file.name:
            raise SchemaError("Message {} not found in {}".format(full_name, root.file.name))
        return message_factory.GetMessageClass(desc)

    def resolve_enum(self, full_name: str) -> EnumTypeWrapper:
        if full_name in self._enums:
            return self._enums[full_name]
        root = self._root_for(full_name)
        try:
            desc = self.pool.FindEnumTypeByName(full_name)
        except KeyError:
            raise SchemaError("Enum {} not found".format(full_name)) from None
        if desc.file.name != root.file.name:
            raise SchemaError("Enum {} not found in {}".format(full_name, root.file.name))
        wrapper = EnumTypeWrapper(desc)
        self._enums[full_name] = wrapper
        return wrapper

    def resolve(self, full_name: str) -> WireMessageType:
        if full_name in self._resolved:
            return self._resolved[full_name]
        message_class = self.resolve_class(full_name)
        name = message_class.DESCRIPTOR.name
        try:
            code = self.resolve_enum(self.message_type_enum).Value(self.type_prefix + name)
        except ValueError:
            raise SchemaError("Message {} has no wire code".format(full_name)) from None
        wire = WireMessageType(code, name, message_class)
        LOG.debug("resolved {} to wire code {}".format(full_name, code))
        self._resolved[full_name] = wire
        self._by_code[code] = wire
        return wire

    def resolve_code(self, code: int) -> WireMessageType:
        if code in self._by_code:
            return self._by_code[code]
        try:
            enum_name = self.resolve_enum(self.message_type_enum).Name(code)
        except ValueError:
            raise SchemaError("Unknown message code {}".format(code)) from None
        short_name = enum_name[len(self.type_prefix):]
        if short_name not in self._short_names:
            raise SchemaError("Message {} (code {}) not found".format(short_name, code))
        return self.resolve(self._short_names[short_name])

    def encode(self, msg: Message) -> Tuple[int, bytes]:
        wire = self.resolve(msg.DESCRIPTOR.full_name)
        return wire.code, msg.SerializeToString()

    def decode(self, code: int, payload: bytes) -> Message:
        wire = self.resolve_code(code)
        msg = wire.message_class()
        try:
            msg.ParseFromString(payload)
        except DecodeError as e:
            raise SchemaError("Could not decode {}: {}".format(wire.name, e)) from e
        return msg


def format_message(msg: Optional[Message]) -> str:
    if msg is None:
        return "None"
    return "{} ({} bytes)".format(msg.DESCRIPTOR.name, msg.ByteSize())
