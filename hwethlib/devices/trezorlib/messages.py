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
Message schema for the subset of the Trezor protocol used for Ethereum signing.

Field numbers and wire codes follow trezor-common's ``messages*.proto``.
All fields are declared optional so that partial replies still decode.
"""

from .protobuf import SchemaRegistry, enum, field, message, schema_file

PACKAGE = "hw.trezor.messages"
COMMON = PACKAGE + ".common"
MANAGEMENT = PACKAGE + ".management"
ETHEREUM = PACKAGE + ".ethereum"
ETHEREUM_EIP712 = PACKAGE + ".ethereum_eip712"
ETHEREUM_DEFINITIONS = PACKAGE + ".ethereum_definitions"

MESSAGE_TYPES = {
    "MessageType_Initialize": 0,
    "MessageType_Success": 2,
    "MessageType_Failure": 3,
    "MessageType_Features": 17,
    "MessageType_PinMatrixRequest": 18,
    "MessageType_PinMatrixAck": 19,
    "MessageType_Cancel": 20,
    "MessageType_ButtonRequest": 26,
    "MessageType_ButtonAck": 27,
    "MessageType_PassphraseRequest": 41,
    "MessageType_PassphraseAck": 42,
    "MessageType_GetFeatures": 55,
    "MessageType_EthereumGetAddress": 56,
    "MessageType_EthereumAddress": 57,
    "MessageType_EthereumSignTx": 58,
    "MessageType_EthereumTxRequest": 59,
    "MessageType_EthereumTxAck": 60,
    "MessageType_EthereumSignMessage": 64,
    "MessageType_EthereumMessageSignature": 66,
    "MessageType_EndSession": 83,
    "MessageType_EthereumSignTxEIP1559": 452,
    "MessageType_EthereumSignTypedData": 464,
    "MessageType_EthereumTypedDataStructRequest": 465,
    "MessageType_EthereumTypedDataStructAck": 466,
    "MessageType_EthereumTypedDataValueRequest": 467,
    "MessageType_EthereumTypedDataValueAck": 468,
    "MessageType_EthereumTypedDataSignature": 469,
}

MESSAGES_PROTO = schema_file(
    "messages.proto",
    PACKAGE,
    enums=[enum("MessageType", MESSAGE_TYPES)],
)

COMMON_PROTO = schema_file(
    "messages-common.proto",
    COMMON,
    messages=[
        message("Success", [field(1, "message", "string")]),
        message(
            "Failure",
            [
                field(1, "code", COMMON + ".Failure.FailureType", enum=True),
                field(2, "message", "string"),
            ],
            enums=[
                enum(
                    "FailureType",
                    {
                        "UnexpectedMessage": 1,
                        "ButtonExpected": 2,
                        "DataError": 3,
                        "ActionCancelled": 4,
                        "PinExpected": 5,
                        "PinCancelled": 6,
                        "PinInvalid": 7,
                        "InvalidSignature": 8,
                        "ProcessError": 9,
                        "NotEnoughFunds": 10,
                        "NotInitialized": 11,
                        "PinMismatch": 12,
                        "WipeCodeMismatch": 13,
                        "InvalidSession": 14,
                        "FirmwareError": 99,
                    },
                )
            ],
        ),
        message(
            "ButtonRequest",
            [
                field(1, "code", COMMON + ".ButtonRequest.ButtonRequestType", enum=True),
                field(2, "pages", "uint32"),
            ],
            enums=[
                enum(
                    "ButtonRequestType",
                    {
                        "Other": 1,
                        "FeeOverThreshold": 2,
                        "ConfirmOutput": 3,
                        "ResetDevice": 4,
                        "ConfirmWord": 5,
                        "WipeDevice": 6,
                        "ProtectCall": 7,
                        "SignTx": 8,
                        "FirmwareCheck": 9,
                        "Address": 10,
                        "PublicKey": 11,
                        "MnemonicWordCount": 12,
                        "MnemonicInput": 13,
                        "UnknownDerivationPath": 15,
                        "RecoveryHomepage": 16,
                        "Success": 17,
                        "Warning": 18,
                        "PassphraseEntry": 19,
                        "PinEntry": 20,
                    },
                )
            ],
        ),
        message("ButtonAck"),
        message(
            "PinMatrixRequest",
            [field(1, "type", COMMON + ".PinMatrixRequest.PinMatrixRequestType", enum=True)],
            enums=[
                enum(
                    "PinMatrixRequestType",
                    {
                        "Current": 1,
                        "NewFirst": 2,
                        "NewSecond": 3,
                        "WipeCodeFirst": 4,
                        "WipeCodeSecond": 5,
                    },
                )
            ],
        ),
        message("PinMatrixAck", [field(1, "pin", "string")]),
        message("PassphraseRequest", [field(1, "_on_device", "bool")]),
        message(
            "PassphraseAck",
            [
                field(1, "passphrase", "string"),
                field(2, "_state", "bytes"),
                field(3, "on_device", "bool"),
            ],
        ),
    ],
)

MANAGEMENT_PROTO = schema_file(
    "messages-management.proto",
    MANAGEMENT,
    messages=[
        message(
            "Initialize",
            [
                field(1, "session_id", "bytes"),
                field(2, "_skip_passphrase", "bool"),
                field(3, "derive_cardano", "bool"),
            ],
        ),
        message("GetFeatures"),
        message(
            "Features",
            [
                field(1, "vendor", "string"),
                field(2, "major_version", "uint32"),
                field(3, "minor_version", "uint32"),
                field(4, "patch_version", "uint32"),
                field(5, "bootloader_mode", "bool"),
                field(6, "device_id", "string"),
                field(7, "pin_protection", "bool"),
                field(8, "passphrase_protection", "bool"),
                field(9, "language", "string"),
                field(10, "label", "string"),
                field(12, "initialized", "bool"),
                field(13, "revision", "bytes"),
                field(16, "unlocked", "bool"),
                field(21, "model", "string"),
                field(35, "session_id", "bytes"),
            ],
        ),
        message("Cancel"),
        message("EndSession"),
    ],
)

DEFINITIONS_PROTO = schema_file(
    "messages-ethereum-definitions.proto",
    ETHEREUM_DEFINITIONS,
    messages=[
        message(
            "EthereumDefinitions",
            [
                field(1, "encoded_network", "bytes"),
                field(2, "encoded_token", "bytes"),
            ],
        ),
    ],
)

ETHEREUM_PROTO = schema_file(
    "messages-ethereum.proto",
    ETHEREUM,
    dependencies=["messages-ethereum-definitions.proto"],
    messages=[
        message(
            "EthereumGetAddress",
            [
                field(1, "address_n", "uint32", repeated=True),
                field(2, "show_display", "bool"),
                field(3, "encoded_network", "bytes"),
                field(4, "chunkify", "bool"),
            ],
        ),
        message(
            "EthereumAddress",
            [
                field(1, "_old_address", "bytes"),
                field(2, "address", "string"),
            ],
        ),
        message(
            "EthereumSignTx",
            [
                field(1, "address_n", "uint32", repeated=True),
                field(2, "nonce", "bytes"),
                field(3, "gas_price", "bytes"),
                field(4, "gas_limit", "bytes"),
                field(11, "to", "string"),
                field(6, "value", "bytes"),
                field(7, "data_initial_chunk", "bytes"),
                field(8, "data_length", "uint32"),
                field(9, "chain_id", "uint64"),
                field(10, "tx_type", "uint32"),
                field(12, "definitions", ETHEREUM_DEFINITIONS + ".EthereumDefinitions"),
                field(13, "chunkify", "bool"),
            ],
        ),
        message(
            "EthereumSignTxEIP1559",
            [
                field(1, "address_n", "uint32", repeated=True),
                field(2, "nonce", "bytes"),
                field(3, "max_gas_fee", "bytes"),
                field(4, "max_priority_fee", "bytes"),
                field(5, "gas_limit", "bytes"),
                field(6, "to", "string"),
                field(7, "value", "bytes"),
                field(8, "data_initial_chunk", "bytes"),
                field(9, "data_length", "uint32"),
                field(10, "chain_id", "uint64"),
                field(11, "access_list", ETHEREUM + ".EthereumSignTxEIP1559.EthereumAccessList", repeated=True),
                field(12, "definitions", ETHEREUM_DEFINITIONS + ".EthereumDefinitions"),
                field(13, "chunkify", "bool"),
            ],
            nested=[
                message(
                    "EthereumAccessList",
                    [
                        field(1, "address", "string"),
                        field(2, "storage_keys", "bytes", repeated=True),
                    ],
                ),
            ],
        ),
        message(
            "EthereumTxRequest",
            [
                field(1, "data_length", "uint32"),
                field(2, "signature_v", "uint32"),
                field(3, "signature_r", "bytes"),
                field(4, "signature_s", "bytes"),
            ],
        ),
        message("EthereumTxAck", [field(1, "data_chunk", "bytes")]),
        message(
            "EthereumSignMessage",
            [
                field(1, "address_n", "uint32", repeated=True),
                field(2, "message", "bytes"),
                field(3, "encoded_network", "bytes"),
                field(4, "chunkify", "bool"),
            ],
        ),
        message(
            "EthereumMessageSignature",
            [
                field(2, "signature", "bytes"),
                field(3, "address", "string"),
            ],
        ),
        message(
            "EthereumTypedDataSignature",
            [
                field(1, "signature", "bytes"),
                field(2, "address", "string"),
            ],
        ),
    ],
)

EIP712_PROTO = schema_file(
    "messages-ethereum-eip712.proto",
    ETHEREUM_EIP712,
    dependencies=["messages-ethereum-definitions.proto"],
    messages=[
        message(
            "EthereumSignTypedData",
            [
                field(1, "address_n", "uint32", repeated=True),
                field(2, "primary_type", "string"),
                field(3, "metamask_v4_compat", "bool"),
                field(4, "definitions", ETHEREUM_DEFINITIONS + ".EthereumDefinitions"),
            ],
        ),
        message("EthereumTypedDataStructRequest", [field(1, "name", "string")]),
        message(
            "EthereumTypedDataStructAck",
            [
                field(1, "members", ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumStructMember", repeated=True),
            ],
            nested=[
                message(
                    "EthereumStructMember",
                    [
                        field(1, "type", ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumFieldType"),
                        field(2, "name", "string"),
                    ],
                ),
                message(
                    "EthereumFieldType",
                    [
                        field(1, "data_type", ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumDataType", enum=True),
                        field(2, "size", "uint32"),
                        field(3, "entry_type", ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumFieldType"),
                        field(4, "struct_name", "string"),
                    ],
                ),
            ],
            enums=[
                enum(
                    "EthereumDataType",
                    {
                        "UINT": 1,
                        "INT": 2,
                        "BYTES": 3,
                        "STRING": 4,
                        "BOOL": 5,
                        "ADDRESS": 6,
                        "ARRAY": 7,
                        "STRUCT": 8,
                    },
                )
            ],
        ),
        message("EthereumTypedDataValueRequest", [field(1, "member_path", "uint32", repeated=True)]),
        message("EthereumTypedDataValueAck", [field(1, "value", "bytes")]),
    ],
)

# dependency order
SCHEMA_FILES = [
    MESSAGES_PROTO,
    COMMON_PROTO,
    MANAGEMENT_PROTO,
    DEFINITIONS_PROTO,
    ETHEREUM_PROTO,
    EIP712_PROTO,
]

REGISTRY = SchemaRegistry(SCHEMA_FILES, PACKAGE + ".MessageType")

MessageType = REGISTRY.resolve_enum(PACKAGE + ".MessageType")

Success = REGISTRY.resolve(COMMON + ".Success").message_class
Failure = REGISTRY.resolve(COMMON + ".Failure").message_class
ButtonRequest = REGISTRY.resolve(COMMON + ".ButtonRequest").message_class
ButtonAck = REGISTRY.resolve(COMMON + ".ButtonAck").message_class
PinMatrixRequest = REGISTRY.resolve(COMMON + ".PinMatrixRequest").message_class
PinMatrixAck = REGISTRY.resolve(COMMON + ".PinMatrixAck").message_class
PassphraseRequest = REGISTRY.resolve(COMMON + ".PassphraseRequest").message_class
PassphraseAck = REGISTRY.resolve(COMMON + ".PassphraseAck").message_class
FailureType = REGISTRY.resolve_enum(COMMON + ".Failure.FailureType")
ButtonRequestType = REGISTRY.resolve_enum(COMMON + ".ButtonRequest.ButtonRequestType")
PinMatrixRequestType = REGISTRY.resolve_enum(COMMON + ".PinMatrixRequest.PinMatrixRequestType")

Initialize = REGISTRY.resolve(MANAGEMENT + ".Initialize").message_class
GetFeatures = REGISTRY.resolve(MANAGEMENT + ".GetFeatures").message_class
Features = REGISTRY.resolve(MANAGEMENT + ".Features").message_class
Cancel = REGISTRY.resolve(MANAGEMENT + ".Cancel").message_class
EndSession = REGISTRY.resolve(MANAGEMENT + ".EndSession").message_class

EthereumDefinitions = REGISTRY.resolve_class(ETHEREUM_DEFINITIONS + ".EthereumDefinitions")

EthereumGetAddress = REGISTRY.resolve(ETHEREUM + ".EthereumGetAddress").message_class
EthereumAddress = REGISTRY.resolve(ETHEREUM + ".EthereumAddress").message_class
EthereumSignTx = REGISTRY.resolve(ETHEREUM + ".EthereumSignTx").message_class
EthereumSignTxEIP1559 = REGISTRY.resolve(ETHEREUM + ".EthereumSignTxEIP1559").message_class
EthereumAccessList = REGISTRY.resolve_class(ETHEREUM + ".EthereumSignTxEIP1559.EthereumAccessList")
EthereumTxRequest = REGISTRY.resolve(ETHEREUM + ".EthereumTxRequest").message_class
EthereumTxAck = REGISTRY.resolve(ETHEREUM + ".EthereumTxAck").message_class
EthereumSignMessage = REGISTRY.resolve(ETHEREUM + ".EthereumSignMessage").message_class
EthereumMessageSignature = REGISTRY.resolve(ETHEREUM + ".EthereumMessageSignature").message_class
EthereumTypedDataSignature = REGISTRY.resolve(ETHEREUM + ".EthereumTypedDataSignature").message_class

EthereumSignTypedData = REGISTRY.resolve(ETHEREUM_EIP712 + ".EthereumSignTypedData").message_class
EthereumTypedDataStructRequest = REGISTRY.resolve(ETHEREUM_EIP712 + ".EthereumTypedDataStructRequest").message_class
EthereumTypedDataStructAck = REGISTRY.resolve(ETHEREUM_EIP712 + ".EthereumTypedDataStructAck").message_class
EthereumStructMember = REGISTRY.resolve_class(ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumStructMember")
EthereumFieldType = REGISTRY.resolve_class(ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumFieldType")
EthereumDataType = REGISTRY.resolve_enum(ETHEREUM_EIP712 + ".EthereumTypedDataStructAck.EthereumDataType")
EthereumTypedDataValueRequest = REGISTRY.resolve(ETHEREUM_EIP712 + ".EthereumTypedDataValueRequest").message_class
EthereumTypedDataValueAck = REGISTRY.resolve(ETHEREUM_EIP712 + ".EthereumTypedDataValueAck").message_class
