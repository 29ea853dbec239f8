"""
Transactions
************

Validation of RPC style transaction fields into one of the two transaction
kinds the device can sign, and serialization of the signed result.
"""

from dataclasses import dataclass
from typing import (
    Any,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import rlp
from eth_utils import is_address, to_checksum_address

from .common import (
    hex_to_bytes,
    int_to_big_endian,
    to_int,
)
from .devices.trezorlib.ethereum import Signature

LEGACY_FEE_FIELDS = ("gasPrice",)
EIP1559_FEE_FIELDS = ("maxFeePerGas", "maxPriorityFeePerGas")

TX_TYPE_LEGACY = 0
TX_TYPE_EIP1559 = 2

AccessList = Tuple[Tuple[str, Tuple[bytes, ...]], ...]


@dataclass(frozen=True)
class LegacyTransaction:
    nonce: int
    gas_limit: int
    to: Optional[str]
    value: int
    data: bytes
    chain_id: int
    gas_price: int

    tx_type = TX_TYPE_LEGACY


@dataclass(frozen=True)
class EIP1559Transaction:
    nonce: int
    gas_limit: int
    to: Optional[str]
    value: int
    data: bytes
    chain_id: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    access_list: AccessList = ()

    tx_type = TX_TYPE_EIP1559


Transaction = Union[LegacyTransaction, EIP1559Transaction]


def _present(fields: Mapping[str, Any], key: str) -> bool:
    return fields.get(key) is not None


def _parse_address(value: Any, what: str) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError("Invalid {} address: {}".format(what, value))
    return to_checksum_address(value)


def _parse_access_list(value: Optional[Sequence[Mapping[str, Any]]]) -> AccessList:
    if not value:
        return ()
    entries = []
    for item in value:
        if not isinstance(item, Mapping) or "address" not in item:
            raise ValueError("Invalid access list entry: {}".format(item))
        keys = tuple(hex_to_bytes(k) for k in item.get("storageKeys", []))
        entries.append((_parse_address(item["address"], "access list"), keys))
    return tuple(entries)


def parse_transaction(fields: Mapping[str, Any], chain_id: Optional[int] = None) -> Transaction:
    """
    Validate transaction fields and decide which kind of transaction they describe.

    Accepts the keys used by ``eth_sendTransaction``. Numbers may be ints, decimal strings or ``0x`` hex strings.
    Fee fields decide the kind: ``gasPrice`` makes a legacy transaction, ``maxFeePerGas`` and ``maxPriorityFeePerGas`` an EIP-1559 one.
    An explicit ``type`` must agree with the fee fields.

    :param fields: The transaction fields
    :param chain_id: The chain id to use when the fields do not carry one
    :return: The validated transaction
    :raises ValueError: if required fields are missing, fee fields are missing or mixed, or a value is malformed
    """
    if not isinstance(fields, Mapping):
        raise ValueError("Transaction must be an object")

    gas = fields.get("gas", fields.get("gasLimit"))
    if gas is None:
        raise ValueError("Transaction is missing gas limit")

    if _present(fields, "chainId"):
        chain_id = to_int(fields["chainId"])
    if chain_id is None:
        raise ValueError("Transaction is missing chain id")

    legacy = any(_present(fields, k) for k in LEGACY_FEE_FIELDS)
    eip1559 = any(_present(fields, k) for k in EIP1559_FEE_FIELDS)
    if legacy and eip1559:
        raise ValueError("Transaction mixes legacy and EIP-1559 fee fields")
    if not legacy and not eip1559:
        raise ValueError("Transaction is missing fee fields")

    if _present(fields, "type"):
        tx_type = to_int(fields["type"])
        if tx_type not in (TX_TYPE_LEGACY, TX_TYPE_EIP1559):
            raise ValueError("Unsupported transaction type {}".format(tx_type))
        if (tx_type == TX_TYPE_EIP1559) != eip1559:
            raise ValueError("Transaction type {} does not match its fee fields".format(tx_type))

    to = fields.get("to")
    to = _parse_address(to, "recipient") if to else None
    data = fields.get("data", fields.get("input"))
    common = dict(
        nonce=to_int(fields.get("nonce")),
        gas_limit=to_int(gas),
        to=to,
        value=to_int(fields.get("value")),
        data=hex_to_bytes(data) if data else b"",
        chain_id=chain_id,
    )

    if legacy:
        return LegacyTransaction(gas_price=to_int(fields["gasPrice"]), **common)

    for key in EIP1559_FEE_FIELDS:
        if not _present(fields, key):
            raise ValueError("Transaction is missing {}".format(key))
    return EIP1559Transaction(
        max_fee_per_gas=to_int(fields["maxFeePerGas"]),
        max_priority_fee_per_gas=to_int(fields["maxPriorityFeePerGas"]),
        access_list=_parse_access_list(fields.get("accessList")),
        **common,
    )


def serialize_signed(tx: Transaction, signature: Signature) -> bytes:
    """
    Serialize a signed transaction for ``eth_sendRawTransaction``.

    Legacy transactions are a plain RLP list, EIP-1559 transactions are the type byte ``0x02`` followed by the RLP list.
    """
    to = hex_to_bytes(tx.to) if tx.to else b""
    v = int_to_big_endian(signature.v)
    r = int_to_big_endian(int.from_bytes(signature.r, "big"))
    s = int_to_big_endian(int.from_bytes(signature.s, "big"))

    if isinstance(tx, LegacyTransaction):
        return rlp.encode([
            int_to_big_endian(tx.nonce),
            int_to_big_endian(tx.gas_price),
            int_to_big_endian(tx.gas_limit),
            to,
            int_to_big_endian(tx.value),
            tx.data,
            v,
            r,
            s,
        ])

    access_list = [[hex_to_bytes(address), list(keys)] for address, keys in tx.access_list]
    return bytes([TX_TYPE_EIP1559]) + rlp.encode([
        int_to_big_endian(tx.chain_id),
        int_to_big_endian(tx.nonce),
        int_to_big_endian(tx.max_priority_fee_per_gas),
        int_to_big_endian(tx.max_fee_per_gas),
        int_to_big_endian(tx.gas_limit),
        to,
        int_to_big_endian(tx.value),
        tx.data,
        access_list,
        v,
        r,
        s,
    ])
