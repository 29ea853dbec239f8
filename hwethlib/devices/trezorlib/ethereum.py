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

import logging
from typing import Any, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from ...common import int_to_big_endian
from . import exceptions, messages
from .eip712 import TypedDataConverter
from .tools import expect

LOG = logging.getLogger(__name__)

# calldata sent inline with the signing request, the rest is streamed on request
CHUNK_SIZE = 1024


class Signature(NamedTuple):
    v: int
    r: bytes
    s: bytes


def make_definitions(encoded_network: Optional[bytes] = None) -> Optional[messages.EthereumDefinitions]:
    if encoded_network is None:
        return None
    return messages.EthereumDefinitions(encoded_network=encoded_network)


# ====== Client functions ====== #


@expect(messages.EthereumAddress, field="address")
def get_address(client, n: Sequence[int], show_display: bool = False, encoded_network: Optional[bytes] = None):
    msg = messages.EthereumGetAddress(address_n=n, show_display=show_display)
    if encoded_network is not None:
        msg.encoded_network = encoded_network
    return client.call(msg)


@expect(messages.EthereumMessageSignature)
def sign_message(client, n: Sequence[int], message: Union[str, bytes], encoded_network: Optional[bytes] = None):
    if isinstance(message, str):
        message = message.encode("utf-8")
    msg = messages.EthereumSignMessage(address_n=n, message=message)
    if encoded_network is not None:
        msg.encoded_network = encoded_network
    return client.call(msg)


def _sign_with_data(client, msg, data: bytes) -> Tuple[messages.EthereumTxRequest, int]:
    """Send a signing request and stream the calldata the device asks for.

    Returns the final response and the number of calldata bytes sent.
    """
    if data:
        msg.data_length = len(data)
        msg.data_initial_chunk = data[:CHUNK_SIZE]
    sent = len(msg.data_initial_chunk)

    response = client.call(msg, expect=messages.EthereumTxRequest)
    while response.HasField("data_length"):
        data_length = response.data_length
        if data_length == 0 or sent + data_length > len(data):
            raise exceptions.UnexpectedMessageError(
                "Device requested {} bytes of calldata, {} left".format(data_length, len(data) - sent),
                received=response,
            )
        chunk = data[sent:sent + data_length]
        sent += len(chunk)
        LOG.debug("sent {}/{} bytes of calldata".format(sent, len(data)))
        response = client.call(messages.EthereumTxAck(data_chunk=chunk), expect=messages.EthereumTxRequest)

    if not (
        response.HasField("signature_v")
        and response.HasField("signature_r")
        and response.HasField("signature_s")
    ):
        raise exceptions.UnexpectedMessageError("Invalid response", received=response)
    return response, sent


def sign_tx(
    client,
    n: Sequence[int],
    nonce: int,
    gas_price: int,
    gas_limit: int,
    to: Optional[str],
    value: int,
    data: bytes = b"",
    chain_id: Optional[int] = None,
    tx_type: Optional[int] = None,
    encoded_network: Optional[bytes] = None,
) -> Signature:
    msg = messages.EthereumSignTx(
        address_n=n,
        nonce=int_to_big_endian(nonce),
        gas_price=int_to_big_endian(gas_price),
        gas_limit=int_to_big_endian(gas_limit),
        value=int_to_big_endian(value),
    )
    if to:
        msg.to = to
    if chain_id is not None:
        msg.chain_id = chain_id
    if tx_type is not None:
        msg.tx_type = tx_type
    if encoded_network is not None:
        msg.definitions.CopyFrom(make_definitions(encoded_network))

    response, _ = _sign_with_data(client, msg, data)

    v = response.signature_v
    # the device leaves the EIP-155 adjustment to the host for large chain ids
    if chain_id is not None and v <= 1:
        v = v + 35 + 2 * chain_id
    return Signature(v, response.signature_r, response.signature_s)


def sign_tx_eip1559(
    client,
    n: Sequence[int],
    *,
    nonce: int,
    gas_limit: int,
    to: Optional[str],
    value: int,
    data: bytes = b"",
    chain_id: int,
    max_gas_fee: int,
    max_priority_fee: int,
    access_list: Sequence[Tuple[str, Sequence[bytes]]] = (),
    encoded_network: Optional[bytes] = None,
) -> Signature:
    msg = messages.EthereumSignTxEIP1559(
        address_n=n,
        nonce=int_to_big_endian(nonce),
        gas_limit=int_to_big_endian(gas_limit),
        value=int_to_big_endian(value),
        chain_id=chain_id,
        max_gas_fee=int_to_big_endian(max_gas_fee),
        max_priority_fee=int_to_big_endian(max_priority_fee),
        access_list=[
            messages.EthereumAccessList(address=address, storage_keys=list(storage_keys))
            for address, storage_keys in access_list
        ],
    )
    if to:
        msg.to = to
    if encoded_network is not None:
        msg.definitions.CopyFrom(make_definitions(encoded_network))

    response, _ = _sign_with_data(client, msg, data)
    return Signature(response.signature_v, response.signature_r, response.signature_s)


def sign_typed_data(
    client,
    n: Sequence[int],
    data: Union[str, Mapping[str, Any]],
    metamask_v4_compat: bool = True,
    encoded_network: Optional[bytes] = None,
) -> messages.EthereumTypedDataSignature:
    converter = TypedDataConverter(data)

    request = messages.EthereumSignTypedData(
        address_n=n,
        primary_type=converter.primary_type,
        metamask_v4_compat=metamask_v4_compat,
    )
    if encoded_network is not None:
        request.definitions.CopyFrom(make_definitions(encoded_network))
    response = client.call(request)

    while not isinstance(response, messages.EthereumTypedDataSignature):
        try:
            if isinstance(response, messages.EthereumTypedDataStructRequest):
                ack = messages.EthereumTypedDataStructAck(members=converter.struct_members(response.name))
            elif isinstance(response, messages.EthereumTypedDataValueRequest):
                ack = messages.EthereumTypedDataValueAck(value=converter.value_at(response.member_path))
            else:
                raise exceptions.UnexpectedMessageError(
                    "Unexpected response message type {}".format(response.DESCRIPTOR.name),
                    expected=messages.EthereumTypedDataSignature,
                    received=response,
                )
        except (ValueError, exceptions.TrezorException):
            client.call_raw(messages.Cancel())
            raise
        response = client.call(ack)

    return response
