#! /usr/bin/env python3

"""
Commands
********

The functions in this module are the primary way to interact with hardware wallets.
Each function that takes a ``client`` uses a :class:`~hwethlib.hwwclient.HardwareWalletClient`
whose session and accounts have already been initialized.

Clients can be constructed using :func:`~get_client`.

The :func:`~enumerate` function returns information about what devices are available to be connected to.
"""

import importlib
import json
import logging

from .common import hex_to_bytes
from .errors import BadArgumentError, DeviceConnectionError
from .devices import __all__ as all_devs
from .devices.trezorlib.transport.bridge import TREZORD_HOST
from .hwwclient import HardwareWalletClient

from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)


# Get the client for the device
def get_client(
    device_type: str = 'trezor',
    device_path: Optional[str] = None,
    derivation_paths: Optional[Sequence[Sequence[int]]] = None,
    chain_id: Optional[int] = None,
    insecure_derivation: bool = False,
    bridge_url: str = TREZORD_HOST,
) -> HardwareWalletClient:
    """
    Returns an initialized HardwareWalletClient for the given device type.

    The session is acquired, the network definition fetched and the accounts derived before returning.
    Use the client as a context manager, or call ``close``, to release the session.

    :param device_type: The type of device
    :param device_path: The bridge path of the device as returned by :func:`~enumerate`. The first device is used if not given.
    :param derivation_paths: The derivation paths of the accounts to manage
    :param chain_id: The chain id to sign for
    :param insecure_derivation: Whether to continue without a network definition
    :param bridge_url: The URL of Trezor Bridge
    :return: A :class:`~hwethlib.hwwclient.HardwareWalletClient` to interact with the device
    :raises: DeviceConnectionError: if the device type is not known
    """
    module = device_type.lower()
    class_name = module.capitalize()

    try:
        imported_dev = importlib.import_module('.devices.' + module, __package__)
    except ImportError:
        raise DeviceConnectionError('Unknown device type specified')
    client_constructor = getattr(imported_dev, class_name + 'Client')

    client = client_constructor(device_path, derivation_paths, chain_id, insecure_derivation, bridge_url=bridge_url)
    try:
        client.initialize()
    except BaseException:
        client.close()
        raise
    return client

# Get a list of all available hardware wallets
def enumerate(bridge_url: str = TREZORD_HOST) -> List[Dict[str, Any]]:
    """
    Enumerate all of the devices that can be reached through the bridge.

    :param bridge_url: The URL of Trezor Bridge
    :return: A list of devices for which clients can be created for.
    """

    result: List[Dict[str, Any]] = []

    for module in all_devs:
        imported_dev = importlib.import_module('.devices.' + module, __package__)
        result.extend(imported_dev.enumerate(bridge_url)) # type: ignore
    logging.debug('Found {} devices'.format(len(result)))
    return result

def getaccounts(client: HardwareWalletClient) -> Dict[str, List[str]]:
    """
    Get the managed accounts of a client

    :param client: The client to interact with
    :return: A dictionary containing the managed addresses.
        Returned as ``{"accounts": [<address>, ...]}``.
    """
    return {"accounts": client.get_accounts()}

def signmessage(client: HardwareWalletClient, address: str, message: Union[str, bytes], hex_message: bool = False) -> Dict[str, str]:
    """
    Sign a message using the key of a managed account.

    :param client: The client to interact with
    :param address: The address of the managed account
    :param message: The message to sign
    :param hex_message: Whether ``message`` is a hex string of the bytes to sign
    :return: A dictionary containing the signature.
        Returned as ``{"signature": <0x hex string>}``.
    """
    if hex_message:
        try:
            message = hex_to_bytes(message)
        except ValueError:
            raise BadArgumentError('Message is not a hex string')
    return {"signature": client.sign_message(address, message)}

def signtypeddata(client: HardwareWalletClient, address: str, data: Union[str, Mapping[str, Any]]) -> Dict[str, str]:
    """
    Sign EIP-712 typed data using the key of a managed account.

    :param client: The client to interact with
    :param address: The address of the managed account
    :param data: The typed data, as a mapping or a JSON string
    :return: A dictionary containing the signature.
        Returned as ``{"signature": <0x hex string>}``.
    """
    return {"signature": client.sign_typed_data(address, data)}

def signtx(client: HardwareWalletClient, tx: Union[str, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Sign a legacy or EIP-1559 transaction.

    :param client: The client to interact with
    :param tx: The transaction fields, as a mapping or a JSON string. ``from`` selects the account.
    :return: A dictionary containing the signature and the signed transaction.
        Returned as ``{"type": <0 or 2>, "signature": {"v": <int>, "r": <hex>, "s": <hex>}, "raw": <0x hex string>}``.
    """
    if isinstance(tx, str):
        try:
            tx = json.loads(tx)
        except ValueError as e:
            raise BadArgumentError('Transaction is not valid JSON: {}'.format(e))
    return client.sign_tx(tx)
