"""
Provider
********

:class:`TrezorProvider` answers the signing related JSON-RPC methods with a
:class:`~hwethlib.hwwclient.HardwareWalletClient` and hands every other
request, and every request for an address the device does not manage, to a
wrapped provider.
"""

import json
import logging

from typing import (
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from .common import hex_to_bytes, to_int
from .devices.trezorlib.eip712 import parse_document
from .errors import AccountNotManagedError, BadArgumentError
from .hwwclient import HardwareWalletClient

LOG = logging.getLogger(__name__)

#: ``fallback(method, params)`` sends a request to the wrapped provider and returns its result
Fallback = Callable[[str, List[Any]], Any]


def _data_param(value: Any, method: str) -> bytes:
    try:
        return hex_to_bytes(value)
    except (TypeError, ValueError):
        raise BadArgumentError('Invalid data param when calling {}'.format(method))


class TrezorProvider(object):
    """
    Wraps a provider, signing with the device for the accounts it manages.
    """

    def __init__(self, client: HardwareWalletClient, fallback: Fallback) -> None:
        """
        :param client: An initialized client
        :param fallback: The wrapped provider
        """
        self.client = client
        self.fallback = fallback
        self.handlers: Dict[str, Callable[[List[Any]], Any]] = {
            'eth_sign': self._eth_sign,
            'personal_sign': self._personal_sign,
            'eth_signTypedData_v4': self._eth_sign_typed_data_v4,
            'eth_signTransaction': self._eth_sign_transaction,
            'eth_sendTransaction': self._eth_send_transaction,
        }

    def chain_id(self) -> int:
        return to_int(self.fallback('eth_chainId', []))

    def request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        params = list(params or [])

        if method == 'eth_accounts':
            accounts = self.fallback(method, params) or []
            return self.client.get_accounts() + list(accounts)

        handler = self.handlers.get(method)
        if handler is not None:
            try:
                result = handler(params)
            except AccountNotManagedError as e:
                LOG.debug('{}, forwarding {}'.format(e, method))
            else:
                if result is not None:
                    return result

        return self.fallback(method, params)

    def _eth_sign(self, params: List[Any]) -> Optional[str]:
        if not params or not params[0]:
            return None
        address = params[0]
        if len(params) < 2 or not params[1]:
            raise BadArgumentError('Missing data param when calling eth_sign')
        data = _data_param(params[1], 'eth_sign')
        return self.client.sign_message(address, data)

    def _personal_sign(self, params: List[Any]) -> Optional[str]:
        if not params or not params[0]:
            return None
        data = _data_param(params[0], 'personal_sign')
        if len(params) < 2 or not params[1]:
            raise BadArgumentError('Missing address param when calling personal_sign')
        return self.client.sign_message(params[1], data)

    def _eth_sign_typed_data_v4(self, params: List[Any]) -> Optional[str]:
        if not params or not params[0]:
            return None
        address = params[0]
        if len(params) < 2 or not params[1]:
            raise BadArgumentError('Missing data param when calling eth_signTypedData_v4')
        try:
            data = parse_document(params[1])
        except ValueError as e:
            raise BadArgumentError('Invalid data param when calling eth_signTypedData_v4: {}'.format(e))
        return self.client.sign_typed_data(address, data)

    def _signed_transaction(self, params: List[Any]) -> Optional[str]:
        if not params:
            return None
        tx = params[0]
        if isinstance(tx, str):
            try:
                tx = json.loads(tx)
            except ValueError:
                raise BadArgumentError('Invalid transaction param')
        if not isinstance(tx, dict) or not tx.get('from'):
            return None
        if tx.get('chainId') is None and self.client.chain_id is None:
            tx = dict(tx, chainId=self.chain_id())
        return self.client.sign_tx(tx)['raw']

    def _eth_sign_transaction(self, params: List[Any]) -> Optional[str]:
        return self._signed_transaction(params)

    def _eth_send_transaction(self, params: List[Any]) -> Any:
        raw = self._signed_transaction(params)
        if raw is None:
            return None
        return self.fallback('eth_sendRawTransaction', [raw])
