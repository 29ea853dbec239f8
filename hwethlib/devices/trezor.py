# Trezor interaction script

from ..hwwclient import HardwareWalletClient, ManagedAccount
from ..errors import ActionCanceledError, BadArgumentError, DeviceConnectionError, DeviceFailureError, ProtocolError
from ..common import bytes_to_hex
from ..definitions import fetch_network_definition
from ..transaction import LegacyTransaction, parse_transaction, serialize_signed
from .trezorlib.client import TrezorClient as Trezor
from .trezorlib.exceptions import Cancelled, DataPathError, SchemaError, TrezorFailure, UnexpectedMessageError
from .trezorlib.transport import NoDeviceFoundError, TransportException
from .trezorlib.transport.bridge import BridgeClient, TREZORD_HOST
from .trezorlib.ui import BridgeUI
from .trezorlib import ethereum
from ..key import path_to_string

from eth_utils import is_address

import logging

from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

def trezor_exception(f):
    def func(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ValueError as e:
            raise BadArgumentError(str(e))
        except Cancelled:
            raise ActionCanceledError('{} canceled'.format(f.__name__))
        except TransportException as e:
            raise DeviceConnectionError(str(e))
        except TrezorFailure as e:
            raise DeviceFailureError(str(e), e.code, e.message)
        except (UnexpectedMessageError, DataPathError, SchemaError) as e:
            raise ProtocolError(str(e))
    return func

# This class extends the HardwareWalletClient for Trezor specific things
class TrezorClient(HardwareWalletClient):

    def __init__(
        self,
        path: Optional[str] = None,
        derivation_paths: Optional[Sequence[Sequence[int]]] = None,
        chain_id: Optional[int] = None,
        insecure_derivation: bool = False,
        bridge_url: str = TREZORD_HOST,
        bridge: Optional[BridgeClient] = None,
        ui: Optional[BridgeUI] = None,
    ) -> None:
        super(TrezorClient, self).__init__(path or '', derivation_paths, chain_id, insecure_derivation)
        self.bridge = bridge if bridge is not None else BridgeClient(bridge_url)
        self.ui = ui if ui is not None else BridgeUI()
        self.client: Optional[Trezor] = None
        self.encoded_network: Optional[bytes] = None
        self.type = 'Trezor'

    def _require_session(self) -> Trezor:
        if self.client is None or self.client.session_id is None:
            raise DeviceConnectionError('No Trezor session, call initialize first')
        return self.client

    @trezor_exception
    def initialize_session(self) -> None:
        """
        Check that Trezor Bridge runs, acquire the first device (or the one at ``path``) and initialize it.
        """
        version = self.bridge.version()
        logging.debug('Trezor Bridge {} is running'.format(version))

        devices = self.bridge.enumerate()
        if self.path:
            devices = [d for d in devices if d.path == self.path]
            if not devices:
                raise NoDeviceFoundError('No Trezor device at {}'.format(self.path))
        device = devices[0]
        self.path = device.path

        self.client = Trezor(self.bridge, device, ui=self.ui)
        self.client.open()
        self.client.init_device()

    def initialize_network(self, chain_id: Optional[int] = None) -> None:
        """
        Record the chain id and fetch its network definition.

        :raises NetworkDefinitionError: if the definition can not be fetched and insecure derivation is not enabled
        """
        if chain_id is not None:
            self.chain_id = chain_id
        if self.chain_id is None:
            logging.debug('No chain id, skipping network definition')
            return
        self.encoded_network = fetch_network_definition(self.chain_id, self.insecure_derivation)

    @trezor_exception
    def initialize_accounts(self) -> None:
        """
        Ask the device for the address of each configured derivation path.
        """
        client = self._require_session()
        accounts = []
        for path in self.derivation_paths:
            address = ethereum.get_address(client, path, encoded_network=self.encoded_network)
            if not is_address(address):
                raise ValueError('Device returned an invalid address for {}: {}'.format(path_to_string(path), address))
            accounts.append(ManagedAccount(address.lower(), path))
            logging.debug('Managing {} at {}'.format(address.lower(), path_to_string(path)))
        self.accounts = accounts

    def initialize(self, chain_id: Optional[int] = None) -> None:
        self.initialize_session()
        self.initialize_network(chain_id)
        self.initialize_accounts()

    @trezor_exception
    def sign_message(self, address: str, message: Union[str, bytes]) -> str:
        account = self.resolve_account(address)
        resp = ethereum.sign_message(self._require_session(), account.derivation_path, message, encoded_network=self.encoded_network)
        return bytes_to_hex(resp.signature)

    @trezor_exception
    def sign_typed_data(self, address: str, data: Union[str, Mapping[str, Any]]) -> str:
        account = self.resolve_account(address)
        resp = ethereum.sign_typed_data(self._require_session(), account.derivation_path, data, encoded_network=self.encoded_network)
        return bytes_to_hex(resp.signature)

    @trezor_exception
    def sign_tx(self, tx: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(tx, Mapping):
            raise BadArgumentError('Transaction must be an object')
        sender = tx.get('from')
        if not sender:
            raise BadArgumentError('Transaction is missing from')
        account = self.resolve_account(sender)
        parsed = parse_transaction(tx, self.chain_id)
        client = self._require_session()

        if isinstance(parsed, LegacyTransaction):
            sig = ethereum.sign_tx(
                client,
                account.derivation_path,
                nonce=parsed.nonce,
                gas_price=parsed.gas_price,
                gas_limit=parsed.gas_limit,
                to=parsed.to,
                value=parsed.value,
                data=parsed.data,
                chain_id=parsed.chain_id,
                encoded_network=self.encoded_network,
            )
        else:
            sig = ethereum.sign_tx_eip1559(
                client,
                account.derivation_path,
                nonce=parsed.nonce,
                gas_limit=parsed.gas_limit,
                to=parsed.to,
                value=parsed.value,
                data=parsed.data,
                chain_id=parsed.chain_id,
                max_gas_fee=parsed.max_fee_per_gas,
                max_priority_fee=parsed.max_priority_fee_per_gas,
                access_list=parsed.access_list,
                encoded_network=self.encoded_network,
            )

        raw = serialize_signed(parsed, sig)
        return {
            'type': parsed.tx_type,
            'signature': {'v': sig.v, 'r': bytes_to_hex(sig.r), 's': bytes_to_hex(sig.s)},
            'raw': bytes_to_hex(raw),
        }

    @trezor_exception
    def close(self) -> None:
        if self.client is None:
            return
        try:
            self.client.close()
        finally:
            self.client = None

def enumerate(bridge_url: str = TREZORD_HOST) -> List[Dict[str, Any]]:
    results = []
    bridge = BridgeClient(bridge_url)
    try:
        bridge.version()
        devices = bridge.enumerate()
    except NoDeviceFoundError:
        return results
    except TransportException as e:
        raise DeviceConnectionError(str(e))
    for dev in devices:
        d_data: Dict[str, Any] = {}

        d_data['type'] = 'trezor'
        d_data['path'] = dev.path
        d_data['in_use'] = dev.session is not None

        results.append(d_data)
    return results
