#! /usr/bin/env python3

import io
import json
import unittest
from contextlib import redirect_stdout
from unittest import mock

from fakes import FakeBridge, features

from hwethlib._cli import get_parser, process_commands
from hwethlib.devices.trezor import TrezorClient
from hwethlib.devices.trezorlib import messages
from hwethlib.errors import (
    ACTION_CANCELED,
    BAD_ARGUMENT,
    DEVICE_CONN_ERROR,
    MISSING_ARGUMENTS,
    ActionCanceledError,
    DeviceConnectionError,
)
from hwethlib.hwwclient import HardwareWalletClient
from hwethlib.key import H_

ADDRESS = '0x73d0385f4d8e00c5e6504c6030f47bf6212736a8'

class TestParser(unittest.TestCase):
    def test_global_options(self):
        args = get_parser().parse_args([
            '--chain-id', '0x89',
            '--derivation-path', "m/44'/60'/0'/0/0",
            '--derivation-path', 'm/44h/60h/0h/0/1',
            '--insecure-derivation',
            'getaccounts',
        ])
        self.assertEqual(args.chain_id, 137)
        self.assertEqual(args.derivation_paths, [
            (H_(44), H_(60), H_(0), 0, 0),
            (H_(44), H_(60), H_(0), 0, 1),
        ])
        self.assertTrue(args.insecure_derivation)
        self.assertEqual(args.bridge_url, 'http://127.0.0.1:21325')

    def test_bad_derivation_path(self):
        out = io.StringIO()
        with redirect_stdout(out), mock.patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                process_commands(['--derivation-path', 'm/x/y', 'getaccounts'])
        self.assertEqual(json.loads(out.getvalue())['code'], MISSING_ARGUMENTS)

    def test_missing_command(self):
        with redirect_stdout(io.StringIO()), mock.patch('sys.stderr', new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                process_commands([])

class TestCommands(unittest.TestCase):
    def setUp(self):
        self.client = mock.Mock(spec=HardwareWalletClient)
        self.client.get_accounts.return_value = [ADDRESS]
        patcher = mock.patch('hwethlib._cli.get_client', return_value=self.client)
        self.get_client = patcher.start()
        self.addCleanup(patcher.stop)

    def test_getaccounts(self):
        result = process_commands(['--chain-id', '1', '--device-path', '2', 'getaccounts'])
        self.assertEqual(result, {'accounts': [ADDRESS]})
        self.get_client.assert_called_once_with(
            device_path='2',
            derivation_paths=None,
            chain_id=1,
            insecure_derivation=False,
            bridge_url='http://127.0.0.1:21325',
        )
        self.client.close.assert_called_once_with()

    def test_signmessage_hex(self):
        self.client.sign_message.return_value = '0xsig'
        result = process_commands(['signmessage', ADDRESS, '0x68656c6c6f', '--hex'])
        self.assertEqual(result, {'signature': '0xsig'})
        self.client.sign_message.assert_called_once_with(ADDRESS, b'hello')

    def test_signmessage_bad_hex(self):
        result = process_commands(['signmessage', ADDRESS, 'hello', '--hex'])
        self.assertEqual(result['code'], BAD_ARGUMENT)

    def test_signtypeddata(self):
        self.client.sign_typed_data.return_value = '0xsig'
        result = process_commands(['signtypeddata', ADDRESS, '{"types": {}}'])
        self.assertEqual(result, {'signature': '0xsig'})
        self.client.sign_typed_data.assert_called_once_with(ADDRESS, '{"types": {}}')

    def test_signtx(self):
        self.client.sign_tx.return_value = {'type': 2, 'raw': '0x02'}
        tx = {'from': ADDRESS, 'gas': 21000}
        result = process_commands(['signtx', json.dumps(tx)])
        self.assertEqual(result, {'type': 2, 'raw': '0x02'})
        self.client.sign_tx.assert_called_once_with(tx)

    def test_signtx_bad_json(self):
        result = process_commands(['signtx', '{from'])
        self.assertEqual(result['code'], BAD_ARGUMENT)
        self.client.sign_tx.assert_not_called()

    def test_command_error(self):
        self.client.sign_message.side_effect = ActionCanceledError('sign_message canceled')
        result = process_commands(['signmessage', ADDRESS, 'hello'])
        self.assertEqual(result, {'error': 'sign_message canceled', 'code': ACTION_CANCELED})
        self.client.close.assert_called_once_with()

    def test_connection_error(self):
        self.get_client.side_effect = DeviceConnectionError('Trezor Bridge is not running')
        result = process_commands(['getaccounts'])
        self.assertEqual(result, {'error': 'Trezor Bridge is not running', 'code': DEVICE_CONN_ERROR})

    def test_unexpected_error_while_connecting(self):
        self.get_client.side_effect = RuntimeError('boom')
        result = process_commands(['getaccounts'])
        self.assertEqual(result['code'], DEVICE_CONN_ERROR)

class TestInterrupted(unittest.TestCase):
    def test_session_released_on_interrupt(self):
        bridge = FakeBridge([features(), messages.EthereumAddress(address=ADDRESS)])
        client = TrezorClient(bridge=bridge)
        client.initialize()
        with mock.patch('hwethlib._cli.get_client', return_value=client), \
                mock.patch('hwethlib._cli.getaccounts', side_effect=KeyboardInterrupt):
            with self.assertRaises(KeyboardInterrupt):
                process_commands(['getaccounts'])
        self.assertEqual(bridge.released, ['session-1'])
        self.assertIsNone(client.client)

class TestEnumerate(unittest.TestCase):
    @mock.patch('hwethlib._cli.enumerate')
    def test_enumerate(self, enumerate):
        enumerate.return_value = [{'type': 'trezor', 'path': '1', 'in_use': False}]
        self.assertEqual(process_commands(['--bridge-url', 'http://localhost:1', 'enumerate']), enumerate.return_value)
        enumerate.assert_called_once_with(bridge_url='http://localhost:1')

    @mock.patch('hwethlib._cli.enumerate')
    def test_enumerate_error(self, enumerate):
        enumerate.side_effect = DeviceConnectionError('Trezor Bridge is not running')
        self.assertEqual(process_commands(['enumerate'])['code'], DEVICE_CONN_ERROR)

if __name__ == "__main__":
    unittest.main()
