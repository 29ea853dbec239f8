#! /usr/bin/env python3

import unittest
from unittest import mock

from fakes import FakeBridge, features

from hwethlib.devices.trezorlib import exceptions, messages
from hwethlib.devices.trezorlib.client import TrezorClient
from hwethlib.devices.trezorlib.transport.bridge import BridgeDevice
from hwethlib.devices.trezorlib.ui import PIN_PLACEHOLDER, BridgeUI

ADDRESS = '0x73d0385f4d8e00c5e6504c6030f47bf6212736a8'

def get_address():
    return messages.EthereumGetAddress(address_n=[0x8000002C, 0x8000003C, 0x80000000, 0, 0])

class TestCallLoop(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch('hwethlib.devices.trezorlib.ui.echo')
        self.echo = patcher.start()
        self.addCleanup(patcher.stop)

    def client(self, replies, **kwargs):
        self.bridge = FakeBridge(replies, **kwargs)
        return TrezorClient(self.bridge, BridgeDevice('1', None), ui=BridgeUI())

    def test_pin_then_button(self):
        client = self.client([
            messages.PinMatrixRequest(type=messages.PinMatrixRequestType.Current),
            messages.ButtonRequest(code=messages.ButtonRequestType.Address),
            messages.EthereumAddress(address=ADDRESS),
        ])
        resp = client.call(get_address(), expect=messages.EthereumAddress)
        self.assertEqual(resp.address, ADDRESS)
        self.assertEqual(self.bridge.log, [
            ('call', 'EthereumGetAddress'),
            ('call', 'PinMatrixAck'),
            ('post', 'ButtonAck'),
            ('read', None),
            ('call', 'EndSession'),
        ])
        self.assertEqual(self.bridge.sent_of(messages.PinMatrixAck)[0].pin, PIN_PLACEHOLDER)
        self.assertEqual(self.bridge.released, ['session-1'])

    def test_button_prompt_once_per_request(self):
        client = self.client([
            messages.ButtonRequest(code=messages.ButtonRequestType.SignTx),
            messages.ButtonRequest(code=messages.ButtonRequestType.SignTx),
            messages.Success(),
        ])
        client.call(messages.GetFeatures())
        self.assertEqual(self.echo.call_count, 1)

    def test_button_prompt_for_each_request(self):
        client = self.client([
            messages.ButtonRequest(code=messages.ButtonRequestType.SignTx),
            messages.Success(),
            messages.ButtonRequest(code=messages.ButtonRequestType.SignTx),
            messages.Success(),
        ])
        with client:
            client.call(messages.GetFeatures())
            client.call(messages.GetFeatures())
        self.assertEqual(self.echo.call_count, 2)

    def test_passphrase_on_device(self):
        client = self.client([
            messages.PassphraseRequest(),
            messages.EthereumAddress(address=ADDRESS),
        ])
        client.call(get_address())
        ack = self.bridge.sent_of(messages.PassphraseAck)[0]
        self.assertTrue(ack.on_device)
        self.assertFalse(ack.HasField('passphrase'))

    def test_passphrase_old_style(self):
        client = self.client([
            messages.PassphraseRequest(_on_device=True),
            messages.EthereumAddress(address=ADDRESS),
        ])
        client.call(get_address())
        ack = self.bridge.sent_of(messages.PassphraseAck)[0]
        self.assertFalse(ack.HasField('on_device'))

    def test_cancelled(self):
        client = self.client([messages.Failure(code=messages.FailureType.ActionCancelled, message='Cancelled')])
        with self.assertRaises(exceptions.Cancelled) as cm:
            client.call(get_address())
        self.assertEqual(cm.exception.code, messages.FailureType.ActionCancelled)
        self.assertEqual(cm.exception.message, 'Cancelled')
        self.assertEqual(self.bridge.released, ['session-1'])

    def test_failure(self):
        client = self.client([messages.Failure(code=messages.FailureType.DataError, message='Invalid path')])
        with self.assertRaises(exceptions.TrezorFailure) as cm:
            client.call(get_address())
        self.assertEqual(cm.exception.code, messages.FailureType.DataError)
        self.assertEqual(cm.exception.message, 'Invalid path')

    def test_pin_failure(self):
        client = self.client([
            messages.PinMatrixRequest(),
            messages.Failure(code=messages.FailureType.PinInvalid, message='PIN invalid'),
        ])
        with self.assertRaises(exceptions.PinException):
            client.call(get_address())

    def test_unexpected_message(self):
        client = self.client([messages.Success()])
        with self.assertRaises(exceptions.UnexpectedMessageError) as cm:
            client.call(get_address(), expect=messages.EthereumAddress)
        self.assertIsInstance(cm.exception.received, messages.Success)

    def test_no_session(self):
        client = self.client([])
        with self.assertRaises(exceptions.TrezorException):
            client.call_raw(get_address())

class TestSession(unittest.TestCase):
    def test_nested_open_shares_session(self):
        bridge = FakeBridge([messages.Success(), messages.Success()])
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        with client:
            client.call(messages.GetFeatures())
            client.call(messages.GetFeatures())
            self.assertEqual(bridge.released, [])
        self.assertEqual(bridge.acquired, [('1', None)])
        self.assertEqual(bridge.released, ['session-1'])
        self.assertEqual(len(bridge.sent_of(messages.EndSession)), 1)

    def test_previous_session(self):
        bridge = FakeBridge()
        client = TrezorClient(bridge, BridgeDevice('2', '9'), ui=BridgeUI())
        client.open()
        self.assertEqual(bridge.acquired, [('2', '9')])

    def test_close_releases_when_end_session_fails(self):
        bridge = FakeBridge(fail_end_session=True)
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        client.open()
        with self.assertLogs('hwethlib.devices.trezorlib.client', level='WARNING'):
            client.close()
        self.assertEqual(bridge.released, ['session-1'])
        self.assertIsNone(client.session_id)

    def test_close_without_open(self):
        bridge = FakeBridge()
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        client.close()
        self.assertEqual(bridge.released, [])

class TestInitDevice(unittest.TestCase):
    def test_init(self):
        bridge = FakeBridge([features(device_id='ABCD')])
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        client.init_device()
        self.assertEqual(client.version, (2, 6, 0))
        self.assertEqual(client.features.device_id, 'ABCD')
        self.assertEqual(bridge.log[0], ('call', 'Initialize'))

    def test_unsupported_vendor(self):
        bridge = FakeBridge([features(vendor='example.com')])
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        with self.assertRaisesRegex(exceptions.TrezorException, 'Unsupported device'):
            client.init_device()

    def test_not_features(self):
        bridge = FakeBridge([messages.Success()])
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        with self.assertRaises(exceptions.UnexpectedMessageError):
            client.init_device()

    def test_init_failure(self):
        bridge = FakeBridge([messages.Failure(code=messages.FailureType.FirmwareError, message='Firmware error')])
        client = TrezorClient(bridge, BridgeDevice('1', None), ui=BridgeUI())
        with self.assertRaises(exceptions.TrezorFailure) as cm:
            client.init_device()
        self.assertEqual(cm.exception.code, messages.FailureType.FirmwareError)
        self.assertEqual(cm.exception.message, 'Firmware error')
        self.assertEqual(bridge.released, ['session-1'])

if __name__ == "__main__":
    unittest.main()
