#! /usr/bin/env python3

import unittest
from unittest import mock

import requests

from hwethlib.definitions import fetch_network_definition, network_definition_url
from hwethlib.errors import NetworkDefinitionError

class TestNetworkDefinitions(unittest.TestCase):
    def test_url(self):
        self.assertEqual(network_definition_url(137), 'https://data.trezor.io/firmware/eth-definitions/chain-id/137/network.dat')

    @mock.patch('hwethlib.definitions.requests.get')
    def test_fetch(self, get):
        get.return_value = mock.Mock(content=b'trzd1')
        self.assertEqual(fetch_network_definition(1, timeout=5), b'trzd1')
        get.assert_called_once_with(network_definition_url(1), timeout=5)

    @mock.patch('hwethlib.definitions.requests.get')
    def test_unavailable(self, get):
        get.side_effect = requests.exceptions.ConnectionError('offline')
        with self.assertRaises(NetworkDefinitionError):
            fetch_network_definition(1)

    @mock.patch('hwethlib.definitions.requests.get')
    def test_http_error(self, get):
        response = mock.Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('404 Client Error')
        get.return_value = response
        with self.assertRaises(NetworkDefinitionError):
            fetch_network_definition(424242)

    @mock.patch('hwethlib.definitions.requests.get')
    def test_insecure_derivation(self, get):
        get.side_effect = requests.exceptions.ConnectionError('offline')
        with self.assertLogs('hwethlib.definitions', level='WARNING'):
            self.assertIsNone(fetch_network_definition(1, insecure_derivation=True))

    def test_session(self):
        session = mock.Mock()
        session.get.return_value = mock.Mock(content=b'trzd1')
        self.assertEqual(fetch_network_definition(5, session=session), b'trzd1')
        session.get.assert_called_once_with(network_definition_url(5), timeout=None)

if __name__ == "__main__":
    unittest.main()
