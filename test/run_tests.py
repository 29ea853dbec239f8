#! /usr/bin/env python3

import argparse
import sys
import unittest

from test_bridge import TestBridgeClient, TestFraming
from test_cli import TestCommands, TestEnumerate, TestParser
from test_client import TestCallLoop, TestInitDevice, TestSession
from test_definitions import TestNetworkDefinitions
from test_eip712 import TestEncodeValue, TestFieldType, TestParseDocument, TestTypedDataConverter
from test_ethereum import TestGetAddress, TestSignMessage, TestSignTx, TestSignTypedData
from test_key import TestKeyPaths
from test_protobuf import TestSchemaRegistry
from test_provider import TestTrezorProvider
from test_transaction import TestParseTransaction, TestSerializeSigned
from test_trezor import TestAccounts, TestInitialize, TestSigning

parser = argparse.ArgumentParser(description='Run automated tests')
parser.add_argument('--protocol-only', help='Only run the wire protocol and device dialogue tests', action='store_true')
args = parser.parse_args()

protocol_tests = [
    TestSchemaRegistry,
    TestFraming,
    TestBridgeClient,
    TestCallLoop,
    TestSession,
    TestInitDevice,
    TestFieldType,
    TestEncodeValue,
    TestParseDocument,
    TestTypedDataConverter,
    TestGetAddress,
    TestSignMessage,
    TestSignTx,
    TestSignTypedData,
]
library_tests = [
    TestKeyPaths,
    TestParseTransaction,
    TestSerializeSigned,
    TestNetworkDefinitions,
    TestInitialize,
    TestAccounts,
    TestSigning,
    TestTrezorProvider,
    TestParser,
    TestCommands,
    TestEnumerate,
]

# Run tests
suite = unittest.TestSuite()
for case in protocol_tests:
    suite.addTests(unittest.defaultTestLoader.loadTestsFromTestCase(case))
if not args.protocol_only:
    for case in library_tests:
        suite.addTests(unittest.defaultTestLoader.loadTestsFromTestCase(case))
success = unittest.TextTestRunner(stream=sys.stdout, verbosity=2).run(suite).wasSuccessful()

sys.exit(not success)
