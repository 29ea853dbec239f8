#! /usr/bin/env python3

import json
import unittest

from hwethlib.devices.trezorlib import messages
from hwethlib.devices.trezorlib.eip712 import (
    Array,
    Leaf,
    Struct,
    TypedDataConverter,
    encode_value,
    field_type,
    parse_document,
)
from hwethlib.devices.trezorlib.exceptions import DataPathError, UnexpectedMessageError

DataType = messages.EthereumDataType

FROM = '0xcd2a3d9f938e13cd947ec05abc7fe734df8dd826'
TO = '0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb'

def document():
    return {
        'types': {
            'EIP712Domain': [
                {'name': 'name', 'type': 'string'},
                {'name': 'chainId', 'type': 'uint256'},
            ],
            'Person': [
                {'name': 'name', 'type': 'string'},
                {'name': 'wallet', 'type': 'address'},
            ],
            'Mail': [
                {'name': 'amount', 'type': 'uint8'},
                {'name': 'flag', 'type': 'bool'},
                {'name': 'items', 'type': 'uint16[3]'},
                {'name': 'to', 'type': 'address'},
                {'name': 'from', 'type': 'Person'},
            ],
        },
        'primaryType': 'Mail',
        'domain': {'name': 'Ether Mail', 'chainId': 1},
        'message': {
            'amount': 5,
            'flag': True,
            'items': [1, 2, 3],
            'to': TO,
            'from': {'name': 'Cow', 'wallet': FROM},
        },
    }

class TestFieldType(unittest.TestCase):
    def test_sized_int(self):
        ft = field_type('uint8')
        self.assertEqual(ft.data_type, DataType.UINT)
        self.assertEqual(ft.size, 1)
        ft = field_type('int256')
        self.assertEqual(ft.data_type, DataType.INT)
        self.assertEqual(ft.size, 32)

    def test_unsized(self):
        self.assertFalse(field_type('uint').HasField('size'))
        self.assertFalse(field_type('bytes').HasField('size'))
        self.assertEqual(field_type('bytes32').size, 32)

    def test_array(self):
        ft = field_type('uint16[3]')
        self.assertEqual(ft.data_type, DataType.ARRAY)
        self.assertEqual(ft.size, 3)
        self.assertEqual(ft.entry_type.data_type, DataType.UINT)
        self.assertEqual(ft.entry_type.size, 2)

        ft = field_type('Person[][2]')
        self.assertEqual(ft.size, 2)
        self.assertEqual(ft.entry_type.data_type, DataType.ARRAY)
        self.assertFalse(ft.entry_type.HasField('size'))
        self.assertEqual(ft.entry_type.entry_type.struct_name, 'Person')

    def test_primitives(self):
        self.assertEqual(field_type('string').data_type, DataType.STRING)
        self.assertEqual(field_type('bool').data_type, DataType.BOOL)
        self.assertEqual(field_type('address').data_type, DataType.ADDRESS)
        ft = field_type('Person')
        self.assertEqual(ft.data_type, DataType.STRUCT)
        self.assertEqual(ft.struct_name, 'Person')

    def test_invalid(self):
        for t in ['uint7', 'int512', 'bytes33', 'bytes0', 'uint8[x]']:
            with self.assertRaises(ValueError, msg=t):
                field_type(t)

class TestEncodeValue(unittest.TestCase):
    def test_ints(self):
        self.assertEqual(encode_value('uint8', 5), b'\x05')
        self.assertEqual(encode_value('int8', -1), b'\xff')
        self.assertEqual(encode_value('uint16', '258'), b'\x01\x02')
        self.assertEqual(encode_value('uint256', 1), b'\x00' * 31 + b'\x01')
        self.assertEqual(len(encode_value('uint', 1)), 32)
        self.assertEqual(len(encode_value('int', -1)), 32)

    def test_int_hex_passthrough(self):
        self.assertEqual(encode_value('uint256', '0x0102'), b'\x01\x02')

    def test_int_overflow(self):
        with self.assertRaises(ValueError):
            encode_value('uint8', 256)
        with self.assertRaises(ValueError):
            encode_value('uint8', -1)

    def test_others(self):
        self.assertEqual(encode_value('bool', True), b'\x01')
        self.assertEqual(encode_value('bool', 'false'), b'\x00')
        self.assertEqual(encode_value('string', 'Hé'), 'Hé'.encode('utf-8'))
        self.assertEqual(encode_value('bytes', '0xdeadbeef'), b'\xde\xad\xbe\xef')
        self.assertEqual(encode_value('bytes', ''), b'')
        self.assertEqual(encode_value('address', FROM), bytes.fromhex(FROM[2:]))

    def test_struct_is_not_a_value(self):
        with self.assertRaises(ValueError):
            encode_value('Person', {})

class TestParseDocument(unittest.TestCase):
    def test_json(self):
        doc = parse_document(json.dumps(document()))
        self.assertEqual(doc['primaryType'], 'Mail')

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_document('{not json')
        with self.assertRaises(ValueError):
            parse_document('[]')
        for key in ['types', 'primaryType', 'domain', 'message']:
            doc = document()
            del doc[key]
            with self.assertRaises(ValueError, msg=key):
                parse_document(doc)

    def test_undefined_types(self):
        doc = document()
        del doc['types']['EIP712Domain']
        with self.assertRaises(ValueError):
            parse_document(doc)
        doc = document()
        doc['primaryType'] = 'Letter'
        with self.assertRaises(ValueError):
            parse_document(doc)

class TestTypedDataConverter(unittest.TestCase):
    def setUp(self):
        self.converter = TypedDataConverter(document())

    def test_tree(self):
        domain, message = self.converter.roots
        self.assertIsInstance(domain, Struct)
        self.assertEqual(domain.type_name, 'EIP712Domain')
        self.assertIsInstance(message.children[2], Array)
        self.assertEqual(message.children[2].entry_type, 'uint16')
        self.assertEqual(message.children[4].children[0], Leaf('string', 'Cow'))

    def test_struct_members(self):
        members = self.converter.struct_members('Mail')
        self.assertEqual([m.name for m in members], ['amount', 'flag', 'items', 'to', 'from'])
        self.assertEqual(members[2].type.data_type, DataType.ARRAY)
        self.assertEqual(members[4].type.struct_name, 'Person')

    def test_unknown_struct(self):
        with self.assertRaises(UnexpectedMessageError):
            self.converter.struct_members('Letter')

    def test_values(self):
        self.assertEqual(self.converter.value_at([0, 0]), b'Ether Mail')
        self.assertEqual(self.converter.value_at([0, 1]), b'\x00' * 31 + b'\x01')
        self.assertEqual(self.converter.value_at([1, 0]), b'\x05')
        self.assertEqual(self.converter.value_at([1, 1]), b'\x01')
        self.assertEqual(self.converter.value_at([1, 2]), b'\x00\x03')
        self.assertEqual(self.converter.value_at([1, 2, 1]), b'\x00\x02')
        self.assertEqual(self.converter.value_at([1, 3]), bytes.fromhex(TO[2:]))
        self.assertEqual(self.converter.value_at([1, 4, 1]), bytes.fromhex(FROM[2:]))

    def test_struct_path(self):
        with self.assertRaises(DataPathError) as cm:
            self.converter.value_at([1, 4])
        self.assertEqual(cm.exception.path, [1, 4])

    def test_bad_paths(self):
        for path in [[], [2], [1, 5], [1, 2, 3], [1, 0, 0]]:
            with self.assertRaises(DataPathError, msg=str(path)):
                self.converter.value_at(path)

    def test_invalid_leaf_value(self):
        doc = document()
        doc['message']['amount'] = 300
        converter = TypedDataConverter(doc)
        with self.assertRaisesRegex(ValueError, r'\[1, 0\]'):
            converter.value_at([1, 0])

    def test_fixed_array_length(self):
        doc = document()
        doc['message']['items'] = [1, 2]
        with self.assertRaises(ValueError):
            TypedDataConverter(doc)

    def test_missing_member(self):
        doc = document()
        del doc['message']['from']['wallet']
        with self.assertRaises(ValueError):
            TypedDataConverter(doc)

    def test_dynamic_array_of_structs(self):
        doc = document()
        doc['types']['Group'] = [{'name': 'members', 'type': 'Person[]'}]
        doc['primaryType'] = 'Group'
        doc['message'] = {'members': [{'name': 'Cow', 'wallet': FROM}, {'name': 'Bob', 'wallet': TO}]}
        converter = TypedDataConverter(doc)
        self.assertEqual(converter.value_at([1, 0]), b'\x00\x02')
        self.assertEqual(converter.value_at([1, 0, 1, 0]), b'Bob')

if __name__ == "__main__":
    unittest.main()
