#! /usr/bin/env python3

from .commands import (
    enumerate,
    get_client,
    getaccounts,
    signmessage,
    signtx,
    signtypeddata,
)
from .errors import (
    handle_errors,
    DEVICE_CONN_ERROR,
    HELP_TEXT,
    MISSING_ARGUMENTS,
    UNKNOWN_ERROR,
)
from .devices.trezorlib.transport.bridge import TREZORD_HOST
from .hwwclient import HardwareWalletClient
from .key import parse_path
from . import __version__

import argparse
import logging
import json
import sys

from typing import (
    Any,
    Dict,
    IO,
    List,
    NoReturn,
    Optional,
    Tuple,
)


def enumerate_handler(args: argparse.Namespace) -> List[Dict[str, Any]]:
    return enumerate(bridge_url=args.bridge_url)

def getaccounts_handler(args: argparse.Namespace, client: HardwareWalletClient) -> Dict[str, List[str]]:
    return getaccounts(client)

def signmessage_handler(args: argparse.Namespace, client: HardwareWalletClient) -> Dict[str, str]:
    return signmessage(client, address=args.address, message=args.message, hex_message=args.hex)

def signtypeddata_handler(args: argparse.Namespace, client: HardwareWalletClient) -> Dict[str, str]:
    return signtypeddata(client, address=args.address, data=args.data)

def signtx_handler(args: argparse.Namespace, client: HardwareWalletClient) -> Dict[str, Any]:
    return signtx(client, tx=args.tx)

def derivation_path(s: str) -> Tuple[int, ...]:
    # hardening of the first three components is applied by the client
    try:
        return tuple(parse_path(s))
    except ValueError:
        raise argparse.ArgumentTypeError('Invalid derivation path: {}'.format(s))

def chain_id(s: str) -> int:
    try:
        return int(s, 0)
    except ValueError:
        raise argparse.ArgumentTypeError('Invalid chain id: {}'.format(s))

class HWEthHelpFormatter(argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter):
    pass

class HWEthArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.formatter_class = HWEthHelpFormatter

    def print_usage(self, file: Optional[IO[str]] = None) -> None:
        if file is None:
            file = sys.stderr
        super().print_usage(file)

    def print_help(self, file: Optional[IO[str]] = None) -> None:
        if file is None:
            file = sys.stderr
        super().print_help(file)
        error = {'error': 'Help text requested', 'code': HELP_TEXT}
        print(json.dumps(error))

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        args = {'prog': self.prog, 'message': message}
        error = {'error': '%(prog)s: error: %(message)s' % args, 'code': MISSING_ARGUMENTS}
        print(json.dumps(error))
        self.exit(2)

def get_parser() -> HWEthArgumentParser:
    parser = HWEthArgumentParser(description='Hardware Wallet Interface for Ethereum, version {}.\nSign Ethereum messages, typed data and transactions with a Trezor through Trezor Bridge. Responses are in JSON format.'.format(__version__))
    parser.add_argument('--bridge-url', help='The URL of Trezor Bridge', default=TREZORD_HOST)
    parser.add_argument('--device-path', '-d', help='Specify the bridge path of the device to connect to. If not given, the first device enumerated is used.')
    parser.add_argument('--derivation-path', help='Derivation path of an account to manage, e.g. m/44h/60h/0h/0/0. The first three components are always hardened. Can be given multiple times.', type=derivation_path, action='append', dest='derivation_paths')
    parser.add_argument('--chain-id', help='The chain id to sign for', type=chain_id)
    parser.add_argument('--insecure-derivation', help='Continue when the network definition for the chain can not be fetched', action='store_true')
    parser.add_argument('--debug', help='Print debug statements', action='store_true')
    parser.add_argument('--version', action='version', version='%(prog)s {}'.format(__version__))

    subparsers = parser.add_subparsers(description='Commands', dest='command')
    # work-around to make subparser required
    subparsers.required = True

    enumerate_parser = subparsers.add_parser('enumerate', help='List all devices known to Trezor Bridge')
    enumerate_parser.set_defaults(func=enumerate_handler)

    getaccounts_parser = subparsers.add_parser('getaccounts', help='Get the addresses of the managed accounts')
    getaccounts_parser.set_defaults(func=getaccounts_handler)

    signmsg_parser = subparsers.add_parser('signmessage', help='Sign a message')
    signmsg_parser.add_argument('address', help='The address of the account to sign with')
    signmsg_parser.add_argument('message', help='The message to sign')
    signmsg_parser.add_argument('--hex', help='The message is a hex string of the bytes to sign', action='store_true')
    signmsg_parser.set_defaults(func=signmessage_handler)

    signtypeddata_parser = subparsers.add_parser('signtypeddata', help='Sign EIP-712 typed data')
    signtypeddata_parser.add_argument('address', help='The address of the account to sign with')
    signtypeddata_parser.add_argument('data', help='The typed data as JSON')
    signtypeddata_parser.set_defaults(func=signtypeddata_handler)

    signtx_parser = subparsers.add_parser('signtx', help='Sign a legacy or EIP-1559 transaction')
    signtx_parser.add_argument('tx', help='The transaction as JSON, with the fields of eth_sendTransaction. "from" selects the account.')
    signtx_parser.set_defaults(func=signtx_handler)

    return parser

def process_commands(cli_args: List[str]) -> Any:
    parser = get_parser()
    args = parser.parse_args(cli_args)

    command = args.command
    result: Dict[str, Any] = {}

    # Setup debug logging
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    # List all available hardware wallet devices
    if command == 'enumerate':
        with handle_errors(result=result, code=DEVICE_CONN_ERROR, debug=args.debug):
            return args.func(args)
        return result

    client = None
    with handle_errors(result=result, code=DEVICE_CONN_ERROR, debug=args.debug):
        client = get_client(
            device_path=args.device_path,
            derivation_paths=args.derivation_paths,
            chain_id=args.chain_id,
            insecure_derivation=args.insecure_derivation,
            bridge_url=args.bridge_url,
        )
    if 'error' in result:
        return result

    if client is None:
        return {"error": "Unable to communicated with device", "code": UNKNOWN_ERROR}

    # Do the commands
    try:
        with handle_errors(result=result, debug=args.debug):
            result = args.func(args, client)
    finally:
        with handle_errors(result=result, debug=args.debug):
            client.close()

    return result

def main() -> None:
    result = process_commands(sys.argv[1:])
    print(json.dumps(result))
