# -*- coding: utf-8 -*-
from setuptools import setup

packages = \
['hwethlib',
 'hwethlib.devices',
 'hwethlib.devices.trezorlib',
 'hwethlib.devices.trezorlib.transport']

package_data = \
{'': ['*']}

modules = \
['hweth']
install_requires = \
['eth-hash[pycryptodome]>=0.5.0,<1.0.0',
 'eth-utils>=2.0.0,<6.0.0',
 'protobuf>=4.23.3,<6.0.0',
 'requests>=2.28,<3.0',
 'rlp>=3.0.0,<5.0.0']

extras_require = \
{'test': ['pytest>=7.0']}

entry_points = \
{'console_scripts': ['hweth = hwethlib._cli:main']}

setup_kwargs = {
    'name': 'hwi-eth',
    'version': '1.0.0',
    'description': 'A library for signing Ethereum messages and transactions with Trezor hardware wallets through Trezor Bridge',
    'long_description': "# Hardware Wallet Interface for Ethereum\n\nSign Ethereum messages, EIP-712 typed data and legacy or EIP-1559 transactions with a Trezor device reached through Trezor Bridge.\nPython software can use the provided library (`hwethlib`). Software in other languages can execute the `hweth` tool.\n\n## Install\n\n```\npip3 install .\n```\n\n## Usage\n\nTrezor Bridge must be running. To list the devices it knows about, run\n\n```\n./hweth.py enumerate\n```\n\nCommands act on the first device unless `--device-path` is given:\n\n```\n./hweth.py --chain-id 1 getaccounts\n./hweth.py --chain-id 1 signmessage <address> <message>\n./hweth.py --chain-id 1 signtypeddata <address> '<typed data JSON>'\n./hweth.py signtx '<transaction JSON>'\n```\n\nAll output will be in JSON form and sent to `stdout`.\nPrompts asking to confirm on the device are sent to `stderr`.\n",
    'author': 'None',
    'author_email': 'None',
    'maintainer': 'None',
    'maintainer_email': 'None',
    'url': 'None',
    'packages': packages,
    'package_data': package_data,
    'py_modules': modules,
    'install_requires': install_requires,
    'extras_require': extras_require,
    'entry_points': entry_points,
    'python_requires': '>=3.8',
}


setup(**setup_kwargs)
