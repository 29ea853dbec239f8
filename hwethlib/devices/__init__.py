"""
Devices
*******

This module contains all of the device implementations.
Each device implementation is a subclass of :class:`~hwethlib.hwwclient.HardwareWalletClient`.
"""

from .trezor import TrezorClient

__all__ = [
    'trezor',
]
