#!/usr/bin/env python3
# Copyright (c) 2020 The HWI developers
# Distributed under the MIT software license, see the accompanying
# file COPYING or http://www.opensource.org/licenses/mit-license.php.

"""
Key Paths and Utilities
***********************

Utilities for working with BIP 32 derivation paths.
"""

from typing import (
    List,
    Sequence,
    Tuple,
)


HARDENED_FLAG = 1 << 31

#: m/44'/60'/0'/0/0, the first Ethereum account. Only the first three components are hardened.
DEFAULT_DERIVATION_PATH: Tuple[int, ...] = (44, 60, 0, 0, 0)

def H_(x: int) -> int:
    """
    Shortcut function that "hardens" a number in a BIP44 path.
    """
    return x | HARDENED_FLAG

def is_hardened(i: int) -> bool:
    """
    Returns whether an index is hardened
    """
    return i & HARDENED_FLAG != 0


def harden_derivation_path(path: Sequence[int]) -> Tuple[int, ...]:
    """
    Harden the purpose, coin type and account components of a derivation path.

    The first three components get the hardened flag set, the rest are left unchanged.
    Components that are already hardened stay hardened.

    e.g.: [44, 60, 0, 0, 5] -> [0x8000002c, 0x8000003c, 0x80000000, 0, 5]

    :param path: list of uint32 integers
    :return: the hardened path
    """
    for i in path:
        if i < 0 or i > 0xFFFFFFFF:
            raise ValueError("Invalid BIP32 path component", i)
    return tuple(H_(x) if i < 3 else x for i, x in enumerate(path))


def parse_path(nstr: str) -> List[int]:
    """
    Convert BIP32 path string to list of uint32 integers with hardened flags.
    Several conventions are supported to set the hardened flag: -1, 1', 1h

    e.g.: "0/1h/1" -> [0, 0x80000001, 1]

    :param nstr: path string
    :return: list of integers
    """
    if not nstr:
        return []

    n = nstr.split("/")

    # m/a/b/c => a/b/c
    if n[0] == "m":
        n = n[1:]

    def str_to_harden(x: str) -> int:
        if x.startswith("-"):
            return H_(abs(int(x)))
        elif x.endswith(("h", "'")):
            return H_(int(x[:-1]))
        else:
            return int(x)

    try:
        return [str_to_harden(x) for x in n]
    except Exception:
        raise ValueError("Invalid BIP32 path", nstr)


def path_to_string(path: Sequence[int], hardened_char: str = "'") -> str:
    """
    Convert a list of integers to a BIP32 path string, e.g. m/44'/60'/0'/0/0
    """
    s = "m"
    for i in path:
        if is_hardened(i):
            s += "/{}{}".format(i & ~HARDENED_FLAG, hardened_char)
        else:
            s += "/{}".format(i)
    return s
