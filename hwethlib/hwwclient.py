"""
Hardware Wallet Client Interface
********************************

The :class:`HardwareWalletClient` is the class which all of the specific device implementations subclass.
"""

from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .errors import AccountNotManagedError
from .key import DEFAULT_DERIVATION_PATH, harden_derivation_path


@dataclass(frozen=True)
class ManagedAccount:
    """
    An address the device can sign for, with the derivation path it was derived from.
    """
    address: str
    derivation_path: Tuple[int, ...]


class HardwareWalletClient(object):
    """Create a client for a device reachable at the given path.

    This abstract class defines the methods
    that hardware wallet subclasses should implement.
    """

    def __init__(
        self,
        path: str,
        derivation_paths: Optional[Sequence[Sequence[int]]] = None,
        chain_id: Optional[int] = None,
        insecure_derivation: bool = False,
    ) -> None:
        """
        :param path: Path to the device as returned by :func:`~hwethlib.commands.enumerate`
        :param derivation_paths: The derivation paths of the accounts to manage.
            The purpose, coin type and account components are hardened.
            Defaults to ``m/44'/60'/0'/0/0``.
        :param chain_id: The chain id the client signs for
        :param insecure_derivation: Whether to continue when the network definition for the chain can not be fetched
        """
        self.path = path
        if not derivation_paths:
            derivation_paths = [DEFAULT_DERIVATION_PATH]
        self.derivation_paths: List[Tuple[int, ...]] = [harden_derivation_path(p) for p in derivation_paths]
        self.chain_id = chain_id
        self.insecure_derivation = insecure_derivation
        self.accounts: List[ManagedAccount] = []

    def get_accounts(self) -> List[str]:
        """
        Get the addresses of the managed accounts, in derivation path order.

        :return: The lower case ``0x`` addresses
        """
        return [a.address for a in self.accounts]

    def resolve_account(self, address: str) -> ManagedAccount:
        """
        Find the managed account for an address.

        :param address: The ``0x`` address, in any case
        :return: The managed account
        :raises AccountNotManagedError: if the address is not one of the managed accounts
        """
        needle = address.lower() if isinstance(address, str) else address
        for account in self.accounts:
            if account.address == needle:
                return account
        raise AccountNotManagedError(str(address))

    def sign_message(self, address: str, message: Union[str, bytes]) -> str:
        """
        Sign a message (Ethereum personal message signing).

        The device prefixes the message with ``\\x19Ethereum Signed Message:\\n`` and its length before signing.

        :param address: The address of the managed account to sign with
        :param message: The message to be signed. First encoded as bytes if not already.
        :return: The ``0x`` hex signature
        """
        raise NotImplementedError("The HardwareWalletClient base class "
                                  "does not implement this method")

    def sign_typed_data(self, address: str, data: Union[str, Mapping[str, Any]]) -> str:
        """
        Sign EIP-712 typed data.

        :param address: The address of the managed account to sign with
        :param data: The typed data document, as a mapping or a JSON string
        :return: The ``0x`` hex signature
        """
        raise NotImplementedError("The HardwareWalletClient base class "
                                  "does not implement this method")

    def sign_tx(self, tx: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Sign a legacy or EIP-1559 transaction.

        :param tx: The transaction fields as used by ``eth_sendTransaction``. ``from`` selects the account.
        :return: A dictionary with the signature components and the serialized signed transaction
        """
        raise NotImplementedError("The HardwareWalletClient base class "
                                  "does not implement this method")

    def close(self) -> None:
        """Close the device."""
        raise NotImplementedError("The HardwareWalletClient base class "
                                  "does not implement this method")

    def __enter__(self) -> "HardwareWalletClient":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()
