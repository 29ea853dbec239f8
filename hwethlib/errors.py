"""
Errors and Error Codes
**********************

hwethlib has several possible Exceptions with corresponding error codes.

:class:`~hwethlib.hwwclient.HardwareWalletClient` functions and :mod:`~hwethlib.commands` functions will generally raise an exception that is a subclass of :class:`HWWError`.
The command line tool will convert these exceptions into a dictionary containing the error message and error code.
These look like ``{"error": "<msg>", "code": <code>}``.
"""

from typing import Any, Dict, Iterator, Optional
from contextlib import contextmanager

# Error codes
MISSING_ARGUMENTS = -2 #: Arguments are missing
DEVICE_CONN_ERROR = -3 #: Error connecting to the device
BAD_ARGUMENT = -7 #: Bad, malformed, or conflicting argument was provided
UNKNOWN_ERROR = -13 #: An unknown error occurred
ACTION_CANCELED = -14 #: Action was canceled by the user
HELP_TEXT = -17 #: Help text was requested by the user
PROTOCOL_ERROR = -19 #: The device sent a message that does not fit the current exchange
ACCOUNT_NOT_MANAGED = -20 #: The address is not one of the device's managed accounts
NETWORK_UNAVAILABLE = -21 #: The network definition for the chain could not be obtained

# Exceptions
class HWWError(Exception):
    """
    Generic exception type produced by hwethlib
    Subclassed by specific Errors to have Exceptions that have specific error codes.

    Contains a message and error code.
    """
    def __init__(self, msg: str, code: int) -> None:
        """
        Create an exception with the message and error code

        :param msg: The error message
        :param code: The error code
        """
        Exception.__init__(self)
        self.code = code
        self.msg = msg

    def get_code(self) -> int:
        """
        Get the error code for this Error

        :return: The error code
        """
        return self.code

    def get_msg(self) -> str:
        """
        Get the error message for this Error

        :return: The error message
        """
        return self.msg

    def __str__(self) -> str:
        return self.msg

class BadArgumentError(HWWError):
    """
    :class:`HWWError` for :data:`BAD_ARGUMENT`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        HWWError.__init__(self, msg, BAD_ARGUMENT)

class DeviceFailureError(HWWError):
    """
    :class:`HWWError` for :data:`UNKNOWN_ERROR`

    Raised when the device answered with a ``Failure`` message.
    The device's own failure code and message are kept alongside.
    """
    def __init__(self, msg: str, device_code: Optional[int] = None, device_message: Optional[str] = None):
        """
        :param msg: The error message
        :param device_code: The ``FailureType`` reported by the device
        :param device_message: The message reported by the device
        """
        HWWError.__init__(self, msg, UNKNOWN_ERROR)
        self.device_code = device_code
        self.device_message = device_message

class ActionCanceledError(HWWError):
    """
    :class:`HWWError` for :data:`ACTION_CANCELED`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        HWWError.__init__(self, msg, ACTION_CANCELED)

class DeviceConnectionError(HWWError):
    """
    :class:`HWWError` for :data:`DEVICE_CONN_ERROR`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        HWWError.__init__(self, msg, DEVICE_CONN_ERROR)

class ProtocolError(HWWError):
    """
    :class:`HWWError` for :data:`PROTOCOL_ERROR`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        HWWError.__init__(self, msg, PROTOCOL_ERROR)

class AccountNotManagedError(HWWError):
    """
    :class:`HWWError` for :data:`ACCOUNT_NOT_MANAGED`

    Unlike the other errors, this one is recoverable: callers are expected to
    catch it and hand the request to another signer.
    """
    def __init__(self, address: str):
        """
        :param address: The address that was looked up
        """
        HWWError.__init__(self, 'Account {} is not managed by the device'.format(address), ACCOUNT_NOT_MANAGED)
        self.address = address

class NetworkDefinitionError(HWWError):
    """
    :class:`HWWError` for :data:`NETWORK_UNAVAILABLE`
    """
    def __init__(self, msg: str):
        """
        :param msg: The error message
        """
        HWWError.__init__(self, msg, NETWORK_UNAVAILABLE)

@contextmanager
def handle_errors(
    msg: Optional[str] = None,
    result: Optional[Dict[str, Any]] = None,
    code: int = UNKNOWN_ERROR,
    debug: bool = False,
) -> Iterator[None]:
    """
    Context manager to catch all Exceptions and HWWErrors to return them as dictionaries containing the error message and code.

    :param msg: Error message prefix. Attached to the beginning of each error message
    :param result: The dictionary to put the resulting error in
    :param code: The default error code to use for Exceptions
    :param debug: Whether to also print out the traceback for debugging purposes
    """
    if result is None:
        result = {}

    if msg is None:
        msg = ""
    else:
        msg = msg + " "

    try:
        yield

    except HWWError as e:
        result['error'] = msg + e.get_msg()
        result['code'] = e.get_code()
    except Exception as e:
        result['error'] = msg + str(e)
        result['code'] = code
        if debug:
            import traceback
            traceback.print_exc()
