# This file is part of the Trezor project.
#
# Copyright (C) 2012-2018 SatoshiLabs and contributors
#
# This library is free software: you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License version 3
# as published by the Free Software Foundation.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the License along with this library.
# If not, see <https://www.gnu.org/licenses/lgpl-3.0.html>.


class TrezorException(Exception):
    pass


class SchemaError(TrezorException):
    """A message, enum or wire code is not known to the schema registry."""


class TrezorFailure(TrezorException):
    """The device answered with a Failure message."""

    def __init__(self, code, message):
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self):
        return "Trezor failure: {} {}".format(self.code, self.message)


class PinException(TrezorFailure):
    pass


class Cancelled(TrezorFailure):
    """The user declined the action on the device."""


class UnexpectedMessageError(TrezorException):
    """The device sent a message that is not valid at this point of the exchange."""

    def __init__(self, message, expected=None, received=None):
        super().__init__(message)
        self.expected = expected
        self.received = received


class DataPathError(TrezorException):
    """The device asked for a typed data member that does not exist."""

    def __init__(self, path, reason):
        super().__init__("Invalid member path {}: {}".format(list(path), reason))
        self.path = list(path)
