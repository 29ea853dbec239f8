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

import functools

from .exceptions import UnexpectedMessageError
from .protobuf import format_message


class expect:
    # Decorator checks if the method
    # returned one of expected protobuf messages
    # or raises an exception
    def __init__(self, expected, field=None):
        self.expected = expected
        self.field = field

    def __call__(self, f):
        @functools.wraps(f)
        def wrapped_f(*args, **kwargs):
            __tracebackhide__ = True  # for pytest # pylint: disable=W0612
            ret = f(*args, **kwargs)
            check_expected(ret, self.expected)
            if self.field is None:
                return ret
            if not ret.HasField(self.field):
                raise UnexpectedMessageError(
                    "Field {} not set in {}".format(self.field, format_message(ret)),
                    expected=self.expected,
                    received=ret,
                )
            return getattr(ret, self.field)

        return wrapped_f


def check_expected(msg, expected):
    if not isinstance(msg, expected):
        raise UnexpectedMessageError(
            "Unexpected response message type {}, expected {}".format(
                format_message(msg), expected.DESCRIPTOR.name
            ),
            expected=expected,
            received=msg,
        )


def session(f):
    # Decorator wraps a TrezorClient method
    # with session activation / deactivation
    @functools.wraps(f)
    def wrapped_f(client, *args, **kwargs):
        __tracebackhide__ = True  # for pytest # pylint: disable=W0612
        client.open()
        try:
            return f(client, *args, **kwargs)
        finally:
            client.close()

    return wrapped_f
