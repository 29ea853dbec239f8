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

import logging
import warnings

from . import exceptions, messages, tools
from .protobuf import format_message
from .transport import TransportException

LOG = logging.getLogger(__name__)

VENDORS = ("bitcointrezor.com", "trezor.io")

PIN_FAILURES = (
    messages.FailureType.PinInvalid,
    messages.FailureType.PinCancelled,
    messages.FailureType.PinExpected,
)


class TrezorClient:
    """Trezor client, a connection to a Trezor device through Trezor Bridge.

    This class manages the bridge session, sends and receives protobuf
    messages and answers the interactions the device may ask for in the
    middle of any request:
    - button request (notify the user that their interaction is needed)
    - PIN request (entered on the device, acknowledged with a placeholder)
    - passphrase request (entered on the device)
    See `ui.BridgeUI` for details.

    The session is acquired by `open` and released by `close`; the client
    can also be used as a context manager. Nested opens share one session.
    """

    def __init__(self, bridge, device, ui=None, registry=messages.REGISTRY):
        LOG.info("creating client instance for device: {}".format(device.path))
        self.bridge = bridge
        self.device = device
        self.ui = ui
        self.registry = registry
        self.features = None
        self.session_id = None

        if ui is None:
            warnings.warn("UI class not supplied. This will probably crash soon.")

        self.session_counter = 0

    def open(self):
        if self.session_counter == 0:
            self.session_id = self.bridge.acquire(self.device.path, self.device.session)
        self.session_counter += 1

    def close(self):
        if self.session_counter == 0:
            return
        self.session_counter -= 1
        if self.session_counter > 0:
            return
        session_id = self.session_id
        try:
            self.call_raw(messages.EndSession())
        except exceptions.TrezorException as e:
            LOG.warning("EndSession failed: {}".format(e))
        finally:
            self.session_id = None
            self.bridge.release(session_id)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _session(self):
        if self.session_id is None:
            raise TransportException("No session acquired")
        return self.session_id

    def cancel(self):
        self._raw_write(messages.Cancel())

    def call_raw(self, msg):
        __tracebackhide__ = True  # for pytest # pylint: disable=W0612
        LOG.debug("sending message: {}".format(format_message(msg)))
        code, payload = self.registry.encode(msg)
        resp_code, resp_payload = self.bridge.call(self._session(), code, payload)
        resp = self.registry.decode(resp_code, resp_payload)
        LOG.debug("received message: {}".format(format_message(resp)))
        return resp

    def _raw_write(self, msg):
        __tracebackhide__ = True  # for pytest # pylint: disable=W0612
        LOG.debug("sending message: {}".format(format_message(msg)))
        code, payload = self.registry.encode(msg)
        self.bridge.post(self._session(), code, payload)

    def _raw_read(self):
        __tracebackhide__ = True  # for pytest # pylint: disable=W0612
        resp = self.registry.decode(*self.bridge.read(self._session()))
        LOG.debug("received message: {}".format(format_message(resp)))
        return resp

    def _callback_pin(self, msg):
        pin = self.ui.get_pin(msg.type)

        if not pin.isdigit():
            self.call_raw(messages.Cancel())
            raise ValueError("Non-numeric PIN provided")

        resp = self.call_raw(messages.PinMatrixAck(pin=pin))
        if isinstance(resp, messages.Failure) and resp.code in PIN_FAILURES:
            raise exceptions.PinException(resp.code, resp.message)
        else:
            return resp

    def _callback_passphrase(self, msg):
        # short-circuit old style entry
        if msg._on_device is True:
            return self.call_raw(messages.PassphraseAck())

        self.ui.passphrase_on_device()
        return self.call_raw(messages.PassphraseAck(on_device=True))

    def _callback_button(self, msg):
        __tracebackhide__ = True  # for pytest # pylint: disable=W0612
        # do this raw - send ButtonAck first, notify UI later
        self._raw_write(messages.ButtonAck())
        self.ui.button_request(msg.code)
        return self._raw_read()

    @tools.session
    def call(self, msg, expect=None):
        if self.ui is not None:
            self.ui.begin_request()
        resp = self.call_raw(msg)
        while True:
            if isinstance(resp, messages.PinMatrixRequest):
                resp = self._callback_pin(resp)
            elif isinstance(resp, messages.PassphraseRequest):
                resp = self._callback_passphrase(resp)
            elif isinstance(resp, messages.ButtonRequest):
                resp = self._callback_button(resp)
            elif isinstance(resp, messages.Failure):
                if resp.code == messages.FailureType.ActionCancelled:
                    raise exceptions.Cancelled(resp.code, resp.message)
                raise exceptions.TrezorFailure(resp.code, resp.message)
            else:
                if expect is not None:
                    tools.check_expected(resp, expect)
                return resp

    @tools.session
    def init_device(self):
        self.features = self.call(messages.Initialize(), expect=messages.Features)
        if self.features.vendor not in VENDORS:
            raise exceptions.TrezorException("Unsupported device")
        self.version = (
            self.features.major_version,
            self.features.minor_version,
            self.features.patch_version,
        )
        LOG.info("initialized {} firmware {}".format(self.features.model or "device", ".".join(str(v) for v in self.version)))
        return self.features
