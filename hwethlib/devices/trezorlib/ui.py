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
import sys

from .messages import ButtonRequestType, PinMatrixRequestType

LOG = logging.getLogger(__name__)

# PIN entry happens on the device, the host only acknowledges the request
PIN_PLACEHOLDER = "000000"

PIN_PROMPTS = {
    PinMatrixRequestType.Current: "Please enter your PIN on your Trezor device",
    PinMatrixRequestType.NewFirst: "Please enter a new PIN on your Trezor device",
    PinMatrixRequestType.NewSecond: "Please confirm the new PIN on your Trezor device",
}


def echo(msg):
    print(msg, file=sys.stderr)


def button_request_name(code):
    try:
        return ButtonRequestType.Name(code)
    except ValueError:
        return str(code)


class BridgeUI:
    """Narrates device prompts to the operator.

    Nothing is ever typed on the host: PIN and passphrase are entered on the
    device itself, so the UI only tells the operator what the device expects.
    """

    def __init__(self, always_prompt=False):
        self.prompt_shown = False
        self.always_prompt = always_prompt

    def begin_request(self):
        # one confirmation prompt per request sent to the device
        self.prompt_shown = False

    def button_request(self, code):
        LOG.debug("button request {}".format(button_request_name(code)))
        if not self.prompt_shown:
            echo("Please confirm action on your Trezor device")
        if not self.always_prompt:
            self.prompt_shown = True

    def get_pin(self, code=None):
        LOG.debug("PIN requested")
        echo(PIN_PROMPTS.get(code, PIN_PROMPTS[PinMatrixRequestType.Current]))
        return PIN_PLACEHOLDER

    def passphrase_on_device(self):
        LOG.debug("passphrase requested")
        echo("Please enter your passphrase on your Trezor device")
