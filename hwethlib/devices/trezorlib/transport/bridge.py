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

import binascii
import logging
import struct
from typing import Any, List, NamedTuple, Optional, Tuple

import requests

from . import BridgeNotRunningError, FramingError, NoDeviceFoundError, TransportException

LOG = logging.getLogger(__name__)

TREZORD_HOST = "http://127.0.0.1:21325"
# trezord only answers to whitelisted origins
TREZORD_ORIGIN_HEADER = {"Origin": "http://localhost:5000"}

FRAME_HEADER = struct.Struct(">HL")


def encode_frame(code: int, payload: bytes) -> str:
    """Frame a message for the bridge: 2 byte type, 4 byte length, payload, hex encoded."""
    return (FRAME_HEADER.pack(code, len(payload)) + payload).hex()


def decode_frame(data: str) -> Tuple[int, bytes]:
    try:
        raw = binascii.unhexlify(data.strip())
    except (binascii.Error, ValueError) as e:
        raise FramingError("Invalid response: {}".format(e)) from e
    if len(raw) < FRAME_HEADER.size:
        raise FramingError("Invalid response length")
    code, length = FRAME_HEADER.unpack(raw[:FRAME_HEADER.size])
    payload = raw[FRAME_HEADER.size:]
    if len(payload) != length:
        raise FramingError("Invalid response length")
    return code, payload


class BridgeDevice(NamedTuple):
    path: str
    session: Optional[str] = None


class BridgeClient:
    """HTTP client for the Trezor Bridge daemon.

    Every endpoint is a POST. The client keeps no session state itself, the
    session token returned by :meth:`acquire` is passed to each call.
    """

    def __init__(self, url: str = TREZORD_HOST, session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> None:
        self.url = url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(TREZORD_ORIGIN_HEADER)
        self.timeout = timeout

    def _request(self, path: str, data: Optional[str] = None) -> requests.Response:
        url = self.url + path
        LOG.debug("bridge request {}".format(path))
        try:
            r = self.session.post(url, data=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportException("Failed to invoke Trezor Bridge: {}".format(e)) from e
        if r.status_code != 200:
            raise TransportException(
                "Trezor Bridge returned {} for {}: {}".format(r.status_code, path, r.text.strip())
            )
        return r

    def _json(self, path: str, data: Optional[str] = None) -> Any:
        r = self._request(path, data)
        try:
            return r.json()
        except ValueError as e:
            raise TransportException("Malformed response from Trezor Bridge for {}".format(path)) from e

    def version(self) -> str:
        try:
            info = self._json("/")
        except TransportException as e:
            raise BridgeNotRunningError("Trezor Bridge is not running") from e
        version = info.get("version") if isinstance(info, dict) else None
        if not version:
            raise BridgeNotRunningError("Trezor Bridge is not running")
        LOG.debug("Trezor Bridge version {}".format(version))
        return version

    def enumerate(self) -> List[BridgeDevice]:
        entries = self._json("/enumerate")
        if not isinstance(entries, list) or not all(
            isinstance(d, dict) and isinstance(d.get("path"), str) for d in entries
        ):
            raise TransportException("Malformed response from Trezor Bridge for /enumerate")
        devices = [BridgeDevice(d["path"], d.get("session")) for d in entries]
        if not devices:
            raise NoDeviceFoundError("No Trezor devices found")
        return devices

    def acquire(self, path: str, previous: Optional[str] = None) -> str:
        info = self._json("/acquire/{}/{}".format(path, previous or "null"), "")
        session = info.get("session") if isinstance(info, dict) else None
        if not session:
            raise TransportException("Failed to acquire Trezor device")
        LOG.debug("acquired session {} on {}".format(session, path))
        return session

    def release(self, session: str) -> None:
        self._request("/release/{}".format(session))
        LOG.debug("released session {}".format(session))

    def call(self, session: str, code: int, payload: bytes) -> Tuple[int, bytes]:
        LOG.debug("sending message type {} ({} bytes)".format(code, len(payload)))
        r = self._request("/call/{}".format(session), encode_frame(code, payload))
        resp = decode_frame(r.text)
        LOG.debug("received message type {} ({} bytes)".format(resp[0], len(resp[1])))
        return resp

    def post(self, session: str, code: int, payload: bytes) -> None:
        LOG.debug("posting message type {} ({} bytes)".format(code, len(payload)))
        self._request("/post/{}".format(session), encode_frame(code, payload))

    def read(self, session: str) -> Tuple[int, bytes]:
        r = self._request("/read/{}".format(session))
        resp = decode_frame(r.text)
        LOG.debug("received message type {} ({} bytes)".format(resp[0], len(resp[1])))
        return resp
