"""Reading API responses over the websocket."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import websocket

from trportfolio.api.headers import Headers
from trportfolio.api.message import parse_message
from trportfolio.api.token import Token
from trportfolio.constants import WEBSOCKET_BASE_HOST
from trportfolio.writer import NilWriter, ResponseWriter

logger = logging.getLogger(__name__)

_CONNECT_MESSAGE = 'connect 31 {"locale": "de"}'
_TRANSPORT_ERRORS = (OSError, websocket.WebSocketException)


class ErrorStateReceived(Exception):
    """The server answered a subscription with an error state."""


class _AuthService(Protocol):
    def login(self) -> None: ...

    def session_token(self) -> Token: ...


class _Connection(Protocol):
    def send(self, payload: str) -> Any: ...

    def recv(self) -> str | bytes: ...

    def close(self) -> Any: ...


def _default_dial(url: str, headers: dict[str, str]) -> _Connection:
    return websocket.create_connection(
        url, header=[f"{key}: {value}" for key, value in headers.items()]
    )


class WebsocketReader:
    """Subscribes to data types and returns the first complete answer."""

    def __init__(
        self,
        auth_service: _AuthService,
        writer: ResponseWriter | None = None,
        connect: Callable[[str, dict[str, str]], _Connection] | None = None,
        url: str | None = None,
    ) -> None:
        self._auth = auth_service
        self._writer: ResponseWriter = writer if writer is not None else NilWriter()
        self._dial = connect if connect is not None else _default_dial
        self._url = url if url is not None else f"wss://{WEBSOCKET_BASE_HOST}/"
        self._conn: _Connection | None = None
        self._sub_id = 0
        self.connect()

    def __enter__(self) -> WebsocketReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._conn is not None:
            self.close()

    def connect(self) -> None:
        """Open the connection and perform the handshake."""
        try:
            conn = self._dial(self._url, Headers().as_dict())
        except _TRANSPORT_ERRORS as error:
            raise ConnectionError(f"could not connect to websocket: {error}") from error
        self._conn = conn

        try:
            conn.send(_CONNECT_MESSAGE)
        except _TRANSPORT_ERRORS as error:
            raise ConnectionError(f"could not send connect msg: {error}") from error
        try:
            reply = conn.recv()
        except _TRANSPORT_ERRORS as error:
            raise ConnectionError(f"could not read connect msg: {error}") from error

        logger.debug("received msg: %r", reply)

    def close(self) -> None:
        """Close the connection."""
        if self._conn is None:
            raise RuntimeError("cannot close websocket: connection not established")
        conn, self._conn = self._conn, None
        try:
            conn.close()
        except _TRANSPORT_ERRORS as error:
            raise ConnectionError(f"could not close websocket connection: {error}") from error

    def read(self, data_type: str, request: Mapping[str, Any] | None = None) -> bytes:
        """Subscribe to *data_type* and return the payload of the answer."""
        self._sub_id += 1
        payload = self._subscription(data_type, request)
        if self._conn is None:
            raise RuntimeError("cannot read: connection not established")
        conn = self._conn

        try:
            conn.send(payload)
        except _TRANSPORT_ERRORS as error:
            raise ConnectionError(f"could not send message: {error}") from error
        logger.debug("sent message: %s", payload)

        while True:
            try:
                raw = conn.recv()
            except _TRANSPORT_ERRORS as error:
                raise ConnectionError(f"could not read message: {error}") from error
            logger.debug("received msg: %r", raw)

            try:
                message = parse_message(raw)
            except ValueError as error:
                raise ValueError(f"could not create message struct: {error}") from error

            if message.has_continue_state():
                continue
            if message.has_error_state():
                if message.has_auth_error():
                    self._auth.login()
                    self._reconnect()
                    return self.read(data_type, request)
                text = raw if isinstance(raw, str) else raw.decode("utf-8", errors="replace")
                raise ErrorStateReceived(f"error state received: {text}")

            self._writer.write(data_type, message.data)
            return message.data

    def _reconnect(self) -> None:
        try:
            self.close()
        except (RuntimeError, ConnectionError):
            pass
        self.connect()

    def _subscription(self, data_type: str, request: Mapping[str, Any] | None) -> str:
        data = dict(request) if request else {}
        data["type"] = data_type
        data["token"] = self._auth.session_token().value
        try:
            body = json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
        except (TypeError, ValueError) as error:
            raise ValueError(f"could not marshal data into json: {error}") from error
        return f"sub {self._sub_id} {body}"