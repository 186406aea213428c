from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

import httpx

from .builders import (
    Number,
    build_add,
    build_charge,
    build_clear_charges,
    build_delete_user,
    build_event,
    build_import,
    build_increment,
    build_set,
)
from .config import ClientConfig
from .errors import InvalidArgument, NetworkError, RemoteRejection, ValueCoercionWarning
from .models import Endpoint, EventEnvelope, Identity, ProfileEnvelope
from .transport import Envelope, Transport

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[Exception]], None]


class Client:
    """Mixpanel client bound to one project token.

    Network methods are coroutines that send exactly one request. Awaiting
    them raises :class:`NetworkError` or :class:`RemoteRejection` on failure,
    unless a ``callback`` is passed: it then receives ``None`` or the error,
    exactly once, and nothing is raised.

    Caller bugs always raise, callback or not: :class:`InvalidArgument` for
    properties with no JSON form (or a bad import time) and
    :class:`ConfigurationError` for an import without an API key.
    """

    def __init__(
        self,
        token: str,
        config: Optional[Mapping[str, Any]] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not token:
            raise InvalidArgument("The Mixpanel Client needs a Mixpanel token: `init(token)`")
        self._token = token
        self.config = ClientConfig()
        self.identity = Identity()
        self.transport = Transport(transport)
        self.people = People(self)
        if config:
            self.set_config(config)

    @property
    def token(self) -> str:
        return self._token

    def set_config(self, partial: Optional[Mapping[str, Any]] = None, **options: Any) -> None:
        if partial:
            self.config.update(partial)
        if options:
            self.config.update(options)

    def identify(self, distinct_id: str) -> None:
        self.identity.distinct_id = distinct_id

    def name_tag(self, name: str) -> None:
        self.identity.name_tag = name

    async def track(
        self,
        event: str,
        properties: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> None:
        endpoint, envelope = build_event(self._token, self.identity, event, properties)
        await self._send_event(endpoint, envelope, callback)

    async def import_event(
        self,
        event: str,
        time: Union[datetime, Number, None],
        properties: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> None:
        endpoint, envelope = build_import(self._token, self.identity, event, time, properties)
        await self._send_event(endpoint, envelope, callback)

    async def _send_event(
        self, endpoint: Endpoint, envelope: EventEnvelope, callback: Optional[Callback]
    ) -> None:
        if self.config.debug:
            logger.info("Sending the following event to Mixpanel: %s", envelope.to_dict())
        await self.dispatch(endpoint, envelope, callback)

    async def dispatch(
        self, endpoint: Endpoint, envelope: Envelope, callback: Optional[Callback] = None
    ) -> None:
        config = self.config.snapshot()
        try:
            await self.transport.send(endpoint, envelope, config)
        except (NetworkError, RemoteRejection) as exc:
            if callback is None:
                raise
            callback(exc)
            return
        if callback is not None:
            callback(None)


class People:
    """Profile updates sent to the engage endpoint."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def set(
        self, distinct_id: str, prop: str, value: Any, callback: Optional[Callback] = None
    ) -> None:
        await self.set_many(distinct_id, {prop: value}, callback)

    async def set_many(
        self,
        distinct_id: str,
        properties: Mapping[str, Any],
        callback: Optional[Callback] = None,
    ) -> None:
        envelope = build_set(self._client.token, distinct_id, properties)
        await self._send(envelope, callback)

    async def increment(
        self,
        distinct_id: str,
        prop: str,
        by: Number = 1,
        callback: Optional[Callback] = None,
    ) -> None:
        """Add ``by`` to a numeric profile property; pass a negative to decrement."""
        if not by:
            by = 1
        await self._send(build_add(self._client.token, distinct_id, prop, by), callback)

    async def increment_many(
        self,
        distinct_id: str,
        amounts: Mapping[str, Any],
        callback: Optional[Callback] = None,
    ) -> None:
        """Add to several properties at once.

        Entries whose value is not a number are dropped before sending.
        """
        envelope = build_increment(
            self._client.token, distinct_id, amounts, debug=self._client.config.debug
        )
        await self._send(envelope, callback)

    async def track_charge(
        self,
        distinct_id: str,
        amount: Any,
        properties: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> Optional[ValueCoercionWarning]:
        """Record a charge of ``amount`` in the user's ``$transactions`` list.

        A ``$time`` datetime in ``properties`` is sent as ISO-8601 text. When
        ``amount`` is not a number nothing is sent: the error is logged and
        handed to ``callback`` (or returned when there is none).
        """
        try:
            envelope = build_charge(self._client.token, distinct_id, amount, properties)
        except ValueCoercionWarning as exc:
            logger.error("%s", exc)
            if callback is None:
                return exc
            callback(exc)
            return None
        await self._send(envelope, callback)
        return None

    async def clear_charges(self, distinct_id: str, callback: Optional[Callback] = None) -> None:
        if self._client.config.debug:
            logger.info("Clearing this user's charges: %s", distinct_id)
        await self._client.dispatch(
            Endpoint.ENGAGE, build_clear_charges(self._client.token, distinct_id), callback
        )

    async def delete_user(self, distinct_id: str, callback: Optional[Callback] = None) -> None:
        if self._client.config.debug:
            logger.info("Deleting the user from engage: %s", distinct_id)
        await self._client.dispatch(
            Endpoint.ENGAGE, build_delete_user(self._client.token, distinct_id), callback
        )

    async def _send(self, envelope: ProfileEnvelope, callback: Optional[Callback]) -> None:
        if self._client.config.debug:
            logger.info("Sending the following data to Mixpanel (Engage): %s", envelope.to_dict())
        await self._client.dispatch(Endpoint.ENGAGE, envelope, callback)


def init(
    token: str,
    config: Optional[Mapping[str, Any]] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Client:
    return Client(token, config, transport=transport)
