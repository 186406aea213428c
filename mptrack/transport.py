from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from .builders import json_default
from .config import ClientConfig, load_settings
from .errors import ConfigurationError, InvalidArgument, NetworkError, RemoteRejection
from .metrics import track_request, track_response
from .models import Endpoint, EventEnvelope, ProfileEnvelope

logger = logging.getLogger(__name__)

SUCCESS_BODY = "1"

Envelope = Union[EventEnvelope, ProfileEnvelope]


def encode_payload(data: Dict[str, Any]) -> str:
    try:
        raw = json.dumps(
            data, separators=(",", ":"), ensure_ascii=False, allow_nan=False, default=json_default
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Payload cannot be encoded as JSON: {exc}") from exc
    return base64.b64encode(raw).decode("ascii")


def build_query(endpoint: Endpoint, envelope: Envelope, config: ClientConfig) -> List[Tuple[str, str]]:
    query = [
        ("data", encode_payload(envelope.to_dict())),
        ("ip", "0"),
    ]
    if endpoint == Endpoint.IMPORT:
        if not config.key:
            raise ConfigurationError(
                "The Mixpanel Client needs a Mixpanel api key when importing old events: "
                "`init(token, {'key': ...})`"
            )
        query.append(("api_key", config.key))
    if config.test:
        query.append(("test", "1"))
    return query


class Transport:
    """Sends one envelope per call to the Mixpanel HTTP API.

    ``transport`` is handed to every ``httpx.AsyncClient`` the sender opens,
    which lets callers swap the network for an ``httpx.MockTransport``.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = load_settings()
        self._transport = transport

    async def send(self, endpoint: Endpoint, envelope: Envelope, config: ClientConfig) -> None:
        query = build_query(endpoint, envelope, config)

        track_request(endpoint.value)
        started = time.monotonic()
        timeout = httpx.Timeout(self.settings.timeout)
        async with httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            try:
                async with client.stream("GET", endpoint.value, params=query) as response:
                    chunks = [chunk async for chunk in response.aiter_text()]
            except httpx.HTTPError as exc:
                track_response(endpoint.value, "network_error", time.monotonic() - started)
                if config.debug:
                    logger.error("Got Error: %s", exc)
                raise NetworkError(str(exc)) from exc

        body = "".join(chunks)
        duration = time.monotonic() - started
        if body != SUCCESS_BODY:
            track_response(endpoint.value, "rejected", duration)
            raise RemoteRejection(body)
        track_response(endpoint.value, "ok", duration)
