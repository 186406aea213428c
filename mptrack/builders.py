from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import InvalidArgument, ValueCoercionWarning
from .models import Endpoint, EventEnvelope, Identity, ProfileEnvelope, ProfileOperation

logger = logging.getLogger(__name__)

LIBRARY_TAG = "python"

Number = Union[int, float]


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_number(value: Any) -> Optional[Number]:
    """Return ``value`` as a finite number, or ``None`` when it is not one.

    Numeric strings are converted (``"3"`` -> ``3``, ``"2.5"`` -> ``2.5``);
    booleans, ``NaN`` and infinities never count as numbers.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _as_utc(moment: datetime) -> datetime:
    # Naive datetimes are read as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def epoch_seconds(moment: Union[datetime, Number]) -> Number:
    if isinstance(moment, datetime):
        return math.floor(_as_utc(moment).timestamp())
    if is_number(moment):
        return moment
    raise InvalidArgument(
        f"The time of an imported event must be a datetime or epoch seconds, got {moment!r}"
    )


def iso_timestamp(moment: datetime) -> str:
    moment = _as_utc(moment)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return iso_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_event(
    token: str,
    identity: Identity,
    event: str,
    properties: Optional[Mapping[str, Any]] = None,
) -> Tuple[Endpoint, EventEnvelope]:
    """Build a tracking envelope and pick the endpoint it belongs to.

    A numeric ``time`` property marks the event as historical, which routes
    it to the import endpoint; everything else goes to ``/track``.
    """
    props: Dict[str, Any] = dict(properties or {})
    time = props.get("time")
    endpoint = Endpoint.IMPORT if is_number(time) and math.isfinite(time) else Endpoint.TRACK

    props["token"] = token
    props["mp_lib"] = LIBRARY_TAG
    if identity.distinct_id is not None:
        props["distinct_id"] = identity.distinct_id
    if identity.name_tag is not None:
        props["mp_name_tag"] = identity.name_tag

    return endpoint, EventEnvelope(event=event, properties=props)


def build_import(
    token: str,
    identity: Identity,
    event: str,
    time: Union[datetime, Number, None],
    properties: Optional[Mapping[str, Any]] = None,
) -> Tuple[Endpoint, EventEnvelope]:
    if time is None:
        raise InvalidArgument("The import method requires you to specify the time of the event")
    props: Dict[str, Any] = dict(properties or {})
    props["time"] = epoch_seconds(time)
    return build_event(token, identity, event, props)


def _profile(token: str, distinct_id: str, operation: ProfileOperation, payload: Any) -> ProfileEnvelope:
    return ProfileEnvelope(operation=operation, token=token, distinct_id=distinct_id, payload=payload)


def build_set(token: str, distinct_id: str, properties: Mapping[str, Any]) -> ProfileEnvelope:
    return _profile(token, distinct_id, ProfileOperation.SET, dict(properties))


def build_add(token: str, distinct_id: str, prop: str, by: Any) -> ProfileEnvelope:
    return _profile(token, distinct_id, ProfileOperation.ADD, {prop: by})


def build_increment(
    token: str,
    distinct_id: str,
    amounts: Mapping[str, Any],
    *,
    debug: bool = False,
) -> ProfileEnvelope:
    valid: Dict[str, Number] = {}
    for prop, value in amounts.items():
        number = parse_number(value)
        if number is None:
            if debug:
                logger.warning(
                    "Invalid increment value passed to people.increment - must be a number. Passed %s:%r",
                    prop,
                    value,
                )
            continue
        valid[prop] = number
    return _profile(token, distinct_id, ProfileOperation.ADD, valid)


def build_charge(
    token: str,
    distinct_id: str,
    amount: Any,
    properties: Optional[Mapping[str, Any]] = None,
) -> ProfileEnvelope:
    number = parse_number(amount)
    if number is None:
        raise ValueCoercionWarning(
            f"Invalid value passed to people.track_charge - must be a number, got {amount!r}"
        )

    transaction: Dict[str, Any] = dict(properties or {})
    transaction["$amount"] = number
    charged_at = transaction.get("$time")
    if isinstance(charged_at, datetime):
        transaction["$time"] = iso_timestamp(charged_at)

    return _profile(token, distinct_id, ProfileOperation.APPEND, {"$transactions": transaction})


def build_clear_charges(token: str, distinct_id: str) -> ProfileEnvelope:
    return _profile(token, distinct_id, ProfileOperation.SET, {"$transactions": []})


def build_delete_user(token: str, distinct_id: str) -> ProfileEnvelope:
    return _profile(token, distinct_id, ProfileOperation.DELETE, distinct_id)
