from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Endpoint(str, Enum):
    TRACK = "/track"
    IMPORT = "/import"
    ENGAGE = "/engage"


class ProfileOperation(str, Enum):
    SET = "$set"
    ADD = "$add"
    APPEND = "$append"
    DELETE = "$delete"


@dataclass(slots=True)
class Identity:
    distinct_id: Optional[str] = None
    name_tag: Optional[str] = None


@dataclass(slots=True)
class EventEnvelope:
    event: str
    properties: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "properties": self.properties,
        }


@dataclass(slots=True)
class ProfileEnvelope:
    operation: ProfileOperation
    token: str
    distinct_id: str
    payload: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            self.operation.value: self.payload,
            "$token": self.token,
            "$distinct_id": self.distinct_id,
        }
