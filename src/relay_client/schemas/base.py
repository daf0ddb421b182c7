"""
Base Schema Classes

Requests serialize to the relay's ``{"type", "data"}`` envelope with
camelCase field names; responses are built from the ``data`` of an
envelope received from the relay.
"""

import json
from typing import Any, Dict, TypeVar

T = TypeVar("T", bound="BaseResponse")


class BaseRequest:
    """Base class for the inbound events a client sends to the relay."""

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self._message_type, "data": self._data()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def _data(self) -> Dict[str, Any]:
        """Wire payload of the request, keyed by camelCase field names."""
        raise NotImplementedError("Subclasses must define _data")

    @property
    def _message_type(self) -> str:
        raise NotImplementedError("Subclasses must define _message_type")


class BaseResponse:
    """Base class for the outbound events a client receives from the relay."""

    @classmethod
    def from_dict(cls: type[T], envelope: Dict[str, Any]) -> T:
        """
        Create an instance from a full relay envelope.

        Args:
            envelope: Decoded frame, {"type": ..., "data": {...}}

        Returns:
            Instance built from the envelope's data
        """
        return cls._from_data(envelope.get("data") or {})

    @classmethod
    def _from_data(cls: type[T], data: Dict[str, Any]) -> T:
        return cls(**data)
