"""
Relay Configuration

Settings are read from the environment when the server starts.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .room_state import MAX_CODE_ATTEMPTS

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class RelayConfig:
    """
    Runtime settings of the relay.

    Attributes:
        host: Address the WebSocket server binds to
        port: Port the WebSocket server listens on
        log_level: Name of the root logging level
        strict_membership: Reject send_message/leave_room from non-members
        report_missing_rooms: Answer get_room_users on unknown codes
            with room_not_found instead of staying silent
        max_code_attempts: Room code regenerations before a create fails
    """

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    strict_membership: bool = False
    report_missing_rooms: bool = False
    max_code_attempts: int = MAX_CODE_ATTEMPTS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Build a config from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Raises:
            ValueError: If a numeric setting is not an integer
        """
        if env is None:
            env = os.environ
        return cls(
            host=env.get("RELAY_HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            strict_membership=_env_flag(env, "STRICT_MEMBERSHIP", False),
            report_missing_rooms=_env_flag(env, "REPORT_MISSING_ROOMS", False),
            max_code_attempts=int(
                env.get("ROOM_CODE_MAX_ATTEMPTS", str(MAX_CODE_ATTEMPTS))
            ),
        )
