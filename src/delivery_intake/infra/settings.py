"""Runtime settings loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Intake settings.

    Attributes:
        group_id: Only process messages from this group. None means all groups.
        default_agency_id: Agency assigned to orders created from the group.
        send_confirmations: Render group replies (confirmations, format errors).
        log_level: Root level for the JSON loggers.
    """

    group_id: str | None = None
    default_agency_id: str | None = None
    send_confirmations: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build Settings from environment variables.

    GROUP_ID, DEFAULT_AGENCY_ID, SEND_CONFIRMATIONS ("true" to enable),
    and LOG_LEVEL.
    """
    return Settings(
        group_id=os.environ.get("GROUP_ID") or None,
        default_agency_id=os.environ.get("DEFAULT_AGENCY_ID") or None,
        send_confirmations=_env_flag("SEND_CONFIRMATIONS"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
