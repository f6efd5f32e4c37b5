from __future__ import annotations

import os
from dataclasses import dataclass


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    token: str
    # Role allowed to press Accept/Deny on a submission.
    decider_role_id: int
    # Channel where new submissions are posted with their review buttons.
    submission_channel_id: int
    # Channel where accepted/denied records are posted.
    moderation_channel_id: int
    application_id: int = 0
    # 0 syncs slash commands globally instead of to a single guild.
    guild_id: int = 0
    decision_timeout_seconds: float = 60.0
    submission_ttl_hours: int = 72
    keepalive_enabled: bool = True
    keepalive_port: int = 3000
    log_level: str = "INFO"
    # Required to read the moderator's follow-up reply.
    message_content_intent: bool = True


def load_settings() -> Settings:
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise RuntimeError("DISCORD_TOKEN is required")

    decider_role_id = _get_int("ACCEPT_ROLE_ID", 0)
    submission_channel_id = _get_int("SUBMISSION_CHANNEL_ID", 0)
    moderation_channel_id = _get_int("MODERATION_CHANNEL_ID", 0)
    missing = [
        name
        for name, value in (
            ("ACCEPT_ROLE_ID", decider_role_id),
            ("SUBMISSION_CHANNEL_ID", submission_channel_id),
            ("MODERATION_CHANNEL_ID", moderation_channel_id),
        )
        if not value
    ]
    if missing:
        raise RuntimeError(f"Missing or invalid Discord IDs: {', '.join(missing)}")

    return Settings(
        token=token,
        decider_role_id=decider_role_id,
        submission_channel_id=submission_channel_id,
        moderation_channel_id=moderation_channel_id,
        application_id=_get_int("CLIENT_ID", 0),
        guild_id=_get_int("GUILD_ID", 0),
        decision_timeout_seconds=max(1.0, _get_float("DECISION_TIMEOUT_SECONDS", 60.0)),
        submission_ttl_hours=max(1, _get_int("SUBMISSION_TTL_HOURS", 72)),
        keepalive_enabled=_get_bool("KEEPALIVE_ENABLED", True),
        keepalive_port=_get_int("KEEPALIVE_PORT", 3000),
        log_level=(os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"),
        message_content_intent=_get_bool("MESSAGE_CONTENT_INTENT", True),
    )
