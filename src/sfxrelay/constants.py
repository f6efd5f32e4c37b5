from __future__ import annotations

from typing import Final

# Upload validation
ALLOWED_CONTENT_TYPES: Final[frozenset[str]] = frozenset({"audio/ogg", "audio/mp3", "audio/mpeg"})
MAX_UPLOAD_BYTES: Final[int] = 4 * 1024 * 1024

# Discord limits
MAX_EMBED_TITLE: Final[int] = 256
MAX_FIELD_VALUE: Final[int] = 1024
MAX_DISPLAY_NAME: Final[int] = 100

# Stable custom_id namespace for review buttons
REVIEW_CUSTOM_ID_PREFIX: Final[str] = "sfx"

# How many decided submission ids are remembered after their outcome is recorded
DECIDED_MEMORY_SIZE: Final[int] = 1024

UNKNOWN_NAME: Final[str] = "Unknown"

COLORS = {
    "accepted": 0x00FF00,
    "denied": 0xFF0000,
}

ERROR_MESSAGES = {
    "invalid_file": "Invalid file type or file size exceeds 4MB. Please upload a .ogg or .mp3 file under 4MB.",
    "invalid_name": "Please provide a name for the sound effect.",
    "target_channel_missing": "Failed to find the target channel. Please check the configuration.",
    "moderation_channel_missing": "Moderation channel not found.",
    "missing_permissions": "You do not have permission to use this button.",
    "already_decided": "This SFX request has already been decided.",
    "decision_in_progress": "Another moderator is already deciding this SFX request.",
    "input_pending": "You already have an open prompt in this channel. Please answer it first.",
    "no_name": "No name was provided. Please try again.",
    "no_reason": "No reason was provided. Please try again.",
    "notification_failed": "Could not send a direct message to the submitter.",
    "generic": "An error occurred while processing your request. Please try again later.",
}

SUCCESS_MESSAGES = {
    "submitted": "Sound effect uploaded successfully! Please wait for moderation.",
    "accepted": "SFX request accepted. The user has been informed.",
    "denied": "SFX request denied. The user has been informed.",
}

PROMPTS = {
    "accept": "Please provide the name of the sound effect:",
    "deny": "Please provide a reason for denying this SFX:",
}
