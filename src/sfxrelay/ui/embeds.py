from __future__ import annotations

import re
from typing import Optional

import discord

from ..constants import COLORS, MAX_EMBED_TITLE, MAX_FIELD_VALUE, UNKNOWN_NAME
from ..moderation.models import AuditRecord, Decider, Outcome, OutcomeKind, Submission

_SUBMITTER_RE = re.compile(r"New SFX Request from <@!?(\d+)>")
_NAME_RE = re.compile(r"Name:\**\s*(.+)")


def truncate_text(text: str, max_length: int = MAX_FIELD_VALUE) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "…"


def _mention(user_id: Optional[int]) -> str:
    return f"<@{user_id}>" if user_id else "an unknown user"


def submission_post_content(submitter_id: Optional[int], display_name: str) -> str:
    return f"New SFX Request from {_mention(submitter_id)}:\n**Name:** {display_name}"


def in_progress_content(submission: Submission, decider: Decider) -> str:
    base = submission_post_content(submission.submitter_id, submission.display_name)
    return f"{base}\n\n⏳ Decision in progress by {decider.name}."


def decided_content(outcome: Outcome) -> str:
    if outcome.kind is OutcomeKind.ACCEPTED:
        return "Accepted! The sound effect has been forwarded."
    return f"Denied by {outcome.decider.name}."


def parse_submission_post(content: str) -> tuple[Optional[int], Optional[str]]:
    """Read the submitter id and name back out of a rendered submission post."""
    submitter = _SUBMITTER_RE.search(content or "")
    name = _NAME_RE.search(content or "")
    return (
        int(submitter.group(1)) if submitter else None,
        name.group(1).strip() if name else None,
    )


def audit_content(record: AuditRecord) -> str:
    verb = "Accepted" if record.kind is OutcomeKind.ACCEPTED else "Denied"
    return f"{verb} SFX Request from {_mention(record.submitter_id)}"


def audit_embed(record: AuditRecord) -> discord.Embed:
    accepted = record.kind is OutcomeKind.ACCEPTED
    title = "SFX Accepted" if accepted else "SFX Denied"
    embed = discord.Embed(
        title=truncate_text(title, MAX_EMBED_TITLE),
        color=COLORS["accepted"] if accepted else COLORS["denied"],
    )
    embed.add_field(name="SFX Name", value=truncate_text(record.sfx_name or UNKNOWN_NAME), inline=True)
    file_value = f"[Download here]({record.asset_ref})" if record.asset_ref else UNKNOWN_NAME
    embed.add_field(name="File", value=file_value, inline=True)
    if not accepted:
        embed.add_field(name="Reason", value=truncate_text(record.reason or "No reason given"), inline=False)
    verb = "Accepted" if accepted else "Denied"
    embed.set_footer(text=f"{verb} by {record.decider.name}", icon_url=record.decider.avatar_url)
    return embed


def direct_message_text(outcome: Outcome) -> str:
    if outcome.kind is OutcomeKind.ACCEPTED:
        return "Your SFX request has been accepted! Thank you for your submission."
    return f"Your SFX request has been denied for the following reason: {outcome.payload}"
