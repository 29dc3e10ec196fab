from __future__ import annotations
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

CHANNEL_HELP = "Channel ID or channel name (with or without #)"


class SlackArgs(BaseModel):
    # mirrors "additionalProperties": false in the published schema
    model_config = ConfigDict(extra="forbid")


class ChannelArgs(SlackArgs):
    channel: str = Field(min_length=1, description=CHANNEL_HELP)


class MessageRefArgs(ChannelArgs):
    timestamp: str = Field(min_length=1, description="Timestamp (ts) of the message")


def ok(**fields: Any) -> Dict[str, Any]:
    return {"success": True, **fields}


def permalink(channel_id: str, ts: Optional[str]) -> Optional[str]:
    if not ts:
        return None
    return f"https://slack.com/archives/{channel_id}/p{ts.replace('.', '')}"


def next_cursor(response: Dict[str, Any]) -> Optional[str]:
    return (response.get("response_metadata") or {}).get("next_cursor") or None


def channel_summary(ch: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": ch.get("id"),
        "name": ch.get("name"),
        "is_private": ch.get("is_private", False),
        "is_archived": ch.get("is_archived", False),
        "is_member": ch.get("is_member", False),
        "num_members": ch.get("num_members"),
        "topic": (ch.get("topic") or {}).get("value") or None,
        "purpose": (ch.get("purpose") or {}).get("value") or None,
        "created": ch.get("created"),
    }


def user_summary(u: Dict[str, Any]) -> Dict[str, Any]:
    profile = u.get("profile") or {}
    return {
        "id": u.get("id"),
        "name": u.get("name"),
        "real_name": u.get("real_name") or profile.get("real_name"),
        "display_name": profile.get("display_name") or None,
        "email": profile.get("email"),
        "title": profile.get("title") or None,
        "status_text": profile.get("status_text") or None,
        "status_emoji": profile.get("status_emoji") or None,
        "tz": u.get("tz"),
        "is_bot": u.get("is_bot", False),
        "is_admin": u.get("is_admin", False),
        "deleted": u.get("deleted", False),
    }


def message_summary(m: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "ts": m.get("ts"),
        "user": m.get("user") or m.get("bot_id"),
        "text": m.get("text", ""),
        "thread_ts": m.get("thread_ts"),
        "reply_count": m.get("reply_count", 0),
        "reactions": [
            {"name": r.get("name"), "count": r.get("count", 0)} for r in (m.get("reactions") or [])
        ],
    }
