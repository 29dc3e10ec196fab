from __future__ import annotations
import asyncio
import json
import logging
import re
import threading
import time
from typing import Any, Dict, Iterator, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from core.config import Settings
from core.errors import (
    SlackApiError,
    SlackConfigurationError,
    SlackConnectionError,
    SlackError,
    SlackHTTPError,
)

logger = logging.getLogger(__name__)

CHANNEL_ID_RE = re.compile(r"^[CGD][A-Z0-9]{2,}$")
USER_ID_RE = re.compile(r"^[UW][A-Z0-9]{2,}$")

RETRY_STATUSES = (429, 500, 502, 503, 504)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def form_encode(params: Dict[str, Any]) -> Dict[str, str]:
    return {k: _form_value(v) for k, v in params.items() if v is not None}


class SlackAPI:
    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://slack.com/api",
        timeout: float = 30.0,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token or token.strip() == "":
            raise SlackConfigurationError("Slack token is empty.")
        self.token = token.strip()
        self.base = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "User-Agent": "slack-mcp-gateway",
        }
        self.session = session or self._build_session(max_retries)

    @staticmethod
    def _build_session(max_retries: int) -> requests.Session:
        retry = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset(["GET", "POST"]),
            respect_retry_after_header=True,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def call(self, method: str, **params: Any) -> Dict[str, Any]:
        """POST a Web API method and return its JSON body.

        Raises ``SlackHTTPError`` for HTTP >= 400, ``SlackApiError`` when the
        body says ``ok: false`` and ``SlackConnectionError`` when Slack cannot
        be reached at all.
        """
        url = f"{self.base}/{method}"
        started = time.monotonic()
        try:
            r = self.session.post(url, headers=self.headers, data=form_encode(params), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Slack API: %s unreachable (%s)", method, type(e).__name__)
            raise SlackConnectionError(method) from e

        duration_ms = int((time.monotonic() - started) * 1000)
        if r.status_code >= 400:
            logger.error("Slack API: %s failed", method, extra={"context": {"status": r.status_code, "duration_ms": duration_ms}})
            raise SlackHTTPError(r.status_code, method)

        try:
            data = r.json()
        except ValueError:
            raise SlackApiError("invalid_response", method) from None

        if not isinstance(data, dict):
            raise SlackApiError("invalid_response", method)
        if not data.get("ok"):
            error_code = str(data.get("error") or "unknown_error")
            logger.error("Slack API: %s failed", method, extra={"context": {"error": error_code, "duration_ms": duration_ms}})
            raise SlackApiError(error_code, method, data)

        logger.debug("Slack API: %s succeeded", method, extra={"context": {"duration_ms": duration_ms}})
        return data

    async def acall(self, method: str, **params: Any) -> Dict[str, Any]:
        return await asyncio.to_thread(self.call, method, **params)

    def paginate(self, method: str, key: str, *, limit: int = 200, max_pages: int = 50, **params: Any) -> Iterator[Dict[str, Any]]:
        cursor: Optional[str] = None
        for _ in range(max_pages):
            page = self.call(method, limit=limit, cursor=cursor, **params)
            for item in page.get(key) or []:
                yield item
            cursor = (page.get("response_metadata") or {}).get("next_cursor") or None
            if not cursor:
                return

    def resolve_channel_id(self, channel: str) -> str:
        channel = (channel or "").strip()
        if CHANNEL_ID_RE.match(channel):
            return channel
        name = channel[1:] if channel.startswith("#") else channel
        for ch in self.paginate(
            "conversations.list",
            "channels",
            limit=1000,
            types="public_channel,private_channel",
            exclude_archived=False,
        ):
            if ch.get("name") == name:
                return ch["id"]
        raise SlackApiError("channel_not_found", "conversations.list")

    def resolve_user_id(self, user: str) -> str:
        user = (user or "").strip()
        if USER_ID_RE.match(user):
            return user
        name = user[1:] if user.startswith("@") else user
        for member in self.paginate("users.list", "members"):
            profile = member.get("profile") or {}
            if name in (member.get("name"), member.get("real_name"), profile.get("display_name")):
                return member["id"]
        raise SlackApiError("user_not_found", "users.list")

    async def aresolve_channel_id(self, channel: str) -> str:
        return await asyncio.to_thread(self.resolve_channel_id, channel)

    async def aresolve_user_id(self, user: str) -> str:
        return await asyncio.to_thread(self.resolve_user_id, user)

    def test_connection(self) -> bool:
        try:
            result = self.call("auth.test")
        except SlackError as e:
            logger.error("Slack connection test failed: %s", e)
            return False
        logger.info("Slack connection test successful", extra={"context": {"team": result.get("team"), "user": result.get("user")}})
        return True


class SlackClientProvider:
    """Builds Slack clients on first use.

    A missing token is a call-time failure of the tool that needs it, so the
    server still starts (and lists its tools) without credentials.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self._session = session
        self._lock = threading.Lock()
        self._bot: Optional[SlackAPI] = None
        self._user: Optional[SlackAPI] = None

    def _build(self, token: str) -> SlackAPI:
        return SlackAPI(
            token,
            base_url=self.settings.slack_api_base_url,
            timeout=self.settings.slack_api_timeout_seconds,
            max_retries=self.settings.slack_api_max_retries,
            session=self._session,
        )

    def bot(self) -> SlackAPI:
        with self._lock:
            if self._bot is None:
                if not self.settings.slack_bot_token:
                    raise SlackConfigurationError("SLACK_BOT_TOKEN is not set. Configure a bot token to use Slack tools.")
                self._bot = self._build(self.settings.slack_bot_token)
                logger.info(
                    "Slack client initialized",
                    extra={"context": {"timeout_ms": self.settings.slack_api_timeout_ms, "max_retries": self.settings.slack_api_max_retries}},
                )
            return self._bot

    def user(self) -> SlackAPI:
        with self._lock:
            if self._user is None:
                if not self.settings.slack_user_token:
                    raise SlackConfigurationError("User token not configured. Set SLACK_USER_TOKEN environment variable.")
                self._user = self._build(self.settings.slack_user_token)
            return self._user
