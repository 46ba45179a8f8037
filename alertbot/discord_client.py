import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .constants import (
    DISCORD_API_BASE_URL,
    DISCORD_GUILDS_PAGE_SIZE,
    DISCORD_TIMEOUT_SECONDS,
    DISCORD_USER_AGENT,
)
from .errors import DiscordAPIError, LoginError

logger = logging.getLogger(__name__)


class BotUser:
    def __init__(self, data: Dict[str, Any]):
        self.id = str(data.get("id"))
        self.username = data.get("username") or ""
        self.discriminator = data.get("discriminator") or "0"

    @property
    def tag(self) -> str:
        # Contas migradas para nomes únicos usam discriminator "0"
        if self.discriminator in ("0", "0000"):
            return self.username
        return f"{self.username}#{self.discriminator}"


class Channel:
    def __init__(self, data: Dict[str, Any]):
        self.id = str(data.get("id"))
        self.name = data.get("name")
        self.type = data.get("type")
        self.guild_id = data.get("guild_id")


class SentMessage:
    def __init__(self, data: Dict[str, Any]):
        self.id = str(data.get("id"))
        self.channel_id = str(data.get("channel_id"))


class DiscordClient:
    """
    Sessão REST autenticada com o Discord usando token de bot.

    Uma instância por processo: `login()` valida o token e carrega os
    servidores do bot; depois disso `is_ready()` é verdadeiro até que a API
    responda 401.
    """

    def __init__(self, token: Optional[str], base_url: str = DISCORD_API_BASE_URL,
                 timeout: float = DISCORD_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.user: Optional[BotUser] = None
        self.guild_ids: List[str] = []
        self._ready = False

    # ---------- Setup helpers ----------

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bot {self.token}",
            "User-Agent": DISCORD_USER_AGENT,
            "Accept": "application/json",
        }

    def _request(self, method: str, path: str, params: Optional[Dict] = None,
                 json_body: Optional[Dict] = None) -> Optional[Any]:
        url = f"{self.base_url}{path}"

        def send():
            return self.session.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=json_body,
                timeout=self.timeout,
            )

        resp = send()
        if resp.status_code == 429:
            # Uma única nova tentativa, com espera limitada ao timeout
            wait = min(_retry_after(resp), self.timeout)
            logger.warning("Rate limit do Discord em %s %s, nova tentativa em %.2fs", method, path, wait)
            time.sleep(wait)
            resp = send()
        if resp.status_code == 401 and self._ready:
            logger.warning("Discord respondeu 401, sessão marcada como offline")
            self._ready = False
        if not resp.ok:
            raise _api_error(resp)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ---------- Sessão ----------

    def login(self) -> None:
        if not self.token:
            raise LoginError("DISCORD_BOT_TOKEN não configurado")
        try:
            self.user = BotUser(self._request("GET", "/users/@me") or {})
            self.guild_ids = self._fetch_guild_ids()
        except (DiscordAPIError, requests.RequestException) as exc:
            raise LoginError(f"Falha ao autenticar no Discord: {exc}") from exc
        self._ready = True
        logger.info("CV Alert Bot online como %s", self.user.tag)
        logger.info("Bot ID: %s", self.user.id)
        logger.info("Servidores: %d", self.guild_count)

    def _fetch_guild_ids(self) -> List[str]:
        ids: List[str] = []
        after: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"limit": DISCORD_GUILDS_PAGE_SIZE}
            if after:
                params["after"] = after
            page = self._request("GET", "/users/@me/guilds", params=params) or []
            ids.extend(str(g.get("id")) for g in page)
            if len(page) < DISCORD_GUILDS_PAGE_SIZE:
                return ids
            after = ids[-1]

    def is_ready(self) -> bool:
        return self._ready

    @property
    def guild_count(self) -> int:
        return len(self.guild_ids)

    # ---------- Operações ----------

    def fetch_channel(self, channel_id: str) -> Optional[Channel]:
        data = self._request("GET", f"/channels/{quote(str(channel_id), safe='')}")
        if not data:
            return None
        return Channel(data)

    def send_message(self, channel: Channel, options: Dict[str, Any]) -> SentMessage:
        data = self._request("POST", f"/channels/{channel.id}/messages", json_body=options) or {}
        data.setdefault("channel_id", channel.id)
        return SentMessage(data)

    def add_reaction(self, message: SentMessage, emoji: str) -> None:
        encoded = quote(emoji, safe='')
        self._request("PUT", f"/channels/{message.channel_id}/messages/{message.id}/reactions/{encoded}/@me")


def _retry_after(resp: requests.Response) -> float:
    try:
        body = resp.json()
    except ValueError:
        body = None
    candidates = [
        body.get("retry_after") if isinstance(body, dict) else None,
        resp.headers.get("X-RateLimit-Reset-After"),
        resp.headers.get("Retry-After"),
    ]
    for value in candidates:
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            continue
    return 0.0


def _api_error(resp: requests.Response) -> DiscordAPIError:
    code = None
    message = resp.reason or f"HTTP {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = body.get("code")
        message = body.get("message") or message
    return DiscordAPIError(message, code=code, status=resp.status_code)
