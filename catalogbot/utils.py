# catalogbot/utils.py
# Discord REST client used for channel/message side effects, the Ed25519
# check for incoming interactions, and the shared logger setup.

import logging
from typing import Dict, List, Optional

import requests
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from decouple import config

from catalogbot.errors import DiscordAPIError, PlatformError, ResourceMissing

DISCORD_API_BASE = config("DISCORD_API_BASE", default="https://discord.com/api/v10")
DISCORD_BOT_TOKEN = config("DISCORD_BOT_TOKEN", default="")
DISCORD_GUILD_ID = config("DISCORD_GUILD_ID", default="")
DISCORD_TIMEOUT = config("DISCORD_TIMEOUT", cast=float, default=2.5)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _created_id(data, what: str) -> str:
    if not isinstance(data, dict) or not data.get("id"):
        raise PlatformError(f"Discord returned no id for the new {what}")
    return str(data["id"])


class DiscordClient:
    """
    Thin wrapper over the Discord REST API for one guild.

    Every call is made once (no retries). A 404 raises ResourceMissing so
    callers can treat already-deleted channels/messages as gone; other
    failures raise DiscordAPIError or PlatformError.
    """

    def __init__(
        self,
        token: str = DISCORD_BOT_TOKEN,
        guild_id: str = DISCORD_GUILD_ID,
        *,
        base_url: str = DISCORD_API_BASE,
        timeout: float = DISCORD_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.guild_id = guild_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bot {token}",
            "User-Agent": "DiscordBot (catalogbot, 0.1.0)",
        })

    @property
    def everyone_role_id(self) -> str:
        # @everyone shares the guild's id
        return self.guild_id

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Discord {method} {path} failed: {e}")
            raise PlatformError(f"{method} {path}: {e}") from e

        if resp.status_code == 404:
            raise ResourceMissing(f"{method} {path}: not found")
        if resp.status_code >= 400:
            logger.error(f"Discord error status={resp.status_code} {method} {path} body={resp.text[:300]}")
            raise DiscordAPIError(resp.status_code, resp.text)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def create_channel(self, slug: str, overwrites: List[dict]) -> "DiscordChannel":
        data = self._request(
            "POST",
            f"/guilds/{self.guild_id}/channels",
            json={"name": slug, "type": 0, "permission_overwrites": overwrites},
        )
        channel_id = _created_id(data, "channel")
        logger.info(f"Created channel #{slug} id={channel_id}")
        return DiscordChannel(self, channel_id)

    def channel(self, channel_id: str) -> "DiscordChannel":
        return DiscordChannel(self, channel_id)

    def message(self, channel_id: str, message_id: str) -> "DiscordMessage":
        return DiscordMessage(self, channel_id, message_id)

    def guild_roles(self) -> Dict[str, str]:
        """Role id -> role name for the configured guild."""
        data = self._request("GET", f"/guilds/{self.guild_id}/roles") or []
        return {str(r["id"]): r["name"] for r in data}

    def register_commands(self, application_id: str, commands: List[dict]) -> None:
        self._request(
            "PUT",
            f"/applications/{application_id}/guilds/{self.guild_id}/commands",
            json=commands,
        )
        logger.info(f"Registered {len(commands)} slash commands for guild {self.guild_id}")


class DiscordChannel:
    def __init__(self, client: DiscordClient, channel_id: str):
        self._client = client
        self.id = str(channel_id)

    def send(self, card: dict) -> "DiscordMessage":
        data = self._client._request("POST", f"/channels/{self.id}/messages", json={"embeds": [card]})
        return DiscordMessage(self._client, self.id, _created_id(data, "message"))

    def delete(self) -> None:
        self._client._request("DELETE", f"/channels/{self.id}")


class DiscordMessage:
    def __init__(self, client: DiscordClient, channel_id: str, message_id: str):
        self._client = client
        self.channel_id = str(channel_id)
        self.id = str(message_id)

    def edit(self, card: dict) -> None:
        self._client._request(
            "PATCH", f"/channels/{self.channel_id}/messages/{self.id}", json={"embeds": [card]}
        )


class RoleDirectory:
    """Caches guild role names; refetches when an unknown role id shows up."""

    def __init__(self, client: DiscordClient):
        self._client = client
        self._names: Dict[str, str] = {}

    def resolve(self, role_ids: List[str]) -> Dict[str, str]:
        if any(rid not in self._names for rid in role_ids):
            self._names = self._client.guild_roles()
        return {rid: self._names[rid] for rid in role_ids if rid in self._names}


def verify_signature(public_key_hex: str, signature_hex: str, timestamp: str, body: bytes) -> bool:
    """Check the X-Signature-Ed25519 header Discord puts on every interaction."""
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        key.verify(bytes.fromhex(signature_hex), timestamp.encode() + body)
    except (ValueError, InvalidSignature):
        return False
    return True
