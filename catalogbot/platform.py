# catalogbot/platform.py
# Narrow capability interfaces the catalog core depends on. DiscordClient in
# catalogbot.utils satisfies ChannelGateway; tests use in-memory fakes.

from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Set


class RoleSource(Protocol):
    def roles(self) -> Set[str]: ...


class MessageHandle(Protocol):
    id: str

    def edit(self, card: dict) -> None: ...


class ChannelHandle(Protocol):
    id: str

    def send(self, card: dict) -> MessageHandle: ...

    def delete(self) -> None: ...


class ChannelGateway(Protocol):
    @property
    def everyone_role_id(self) -> str: ...

    def create_channel(self, slug: str, overwrites: List[dict]) -> ChannelHandle: ...

    def channel(self, channel_id: str) -> ChannelHandle: ...

    def message(self, channel_id: str, message_id: str) -> MessageHandle: ...


@dataclass(frozen=True)
class Requester:
    """The member issuing a command, with roles already resolved to names."""
    user_id: str
    role_map: Dict[str, str] = field(default_factory=dict)  # role id -> name

    def roles(self) -> Set[str]:
        return set(self.role_map.values())


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a best-effort remote call (card refresh, channel delete)."""
    ok: bool
    detail: str = ""
