from dataclasses import replace
from typing import Dict, List

import pytest

from catalogbot.errors import PersistenceFailure, PlatformError, ResourceMissing
from catalogbot.operations import CatalogOperations
from catalogbot.platform import Requester
from catalogbot.store import CatalogStore

GUILD_ID = "900"
ADMIN_ROLE_ID = "1"
MEMBER_ROLE_ID = "2"
ROLE_NAMES = {ADMIN_ROLE_ID: "Admin", MEMBER_ROLE_ID: "Member", "3": "Moderator"}


class FakeMessage:
    def __init__(self, gateway, channel_id, message_id, card):
        self.gateway = gateway
        self.channel_id = channel_id
        self.id = message_id
        self.cards = [card]

    def edit(self, card):
        if self.gateway.fail_edit:
            raise PlatformError("edit refused")
        self.cards.append(card)


class FakeChannel:
    def __init__(self, gateway, channel_id, name="", overwrites=None):
        self.gateway = gateway
        self.id = channel_id
        self.name = name
        self.overwrites = overwrites or []
        self.messages: List[FakeMessage] = []

    def send(self, card):
        if self.gateway.fail_send:
            raise PlatformError("send refused")
        message = FakeMessage(self.gateway, self.id, f"m{self.id}", card)
        self.messages.append(message)
        self.gateway.messages[message.id] = message
        return message

    def delete(self):
        if self.gateway.fail_delete:
            raise PlatformError("delete refused")
        if self.id not in self.gateway.channels:
            raise ResourceMissing(self.id)
        del self.gateway.channels[self.id]


class _GhostMessage:
    def __init__(self, message_id):
        self.id = message_id

    def edit(self, card):
        raise ResourceMissing(self.id)


class FakeGateway:
    """In-memory stand-in for the Discord guild."""

    def __init__(self):
        self.everyone_role_id = GUILD_ID
        self.channels: Dict[str, FakeChannel] = {}
        self.messages: Dict[str, FakeMessage] = {}
        self.created = 0
        self.fail_create = False
        self.fail_send = False
        self.fail_edit = False
        self.fail_delete = False

    def create_channel(self, slug, overwrites):
        if self.fail_create:
            raise PlatformError("create refused")
        self.created += 1
        channel = FakeChannel(self, f"c{self.created}", slug, overwrites)
        self.channels[channel.id] = channel
        return channel

    def channel(self, channel_id):
        return self.channels.get(channel_id) or FakeChannel(self, channel_id)

    def message(self, channel_id, message_id):
        return self.messages.get(message_id) or _GhostMessage(message_id)


class MemorySnapshot:
    def __init__(self, products=None):
        self.saved = [replace(p) for p in products or []]
        self.saves = 0
        self.fail = False

    def load(self):
        return [replace(p) for p in self.saved]

    def save(self, products):
        if self.fail:
            raise PersistenceFailure("disk full")
        self.saves += 1
        self.saved = [replace(p) for p in products]


@pytest.fixture
def admin():
    return Requester(user_id="42", role_map={ADMIN_ROLE_ID: "Admin", MEMBER_ROLE_ID: "Member"})


@pytest.fixture
def outsider():
    return Requester(user_id="7", role_map={MEMBER_ROLE_ID: "Member"})


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def snapshot():
    return MemorySnapshot()


@pytest.fixture
def store(snapshot):
    return CatalogStore.open(snapshot)


@pytest.fixture
def ops(store, gateway):
    return CatalogOperations(store, gateway, admin_roles=["Admin", "Moderator"], currency="EUR")
