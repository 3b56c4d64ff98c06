# catalogbot/services/channels.py
# One text channel per product: everyone can read, only allow-listed roles
# can post. Creation failures abort the caller; deletion is best-effort.

import logging
import re
from typing import Iterable

from catalogbot.errors import ExternalResourceFailure, PlatformError, ResourceMissing
from catalogbot.platform import ChannelGateway, ChannelHandle, SyncResult

logger = logging.getLogger(__name__)

SEND_MESSAGES = 1 << 11
ROLE_OVERWRITE = 0

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    return _NON_ALNUM.sub("-", name.lower())


class ChannelProvisioner:
    def __init__(self, gateway: ChannelGateway):
        self.gateway = gateway

    def overwrites(self, allowed_role_ids: Iterable[str]) -> list:
        rules = [{"id": self.gateway.everyone_role_id, "type": ROLE_OVERWRITE, "deny": str(SEND_MESSAGES)}]
        rules += [
            {"id": rid, "type": ROLE_OVERWRITE, "allow": str(SEND_MESSAGES)}
            for rid in allowed_role_ids
        ]
        return rules

    def provision(self, slug: str, allowed_role_ids: Iterable[str]) -> ChannelHandle:
        try:
            return self.gateway.create_channel(slug, self.overwrites(allowed_role_ids))
        except PlatformError as e:
            logger.error(f"Channel #{slug} could not be created: {e}")
            raise ExternalResourceFailure(str(e)) from e

    def deprovision(self, channel_id: str) -> SyncResult:
        try:
            self.gateway.channel(channel_id).delete()
        except ResourceMissing:
            logger.info(f"Channel {channel_id} already gone")
            return SyncResult(True, "already deleted")
        except PlatformError as e:
            logger.warning(f"Channel {channel_id} could not be deleted: {e}")
            return SyncResult(False, str(e))
        return SyncResult(True)
