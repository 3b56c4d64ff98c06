# catalogbot/auth.py
from typing import Iterable, List

from decouple import Csv, config

from catalogbot.platform import Requester

ADMIN_ROLES = config("ADMIN_ROLES", cast=Csv(), default="Admin,Moderator")


def is_authorized(roles: Iterable[str], allow_list: Iterable[str] = ADMIN_ROLES) -> bool:
    return bool(set(roles) & set(allow_list))


def allowed_role_ids(requester: Requester, allow_list: Iterable[str] = ADMIN_ROLES) -> List[str]:
    """Ids of the requester's roles that are on the allow-list."""
    allowed = set(allow_list)
    return [rid for rid, name in requester.role_map.items() if name in allowed]
