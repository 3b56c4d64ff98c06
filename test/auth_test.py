from catalogbot.auth import allowed_role_ids, is_authorized
from catalogbot.platform import Requester

ALLOW = ["Admin", "Moderator"]


def test_admin_or_moderator_is_authorized():
    assert is_authorized({"Admin"}, ALLOW)
    assert is_authorized({"Member", "Moderator"}, ALLOW)


def test_other_roles_are_denied():
    assert not is_authorized({"Member", "admin"}, ALLOW)
    assert not is_authorized(set(), ALLOW)


def test_default_allow_list():
    assert is_authorized({"Admin"})
    assert not is_authorized({"Guest"})


def test_allowed_role_ids_keeps_only_allow_listed_roles():
    requester = Requester("1", {"10": "Admin", "11": "Member", "12": "Moderator"})
    assert sorted(allowed_role_ids(requester, ALLOW)) == ["10", "12"]
