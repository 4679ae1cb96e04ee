"""
Unit tests for the identity domain helpers (no network).
"""
from __future__ import annotations

import pytest

from board_invite.identity_access.domain import ALLOWED_ROLES, RoleSelection, User, mask_email


def test_role_selection_parses_case_insensitively():
    assert RoleSelection.parse("Guest") is RoleSelection.GUEST
    assert RoleSelection.parse(" MEMBER ") is RoleSelection.MEMBER
    assert RoleSelection.parse(RoleSelection.MEMBER) is RoleSelection.MEMBER
    assert ALLOWED_ROLES == {"guest", "member"}


@pytest.mark.parametrize("value", ["", None, "admin", "owner"])
def test_role_selection_rejects_unknown_values(value):
    with pytest.raises(ValueError):
        RoleSelection.parse(value)


def test_user_label_prefers_normalized_email_then_name():
    assert User(id="1", name="Ada", email=" Ada@Example.COM ").label == "ada@example.com"
    assert User(id="2", name="Grace", email="").label == "Grace"


def test_mask_email_hides_local_part():
    assert mask_email("raphael.fournell@example.de") == "ra***@example.de"
    assert mask_email("not-an-email") == "***"
