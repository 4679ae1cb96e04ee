"""
Identity domain types shared by the resolver, executor and orchestrator.

Why:
- Keep the request objects immutable so a provisioning run works on a fixed
  view of the caller's selection (boards, users, email text, role).
- Keep terms aligned with the glossary: directory snapshot, resolution,
  fan-out, outcome set.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class RoleSelection(str, Enum):
    """Role applied uniformly to every identity invited in one run."""

    GUEST = "guest"
    MEMBER = "member"

    @classmethod
    def parse(cls, value: object) -> "RoleSelection":
        if isinstance(value, RoleSelection):
            return value
        text = str(value or "").strip().lower()
        for role in cls:
            if role.value == text:
                return role
        raise ValueError("invalid_role")


# Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset(r.value for r in RoleSelection)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str

    @property
    def email_key(self) -> str:
        return (self.email or "").strip().lower()

    @property
    def label(self) -> str:
        """Outcome label: email when known, display name otherwise."""
        return self.email_key or self.name


@dataclass(frozen=True)
class Board:
    id: str
    name: str


@dataclass(frozen=True)
class ExistingUserRef:
    user: User


@dataclass(frozen=True)
class EmailString:
    email: str


IdentityRequest = Union[ExistingUserRef, EmailString]


def mask_email(email: str) -> str:
    """Mask email for logs to reduce PII exposure."""
    local, sep, domain = (email or "").partition("@")
    if not sep:
        return "***"
    return f"{local[:2]}***@{domain}"


__all__ = [
    "ALLOWED_ROLES",
    "Board",
    "EmailString",
    "ExistingUserRef",
    "IdentityRequest",
    "RoleSelection",
    "User",
    "mask_email",
]
