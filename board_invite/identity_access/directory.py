"""
Directory resolver: map an identity request to a platform user id.

Why:
    Provisioning accepts both already-known users and bare email addresses.
    Emails are matched case-insensitively against a directory snapshot taken
    once per run; unmatched emails are invited with the run's role. The
    resolver never mutates the snapshot, so every identity of a run is judged
    against the same point-in-time view.

Security:
    - Emails are masked in log output.
    - Invitations are issued one email per call; the email is passed as a
      bound GraphQL variable by the platform client.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Protocol, Sequence

from board_invite.identity_access.domain import (
    EmailString,
    ExistingUserRef,
    IdentityRequest,
    RoleSelection,
    User,
    mask_email,
)
from board_invite.provisioning.errors import ResolutionFailure


logger = logging.getLogger("board_invite.directory")


class DirectoryClientProtocol(Protocol):
    def list_users(self) -> List[User]:
        ...

    def invite_users(self, emails: Sequence[str], role: RoleSelection) -> List[dict]:
        ...


@dataclass(frozen=True)
class Resolution:
    user_id: str
    invited: bool = False


@dataclass(frozen=True)
class DirectorySnapshot:
    """Existing accounts at the start of a run, indexed by lower-cased email."""

    users: tuple = ()
    _by_email: Dict[str, User] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def of(cls, users: Iterable[User]) -> "DirectorySnapshot":
        users_t = tuple(users)
        index: Dict[str, User] = {}
        for u in users_t:
            key = u.email_key
            # First entry wins on duplicate emails.
            if key and key not in index:
                index[key] = u
        return cls(users=users_t, _by_email=index)

    @classmethod
    def fetch(cls, client: DirectoryClientProtocol) -> "DirectorySnapshot":
        return cls.of(client.list_users())

    def find(self, email: str) -> User | None:
        return self._by_email.get((email or "").strip().lower())

    def __len__(self) -> int:
        return len(self.users)


def _pick_invited_id(entries: object, email: str) -> str:
    """Extract the single created user id from an invite response."""
    if not isinstance(entries, list) or not entries:
        raise ResolutionFailure(email, "invite_returned_no_users")
    wanted = email.lower()
    matching = [
        e for e in entries
        if isinstance(e, dict) and str(e.get("email") or "").strip().lower() == wanted
    ]
    candidates = matching or [e for e in entries if isinstance(e, dict)]
    if len(candidates) != 1:
        raise ResolutionFailure(email, "invite_ambiguous_response")
    user_id = candidates[0].get("id")
    if user_id is None or str(user_id).strip() == "":
        raise ResolutionFailure(email, "invite_missing_id")
    return str(user_id)


@dataclass
class DirectoryResolver:
    """Resolve identities against a snapshot, inviting unmatched emails."""

    client: DirectoryClientProtocol

    def resolve(
        self,
        identity: IdentityRequest,
        snapshot: DirectorySnapshot,
        role: RoleSelection,
    ) -> Resolution:
        if isinstance(identity, ExistingUserRef):
            return Resolution(user_id=str(identity.user.id))
        if not isinstance(identity, EmailString):
            raise TypeError("unsupported identity request")

        email = identity.email.strip().lower()
        existing = snapshot.find(email)
        if existing is not None:
            logger.debug("Matched %s to existing user %s", mask_email(email), existing.id)
            return Resolution(user_id=str(existing.id))

        try:
            entries = self.client.invite_users([email], role)
        except Exception as exc:
            logger.warning("Invite failed for %s: %s", mask_email(email), exc.__class__.__name__)
            raise ResolutionFailure(email, "invite_failed") from exc
        user_id = _pick_invited_id(entries, email)
        logger.info("Invited %s as %s -> %s", mask_email(email), role.value, user_id)
        return Resolution(user_id=user_id, invited=True)
