"""Provisioning service (Clean Architecture boundary).

Why:
    Encapsulates the bulk "add people to boards" use case so the CLI and the
    web adapter stay thin and the reconciliation rules can be unit-tested with
    a fake platform client.

Run order:
    1. Validate input; no remote call happens on invalid input.
    2. Fetch the directory snapshot once, only if emails were supplied.
    3. Assign every selected user to every board.
    4. Resolve each parsed email in input order (match or invite), then assign.

Outcome rules:
    - matched email or selected user, at least one board assigned -> added
    - invited email, at least one board assigned -> invited
    - resolution failed, or every board assignment failed -> failed
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol, Sequence

from board_invite.boards.assignment import BoardAssignmentExecutor, BoardClientProtocol
from board_invite.identity_access.directory import (
    DirectoryClientProtocol,
    DirectoryResolver,
    DirectorySnapshot,
)
from board_invite.identity_access.domain import (
    EmailString,
    ExistingUserRef,
    IdentityRequest,
    RoleSelection,
    User,
    mask_email,
)
from board_invite.provisioning.errors import (
    DirectoryUnavailable,
    ResolutionFailure,
    ValidationFailure,
)


logger = logging.getLogger("board_invite.provisioning")

_EMAIL_SPLIT = re.compile(r"[\n,]")


class PlatformProtocol(DirectoryClientProtocol, BoardClientProtocol, Protocol):
    pass


def parse_email_list(raw: str | None) -> List[str]:
    """Split on newline or comma, trim, lower-case and drop empty tokens.

    Repeated emails are kept; each occurrence is processed on its own.
    """
    if not raw:
        return []
    return [tok.strip().lower() for tok in _EMAIL_SPLIT.split(raw) if tok.strip()]


@dataclass(frozen=True)
class ProvisioningOutcome:
    added: tuple = ()
    invited: tuple = ()
    failed: tuple = ()

    def to_dict(self) -> dict:
        return {
            "added": list(self.added),
            "invited": list(self.invited),
            "failed": list(self.failed),
        }


@dataclass
class _OutcomeBuilder:
    added: List[str] = field(default_factory=list)
    invited: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def build(self) -> ProvisioningOutcome:
        return ProvisioningOutcome(
            added=tuple(self.added),
            invited=tuple(self.invited),
            failed=tuple(self.failed),
        )


def _normalize_boards(boards: Iterable[object] | None) -> List[str]:
    out: List[str] = []
    for b in boards or []:
        bid = str(getattr(b, "id", b) or "").strip()
        if bid:
            out.append(bid)
    return out


@dataclass
class ProvisioningService:
    """Use case: provision boards for a mixed list of identities."""

    client: PlatformProtocol

    def provision(
        self,
        selected_users: Iterable[User] | None,
        raw_email_list: str | None,
        selected_boards: Sequence[object] | None,
        role: RoleSelection | str = RoleSelection.GUEST,
    ) -> ProvisioningOutcome:
        try:
            role = RoleSelection.parse(role)
        except ValueError as exc:
            raise ValidationFailure("invalid_role") from exc
        users = list(selected_users or [])
        emails = parse_email_list(raw_email_list)
        board_ids = _normalize_boards(selected_boards)

        if not board_ids:
            raise ValidationFailure("no_boards")
        if not users and not emails:
            raise ValidationFailure("no_identities")

        snapshot = DirectorySnapshot()
        if emails:
            try:
                snapshot = DirectorySnapshot.fetch(self.client)
            except Exception as exc:
                logger.error("Directory snapshot fetch failed: %s", exc.__class__.__name__)
                raise DirectoryUnavailable() from exc

        logger.info(
            "Provisioning %d user(s) and %d email(s) on %d board(s) as %s",
            len(users),
            len(emails),
            len(board_ids),
            role.value,
        )

        resolver = DirectoryResolver(self.client)
        executor = BoardAssignmentExecutor(self.client)
        outcome = _OutcomeBuilder()

        identities: List[IdentityRequest] = [ExistingUserRef(u) for u in users]
        identities.extend(EmailString(e) for e in emails)

        for identity in identities:
            label = identity.user.label if isinstance(identity, ExistingUserRef) else identity.email
            try:
                resolution = resolver.resolve(identity, snapshot, role)
            except ResolutionFailure as exc:
                logger.warning("Could not resolve %s: %s", mask_email(exc.email), exc.reason)
                outcome.failed.append(label)
                continue

            result = executor.assign(resolution.user_id, board_ids)
            if not result.succeeded:
                logger.warning("All board assignments failed for %s", mask_email(label))
                outcome.failed.append(label)
            elif resolution.invited:
                outcome.invited.append(label)
            else:
                outcome.added.append(label)

        final = outcome.build()
        logger.info(
            "Provisioning finished: added=%d invited=%d failed=%d",
            len(final.added),
            len(final.invited),
            len(final.failed),
        )
        return final


def provision(
    client: PlatformProtocol,
    selected_users: Iterable[User] | None,
    raw_email_list: str | None,
    selected_boards: Sequence[object] | None,
    role: RoleSelection | str = RoleSelection.GUEST,
) -> ProvisioningOutcome:
    """Functional entry point; see `ProvisioningService.provision`."""
    return ProvisioningService(client).provision(selected_users, raw_email_list, selected_boards, role)
