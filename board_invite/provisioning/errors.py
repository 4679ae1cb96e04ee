"""
Error taxonomy for provisioning runs.

Only `ValidationFailure` and `DirectoryUnavailable` reach the caller of
`provision`. Resolution and assignment failures are per identity and end up in
the outcome sets.
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base exception for provisioning errors."""


class ValidationFailure(ProvisioningError, ValueError):
    """Caller input is insufficient (no identities or no boards)."""

    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


class ResolutionFailure(ProvisioningError, LookupError):
    """An email could neither be matched nor invited."""

    def __init__(self, email: str, reason: str = "resolution_failed") -> None:
        super().__init__(reason)
        self.email = email
        self.reason = reason


class AssignmentFailure(ProvisioningError, RuntimeError):
    """A single (user, board) assignment call errored."""

    def __init__(self, user_id: str, board_id: str, reason: str = "assignment_failed") -> None:
        super().__init__(reason)
        self.user_id = user_id
        self.board_id = board_id
        self.reason = reason


class DirectoryUnavailable(ProvisioningError, RuntimeError):
    """The directory snapshot could not be fetched; the run is aborted."""

    def __init__(self, reason: str = "directory_unavailable") -> None:
        super().__init__(reason)
        self.reason = reason
