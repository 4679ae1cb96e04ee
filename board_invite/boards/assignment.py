"""Board assignment executor: one add-to-board call per (user, board) pair.

Assignments are not transactional across boards. A failing board is recorded
and the next board is still attempted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence

from board_invite.provisioning.errors import AssignmentFailure


logger = logging.getLogger("board_invite.boards")


class BoardClientProtocol(Protocol):
    def add_users_to_board(self, board_id: str, user_ids: Sequence[str]) -> dict:
        ...


@dataclass
class AssignmentResult:
    user_id: str
    assigned: List[str] = field(default_factory=list)
    failures: List[AssignmentFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """True when at least one board accepted the user."""
        return bool(self.assigned)


@dataclass
class BoardAssignmentExecutor:
    client: BoardClientProtocol

    def assign(self, user_id: str, board_ids: Sequence[str]) -> AssignmentResult:
        result = AssignmentResult(user_id=str(user_id))
        for board_id in board_ids:
            try:
                self.client.add_users_to_board(str(board_id), [str(user_id)])
            except Exception as exc:
                failure = AssignmentFailure(str(user_id), str(board_id), exc.__class__.__name__)
                failure.__cause__ = exc
                logger.warning(
                    "Assignment of user %s to board %s failed: %s",
                    user_id,
                    board_id,
                    exc.__class__.__name__,
                )
                result.failures.append(failure)
                continue
            result.assigned.append(str(board_id))
        return result
