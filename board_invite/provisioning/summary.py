"""Human-readable run summary with fixed section labels."""

from __future__ import annotations

from board_invite.provisioning.service import ProvisioningOutcome

SUMMARY_HEADER = "Completed"
FATAL_MESSAGE = "Error adding users to boards"


def render_summary(outcome: ProvisioningOutcome) -> str:
    lines = [SUMMARY_HEADER]
    for label, items in (
        ("Added", outcome.added),
        ("Invited", outcome.invited),
        ("Failed", outcome.failed),
    ):
        if items:
            lines.append(f"{label}: {', '.join(items)}")
    return "\n".join(lines)
