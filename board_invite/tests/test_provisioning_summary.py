from __future__ import annotations

from board_invite.provisioning.service import ProvisioningOutcome
from board_invite.provisioning.summary import render_summary


def test_summary_lists_sections_with_fixed_labels():
    outcome = ProvisioningOutcome(
        added=("a@x.com", "b@x.com"),
        invited=("new@x.com",),
        failed=("bad@x.com",),
    )
    assert render_summary(outcome) == (
        "Completed\n"
        "Added: a@x.com, b@x.com\n"
        "Invited: new@x.com\n"
        "Failed: bad@x.com"
    )


def test_summary_omits_empty_sections():
    assert render_summary(ProvisioningOutcome(invited=("new@x.com",))) == "Completed\nInvited: new@x.com"
    assert render_summary(ProvisioningOutcome()) == "Completed"
