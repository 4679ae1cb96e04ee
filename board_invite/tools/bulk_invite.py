"""Bulk board invite tool.

Adds people to one or more boards. Existing accounts are matched by email;
unknown emails are invited with the chosen role first.

Usage example:

    python -m board_invite.tools.bulk_invite boards --limit 50

    python -m board_invite.tools.bulk_invite invite \
        --board 1234567890 --board 2345678901 \
        --emails "ada@example.com, grace@example.com" \
        --role member

Environment variables (MONDAY_API_URL, MONDAY_API_TOKEN, MONDAY_API_VERSION,
MONDAY_TIMEOUT, BOARD_LIST_LIMIT) can be used instead of CLI flags.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import click

from board_invite.config import PlatformConfig, clamp_board_limit
from board_invite.identity_access.domain import ALLOWED_ROLES, User
from board_invite.platform.client import PlatformClient, PlatformError
from board_invite.provisioning.errors import DirectoryUnavailable, ValidationFailure
from board_invite.provisioning.service import ProvisioningService, parse_email_list
from board_invite.provisioning.summary import FATAL_MESSAGE, render_summary


logger = logging.getLogger("board_invite.tools.bulk_invite")


def _build_client(api_url: str | None, token: str | None, timeout: float | None) -> PlatformClient:
    cfg = PlatformConfig.from_env()
    if api_url:
        cfg = replace(cfg, api_url=api_url.rstrip("/"))
    if token:
        cfg = replace(cfg, token=token)
    if timeout:
        cfg = replace(cfg, timeout=timeout)
    try:
        return PlatformClient.from_config(cfg)
    except RuntimeError as exc:
        raise click.ClickException(str(exc))


def _read_emails(emails: str | None, emails_file: Path | None) -> str:
    parts = []
    if emails:
        parts.append(emails)
    if emails_file:
        parts.append(emails_file.read_text(encoding="utf-8"))
    return "\n".join(parts)


def _lookup_users(client: PlatformClient, user_ids: Sequence[str]) -> list[User]:
    """Turn `--user-id` values into directory entries with one listing call."""
    if not user_ids:
        return []
    try:
        by_id = {u.id: u for u in client.list_users()}
    except PlatformError as exc:
        raise click.ClickException(f"Could not list users: {exc}")
    missing = [uid for uid in user_ids if uid not in by_id]
    if missing:
        raise click.ClickException("Unknown user id(s): " + ", ".join(missing))
    return [by_id[uid] for uid in user_ids]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--api-url", envvar="MONDAY_API_URL", required=False, help="GraphQL endpoint of the platform.")
@click.option("--token", envvar="MONDAY_API_TOKEN", required=False, help="Platform API token.")
@click.option("--timeout", type=float, default=None, help="HTTP timeout in seconds for platform calls.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, api_url: str | None, token: str | None, timeout: float | None, verbose: bool) -> None:
    """Add people to boards, inviting unknown emails first."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["client_args"] = (api_url, token, timeout)


@cli.command("boards")
@click.option("--limit", type=int, default=None, help="Maximum number of boards to list.")
@click.pass_context
def boards_cmd(ctx: click.Context, limit: int | None) -> None:
    """List boards as `id<TAB>name`."""
    client = _build_client(*ctx.obj["client_args"])
    effective = clamp_board_limit(limit) if limit is not None else PlatformConfig.from_env().board_limit
    try:
        boards = client.list_boards(limit=effective)
    except PlatformError as exc:
        raise click.ClickException(f"Could not list boards: {exc}")
    for b in boards:
        click.echo(f"{b.id}\t{b.name}")


@cli.command("invite")
@click.option("--board", "boards", multiple=True, required=True, help="Board id (repeatable).")
@click.option("--emails", required=False, help="Emails separated by commas or newlines.")
@click.option("--emails-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="File with one email per line.")
@click.option("--user-id", "user_ids", multiple=True, help="Existing user id to add (repeatable).")
@click.option("--role", type=click.Choice(sorted(ALLOWED_ROLES), case_sensitive=False), default="guest", show_default=True, help="Role for newly invited users.")
@click.option("--dry-run", is_flag=True, help="Show what would be done without remote calls.")
@click.pass_context
def invite_cmd(
    ctx: click.Context,
    boards: tuple[str, ...],
    emails: str | None,
    emails_file: Path | None,
    user_ids: tuple[str, ...],
    role: str,
    dry_run: bool,
) -> None:
    """Add users and emails to every given board."""
    raw = _read_emails(emails, emails_file)
    if dry_run:
        parsed = parse_email_list(raw)
        click.echo(f"[dry-run] boards: {', '.join(boards)}")
        click.echo(f"[dry-run] user ids: {', '.join(user_ids) or '-'}")
        click.echo(f"[dry-run] emails ({len(parsed)}): {', '.join(parsed) or '-'}")
        click.echo(f"[dry-run] role for invites: {role.lower()}")
        return

    client = _build_client(*ctx.obj["client_args"])
    users = _lookup_users(client, list(user_ids))
    service = ProvisioningService(client)
    try:
        outcome = service.provision(users, raw, list(boards), role.lower())
    except ValidationFailure as exc:
        raise click.ClickException(f"Invalid input: {exc.code}")
    except DirectoryUnavailable:
        logger.error("Directory snapshot unavailable; nothing was provisioned")
        raise click.ClickException(FATAL_MESSAGE)
    click.echo(render_summary(outcome))


if __name__ == "__main__":  # pragma: no cover - manual entry
    cli()
