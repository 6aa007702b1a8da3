"""CLI module for helpdesk operators.

This module provides the command-line interface using Typer:
- init-db: Create all tables in the configured database
- drop-db: Drop all tables, wiping every organization's data
- create-org: Create an organization with its first user and API key
- create-api-key: Issue an additional API key for an existing user
"""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import IntegrityError

from helpdesk.core.database import close_db, create_all, drop_all, get_db_context
from helpdesk.models.contracts.organization import OrganizationCreate
from helpdesk.models.contracts.user import UserCreate
from helpdesk.models.enums import UserRole
from helpdesk.repositories.api_key import ApiKeyRepository
from helpdesk.repositories.organization import OrganizationRepository
from helpdesk.repositories.user import UserRepository

# Create Typer app
app = typer.Typer(
    name="helpdesk",
    help="Helpdesk API operator tools",
    no_args_is_help=True,
)

# Rich console for output
console = Console()
error_console = Console(stderr=True)

# Logger for this module
logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised by command bodies for errors reported to the operator."""


def _run(coro) -> None:
    """Run an async command body and dispose the engine afterwards."""

    async def _wrapped():
        try:
            return await coro
        finally:
            await close_db()

    try:
        asyncio.run(_wrapped())
    except CommandError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def _print_key(title: str, email: str, raw_key: str) -> None:
    console.print(
        Panel(
            f"[bold]{raw_key}[/bold]\n\nStore this key now - it cannot be shown again.",
            title=f"{title} for {email}",
            border_style="green",
        )
    )


async def _create_org(name: str, slug: str, email: str, user_name: str, role: UserRole) -> None:
    async with get_db_context() as db:
        org_repo = OrganizationRepository(db)
        user_repo = UserRepository(db)

        if await org_repo.get_by_slug(slug) is not None:
            raise CommandError(f"Organization with slug '{slug}' already exists")
        if await user_repo.get_by_email(email) is not None:
            raise CommandError(f"User with email '{email}' already exists")

        try:
            organization = await org_repo.create(name=name, slug=slug)
            user = await user_repo.create(
                organization_id=organization.id, email=email, name=user_name, role=role.value
            )
            _, raw_key = await ApiKeyRepository(db).issue(user.id)
        except IntegrityError as e:
            raise CommandError(f"Could not create organization: {e.orig}") from e

    table = Table(title="Created")
    table.add_column("Entity")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_row("Organization", str(organization.id), f"{organization.name} ({organization.slug})")
    table.add_row("User", str(user.id), f"{user.name} <{user.email}> [{role.value}]")
    console.print(table)
    _print_key("API key", user.email, raw_key)


async def _create_api_key(email: str, name: str) -> None:
    async with get_db_context() as db:
        user = await UserRepository(db).get_by_email(email)
        if user is None:
            raise CommandError(f"No user with email '{email}'")
        _, raw_key = await ApiKeyRepository(db).issue(user.id, name)

    _print_key("API key", email, raw_key)


@app.command("init-db")
def init_db_command() -> None:
    """Create all tables that do not exist yet."""
    _run(create_all())
    console.print("[green]Database tables created[/green]")


@app.command("drop-db")
def drop_db_command(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the confirmation prompt"),
    ] = False,
) -> None:
    """Drop all tables. Every organization's data is lost."""
    if not yes:
        typer.confirm("Drop all helpdesk tables and their data?", abort=True)

    _run(drop_all())
    console.print("[yellow]Database tables dropped[/yellow]")


@app.command("create-org")
def create_org(
    name: Annotated[str, typer.Argument(help="Organization display name")],
    slug: Annotated[str, typer.Argument(help="Unique organization slug")],
    email: Annotated[str, typer.Argument(help="Email of the first user")],
    user_name: Annotated[str, typer.Argument(help="Name of the first user")],
    role: Annotated[
        UserRole,
        typer.Option("--role", "-r", help="Role of the first user"),
    ] = UserRole.ADMIN,
) -> None:
    """Create an organization, its first user, and an API key for that user."""
    try:
        OrganizationCreate(name=name, slug=slug)
        UserCreate(email=email, name=user_name, role=role)
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] Invalid input: {e}")
        raise typer.Exit(1) from None

    _run(_create_org(name, slug, email, user_name, role))


@app.command("create-api-key")
def create_api_key(
    email: Annotated[str, typer.Argument(help="Email of the key owner")],
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Display name for the key"),
    ] = "default",
) -> None:
    """Issue a new API key for an existing user."""
    _run(_create_api_key(email, name))


if __name__ == "__main__":
    app()
