"""CLI tools for append list administration."""

import click

from appendlist_api.core.security import create_session_token
from appendlist_api.db.session import SessionLocal
from appendlist_api.services import append_list_service


@click.group()
def cli():
    """Append lists CLI tools."""
    pass


@cli.command()
def normalize_list_types():
    """
    Rewrite legacy stored list types ("nightslip", "names", empty) to "plain".

    Reads already treat these as plain; this only tidies stored rows.

    Example:
        python -m appendlist_api.cli normalize-list-types
    """
    db = SessionLocal()
    try:
        updated, total = append_list_service.normalize_list_types(db)
        click.echo(f"✓ Normalized {updated} of {total} list(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command("create-session-token")
@click.option("--user-id", required=True, help="Principal id (from the identity provider)")
@click.option("--email", default=None, help="Principal email")
@click.option("--name", default=None, help="Principal display name")
def create_session_token_cmd(user_id: str, email: str | None, name: str | None):
    """
    Mint a session cookie value for local testing.

    Example:
        python -m appendlist_api.cli create-session-token --user-id u1 --email a@x.com
    """
    click.echo(create_session_token(user_id=user_id, email=email, name=name))


if __name__ == "__main__":
    cli()
