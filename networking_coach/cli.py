"""
Command-line interface for Networking Coach.

Usage:
    networking-coach types                       List message types
    networking-coach render -n "Sarah" -c Acme   Fill a template offline
    networking-coach generate -n "Sarah" -c Acme Generate with OpenAI
    networking-coach history you@school.edu      Show saved messages
    networking-coach serve                       Run the API server
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import MessageType

console = Console()

_type_choice = click.Choice(MessageType.values())


def _message_options(f):
    """Form fields shared by render and generate."""
    f = click.option("--type", "message_type", type=_type_choice,
                     default=MessageType.LINKEDIN.value, show_default=True,
                     help="Kind of message to write.")(f)
    f = click.option("--purpose", "-p", default="", help="Why you are reaching out.")(f)
    f = click.option("--title", "-t", "recipient_title", default="", help="Recipient's job title.")(f)
    f = click.option("--company", "-c", required=True, help="Recipient's company.")(f)
    f = click.option("--name", "-n", "recipient_name", required=True, help="Recipient's name.")(f)
    return f


@click.group()
def main() -> None:
    """
    Networking Coach - craft outreach messages to alumni, recruiters and mentors.
    """


@main.command("init-db")
def init_db_command() -> None:
    """Create the database tables."""
    from .database import init_db

    init_db()
    console.print("[green]✓ Database initialized[/green]")


@main.command()
def types() -> None:
    """List the available message types."""
    from .message_templates import MESSAGE_TEMPLATES

    table = Table(title="Message Types")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Description", style="dim")

    for key, template in MESSAGE_TEMPLATES.items():
        table.add_row(key, template.title, template.description)

    console.print(table)


@main.command()
@_message_options
def render(recipient_name: str, company: str, recipient_title: str, purpose: str, message_type: str) -> None:
    """Fill a static template (no AI involved)."""
    from .message_templates import MessageData, get_template, render_message

    data = MessageData(recipient_name, company, recipient_title, purpose, message_type)
    try:
        message = render_message(data)
    except ValueError as e:
        raise click.UsageError(str(e))

    console.print(Panel(message, title=get_template(message_type).title, border_style="blue"))


@main.command()
@_message_options
@click.option("--save-as", "save_as", default=None, metavar="EMAIL",
              help="Store the result in this user's history.")
def generate(
    recipient_name: str,
    company: str,
    recipient_title: str,
    purpose: str,
    message_type: str,
    save_as: str | None,
) -> None:
    """Generate a personalized message with OpenAI."""
    from .generate_message import GenerationError, generate_networking_message
    from .message_templates import MessageData

    data = MessageData(recipient_name, company, recipient_title, purpose, message_type)

    try:
        with console.status("Generating message..."):
            message = generate_networking_message(data)
    except GenerationError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise click.Abort()

    console.print(Panel(message, title="✨ Your Message", border_style="green"))

    if save_as:
        _save_for(save_as, data, message)


def _save_for(email: str, data, message: str) -> None:
    from .database import get_db
    from .models import User
    from .services import MessageService

    with get_db() as db:
        user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        console.print(f"[red]✗ No account for {email}[/red]")
        raise click.Abort()

    with get_db(user.id) as db:
        saved = MessageService(db, user).create(data, message)
        console.print(f"[green]✓ Saved to history ({saved.id})[/green]")


@main.command()
@click.argument("email")
@click.option("--favorites", is_flag=True, help="Only show favorites.")
@click.option("--limit", type=int, default=20, show_default=True)
def history(email: str, favorites: bool, limit: int) -> None:
    """Show the saved messages for EMAIL."""
    from .database import get_db
    from .message_templates import MESSAGE_TYPE_LABELS
    from .models import User
    from .services import MessageService

    with get_db() as db:
        user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        console.print(f"[red]✗ No account for {email}[/red]")
        raise click.Abort()

    with get_db(user.id) as db:
        messages = MessageService(db, user).get_all(favorites_only=favorites, limit=limit)

        if not messages:
            console.print("[yellow]No messages generated yet.[/yellow]")
            return

        table = Table(title=f"Message History ({len(messages)})")
        table.add_column("When", style="dim")
        table.add_column("Type", style="cyan")
        table.add_column("Recipient")
        table.add_column("★", justify="center")
        table.add_column("Message")

        for m in messages:
            recipient = f"{m.recipient_name}\n{m.recipient_title + ' at ' if m.recipient_title else ''}{m.company}"
            preview = m.generated_message if len(m.generated_message) <= 80 else m.generated_message[:77] + "..."
            table.add_row(
                m.created_at.strftime("%Y-%m-%d %H:%M"),
                MESSAGE_TYPE_LABELS.get(m.message_type, m.message_type),
                recipient,
                "♥" if m.is_favorite else "",
                preview,
            )

    console.print(table)


@main.command()
@click.option("--limit", type=int, default=6, show_default=True)
def starters(limit: int) -> None:
    """Print conversation starters for informational interviews."""
    from .message_templates import conversation_starters

    for starter in conversation_starters(limit):
        console.print(f"[cyan]•[/cyan] {starter}")


@main.command()
@click.option("--host", default=None, help="Host to bind to.")
@click.option("--port", type=int, default=None, help="Port to run on.")
@click.option("--debug", is_flag=True, help="Run in debug mode.")
def serve(host: str | None, port: int | None, debug: bool) -> None:
    """Run the API server."""
    from api_server import run
    from .config import config

    if debug:
        console.print("[yellow]⚠️  Debug mode. Do not use in production![/yellow]")

    run(host=host or config.API_HOST, port=port or config.API_PORT, debug=debug or config.FLASK_DEBUG)


if __name__ == "__main__":
    main()
