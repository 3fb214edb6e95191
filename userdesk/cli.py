import asyncio
import logging
import shlex

import click

from .api.client import UserGateway
from .errors import UserStoreError
from .forms import DEPARTMENTS, IntentKind, ValidationFailure
from .output.formatters import FIELD_LABELS, format_output
from .session import ManagementSession
from .store import UserListStore
from .utils.config import (
    get_base_url,
    get_config_path,
    get_log_dir,
    get_page_size,
    get_request_timeout,
    load_config,
    set_config_value,
)

DELETE_PROMPT = "Are you sure you want to delete this user? This action cannot be undone."


class OrderedGroup(click.Group):
    def __init__(self, *args, commands_order: list[str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.commands_order = commands_order or []

    def list_commands(self, ctx):
        commands = super().list_commands(ctx)
        if self.commands_order:
            ordered = [c for c in self.commands_order if c in commands]
            remaining = [c for c in commands if c not in self.commands_order]
            return ordered + remaining
        return commands


def setup_logging(config: dict) -> None:
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = str(config.get("logging", {}).get("level", "info")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_dir / "userdesk.log"),
        ],
    )


def build_session(ctx: click.Context) -> ManagementSession:
    config = ctx.obj["config"]
    gateway = UserGateway(
        get_base_url(config),
        timeout=get_request_timeout(config),
        transport=ctx.obj.get("transport"),
    )
    return ManagementSession(UserListStore(gateway), rows_per_page=get_page_size(config))


def open_session(ctx: click.Context) -> ManagementSession:
    session = build_session(ctx)
    if not asyncio.run(session.load()):
        raise click.ClickException(session.store.error or "Failed to fetch users")
    return session


def session_output(session: ManagementSession, message: str | None = None) -> dict:
    return {
        "users": [u.to_dict() for u in session.visible_users],
        "page": session.page,
        "page_count": session.page_count,
        "total": len(session.users),
        "message": message,
    }


def echo(ctx: click.Context, data) -> None:
    click.echo(format_output(data, "json" if ctx.obj["json"] else "plain"))


def echo_success(ctx: click.Context, session: ManagementSession) -> None:
    message = session.store.success_message
    session.store.dismiss_success()
    echo(ctx, session_output(session, message))


def submit_form(ctx: click.Context, session: ManagementSession, values: dict) -> None:
    result = asyncio.run(session.submit(values))

    if isinstance(result, ValidationFailure):
        raise click.ClickException(format_output({"errors": result.errors}))
    if result is None:
        raise click.ClickException(session.store.error or "Request failed")

    if result.kind == IntentKind.CREATE:
        session.set_page(session.page_count - 1)
    echo_success(ctx, session)


CLI_HELP = """\
userdesk manages the users of a remote REST service.

The remote service does not keep writes, so every command fetches the
current list, applies the change locally and prints the resulting table.
Use `userdesk shell` to keep one list across several changes.
"""


@click.group(
    cls=OrderedGroup,
    commands_order=["list", "add", "edit", "delete", "shell", "config"],
    help=CLI_HELP,
    context_settings={"help_option_names": ["-h", "--help"], "max_content_width": 120},
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def cli(ctx, json_output):
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj.setdefault("config", load_config())
    setup_logging(ctx.obj["config"])


@cli.command("list")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True, help="Page to show")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Rows per page")
@click.pass_context
def list_users(ctx, page, page_size):
    """List users, one page at a time."""
    session = open_session(ctx)
    if page_size:
        session.set_rows_per_page(page_size)
    session.set_page(page - 1)
    echo(ctx, session_output(session))


@cli.command("add")
@click.option("--first-name", default="", help="First name (required)")
@click.option("--last-name", default="", help="Last name")
@click.option("--email", default="", help="Email address (required)")
@click.option("--department", default="", help=f"Department (required), e.g. {', '.join(DEPARTMENTS[:3])}")
@click.pass_context
def add_user(ctx, first_name, last_name, email, department):
    """Add a user."""
    session = open_session(ctx)
    submit_form(ctx, session, {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "department": department,
    })


@cli.command("edit")
@click.argument("user_id", type=int)
@click.option("--first-name", default=None, help="New first name")
@click.option("--last-name", default=None, help="New last name")
@click.option("--email", default=None, help="New email address")
@click.option("--department", default=None, help="New department")
@click.pass_context
def edit_user(ctx, user_id, first_name, last_name, email, department):
    """Edit a user. Fields that are not given keep their current value."""
    session = open_session(ctx)
    try:
        values = session.start_edit(user_id)
    except UserStoreError as e:
        raise click.ClickException(e.message)

    changes = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "department": department,
    }
    updated = values.model_copy(update={k: v for k, v in changes.items() if v is not None})
    submit_form(ctx, session, updated.model_dump())


@cli.command("delete")
@click.argument("user_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_user(ctx, user_id, yes):
    """Delete a user."""
    session = open_session(ctx)
    try:
        session.store.get(user_id)
    except UserStoreError as e:
        raise click.ClickException(e.message)

    session.request_delete(user_id)
    if not yes and not click.confirm(DELETE_PROMPT):
        session.cancel_delete()
        click.echo("Cancelled")
        return

    if not asyncio.run(session.confirm_delete()):
        raise click.ClickException(session.store.error or "Failed to delete user")

    echo_success(ctx, session)


SHELL_HELP = """\
Commands:
  list              show the current page
  next, prev        move between pages
  page N            jump to page N
  size N            set rows per page
  add               add a user
  edit ID           edit a user
  delete ID         delete a user
  help              show this help
  quit              leave the shell"""


@cli.command("shell")
@click.pass_context
def shell(ctx):
    """Manage users interactively against a single in-memory list."""
    session = open_session(ctx)
    echo(ctx, session_output(session))

    while True:
        try:
            line = click.prompt("userdesk", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            break

        try:
            words = shlex.split(line)
        except ValueError as e:
            click.echo(f"Error: {e}")
            continue
        if not words:
            continue

        command, args = words[0], words[1:]
        if command in ("quit", "exit"):
            break

        try:
            _run_shell_command(ctx, session, command, args)
        except click.ClickException as e:
            click.echo(f"Error: {e.format_message()}")

        if session.store.error:
            click.echo(f"Error: {session.store.error}")
            session.store.dismiss_error()


def _run_shell_command(ctx: click.Context, session: ManagementSession, command: str, args: list[str]) -> None:
    if command == "help":
        click.echo(SHELL_HELP)
    elif command == "list":
        echo(ctx, session_output(session))
    elif command == "next":
        session.set_page(session.page + 1)
        echo(ctx, session_output(session))
    elif command == "prev":
        session.set_page(session.page - 1)
        echo(ctx, session_output(session))
    elif command == "page":
        session.set_page(_int_arg(args, "page") - 1)
        echo(ctx, session_output(session))
    elif command == "size":
        size = _int_arg(args, "size")
        if size <= 0:
            raise click.ClickException("size must be positive")
        session.set_rows_per_page(size)
        echo(ctx, session_output(session))
    elif command == "add":
        session.form.cancel()
        _prompt_and_submit(ctx, session)
    elif command == "edit":
        user_id = _int_arg(args, "edit")
        try:
            session.start_edit(user_id)
        except UserStoreError as e:
            raise click.ClickException(e.message)
        _prompt_and_submit(ctx, session)
    elif command == "delete":
        user_id = _int_arg(args, "delete")
        try:
            session.store.get(user_id)
        except UserStoreError as e:
            raise click.ClickException(e.message)
        session.request_delete(user_id)
        if not click.confirm(DELETE_PROMPT):
            session.cancel_delete()
            click.echo("Cancelled")
            return
        if asyncio.run(session.confirm_delete()):
            echo_success(ctx, session)
    else:
        raise click.ClickException(f"Unknown command: {command} (try `help`)")


def _int_arg(args: list[str], command: str) -> int:
    if len(args) != 1:
        raise click.ClickException(f"Usage: {command} N")
    try:
        return int(args[0])
    except ValueError:
        raise click.ClickException(f"Not a number: {args[0]}")


def _prompt_and_submit(ctx: click.Context, session: ManagementSession) -> None:
    form = session.form
    click.echo(form.title)

    while True:
        for name, label in FIELD_LABELS.items():
            if name == "department":
                click.echo(f"  ({', '.join(DEPARTMENTS)})")
            current = getattr(form.values, name)
            value = click.prompt(f"  {label}", default=current, show_default=bool(current))
            error = form.blur(name, value)
            if error:
                click.echo(f"    {error}")

        if not click.confirm(form.submit_label, default=True):
            form.cancel()
            session.store.dismiss_error()
            click.echo("Cancelled")
            return

        result = asyncio.run(session.submit())
        if isinstance(result, ValidationFailure):
            click.echo(format_output({"errors": result.errors}))
            continue
        if result is not None:
            echo_success(ctx, session)
        return


@cli.command()
@click.option("--base-url", default=None, help="Base URL of the users API")
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Default rows per page")
@click.pass_context
def config(ctx, base_url, page_size):
    """Print config file location and contents, or update it."""
    cfg = ctx.obj["config"]
    if base_url:
        set_config_value(cfg, "api", "base_url", base_url)
    if page_size:
        set_config_value(cfg, "display", "page_size", page_size)

    config_path = get_config_path()
    data = {"config_path": str(config_path), "exists": config_path.exists()}
    if config_path.exists():
        data["contents"] = config_path.read_text()
    echo(ctx, data)


if __name__ == "__main__":
    cli()
