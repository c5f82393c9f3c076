"""CLI for sharing and viewing Ephemeral Clip secrets."""
import json
import sys
from typing import Optional

import click

from ephemeral_clip.client import ClipClient, resolve_secret_id
from ephemeral_clip.core.config import settings
from ephemeral_clip.crypto.cipher import describe_error
from ephemeral_clip.errors import ClipError


def _fail(error: ClipError) -> None:
    click.echo(f"Error: {describe_error(error)}", err=True)
    sys.exit(1)


@click.group()
@click.option("--server", envvar="CLIP_SERVER_URL", default="http://localhost:3000",
              show_default=True, help="Base URL of the Ephemeral Clip server")
@click.option("--timeout", default=10.0, show_default=True, help="HTTP timeout in seconds")
@click.option("--max-chars", envvar="MAX_PLAINTEXT_CHARS", type=int, default=settings.MAX_PLAINTEXT_CHARS,
              show_default=True, help="Longest secret accepted for sharing")
@click.pass_context
def cli(ctx: click.Context, server: str, timeout: float, max_chars: int):
    """Ephemeral Clip: share short-lived secrets via end-to-end encrypted links."""
    ctx.obj = {"server": server, "timeout": timeout, "max_chars": max_chars}


def _client(ctx: click.Context) -> ClipClient:
    return ClipClient(ctx.obj["server"], timeout=ctx.obj["timeout"], max_plaintext_chars=ctx.obj["max_chars"])


@cli.command("share")
@click.argument("text", required=False)
@click.option("--ttl", type=int, default=None, help="Lifetime in seconds (1-86400, default 60)")
@click.pass_context
def share(ctx: click.Context, text: Optional[str], ttl: Optional[int]):
    """Encrypt TEXT (or stdin) locally and print a share link."""
    if text is None:
        text = click.get_text_stream("stdin").read()
    try:
        with _client(ctx) as client:
            url = client.share(text, ttl=ttl)
    except ClipError as e:
        _fail(e)
        return
    click.echo(url)


@cli.command("view")
@click.argument("url")
@click.option("--delete", "delete_after", is_flag=True, help="Delete the secret from the server after reading")
@click.pass_context
def view(ctx: click.Context, url: str, delete_after: bool):
    """Fetch and decrypt the secret behind a share link."""
    try:
        with _client(ctx) as client:
            plaintext = client.reveal(url, delete_after=delete_after)
    except ClipError as e:
        _fail(e)
        return
    click.echo(plaintext)
    if delete_after:
        click.echo("✓ Secret deleted from server", err=True)


@cli.command("delete")
@click.argument("url_or_id")
@click.pass_context
def delete(ctx: click.Context, url_or_id: str):
    """Delete a secret by share link or identifier."""
    try:
        secret_id = resolve_secret_id(url_or_id)
        with _client(ctx) as client:
            client.delete_secret(secret_id)
    except ClipError as e:
        _fail(e)
        return
    click.echo(f"✓ Secret '{secret_id}' deleted")


@cli.command("health")
@click.pass_context
def health(ctx: click.Context):
    """Show server status and storage backend."""
    try:
        with _client(ctx) as client:
            status = client.health()
    except ClipError as e:
        _fail(e)
        return
    click.echo(json.dumps(status, indent=2))


if __name__ == "__main__":
    cli()
