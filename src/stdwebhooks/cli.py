"""stdwebhooks CLI - Sign and verify webhook deliveries."""

import json
import sys
import time
import uuid
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from stdwebhooks.common.auth import build_verifier
from stdwebhooks.common.logging import setup_logging
from stdwebhooks.common.settings import Settings
from stdwebhooks.signing import generate_secret
from stdwebhooks.verifier import (
    HEADER_ID,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
    WebhookVerificationError,
    WebhookVerifier,
)

console = Console()


def _read_payload(payload: str | None, payload_file: str | None) -> bytes:
    if payload_file:
        path = Path(payload_file)
        if not path.exists():
            console.print(f"[red]Payload file not found: {payload_file}[/red]")
            sys.exit(1)
        # Exact bytes; signatures cover the body as sent
        return path.read_bytes()
    if payload is None:
        console.print("[red]Either --payload or --payload-file is required[/red]")
        sys.exit(1)
    return payload.encode("utf-8")


def _get_verifier(ctx: click.Context) -> WebhookVerifier:
    settings: Settings = ctx.obj["settings"]
    try:
        return build_verifier(settings)
    except WebhookVerificationError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        sys.exit(1)


@click.group()
@click.option("--secret", help="Signing secret (whsec_...)")
@click.option("--raw", is_flag=True, help="Treat --secret as raw key material")
@click.option("--tolerance", type=int, default=None, help="Timestamp tolerance in seconds")
@click.pass_context
def cli(
    ctx: click.Context,
    secret: str | None,
    raw: bool,
    tolerance: int | None,
) -> None:
    """stdwebhooks CLI - Sign and verify Standard Webhooks deliveries."""
    overrides: dict[str, object] = {}
    if secret is not None:
        overrides["webhook_secret"] = secret
    if raw:
        overrides["webhook_secret_raw"] = True
    if tolerance is not None:
        overrides["webhook_tolerance_seconds"] = tolerance

    settings = Settings(**overrides)
    setup_logging(settings.log_level, json_output=settings.log_json)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("generate-secret")
@click.option("--bytes", "num_bytes", default=24, show_default=True, help="Key length in bytes")
def generate_secret_cmd(num_bytes: int) -> None:
    """Generate a new signing secret."""
    click.echo(generate_secret(num_bytes))


@cli.command("sign")
@click.option("--id", "msg_id", help="Message id (default: random msg_ id)")
@click.option("--timestamp", "-t", type=int, help="Unix timestamp (default: now)")
@click.option("--payload", "-p", help="Payload string")
@click.option("--payload-file", "-f", help="Path to payload file")
@click.option("--json", "as_json", is_flag=True, help="Print headers as JSON")
@click.pass_context
def sign_cmd(
    ctx: click.Context,
    msg_id: str | None,
    timestamp: int | None,
    payload: str | None,
    payload_file: str | None,
    as_json: bool,
) -> None:
    """Sign a payload and print the webhook headers."""
    verifier = _get_verifier(ctx)
    body = _read_payload(payload, payload_file)
    msg_id = msg_id or f"msg_{uuid.uuid4().hex}"
    timestamp = timestamp if timestamp is not None else int(time.time())

    try:
        headers = verifier.sign_headers(msg_id, timestamp, body)
    except WebhookVerificationError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(headers, indent=2))
        return

    table = Table(title="Webhook Headers")
    table.add_column("Header", style="cyan")
    table.add_column("Value", style="green")
    for name, value in headers.items():
        table.add_row(name, value)
    console.print(table)


@cli.command("verify")
@click.option("--id", "msg_id", required=True, help="webhook-id header value")
@click.option("--timestamp", "-t", required=True, help="webhook-timestamp header value")
@click.option("--signature", "-s", required=True, help="webhook-signature header value")
@click.option("--payload", "-p", help="Payload string")
@click.option("--payload-file", "-f", help="Path to payload file")
@click.pass_context
def verify_cmd(
    ctx: click.Context,
    msg_id: str,
    timestamp: str,
    signature: str,
    payload: str | None,
    payload_file: str | None,
) -> None:
    """Verify a delivery and print its decoded payload."""
    verifier = _get_verifier(ctx)
    body = _read_payload(payload, payload_file)
    headers = {
        HEADER_ID: msg_id,
        HEADER_TIMESTAMP: timestamp,
        HEADER_SIGNATURE: signature,
    }

    try:
        decoded = verifier.verify(body, headers)
    except WebhookVerificationError as exc:
        console.print(f"[red]✗ {exc.kind.value} error: {exc.message}[/red]")
        sys.exit(1)

    console.print("[green]✓ Signature is valid[/green]")
    click.echo(json.dumps(decoded, indent=2))


@cli.command("serve")
@click.option("--host", default=None, help="Bind host")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_context
def serve_cmd(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the webhook receiver."""
    import uvicorn

    from stdwebhooks.receiver.main import create_app

    settings: Settings = ctx.obj["settings"]
    app = create_app(settings, verifier=_get_verifier(ctx))

    uvicorn.run(
        app,
        host=host or settings.receiver_host,
        port=port or settings.receiver_port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
