import json

import click
import pandas as pd
from flask import current_app
from flask.cli import with_appcontext

from app.services import feedback as svc
from app.services.errors import ServiceError
from app.services.kv_store import get_store

_SEED_COLUMNS = ("text", "category", "status", "note", "upvotes")


def load_seed_pack(path: str) -> pd.DataFrame:
    """
    Read a demo pack. Only `text` is required; blank cells become None and
    upvotes default to 0.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    if "text" not in df.columns:
        raise ValueError(f"{path}: missing required column 'text'")
    for col in _SEED_COLUMNS:
        if col not in df.columns:
            df[col] = ""
    df = df[list(_SEED_COLUMNS)].copy()
    df["text"] = df["text"].str.strip()
    df = df[df["text"] != ""].copy()
    df["upvotes"] = pd.to_numeric(df["upvotes"], errors="coerce").fillna(0).astype(int).clip(lower=0)
    return df


@click.group()
def feedback():
    """Feedback store operations."""


@feedback.command("seed-demo")
@click.option("--file", "path", default=None, help="CSV pack (defaults to DEMO_SEED_FILE)")
@with_appcontext
def seed_demo(path):
    path = path or current_app.config["DEMO_SEED_FILE"]
    try:
        df = load_seed_pack(path)
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc))

    store = get_store()
    created = 0
    # Reject bad statuses up front so a failing pack writes nothing
    for i, status in enumerate(df["status"], start=1):
        if status and status not in svc.STATUSES:
            raise click.ClickException(f"row {i}: unknown status {status!r}")

    for row in df.itertuples(index=False):
        try:
            result = svc.submit_feedback(store, row.text, category=row.category or None)
            sid = result["sessionId"]
            if row.status and row.status != svc.STATUS_RECEIVED:
                svc.update_status(store, sid, row.status, note=row.note or None)
            for _ in range(int(row.upvotes)):
                svc.upvote(store, sid)
        except ServiceError as exc:
            raise click.ClickException(f"row {created + 1}: {exc}")
        created += 1
        click.echo(f"{sid}  {result['analysis']['topic']:<15} {result['analysis']['sentiment']}")

    click.echo(f"Seeded {created} feedback item(s) from {path}")


@feedback.command("show")
@click.argument("session_id")
@with_appcontext
def show(session_id):
    try:
        data = svc.get_session(get_store(), session_id)
    except ServiceError as exc:
        raise click.ClickException(str(exc))
    click.echo(json.dumps(data, indent=2, sort_keys=True))


@feedback.command("set-status")
@click.argument("session_id")
@click.argument("status", type=click.Choice(svc.STATUSES))
@click.option("--note", default=None)
@with_appcontext
def set_status(session_id, status, note):
    try:
        svc.update_status(get_store(), session_id, status, note=note)
    except ServiceError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{session_id} -> {status}")


def register_cli(app):
    app.cli.add_command(feedback)
