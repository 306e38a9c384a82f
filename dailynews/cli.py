"""
Operator CLI: initialise the database and trigger pipeline steps by hand.
"""
from __future__ import annotations

import json
from datetime import date

import click

from app import PROJECT_ROOT, load_environment
from app_utils import configure_logging
from dailynews.errors import DailyNewsError
from dailynews.services import build_services


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


@click.group()
@click.pass_context
def cli(ctx):
    load_environment()
    configure_logging(PROJECT_ROOT / "logs")
    ctx.ensure_object(dict)


def _services(ctx):
    if "services" not in ctx.obj:
        ctx.obj["services"] = build_services()
    return ctx.obj["services"]


@cli.command("init-db")
@click.pass_context
def init_db(ctx):
    """Create tables and seed the default topics."""
    services = _services(ctx)
    click.echo(f"Database ready: {len(services.store.list_topics())} topics")


@cli.command()
@click.option("--date", "run_date", default=None, help="Run date (YYYY-MM-DD); defaults to today in UTC.")
@click.pass_context
def generate(ctx, run_date):
    """Generate articles for every active topic and language."""
    try:
        parsed = date.fromisoformat(run_date) if run_date else None
    except ValueError as exc:
        raise click.BadParameter("use YYYY-MM-DD", param_hint="--date") from exc
    try:
        run = _services(ctx).article_generator().run(parsed)
    except DailyNewsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(run.to_dict())


@cli.command()
@click.argument("url")
@click.pass_context
def extract(ctx, url):
    """Run the extraction chain on URL without storing anything."""
    try:
        page = _services(ctx).chain.extract(url)
    except DailyNewsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(page.model_dump(mode="json"))


@cli.command()
@click.argument("url")
@click.option("--interest-id", required=True, type=int)
@click.pass_context
def submit(ctx, url, interest_id):
    """Extract URL and store it under a social interest."""
    try:
        result = _services(ctx).social.submit(url, interest_id)
    except DailyNewsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(result.to_dict())


@cli.command()
@click.argument("article_id", type=int)
@click.pass_context
def tts(ctx, article_id):
    """Synthesize speech for a daily article (cached after the first call)."""
    try:
        result = _services(ctx).speech.synthesize(article_id)
    except DailyNewsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(result.to_dict())


@cli.command()
@click.argument("article_id", type=int)
@click.pass_context
def summarize(ctx, article_id):
    """Summarize a stored social article (cached after the first call)."""
    try:
        result = _services(ctx).social.summarize(article_id)
    except DailyNewsError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(result.to_dict())


@cli.command()
@click.pass_context
def schedule(ctx):
    """Run the daily generation job in the foreground."""
    from dailynews.scheduler import run_scheduler

    run_scheduler(_services(ctx))


if __name__ == "__main__":  # pragma: no cover
    cli()
