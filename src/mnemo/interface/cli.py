"""mnemo CLI: scheduling, review submission, stats and due-queue commands."""

import asyncio
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from datetime import timedelta
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from mnemo.application.aggregator import DueItem
from mnemo.application.config import resolve_config
from mnemo.application.factory import get_review_service
from mnemo.application.review.service import ReviewService
from mnemo.application.scheduler import (
    QUALITY_DESCRIPTIONS,
    compute_next_review,
    utc_now,
)
from mnemo.domain.constants import INITIAL_EASINESS_FACTOR, MIN_EASINESS_FACTOR
from mnemo.domain.errors import MnemoError
from mnemo.domain.review.models import ReviewState
from mnemo.infrastructure.serialization import event_to_record, state_to_record

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mnemo: SM-2 spaced-repetition scheduling for flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage mnemo configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared options and helpers
# ---------------------------------------------------------------------------

StoreOption = Annotated[
    Path | None,
    typer.Option("--store", help="Review snapshot file. Defaults to 'store_path' in config."),
]
ReviewerOption = Annotated[
    str | None,
    typer.Option("--reviewer", "-r", help="Reviewer ID. Defaults to 'default_reviewer' in config."),
]
DeckOption = Annotated[str | None, typer.Option("--deck", "-d", help="Restrict to one deck.")]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except MnemoError as e:
        logger.debug(f"Command failed: {e!r}", exc_info=True)
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(code=1)
    except ValidationError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(code=1)


def _open_service(store: Path | None, reviewer: str | None) -> tuple[ReviewService, str]:
    config = resolve_config({"store_path": store})
    reviewer_id = reviewer or config.default_reviewer
    if not reviewer_id:
        typer.secho(
            "Error: no reviewer given. Pass --reviewer or set default_reviewer.",
            fg="red",
            err=True,
        )
        raise typer.Exit(code=1)
    return get_review_service(config), reviewer_id


def _due_item_record(item: DueItem) -> dict:
    return {
        "item": item.item_id,
        "deck": item.deck_id,
        "state": state_to_record(item.latest_state) if item.latest_state else None,
    }


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
):
    """Global settings for mnemo."""
    if verbose:
        logging.getLogger("mnemo").setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


@app.command("next")
def next_review(
    quality: Annotated[int, typer.Argument(help="Recall quality, 0-5.")],
    ef: Annotated[
        float | None,
        typer.Option("--ef", min=MIN_EASINESS_FACTOR, help="Prior easiness factor."),
    ] = None,
    interval: Annotated[
        int | None, typer.Option(min=0, help="Prior interval in days.")
    ] = None,
    repetitions: Annotated[
        int | None, typer.Option(min=0, help="Prior consecutive successful reviews.")
    ] = None,
):
    """Compute the next SM-2 state without touching storage."""
    now = utc_now()
    prior = None
    if ef is not None or interval is not None or repetitions is not None:
        # A prior state reviewed `interval` days ago and due now
        prior_interval = interval or 0
        prior = ReviewState(
            easiness_factor=ef if ef is not None else INITIAL_EASINESS_FACTOR,
            interval=prior_interval,
            repetitions=repetitions or 0,
            next_review=now,
            last_reviewed=now - timedelta(days=prior_interval),
        )

    with _handle_errors():
        state = compute_next_review(quality, prior, now=now)
    typer.echo(json.dumps(state_to_record(state), indent=2))


@app.command()
def ratings():
    """List the quality ratings."""
    for quality, description in enumerate(QUALITY_DESCRIPTIONS):
        typer.echo(f"{quality}  {description}")


# ---------------------------------------------------------------------------
# Review storage
# ---------------------------------------------------------------------------


@app.command()
def review(
    item_id: Annotated[str, typer.Argument(help="Item that was studied.")],
    quality: Annotated[int, typer.Argument(help="Recall quality, 0-5.")],
    reviewer: ReviewerOption = None,
    store: StoreOption = None,
):
    """[bold green]Submit[/bold green] a review and schedule the item."""
    with _handle_errors():
        service, reviewer_id = _open_service(store, reviewer)
        event = asyncio.run(service.submit_review(item_id, reviewer_id, quality))

    state = event.state
    typer.echo(
        f"{item_id}: next review in {state.interval} day(s) "
        f"({state.next_review.isoformat()}), EF {state.easiness_factor:.2f}"
    )


@app.command()
def stats(
    reviewer: ReviewerOption = None,
    deck: DeckOption = None,
    store: StoreOption = None,
    json_output: JsonOption = False,
):
    """Show counts of new, learning, review and due items."""
    with _handle_errors():
        service, reviewer_id = _open_service(store, reviewer)
        result = asyncio.run(service.get_stats(reviewer_id, deck))

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    typer.echo(f"Total:    {result.total}")
    typer.echo(f"New:      {result.new}")
    typer.echo(f"Learning: {result.learning}")
    typer.echo(f"Review:   {result.review}")
    typer.echo(f"Due:      {result.due}")


@app.command()
def due(
    reviewer: ReviewerOption = None,
    deck: DeckOption = None,
    limit: Annotated[
        int | None, typer.Option(help="Maximum items. Defaults to 'default_due_limit'.")
    ] = None,
    store: StoreOption = None,
    json_output: JsonOption = False,
):
    """List due items, earliest due first."""
    with _handle_errors():
        service, reviewer_id = _open_service(store, reviewer)
        items = asyncio.run(service.get_due_items(reviewer_id, deck, limit))

    if json_output:
        typer.echo(json.dumps([_due_item_record(i) for i in items], indent=2))
        return

    if not items:
        typer.echo("Nothing due.")
        return

    for item in items:
        when = item.latest_state.next_review.isoformat() if item.latest_state else "new"
        typer.echo(f"{item.item_id}\t{item.deck_id}\t{when}")


@app.command()
def history(
    item_id: Annotated[str, typer.Argument(help="Item to show.")],
    reviewer: ReviewerOption = None,
    store: StoreOption = None,
    json_output: JsonOption = False,
):
    """Show an item's review history, newest first."""
    with _handle_errors():
        service, reviewer_id = _open_service(store, reviewer)
        events = asyncio.run(service.get_history(item_id, reviewer_id))

    if json_output:
        typer.echo(json.dumps([event_to_record(e) for e in events], indent=2))
        return

    if not events:
        typer.echo(f"{item_id} has not been reviewed.")
        return

    for event in events:
        s = event.state
        typer.echo(
            f"{s.last_reviewed.isoformat()}  q={event.quality}  EF={s.easiness_factor:.2f}  "
            f"interval={s.interval}d  reps={s.repetitions}"
        )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    with _handle_errors():
        config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
