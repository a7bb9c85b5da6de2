"""Main CLI entry point."""

from datetime import datetime, timedelta, timezone
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from config import get_settings
from votewatch.log_setup import configure_logging

app = typer.Typer(
    name="votewatch",
    help="Validator performance and bandwidth quota monitor",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Log level"),
):
    configure_logging(log_level or get_settings().log_level)


def _fail(err: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {err}")
    raise typer.Exit(code=1)


def utc_offset_suffix(dt: datetime) -> str:
    """ISO-8601 offset label for ``dt``, ``Z`` for UTC."""
    offset = dt.utcoffset() or timedelta(0)
    if not offset:
        return "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def parse_reference(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise typer.BadParameter(
            f"Invalid timestamp '{raw}'. Expected ISO-8601 (e.g., 2024-08-12T00:00:00Z)"
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@app.command()
def status(
    vote_pubkey: str = typer.Argument(..., help="Validator vote account"),
    epoch: Optional[int] = typer.Option(None, "--epoch", "-e", help="Epoch (default: current)"),
):
    """Show delinquency, leader slots, skip rate and credits for one validator."""
    from votewatch.services import ChainClient, get_validator_status
    from votewatch.services.errors import ChainClientError, EpochError

    with ChainClient() as client:
        try:
            epoch_info = client.get_epoch_info()
            result = get_validator_status(
                client, vote_pubkey, epoch_info, epoch if epoch is not None else epoch_info.epoch
            )
        except (ChainClientError, EpochError) as e:
            _fail(e)

    if result is None:
        console.print(f"[yellow]Vote account {vote_pubkey} not found[/yellow]")
        raise typer.Exit(code=1)
    console.print(result.summary())


@app.command("credit-score")
def credit_score(
    epoch: Optional[int] = typer.Option(None, "--epoch", "-e", help="Epoch (default: current)"),
    ignore_commission: bool = typer.Option(
        False, "--ignore-commission", help="Rank by total credits, before commission"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Show only the top N"
    ),
):
    """Rank validators by staker credits earned in an epoch."""
    from votewatch.services import ChainClient, get_validators_by_credit_score
    from votewatch.services.errors import ChainClientError, CreditScoreError, EpochError
    from votewatch.services.validator_status import LAMPORTS_PER_SOL

    with ChainClient() as client:
        try:
            epoch_info = client.get_epoch_info()
            target = epoch if epoch is not None else epoch_info.epoch
            ranking = get_validators_by_credit_score(
                client, epoch_info, target, ignore_commission
            )
        except (ChainClientError, CreditScoreError, EpochError) as e:
            _fail(e)

    table = Table(title=f"Staker credits, epoch {target}")
    table.add_column("Rank", justify="right")
    table.add_column("Vote Account", style="cyan")
    table.add_column("Credits", justify="right", style="green")
    table.add_column("Stake (SOL)", justify="right")

    for rank, entry in enumerate(ranking[:limit] if limit is not None else ranking, start=1):
        table.add_row(
            str(rank),
            entry.vote_pubkey,
            str(entry.staker_credits),
            f"{entry.activated_stake // LAMPORTS_PER_SOL:,}",
        )

    console.print(table)


@app.command()
def bandwidth(
    start_day: Optional[int] = typer.Option(
        None, "--start-day", "-d", min=1, max=31, help="Billing cycle start day"
    ),
):
    """Show inbound/outbound traffic against the Latitude.sh quota."""
    from dataclasses import replace

    from votewatch.services import LatitudeClient, LatitudeConfig
    from votewatch.services.errors import BandwidthError

    config = LatitudeConfig.from_settings(get_settings().latitude)
    if not config.enabled:
        console.print("[yellow]Bandwidth reporting disabled (LATITUDE_API_KEY not set)[/yellow]")
        return
    if start_day is not None:
        config = replace(config, billing_start_day=start_day)

    try:
        usage = LatitudeClient(config).get_bandwidth_usage()
    except BandwidthError as e:
        _fail(e)

    if usage is None:
        console.print("[yellow]Bandwidth usage unavailable[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title="Bandwidth Usage")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Quota (GB)", str(usage.quota))
    table.add_row("Inbound (GB)", f"{usage.inbound} ({usage.inbound_usage}%)")
    table.add_row("Outbound (GB)", f"{usage.outbound} ({usage.outbound_usage}%)")
    console.print(table)


@app.command("billing-cycle")
def billing_cycle(
    start_day: Optional[int] = typer.Option(
        None, "--start-day", "-d", min=1, max=31, help="Billing cycle start day"
    ),
    reference: Optional[str] = typer.Option(
        None, "--reference", "-r", help="Reference time, ISO-8601 (default: now)"
    ),
):
    """Print the billing cycle window containing a point in time."""
    from votewatch.services.bandwidth import current_dt_utc, get_date_range
    from votewatch.services.errors import DateConstructionError

    day = start_day if start_day is not None else get_settings().latitude.billing_start_day
    ref = parse_reference(reference) if reference else current_dt_utc()
    try:
        start, end = get_date_range(day, ref)
    except DateConstructionError as e:
        _fail(e)

    suffix = utc_offset_suffix(ref)
    console.print(f"{start}{suffix} .. {end}{suffix}")


if __name__ == "__main__":
    app()
