"""CLI commands for fetching element data."""

import logging
from pathlib import Path

import click
import structlog

from celestrak.errors import CelestrakError
from celestrak.fetch.client import CelestrakClient
from celestrak.fetch.config import ClientConfig
from celestrak.fetch.context import FetchContext
from celestrak.observability.logging import configure_logging
from celestrak.query.models import OutputFormat, Query, TableFlags
from celestrak.settings import get_settings


logger = structlog.get_logger()

# Endpoint choice -> client operation
ENDPOINT_OPERATIONS = {
    "gp": CelestrakClient.fetch_gp,
    "gp-first": CelestrakClient.fetch_gp_first,
    "gp-last": CelestrakClient.fetch_gp_last,
    "table": CelestrakClient.fetch_table,
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
def cli() -> None:
    """Fetch orbital element data from CelesTrak."""


@cli.command()
@click.option("--catnr", default="", help="Catalog number (NORAD ID).")
@click.option("--intdes", default="", help="International designator (yyyy-nnn).")
@click.option("--group", default="", help="Group name, e.g. STATIONS.")
@click.option("--name", default="", help="Satellite name (partial match).")
@click.option("--special", default="", help="Special dataset: GPZ, GPZ-PLUS, DECAYING.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    default=None,
    help="Output format (default: TLE).",
)
@click.option(
    "--endpoint",
    type=click.Choice(list(ENDPOINT_OPERATIONS)),
    default="gp",
    show_default=True,
    help="Element endpoint to query.",
)
@click.option("--bstar", is_flag=True, help="Table: show BSTAR instead of eccentricity.")
@click.option("--show-ops", is_flag=True, help="Table: show operational status.")
@click.option("--oldest", is_flag=True, help="Table: only data older than 3.5 days.")
@click.option("--docked", is_flag=True, help="Table: only docked objects.")
@click.option("--movers", is_flag=True, help="Table: only drifting GEO objects.")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Overall deadline in seconds, including retries.",
)
@click.option(
    "--retries", type=click.IntRange(0, 10), default=None, help="Override max retries."
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write payload to file instead of stdout.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines on stderr.")
def fetch(  # noqa: PLR0913
    catnr: str,
    intdes: str,
    group: str,
    name: str,
    special: str,
    fmt: str | None,
    endpoint: str,
    bstar: bool,
    show_ops: bool,
    oldest: bool,
    docked: bool,
    movers: bool,
    timeout: float | None,
    retries: int | None,
    output: Path | None,
    log_level: str,
    json_logs: bool,
) -> None:
    """Fetch one query and write the raw payload."""
    configure_logging(
        level=getattr(logging, log_level.upper()),
        json_format=json_logs,
    )

    query = Query(
        catnr=catnr,
        intdes=intdes,
        group=group,
        name=name,
        special=special,
        format=OutputFormat(fmt.upper()) if fmt else None,
        table_flags=TableFlags(
            bstar=bstar,
            show_ops=show_ops,
            oldest=oldest,
            docked=docked,
            movers=movers,
        ),
    )

    config = get_settings().to_client_config()
    if retries is not None:
        config = ClientConfig.model_validate(
            {**config.model_dump(), "max_retries": retries}
        )

    ctx = FetchContext.with_timeout(timeout) if timeout else FetchContext.background()

    with CelestrakClient(config) as client:
        try:
            data = ENDPOINT_OPERATIONS[endpoint](client, ctx, query)
        except CelestrakError as e:
            logger.debug("cli_fetch_failed", error=e.to_dict())
            raise click.ClickException(str(e)) from e

    if output is not None:
        output.write_bytes(data)
        click.echo(f"Wrote {len(data)} bytes to {output}", err=True)
    else:
        stdout = click.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()
