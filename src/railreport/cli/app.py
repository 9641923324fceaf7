"""Main Typer CLI application for railreport."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from railreport import pipeline
from railreport.config import ReporterConfig, Settings, get_settings, load_config
from railreport.core.exceptions import RailReportError
from railreport.logging import configure_logging, get_logger, run_id_ctx
from railreport.testrail.client import TestRailClient

app = typer.Typer(
    name="railreport",
    help="Upload JUnit XML test results to TestRail",
    no_args_is_help=True,
)

logger = get_logger(__name__)

UrlOption = Annotated[
    str | None,
    typer.Option("--url", help="TestRail URL (or set TESTRAIL_URL)"),
]
UsernameOption = Annotated[
    str | None,
    typer.Option("--username", help="TestRail user (or set TESTRAIL_UN)"),
]
PasswordOption = Annotated[
    str | None,
    typer.Option("--password", help="TestRail password or API key (or set TESTRAIL_PW)"),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("-c", "--config", help="Mapping file (default: ./.testrail-cli.yml)"),
]
DebugOption = Annotated[
    bool,
    typer.Option("--debug", help="Log intermediate state to stderr"),
]
MaxAttemptsOption = Annotated[
    int | None,
    typer.Option("--max-attempts", min=1, help="Attempts per TestRail call"),
]


def _fail(message: str) -> typer.Exit:
    typer.echo(message, err=True)
    return typer.Exit(code=1)


def _setup(debug: bool) -> Settings:
    """Load settings and configure logging for a command."""
    settings = get_settings()
    level = "DEBUG" if debug else settings.effective_log_level
    configure_logging(log_level=level, json_format=settings.log_json_format)
    return settings


def _load_config(path: Path | None) -> ReporterConfig:
    try:
        return load_config(path)
    except RailReportError as e:
        raise _fail(str(e)) from e


def _create_client(
    settings: Settings,
    url: str | None,
    username: str | None,
    password: str | None,
) -> TestRailClient:
    """Build a client from CLI options, falling back to the environment."""
    url = url or settings.url
    username = username or settings.username
    password = password or settings.password

    if not (url and username and password):
        raise _fail(
            "Couldn't find TestRail API credentials.\n"
            "URL:      Either TESTRAIL_URL env variable or --url flag.\n"
            "Username: Either TESTRAIL_UN env variable or --username flag.\n"
            "Password: Either TESTRAIL_PW env variable or --password flag."
        )
    return TestRailClient(url, username, password, timeout=settings.timeout)


@app.command()
def init(
    project_id: Annotated[
        str | None,
        typer.Option("-p", "--project-id", help="Project to add the run to"),
    ] = None,
    run_name: Annotated[
        str | None,
        typer.Option("-n", "--run-name", help="Name of the new run"),
    ] = None,
    suite_id: Annotated[
        str | None,
        typer.Option("-s", "--suite-id", help="Test suite to run"),
    ] = None,
    description: Annotated[
        str | None,
        typer.Option("-d", "--description", help="Run description"),
    ] = None,
    milestone_id: Annotated[
        str | None,
        typer.Option("-m", "--milestone-id", help="Milestone to associate the run with"),
    ] = None,
    url: UrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    config: ConfigOption = None,
    debug: DebugOption = False,
    max_attempts: MaxAttemptsOption = None,
) -> None:
    """Create a TestRail run and print its id."""
    settings = _setup(debug)
    reporter_config = _load_config(config)

    project_id = project_id or _optional_str(reporter_config.project_id)
    suite_id = suite_id or _optional_str(reporter_config.suite_id)
    if not project_id or not run_name:
        raise _fail("You must supply a project id (-p/--project-id) and run name (-n/--run-name).")

    with _create_client(settings, url, username, password) as client:
        try:
            run = pipeline.open_run(
                client,
                project_id,
                run_name,
                suite_id=suite_id,
                description=description,
                milestone_id=milestone_id,
                max_attempts=max_attempts or settings.max_attempts,
                delay=settings.retry_delay,
            )
        except RailReportError as e:
            raise _fail(f"Error initializing test run in TestRail: {e}") from e

    logger.debug("run_created", response=run)
    typer.echo(run["id"])


@app.command()
def finish(
    run_id: Annotated[
        str | None,
        typer.Option("-r", "--run-id", help="Run to close"),
    ] = None,
    url: UrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    debug: DebugOption = False,
    max_attempts: MaxAttemptsOption = None,
) -> None:
    """Close a TestRail run."""
    settings = _setup(debug)
    if not run_id:
        raise _fail("You must supply a run id (-r/--run-id).")
    run_id_ctx.set(run_id)

    with _create_client(settings, url, username, password) as client:
        try:
            pipeline.close_run(
                client,
                run_id,
                max_attempts=max_attempts or settings.max_attempts,
                delay=settings.retry_delay,
            )
        except RailReportError as e:
            raise _fail(f"There was an error closing the test run: {e}") from e

    typer.echo(f"Successfully closed test run {run_id}.")


@app.command()
def report(
    run_id: Annotated[
        str | None,
        typer.Option("-r", "--run-id", help="Run to record results against"),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("-f", "--file", help="JUnit XML file or directory of files"),
    ] = None,
    coverage: Annotated[
        bool,
        typer.Option("--coverage", help="Log mapping entries no test case used"),
    ] = False,
    url: UrlOption = None,
    username: UsernameOption = None,
    password: PasswordOption = None,
    config: ConfigOption = None,
    debug: DebugOption = False,
    max_attempts: MaxAttemptsOption = None,
) -> None:
    """Map JUnit results to TestRail cases and upload them to a run."""
    settings = _setup(debug)
    if not file or not run_id:
        raise _fail("You must supply a file (-f/--file) and run id (-r/--run-id).")
    run_id_ctx.set(run_id)
    reporter_config = _load_config(config)

    with _create_client(settings, url, username, password) as client:
        try:
            outcome = pipeline.report(
                client,
                run_id,
                file,
                reporter_config.mapping,
                max_attempts=max_attempts or settings.max_attempts,
                delay=settings.retry_delay,
                log_coverage=coverage or reporter_config.coverage,
                max_workers=settings.max_workers,
            )
        except RailReportError as e:
            raise _fail(str(e)) from e

    if outcome.upload.status is pipeline.UploadStatus.UPLOADED:
        typer.echo(f"Successfully uploaded {outcome.upload.count} test case results to TestRail.")
    else:
        typer.echo("No mapped test results to report.")


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def main() -> None:
    """Entry point for the Typer CLI."""
    app()
