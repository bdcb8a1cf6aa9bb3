"""Command-line entry point for YouTrack Wrapped."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated, NoReturn

import pendulum
import typer

from ytwrapped.aggregate.service import AggregationService, write_dataset
from ytwrapped.collector import YearDataCollector
from ytwrapped.config import AppSettings, load_settings
from ytwrapped.errors import AuthError, TransportError, YouTrackError
from ytwrapped.fetchers import projects as project_fetchers
from ytwrapped.fetchers import users
from ytwrapped.render.service import RenderService
from ytwrapped.store.settings_store import SavedSettings, SettingsStore
from ytwrapped.youtrack_client import YouTrackClient

if TYPE_CHECKING:
    from datetime import tzinfo

    from ytwrapped.models import RawYearDataset

app = typer.Typer(add_completion=False, help="Your year in YouTrack, wrapped.")

LOGGER = logging.getLogger(__name__)

CONNECTIVITY_HINT = (
    "Could not connect to YouTrack. Please check:\n"
    "1. The YouTrack URL is correct\n"
    "2. The instance is reachable from this machine\n"
    "3. You have network connectivity"
)
AUTH_HINT = (
    "Authentication failed. Please check your API token.\n"
    "Make sure the token has the required permissions."
)

YearOption = Annotated[int | None, typer.Option("--year", help="Override the configured year.")]
ProjectsOption = Annotated[
    str | None,
    typer.Option("--projects", help="Comma-separated project short names to read articles from."),
]


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s - %(message)s")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable verbose logging output.")] = False,
) -> None:
    """Configure logging before executing a sub-command."""
    _configure_logging(verbose)


@app.command()
def collect(
    year: YearOption = None,
    projects: ProjectsOption = None,
    remember: Annotated[
        bool | None,
        typer.Option("--remember/--forget", help="Save or clear the connection settings after collecting."),
    ] = None,
) -> None:
    """Collect a year of activity and store the raw dataset."""
    store = _settings_store()
    try:
        settings = _patched_settings(load_settings(store.load()), year=year, projects=projects)
        target_year = settings.require_year()
        credential = settings.credential()
    except ValueError as exc:
        _handle_settings_error(exc)
    dataset = _run_collection(settings, target_year)
    dataset_path = settings.dataset_path(target_year)
    write_dataset(dataset, dataset_path)
    if remember is True:
        store.save(
            SavedSettings(
                base_url=credential.base_url,
                token=credential.token,
                year=target_year,
                article_projects=settings.article_projects,
            ),
        )
    elif remember is False:
        store.clear()
    typer.echo(
        f"Collected {len(dataset.created_issues)} created issues, {len(dataset.resolved_issues)} resolved issues, "
        f"{len(dataset.comments)} comments and {len(dataset.articles)} articles into {dataset_path}",
    )


@app.command()
def aggregate(year: YearOption = None) -> None:
    """Aggregate a collected dataset into the statistics report."""
    try:
        settings = _patched_settings(_load(), year=year, projects=None)
        target_year = settings.require_year()
    except ValueError as exc:
        _handle_settings_error(exc)
    output_path = settings.report_path(target_year)
    service = AggregationService(timezone=_timezone(settings))
    try:
        report = service.run(dataset_path=settings.dataset_path(target_year), output_path=output_path)
    except (OSError, ValueError) as exc:
        _fail("Failed to aggregate statistics", exc)
    typer.echo(
        f"Aggregated {report.summary.total_contributions} contributions across "
        f"{report.project_stats.total_projects} projects into {output_path}",
    )


@app.command()
def render(year: YearOption = None) -> None:
    """Render the shareable HTML report."""
    try:
        settings = _patched_settings(_load(), year=year, projects=None)
        target_year = settings.require_year()
    except ValueError as exc:
        _handle_settings_error(exc)
    manifest = _render(settings, target_year)
    typer.echo(f"Rendered {len(manifest)} artifacts to {settings.output_dir}")


@app.command()
def wrapped(year: YearOption = None, projects: ProjectsOption = None) -> None:
    """Collect, aggregate, and render in one go."""
    try:
        settings = _patched_settings(_load(), year=year, projects=projects)
        target_year = settings.require_year()
        settings.credential()
    except ValueError as exc:
        _handle_settings_error(exc)
    dataset = _run_collection(settings, target_year)
    write_dataset(dataset, settings.dataset_path(target_year))
    typer.echo("Calculating your statistics...")
    report_path = settings.report_path(target_year)
    try:
        AggregationService(timezone=_timezone(settings)).run(
            dataset_path=settings.dataset_path(target_year),
            output_path=report_path,
        )
    except (OSError, ValueError) as exc:
        _fail("Failed to aggregate statistics", exc)
    _render(settings, target_year)
    typer.echo(f"Your {target_year} Wrapped is ready: {settings.output_dir / 'index.html'}")


@app.command("projects")
def list_projects() -> None:
    """List projects visible to the token, to pick article sources from."""
    try:
        credential = _load().credential()
    except ValueError as exc:
        _handle_settings_error(exc)

    async def _fetch() -> list[tuple[str, str]]:
        async with YouTrackClient(credential) as client:
            found = await project_fetchers.fetch_projects(client)
        return [(project.short_name or "?", project.name or "") for project in found]

    try:
        rows = asyncio.run(_fetch())
    except YouTrackError as exc:
        _handle_youtrack_error(exc)
    for short_name, name in rows:
        typer.echo(f"{short_name}\t{name}")


@app.command()
def doctor() -> None:
    """Validate configuration and verify YouTrack API connectivity."""
    try:
        settings = _load()
        settings.credential()
    except ValueError as exc:
        _handle_settings_error(exc)
    typer.echo(f"Loaded configuration for: {settings.youtrack_url}")
    asyncio.run(_doctor(settings))


async def _doctor(settings: AppSettings) -> None:
    try:
        async with YouTrackClient(settings.credential()) as client:
            user = await users.fetch_current_user(client)
    except YouTrackError as exc:
        _handle_youtrack_error(exc)
    typer.echo(f"Authenticated as: {user.display_name} ({user.login})")


def _run_collection(settings: AppSettings, year: int) -> RawYearDataset:
    async def _collect() -> RawYearDataset:
        async with YouTrackClient(settings.credential()) as client:
            collector = YearDataCollector(client)
            return await collector.collect_year_data(year, settings.article_project_list, typer.echo)

    try:
        return asyncio.run(_collect())
    except YouTrackError as exc:
        _handle_youtrack_error(exc)


def _render(settings: AppSettings, year: int) -> dict[str, str]:
    service = RenderService(
        report_path=settings.report_path(year),
        build_dir=settings.data_dir / "build",
        public_dir=settings.output_dir,
        base_url=settings.youtrack_url or None,
    )
    try:
        return service.run()
    except (OSError, ValueError) as exc:
        _fail("Failed to render report", exc)


def _settings_store() -> SettingsStore:
    return SettingsStore(AppSettings().saved_settings_path)


def _load() -> AppSettings:
    return load_settings(_settings_store().load())


def _timezone(settings: AppSettings) -> str | tzinfo:
    return settings.timezone or pendulum.local_timezone()


def _patched_settings(settings: AppSettings, *, year: int | None, projects: str | None) -> AppSettings:
    updates: dict[str, object] = {}
    if year is not None:
        updates["year"] = year
    if projects is not None:
        updates["article_projects"] = projects
    if updates:
        settings = AppSettings.model_validate({**settings.model_dump(), **updates})
    return settings


def _handle_settings_error(exc: ValueError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _handle_youtrack_error(exc: YouTrackError) -> NoReturn:
    LOGGER.debug("YouTrack request failed", exc_info=exc)
    if isinstance(exc, TransportError):
        message = CONNECTIVITY_HINT
    elif isinstance(exc, AuthError):
        message = AUTH_HINT
    else:
        message = str(exc)
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _fail(prefix: str, exc: Exception) -> NoReturn:
    typer.secho(f"{prefix}: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
