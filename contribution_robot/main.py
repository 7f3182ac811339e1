import logging
import sys
from datetime import datetime
from pathlib import Path

import sentry_sdk

from contribution_robot.core.observability import configure_logging
from contribution_robot.core.observability import init_sentry
from contribution_robot.models import Theme
from contribution_robot.services.calendar_service import fetch_contribution_weeks
from contribution_robot.services.calendar_service import flatten_weeks
from contribution_robot.services.layout_service import get_grid_metrics
from contribution_robot.services.render_service import render_robot_svg
from contribution_robot.settings import Settings
from contribution_robot.themes import DARK_THEME
from contribution_robot.themes import LIGHT_THEME


logger = logging.getLogger(__name__)

OUTPUT_FILES: tuple[tuple[str, Theme], ...] = (
    ("github-contribution-grid-robot.svg", LIGHT_THEME),
    ("github-contribution-grid-robot-dark.svg", DARK_THEME),
)


class ConfigurationError(Exception):
    """Raised when required settings are missing."""


class ContributionDataError(Exception):
    """Raised when the calendar was fetched but holds no days."""


def run(settings: Settings, now: datetime | None = None) -> list[Path]:
    """Fetch the calendar, render both themes and write the images.

    Returns the written file paths. Nothing is written unless both images
    rendered.
    """

    username = settings.username
    if not username:
        raise ConfigurationError("Missing PROFILE_USERNAME or GITHUB_ACTOR.")

    weeks = fetch_contribution_weeks(username=username, settings=settings, now=now)
    days = flatten_weeks(weeks)
    if not days:
        raise ContributionDataError(f'No contribution data available for "{username}".')

    metrics = get_grid_metrics(len(weeks))
    rendered = [
        (settings.output_dir / file_name, render_robot_svg(username, days, metrics, theme))
        for file_name, theme in OUTPUT_FILES
    ]

    settings.output_dir.mkdir(parents=True, exist_ok=True)
    write_all(rendered)
    return [path for path, _ in rendered]


def write_all(documents: list[tuple[Path, str]]) -> None:
    """Write every document or none of them.

    Documents are staged next to their targets and only moved into place
    once all of them were written.
    """

    staged: list[tuple[Path, Path]] = []
    try:
        for path, content in documents:
            staging_path = path.with_name(f".{path.name}.tmp")
            staged.append((staging_path, path))
            staging_path.write_text(content, encoding="utf-8")
    except OSError:
        for staging_path, _ in staged:
            staging_path.unlink(missing_ok=True)
        raise

    for staging_path, path in staged:
        staging_path.replace(path)
        logger.info("Wrote %s", path)


def main() -> int:
    try:
        settings = Settings()
        configure_logging(settings)
        init_sentry(settings)
        run(settings)
    except Exception as exc:
        sentry_sdk.capture_exception(exc)
        sys.stderr.write(f"{exc}\n")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
