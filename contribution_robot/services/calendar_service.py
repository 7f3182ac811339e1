import logging
from collections.abc import Callable
from collections.abc import Sequence
from datetime import UTC
from datetime import date
from datetime import datetime
from datetime import timedelta
from functools import partial

import httpx

from contribution_robot.github_api import fetch_graphql_weeks
from contribution_robot.github_api import fetch_public_calendar_days
from contribution_robot.models import ContributionDay
from contribution_robot.models import Week
from contribution_robot.settings import Settings


logger = logging.getLogger(__name__)

WINDOW_DAYS = 365


class CalendarFetchError(Exception):
    """Raised when every calendar source failed for a user."""

    def __init__(self, username: str, attempts: Sequence[str]) -> None:
        self.username = username
        self.attempts = list(attempts)
        super().__init__(
            f'Unable to fetch contribution data for "{username}". '
            + " | ".join(self.attempts)
        )


def contribution_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return the trailing one-year window ending at `now` (UTC)."""

    to_moment = now or datetime.now(UTC)
    return to_moment - timedelta(days=WINDOW_DAYS), to_moment


def start_of_week(day: ContributionDay) -> date:
    return day.date - timedelta(days=day.weekday)


def group_days_into_weeks(days: Sequence[ContributionDay]) -> list[Week]:
    """Group chronological days into weeks keyed by their week start.

    Weeks keep the order in which their start date first appears and days
    inside a week are ordered by weekday. Empty input yields no weeks.
    """

    grouped_weeks: dict[date, list[ContributionDay]] = {}
    for day in days:
        grouped_weeks.setdefault(start_of_week(day), []).append(day)

    return [
        Week(days=tuple(sorted(week_days, key=lambda day: day.weekday)))
        for week_days in grouped_weeks.values()
    ]


def flatten_weeks(weeks: Sequence[Week]) -> list[ContributionDay]:
    """Flatten weeks into one day list with `week_index` assigned."""

    return [
        day.model_copy(update={"week_index": week_index})
        for week_index, week in enumerate(weeks)
        for day in week.days
    ]


def fetch_public_calendar_weeks(
    username: str,
    settings: Settings,
    from_moment: datetime,
    to_moment: datetime,
) -> list[Week]:
    days = fetch_public_calendar_days(
        username=username,
        calendar_url=settings.github_public_calendar_url,
        from_day=from_moment.date(),
        to_day=to_moment.date(),
        timeout=settings.request_timeout_seconds,
    )
    weeks = group_days_into_weeks(days)
    if not weeks:
        raise ValueError("Failed to group public contribution calendar into weeks")
    return weeks


def fetch_contribution_weeks(
    username: str,
    settings: Settings,
    now: datetime | None = None,
) -> list[Week]:
    """Fetch a year of contribution weeks, falling back to the public calendar.

    The GraphQL source is tried first when a token is configured and its
    result is used as-is, even when it holds no weeks. Otherwise the public
    calendar is scraped. When every source fails a `CalendarFetchError`
    listing each attempt is raised.
    """

    from_moment, to_moment = contribution_window(now)
    attempts: list[str] = []
    strategies: list[tuple[str, Callable[[], list[Week]]]] = []

    token = settings.token
    if token:
        strategies.append(
            (
                "GraphQL",
                partial(
                    fetch_graphql_weeks,
                    username=username,
                    token=token,
                    graphql_url=settings.github_graphql_url,
                    from_moment=from_moment,
                    to_moment=to_moment,
                    timeout=settings.request_timeout_seconds,
                ),
            )
        )
    else:
        attempts.append("GraphQL: skipped (missing GITHUB_TOKEN)")

    strategies.append(
        (
            "Public calendar",
            partial(
                fetch_public_calendar_weeks,
                username=username,
                settings=settings,
                from_moment=from_moment,
                to_moment=to_moment,
            ),
        )
    )

    for name, strategy in strategies:
        try:
            weeks = strategy()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("%s calendar source failed for %s: %s", name, username, exc)
            attempts.append(f"{name}: {exc}")
            continue

        logger.info("Fetched %d weeks for %s from %s", len(weeks), username, name)
        return weeks

    raise CalendarFetchError(username, attempts)
