from collections.abc import Mapping
from datetime import date
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from contribution_robot.models import ContributionDay
from contribution_robot.models import Week


USER_AGENT = "ai-contribution-robot-generator"
DAY_NODE_CLASS = "ContributionCalendar-day"

CALENDAR_QUERY = """
query($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            contributionCount
            date
            weekday
          }
        }
      }
    }
  }
}
"""


class CalendarSourceError(ValueError):
    """Raised when a calendar source answers with unusable data."""


def format_graphql_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def weekday_of(day: date) -> int:
    """Return the weekday index with Sunday as 0."""

    return (day.weekday() + 1) % 7


def fetch_graphql_weeks(
    username: str,
    token: str,
    graphql_url: str,
    from_moment: datetime,
    to_moment: datetime,
    timeout: float = 20.0,
) -> list[Week]:
    """Fetch the pre-grouped contribution calendar from GitHub GraphQL API."""

    variables = {
        "username": username,
        "from": format_graphql_timestamp(from_moment),
        "to": format_graphql_timestamp(to_moment),
    }
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
    }

    response = httpx.post(
        graphql_url,
        json={"query": CALENDAR_QUERY, "variables": variables},
        headers=headers,
        timeout=timeout,
    )
    if response.is_error:
        raise CalendarSourceError(
            f"GitHub GraphQL request failed ({response.status_code}): {response.text}"
        )

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise CalendarSourceError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if errors and not isinstance(errors, list):
        raise CalendarSourceError(f"GitHub GraphQL errors: {errors}")
    if errors:
        messages = [
            str(error.get("message")) if isinstance(error, Mapping) else str(error)
            for error in errors
        ]
        raise CalendarSourceError(f"GitHub GraphQL errors: {'; '.join(messages)}")

    calendar = _dig(payload, "data", "user", "contributionsCollection", "contributionCalendar")
    if calendar is None:
        raise CalendarSourceError(f'Contribution calendar not found for "{username}".')

    raw_weeks = calendar.get("weeks")
    if not isinstance(raw_weeks, list):
        return []

    weeks: list[Week] = []
    for raw_week in raw_weeks:
        if not isinstance(raw_week, Mapping):
            continue
        contribution_days = raw_week.get("contributionDays")
        if not isinstance(contribution_days, list):
            continue

        days: list[ContributionDay] = []
        for item in contribution_days:
            if not isinstance(item, Mapping):
                continue
            raw_date = item.get("date")
            raw_count = item.get("contributionCount")
            raw_weekday = item.get("weekday")
            if not isinstance(raw_date, str) or not isinstance(raw_count, int):
                continue
            try:
                parsed_day = date.fromisoformat(raw_date)
            except ValueError:
                continue
            if not isinstance(raw_weekday, int):
                raw_weekday = weekday_of(parsed_day)
            days.append(
                ContributionDay(
                    date=parsed_day,
                    weekday=raw_weekday,
                    contribution_count=raw_count,
                )
            )

        if days:
            weeks.append(Week(days=tuple(sorted(days, key=lambda day: day.weekday))))

    return weeks


def fetch_public_calendar_days(
    username: str,
    calendar_url: str,
    from_day: date,
    to_day: date,
    timeout: float = 20.0,
) -> list[ContributionDay]:
    """Scrape the public contribution calendar into a date-sorted day list."""

    response = httpx.get(
        calendar_url.format(username=quote(username, safe="")),
        params={"from": from_day.isoformat(), "to": to_day.isoformat()},
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "image/svg+xml,text/html;q=0.9,*/*;q=0.8",
        },
        timeout=timeout,
        follow_redirects=True,
    )
    if response.is_error:
        raise CalendarSourceError(
            f"Contribution calendar request failed ({response.status_code})"
        )

    days = parse_calendar_markup(response.text)
    if not days:
        raise CalendarSourceError(
            "No contribution-day nodes found in public calendar response"
        )

    return sorted(days, key=lambda day: day.date)


def parse_calendar_markup(markup: str) -> list[ContributionDay]:
    """Extract day nodes carrying both `data-date` and `data-count`.

    Weekday is recomputed from the date; any weekday or level attribute in
    the markup is ignored.
    """

    soup = BeautifulSoup(markup, "html.parser")
    days: list[ContributionDay] = []
    for node in soup.find_all(class_=DAY_NODE_CLASS):
        raw_date = node.get("data-date")
        raw_count = node.get("data-count")
        if not isinstance(raw_date, str) or not isinstance(raw_count, str):
            continue
        if not (raw_count.isascii() and raw_count.isdigit()):
            continue
        try:
            parsed_day = date.fromisoformat(raw_date)
        except ValueError:
            continue

        days.append(
            ContributionDay(
                date=parsed_day,
                weekday=weekday_of(parsed_day),
                contribution_count=int(raw_count),
            )
        )

    return days


def _dig(payload: Mapping[str, Any], *keys: str) -> Mapping[str, Any] | None:
    current: Any = payload
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current if isinstance(current, Mapping) else None
