from collections.abc import Sequence
from datetime import date

from contribution_robot.models import ContributionDay
from contribution_robot.models import GridMetrics
from contribution_robot.models import Theme


CELL_SIZE = 11
CELL_GAP = 4
OFFSET_X = 68
OFFSET_Y = 58
DAYS_PER_WEEK = 7

LOW_RATIO = 0.34
MEDIUM_RATIO = 0.67

MIN_MOTION_SECONDS = 14.0
MAX_MOTION_SECONDS = 38.0
DAYS_PER_MOTION_SECOND = 2.2

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def get_grid_metrics(week_count: int) -> GridMetrics:
    """Compute grid geometry for a calendar with `week_count` columns."""

    step = CELL_SIZE + CELL_GAP
    graph_width = week_count * step - CELL_GAP
    graph_height = DAYS_PER_WEEK * step - CELL_GAP

    return GridMetrics(
        cell=CELL_SIZE,
        gap=CELL_GAP,
        offset_x=OFFSET_X,
        offset_y=OFFSET_Y,
        graph_width=graph_width,
        graph_height=graph_height,
        width=OFFSET_X + graph_width + 30,
        height=OFFSET_Y + graph_height + 92,
        center_x=OFFSET_X + graph_width / 2,
    )


def cell_top_left(day: ContributionDay, metrics: GridMetrics) -> tuple[int, int]:
    step = metrics.cell + metrics.gap
    return (
        metrics.offset_x + day.week_index * step,
        metrics.offset_y + day.weekday * step,
    )


def cell_center(day: ContributionDay, metrics: GridMetrics) -> tuple[float, float]:
    x, y = cell_top_left(day, metrics)
    return x + metrics.cell / 2, y + metrics.cell / 2


def max_contribution_count(days: Sequence[ContributionDay]) -> int:
    return max([day.contribution_count for day in days] + [1])


def contribution_tier(count: int, max_count: int) -> str:
    """Map a daily count to the `low`, `medium` or `high` intensity tier."""

    ratio = count / max(max_count, 1)
    if ratio < LOW_RATIO:
        return "low"
    if ratio < MEDIUM_RATIO:
        return "medium"
    return "high"


def contribution_color(count: int, max_count: int, theme: Theme) -> str:
    return getattr(theme, contribution_tier(count, max_count))


def motion_days(days: Sequence[ContributionDay]) -> list[ContributionDay]:
    """Return the days the robot visits.

    Falls back to the most recent day so the robot has a place to stand on
    a year without contributions.
    """

    active_days = [day for day in days if day.contribution_count > 0]
    if active_days:
        return active_days
    return list(days[-1:])


def build_scan_path(points: Sequence[tuple[float, float]]) -> str:
    """Join cell centers into one SVG path description."""

    if not points:
        return "M 0 0"

    if len(points) == 1:
        x, y = points[0]
        return f"M {x:.2f} {y:.2f} L {x + 0.01:.2f} {y:.2f}"

    return " ".join(
        f"{'M' if index == 0 else 'L'} {x:.2f} {y:.2f}"
        for index, (x, y) in enumerate(points)
    )


def motion_duration(day_count: int) -> float:
    """Seconds for one robot lap, clamped to keep the pace readable."""

    seconds = day_count / DAYS_PER_MOTION_SECOND
    return round(max(MIN_MOTION_SECONDS, min(MAX_MOTION_SECONDS, seconds)), 2)


def month_name(day: date) -> str:
    return MONTH_NAMES[day.month - 1]


def format_day(day: date) -> str:
    """Format a date as `Feb 3, 2026` regardless of the process locale."""

    return f"{month_name(day)} {day.day}, {day.year}"


def build_month_labels(
    days: Sequence[ContributionDay],
    metrics: GridMetrics,
) -> list[tuple[str, int]]:
    """Place a month label above each week whose Sunday starts a new month."""

    labels: list[tuple[str, int]] = []
    previous_month = ""
    for day in days:
        if day.weekday != 0:
            continue
        label = month_name(day.date)
        if label == previous_month:
            continue
        labels.append((label, cell_top_left(day, metrics)[0]))
        previous_month = label

    return labels
