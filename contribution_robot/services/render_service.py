from collections.abc import Sequence
from html import escape

from contribution_robot.models import ContributionDay
from contribution_robot.models import GridMetrics
from contribution_robot.models import Theme
from contribution_robot.services.layout_service import build_month_labels
from contribution_robot.services.layout_service import build_scan_path
from contribution_robot.services.layout_service import cell_center
from contribution_robot.services.layout_service import cell_top_left
from contribution_robot.services.layout_service import contribution_color
from contribution_robot.services.layout_service import format_day
from contribution_robot.services.layout_service import max_contribution_count
from contribution_robot.services.layout_service import motion_days
from contribution_robot.services.layout_service import motion_duration


FONT_FAMILY = "Inter, Segoe UI, Arial, sans-serif"
WEEKDAY_LABELS = (("Mon", 1), ("Wed", 3), ("Fri", 5))
PULSE_STAGGER_SECONDS = 0.11


def render_robot_svg(
    username: str,
    days: Sequence[ContributionDay],
    metrics: GridMetrics,
    theme: Theme,
) -> str:
    """Render the animated contribution robot as a standalone SVG document.

    `days` must carry their `week_index`. Every color is taken from `theme`.
    """

    visited_days = motion_days(days)
    scan_path = build_scan_path([cell_center(day, metrics) for day in visited_days])
    duration = f"{motion_duration(len(visited_days)):.2f}"
    handle = escape(username)

    return "".join(
        [
            f'<svg width="{metrics.width}" height="{metrics.height}" '
            f'viewBox="0 0 {metrics.width} {metrics.height}" fill="none" '
            'xmlns="http://www.w3.org/2000/svg" '
            'xmlns:xlink="http://www.w3.org/1999/xlink" '
            'role="img" aria-labelledby="title desc">',
            f'<title id="title">AI Contribution Robot for {handle}</title>',
            '<desc id="desc">Animated robot that scans your GitHub contribution graph.</desc>',
            _defs(theme),
            _panel(handle, metrics, theme),
            f'<path id="scanPath" d="{scan_path}" fill="none" stroke="{theme.accent}" '
            'stroke-width="1.4" stroke-linecap="round" stroke-linejoin="round" '
            'opacity="0.38" stroke-dasharray="5 8">'
            '<animate attributeName="stroke-dashoffset" from="0" to="-26" dur="2.2s" '
            'repeatCount="indefinite" />'
            "</path>",
            _base_cells(days, metrics, theme),
            _contribution_cells(days, metrics, theme),
            _month_labels(days, metrics, theme),
            _weekday_labels(metrics, theme),
            _robot(duration, theme),
            f'<text x="{metrics.center_x:g}" y="{metrics.height - 20}" text-anchor="middle" '
            f'fill="{theme.muted}" font-size="11" font-family="{FONT_FAMILY}">'
            "Generated automatically from your contribution graph</text>",
            "</svg>",
        ]
    )


def _defs(theme: Theme) -> str:
    return (
        "<defs>"
        '<filter id="robotGlow" x="-100%" y="-100%" width="300%" height="300%">'
        f'<feDropShadow dx="0" dy="0" stdDeviation="2" flood-color="{theme.accent_strong}" '
        'flood-opacity="0.45" />'
        "</filter>"
        f'<linearGradient id="headerGlow-{theme.name}" x1="0" y1="0" x2="1" y2="0">'
        f'<stop offset="0%" stop-color="{theme.accent_strong}" stop-opacity="0.15" />'
        f'<stop offset="100%" stop-color="{theme.accent_strong}" stop-opacity="0" />'
        "</linearGradient>"
        "</defs>"
    )


def _panel(handle: str, metrics: GridMetrics, theme: Theme) -> str:
    return (
        f'<rect width="{metrics.width}" height="{metrics.height}" rx="18" ry="18" '
        f'fill="{theme.background}" />'
        f'<rect x="10" y="10" width="{metrics.width - 20}" height="{metrics.height - 20}" '
        f'rx="14" ry="14" fill="{theme.panel}" stroke="{theme.border}" stroke-width="1" />'
        f'<rect x="10" y="10" width="{metrics.width - 20}" height="42" rx="14" ry="14" '
        f'fill="url(#headerGlow-{theme.name})" />'
        f'<text x="26" y="36" fill="{theme.text}" font-size="16" font-weight="600" '
        f'font-family="{FONT_FAMILY}">\U0001f916 AI Contribution Robot</text>'
        f'<text x="{metrics.width - 24}" y="36" text-anchor="end" fill="{theme.muted}" '
        f'font-size="11" font-family="{FONT_FAMILY}">@{handle}</text>'
    )


def _base_cells(
    days: Sequence[ContributionDay], metrics: GridMetrics, theme: Theme
) -> str:
    cells = []
    for day in days:
        x, y = cell_top_left(day, metrics)
        cells.append(
            f'<rect x="{x}" y="{y}" width="{metrics.cell}" height="{metrics.cell}" '
            f'rx="2" ry="2" fill="{theme.grid_base}" stroke="{theme.border}" '
            'stroke-width="0.25" />'
        )
    return "".join(cells)


def _contribution_cells(
    days: Sequence[ContributionDay], metrics: GridMetrics, theme: Theme
) -> str:
    max_count = max_contribution_count(days)
    active_days = [day for day in days if day.contribution_count > 0]

    cells = []
    for index, day in enumerate(active_days):
        x, y = cell_top_left(day, metrics)
        count = day.contribution_count
        noun = "contribution" if count == 1 else "contributions"
        cells.append(
            f'<rect x="{x}" y="{y}" width="{metrics.cell}" height="{metrics.cell}" '
            f'rx="2" ry="2" fill="{contribution_color(count, max_count, theme)}">'
            f"<title>{format_day(day.date)} · {count} {noun}</title>"
            '<animate attributeName="opacity" values="0.82;1;0.82" dur="3.2s" '
            f'begin="{index * PULSE_STAGGER_SECONDS:.2f}s" repeatCount="indefinite" />'
            "</rect>"
        )
    return "".join(cells)


def _month_labels(
    days: Sequence[ContributionDay], metrics: GridMetrics, theme: Theme
) -> str:
    return "".join(
        f'<text x="{x}" y="{metrics.offset_y - 10}" fill="{theme.muted}" '
        f'font-size="10" font-family="{FONT_FAMILY}">{label}</text>'
        for label, x in build_month_labels(days, metrics)
    )


def _weekday_labels(metrics: GridMetrics, theme: Theme) -> str:
    step = metrics.cell + metrics.gap
    return "".join(
        f'<text x="{metrics.offset_x - 36}" y="{metrics.offset_y + row * step + 8}" '
        f'fill="{theme.muted}" font-size="10" font-family="{FONT_FAMILY}">{label}</text>'
        for label, row in WEEKDAY_LABELS
    )


def _along_scan_path(duration: str, rotate: bool = False) -> str:
    rotate_attribute = ' rotate="auto"' if rotate else ""
    return (
        f'<animateMotion dur="{duration}s" repeatCount="indefinite"{rotate_attribute}>'
        '<mpath href="#scanPath" xlink:href="#scanPath" />'
        "</animateMotion>"
    )


def _robot(duration: str, theme: Theme) -> str:
    # The glow point shares the robot's motion so both stay in sync.
    return (
        '<g filter="url(#robotGlow)">'
        "<g>"
        f'<path d="M -12 4 L 0 -12 L 12 4 Z" fill="{theme.beam}">'
        '<animate attributeName="opacity" values="0.2;0.6;0.2" dur="1.4s" '
        'repeatCount="indefinite" />'
        "</path>"
        '<g transform="translate(-12,-12)">'
        f'<rect x="-2" y="-8" width="4" height="5" rx="1" fill="{theme.robot_stroke}" />'
        f'<circle cx="0" cy="-8" r="2.1" fill="{theme.accent_strong}">'
        '<animate attributeName="r" values="1.6;2.3;1.6" dur="1.4s" repeatCount="indefinite" />'
        "</circle>"
        f'<rect x="-10" y="-3" width="20" height="16" rx="4" fill="{theme.robot_body}" '
        f'stroke="{theme.robot_stroke}" stroke-width="1.8" />'
        f'<rect x="-13" y="0" width="3" height="8" rx="1.5" fill="{theme.robot_stroke}" />'
        f'<rect x="10" y="0" width="3" height="8" rx="1.5" fill="{theme.robot_stroke}" />'
        f'<rect x="-6.5" y="13" width="4" height="4" rx="1" fill="{theme.robot_stroke}" />'
        f'<rect x="2.5" y="13" width="4" height="4" rx="1" fill="{theme.robot_stroke}" />'
        f'<rect x="-7" y="0" width="14" height="8" rx="2" fill="{theme.panel}" '
        f'stroke="{theme.robot_stroke}" stroke-width="1.1" />'
        + "".join(
            f'<circle cx="{eye_x}" cy="4" r="1.6" fill="{theme.robot_eye}">'
            '<animate attributeName="cy" values="4;3.4;4" dur="1.1s" repeatCount="indefinite" />'
            "</circle>"
            for eye_x in (-3, 3)
        )
        + f'<rect x="-4" y="8.5" width="8" height="1.8" rx="0.9" fill="{theme.robot_stroke}">'
        '<animate attributeName="width" values="8;6;8" dur="1.6s" repeatCount="indefinite" />'
        "</rect>"
        "</g>"
        + _along_scan_path(duration, rotate=True)
        + "</g>"
        f'<circle cx="0" cy="0" r="4.4" fill="{theme.accent_strong}" opacity="0.85">'
        '<animate attributeName="r" values="3;8;3" dur="1.6s" repeatCount="indefinite" />'
        '<animate attributeName="opacity" values="0.85;0.2;0.85" dur="1.6s" '
        'repeatCount="indefinite" />'
        + _along_scan_path(duration)
        + "</circle>"
        "</g>"
    )
