from datetime import UTC
from datetime import date
from datetime import datetime
from datetime import timedelta
from pathlib import Path

import pytest

from contribution_robot.github_api import CalendarSourceError
from contribution_robot.github_api import weekday_of
from contribution_robot.main import ConfigurationError
from contribution_robot.main import ContributionDataError
from contribution_robot.main import main
from contribution_robot.main import run
from contribution_robot.models import ContributionDay
from contribution_robot.services.calendar_service import group_days_into_weeks
from contribution_robot.settings import Settings


NOW = datetime(2026, 2, 7, 12, 0, tzinfo=UTC)
LIGHT_FILE = "github-contribution-grid-robot.svg"
DARK_FILE = "github-contribution-grid-robot-dark.svg"


def sample_weeks():
    first = date(2026, 1, 25)
    days = []
    for offset in range(14):
        day = first + timedelta(days=offset)
        days.append(
            ContributionDay(
                date=day, weekday=weekday_of(day), contribution_count=offset % 3
            )
        )
    return group_days_into_weeks(days)


def test_run_writes_light_and_dark_images(monkeypatch, tmp_path) -> None:
    calls: list[dict[str, object]] = []

    def fake_fetch(**kwargs):
        calls.append(kwargs)
        return sample_weeks()

    monkeypatch.setattr("contribution_robot.main.fetch_contribution_weeks", fake_fetch)
    output_dir = tmp_path / "nested" / "dist"
    settings = Settings(
        _env_file=None, profile_username="octocat", output_dir=output_dir
    )

    written = run(settings, now=NOW)

    assert written == [output_dir / LIGHT_FILE, output_dir / DARK_FILE]
    assert calls[0]["username"] == "octocat"
    assert calls[0]["now"] == NOW
    light = (output_dir / LIGHT_FILE).read_text(encoding="utf-8")
    dark = (output_dir / DARK_FILE).read_text(encoding="utf-8")
    assert light.startswith("<svg ")
    assert 'id="headerGlow-light"' in light
    assert 'id="headerGlow-dark"' in dark
    assert light.endswith("</svg>")


def test_run_overwrites_existing_images(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        "contribution_robot.main.fetch_contribution_weeks",
        lambda **kwargs: sample_weeks(),
    )
    (tmp_path / LIGHT_FILE).write_text("stale", encoding="utf-8")
    settings = Settings(_env_file=None, github_actor="hubot", output_dir=tmp_path)

    run(settings)

    assert (tmp_path / LIGHT_FILE).read_text(encoding="utf-8").startswith("<svg ")


def test_run_requires_username_before_fetching(monkeypatch, tmp_path) -> None:
    def fake_fetch(**kwargs):
        raise AssertionError("fetch should not run without a username")

    monkeypatch.setattr("contribution_robot.main.fetch_contribution_weeks", fake_fetch)
    settings = Settings(
        _env_file=None,
        profile_username=None,
        github_actor=None,
        output_dir=tmp_path / "out",
    )

    with pytest.raises(ConfigurationError, match="PROFILE_USERNAME or GITHUB_ACTOR"):
        run(settings)

    assert not (tmp_path / "out").exists()


def test_run_rejects_empty_calendar(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        "contribution_robot.main.fetch_contribution_weeks", lambda **kwargs: []
    )
    settings = Settings(
        _env_file=None, profile_username="octocat", output_dir=tmp_path / "out"
    )

    with pytest.raises(ContributionDataError) as exc_info:
        run(settings)

    assert str(exc_info.value) == 'No contribution data available for "octocat".'
    assert not (tmp_path / "out").exists()


def test_main_returns_zero_on_success(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("PROFILE_USERNAME", "octocat")
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path))
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    monkeypatch.setattr(
        "contribution_robot.main.fetch_contribution_weeks",
        lambda **kwargs: sample_weeks(),
    )

    assert main() == 0
    assert (tmp_path / LIGHT_FILE).exists()
    assert (tmp_path / DARK_FILE).exists()


def test_main_reports_aggregate_error_and_writes_nothing(
    monkeypatch, tmp_path, capsys
) -> None:
    output_dir = tmp_path / "out"
    monkeypatch.setenv("PROFILE_USERNAME", "octocat")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    monkeypatch.setenv("OUTPUT_DIR", str(output_dir))
    monkeypatch.delenv("SENTRY_DSN", raising=False)

    def fake_graphql(**kwargs):
        raise CalendarSourceError("GitHub GraphQL request failed (401): Bad credentials")

    def fake_public(**kwargs):
        raise CalendarSourceError("Contribution calendar request failed (404)")

    monkeypatch.setattr(
        "contribution_robot.services.calendar_service.fetch_graphql_weeks", fake_graphql
    )
    monkeypatch.setattr(
        "contribution_robot.services.calendar_service.fetch_public_calendar_days",
        fake_public,
    )

    exit_code = main()

    stderr = capsys.readouterr().err
    assert exit_code == 1
    assert 'Unable to fetch contribution data for "octocat".' in stderr
    assert "GraphQL: GitHub GraphQL request failed (401): Bad credentials" in stderr
    assert "Public calendar: Contribution calendar request failed (404)" in stderr
    assert not output_dir.exists()


def test_main_fails_without_username(monkeypatch, tmp_path, capsys) -> None:
    monkeypatch.delenv("PROFILE_USERNAME", raising=False)
    monkeypatch.delenv("GITHUB_ACTOR", raising=False)
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "out"))

    assert main() == 1
    assert "Missing PROFILE_USERNAME or GITHUB_ACTOR." in capsys.readouterr().err


def test_run_leaves_no_partial_output_when_a_write_fails(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        "contribution_robot.main.fetch_contribution_weeks",
        lambda **kwargs: sample_weeks(),
    )
    original_write_text = Path.write_text

    def failing_write_text(self, data, *args, **kwargs):
        if DARK_FILE in self.name:
            raise OSError("disk full")
        return original_write_text(self, data, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", failing_write_text)
    settings = Settings(_env_file=None, profile_username="octocat", output_dir=tmp_path)

    with pytest.raises(OSError, match="disk full"):
        run(settings)

    assert list(tmp_path.iterdir()) == []


def test_run_keeps_previous_images_when_a_write_fails(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        "contribution_robot.main.fetch_contribution_weeks",
        lambda **kwargs: sample_weeks(),
    )
    (tmp_path / LIGHT_FILE).write_text("previous light", encoding="utf-8")
    original_write_text = Path.write_text

    def failing_write_text(self, data, *args, **kwargs):
        if DARK_FILE in self.name:
            raise OSError("disk full")
        return original_write_text(self, data, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", failing_write_text)
    settings = Settings(_env_file=None, profile_username="octocat", output_dir=tmp_path)

    with pytest.raises(OSError):
        run(settings)

    assert (tmp_path / LIGHT_FILE).read_text(encoding="utf-8") == "previous light"
    assert sorted(path.name for path in tmp_path.iterdir()) == [LIGHT_FILE]
