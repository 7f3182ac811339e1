import logging
import sys

import sentry_sdk

from contribution_robot.settings import Settings


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(app_settings: Settings) -> None:
    """Send log records to stderr at the configured level."""

    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def init_sentry(app_settings: Settings) -> None:
    """Initialize Sentry SDK when DSN is configured.

    Events are tagged with the rendered profile and the calendar source the
    run starts from, so failures can be grouped per user.
    """

    if not app_settings.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=app_settings.sentry_dsn,
        environment=app_settings.environment,
        release=app_settings.release,
        traces_sample_rate=app_settings.sentry_traces_sample_rate,
        send_default_pii=False,
    )
    sentry_sdk.set_tag("profile", app_settings.username or "unknown")
    sentry_sdk.set_tag(
        "calendar_source", "graphql" if app_settings.token else "public_calendar"
    )
