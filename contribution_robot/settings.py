from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Generator settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    The instance is frozen and passed through the pipeline explicitly.
    """

    github_token: str | None = None
    profile_username: str | None = None
    github_actor: str | None = None
    output_dir: Path = Path("dist")
    github_graphql_url: str = "https://api.github.com/graphql"
    github_public_calendar_url: str = (
        "https://github.com/users/{username}/contributions"
    )
    request_timeout_seconds: float = 20.0
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("output_dir", mode="before")
    @classmethod
    def default_blank_output_dir(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Path("dist")
        return value

    @property
    def username(self) -> str | None:
        """Profile to render, falling back to the workflow actor."""

        for candidate in (self.profile_username, self.github_actor):
            if candidate and candidate.strip():
                return candidate.strip()
        return None

    @property
    def token(self) -> str | None:
        if self.github_token and self.github_token.strip():
            return self.github_token.strip()
        return None
