from datetime import date

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ContributionDay(BaseModel):
    """Single calendar day with its contribution count and grid position."""

    model_config = ConfigDict(frozen=True)

    date: date
    weekday: int = Field(ge=0, le=6)
    contribution_count: int = Field(ge=0)
    week_index: int = Field(default=0, ge=0)


class Week(BaseModel):
    """Week bucket containing days ordered by weekday."""

    model_config = ConfigDict(frozen=True)

    days: tuple[ContributionDay, ...] = Field(min_length=1, max_length=7)


class Theme(BaseModel):
    """Named color palette applied to one rendered image."""

    model_config = ConfigDict(frozen=True)

    name: str
    background: str
    panel: str
    border: str
    grid_base: str
    muted: str
    text: str
    low: str
    medium: str
    high: str
    accent: str
    accent_strong: str
    robot_body: str
    robot_stroke: str
    robot_eye: str
    beam: str


class GridMetrics(BaseModel):
    """Pixel geometry of the contribution grid and its surrounding chrome."""

    model_config = ConfigDict(frozen=True)

    cell: int
    gap: int
    offset_x: int
    offset_y: int
    graph_width: int
    graph_height: int
    width: int
    height: int
    center_x: float
