from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .stats import round_half_up

# Type aliases
SprintId = Union[int, str]
StoryPoints = float
Percentage = float


class RecommendationKind(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class SprintRecord(BaseModel):
    """
    One historical sprint as seen by the analytics core.

    Records are immutable snapshots. ``completion_ratio`` and ``velocity``
    are derived from the point fields on every access and cannot be set.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: SprintId
    name: str
    start_date: date
    end_date: date
    planned_points: StoryPoints = Field(default=0, ge=0)
    completed_points: StoryPoints = Field(default=0, ge=0)
    team_availability: Percentage = Field(default=100, ge=0, le=100)
    team_capacity: Optional[float] = None
    notes: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completion_ratio(self) -> float:
        if self.planned_points == 0:
            return 0.0
        return self.completed_points / self.planned_points * 100

    @computed_field  # type: ignore[prop-decorator]
    @property
    def velocity(self) -> float:
        return float(self.completed_points)


class MetricsResult(BaseModel):
    average_velocity: int = 0
    average_completion_ratio: int = 0
    team_availability_consistency: int = 0
    predicted_velocity: int = 0
    total_sprints: int = 0


class ForecastResult(BaseModel):
    recommended_planning: int = Field(ge=0)
    confidence_level: int = Field(ge=0, le=100)
    based_on_sprints: int = Field(ge=0)


class PlanningOptions(BaseModel):
    conservative: int
    recommended: int
    aggressive: int


class TrendResult(BaseModel):
    slope: float = 0.0


class SeriesTrend(BaseModel):
    slope: float
    consistency: float


class TrendSummary(BaseModel):
    sprints_analyzed: int
    velocity: SeriesTrend
    completion_ratio: SeriesTrend
    team_availability: SeriesTrend


class Recommendation(BaseModel):
    kind: RecommendationKind
    title: str
    message: str


class TeamMember(BaseModel):
    name: str
    total_sprint_days: float = Field(default=10, ge=0)
    days_available: float = Field(default=10, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def availability_percentage(self) -> int:
        if self.total_sprint_days == 0:
            return 0
        return round_half_up(self.days_available / self.total_sprint_days * 100)


class TeamAvailability(BaseModel):
    overall_availability: int
    members: List[TeamMember]
