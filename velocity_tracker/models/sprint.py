from sqlalchemy import Column, String, Date, Float, Text
from .base import BaseModel


class Sprint(BaseModel):
    __tablename__ = "sprints"
    # ids of deleted sprints are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    name = Column(String(120), nullable=False)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)

    # Sprint metrics (story points)
    planned_points = Column(Float, nullable=False, default=0)
    completed_points = Column(Float, nullable=False, default=0)

    # Team
    team_availability = Column(Float, nullable=False, default=100)  # percentage 0-100
    team_capacity = Column(Float, nullable=True)  # informational only

    notes = Column(Text, nullable=False, default="")

    # Derived from the points columns, never stored
    @property
    def completion_ratio(self) -> float:
        if not self.planned_points:
            return 0.0
        return (self.completed_points or 0) / self.planned_points * 100

    @property
    def velocity(self) -> float:
        return float(self.completed_points or 0)
