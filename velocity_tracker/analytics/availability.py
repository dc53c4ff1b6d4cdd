from typing import Sequence

from .constants import DEFAULT_TEAM_AVAILABILITY
from .stats import mean, round_half_up
from .types import TeamAvailability, TeamMember


def calculate_team_availability(members: Sequence[TeamMember]) -> TeamAvailability:
    """Overall availability as the rounded mean of each member's percentage."""

    if not members:
        return TeamAvailability(
            overall_availability=round_half_up(DEFAULT_TEAM_AVAILABILITY),
            members=[],
        )

    overall = mean([member.availability_percentage for member in members])
    return TeamAvailability(
        overall_availability=round_half_up(overall),
        members=list(members),
    )


def calculate_team_capacity(average_velocity: float, team_availability: float) -> int:
    """Informational capacity: average velocity scaled by availability."""
    return round_half_up(average_velocity * team_availability / 100)
