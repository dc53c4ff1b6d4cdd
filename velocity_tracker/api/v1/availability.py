from fastapi import APIRouter
from typing import List
from pydantic import BaseModel

from ...analytics import TeamAvailability, TeamMember, calculate_team_availability

router = APIRouter()

class TeamAvailabilityRequest(BaseModel):
    members: List[TeamMember]


@router.post("/team", response_model=TeamAvailability)
async def calculate_availability(request: TeamAvailabilityRequest):
    """Overall team availability from per-member sprint days"""

    return calculate_team_availability(request.members)
