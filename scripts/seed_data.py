#!/usr/bin/env python3
"""
Seed Data Script for Sprint Velocity Tracker

Creates a realistic sprint history for development:
- 8 two-week sprints
- Varying commitment, delivery and team availability

Usage:
    python scripts/seed_data.py              # Add seed data
    python scripts/seed_data.py --clear      # Clear all data first
"""
import asyncio
import sys
import os
from datetime import date, timedelta
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from velocity_tracker.database import async_session, init_models
from velocity_tracker.models.sprint import Sprint
from velocity_tracker.services.sprint_service import SprintInput, SprintService


# ==================== DATA DEFINITIONS ====================

FIRST_SPRINT_START = date(2024, 1, 1)
SPRINT_LENGTH_DAYS = 14

# (planned points, completed points, team availability %, notes)
SPRINTS_DATA = [
    (32, 28, 90, "Good sprint, one story moved to next sprint"),
    (30, 30, 100, "Excellent delivery, all stories completed"),
    (35, 26, 85, "One team member on vacation, technical debt addressed"),
    (30, 29, 95, "Stable sprint"),
    (34, 31, 90, "Release preparation"),
    (28, 22, 70, "Two people out sick, production incident"),
    (30, 30, 100, "Full team, smooth sprint"),
    (33, 32, 95, "New teammate onboarded"),
]


# ==================== SEED FUNCTIONS ====================

async def clear_all_data(session: AsyncSession):
    """Clear all data from the database"""
    print("🗑️  Clearing existing data...")

    await session.execute(delete(Sprint))
    await session.commit()

    print("✅ All data cleared")


async def create_sprints(session: AsyncSession):
    """Create the sprint history through the store service"""
    print("\n🏃 Creating sprints...")

    service = SprintService(session)
    for index, (planned, completed, availability, notes) in enumerate(SPRINTS_DATA):
        start = FIRST_SPRINT_START + timedelta(days=index * SPRINT_LENGTH_DAYS)
        sprint = await service.create_sprint(SprintInput(
            name=f"Sprint {index + 1}",
            start_date=start,
            end_date=start + timedelta(days=SPRINT_LENGTH_DAYS - 1),
            planned_points=planned,
            completed_points=completed,
            team_availability=availability,
            notes=notes,
        ))
        print(f"  ✓ Created: {sprint.name} - {completed}/{planned} pts at {availability}% availability")


async def main():
    """Main seeding function"""
    clear = "--clear" in sys.argv

    await init_models()

    async with async_session() as session:
        if clear:
            await clear_all_data(session)
        await create_sprints(session)

    print("\n🎉 Seed data created successfully!")


if __name__ == "__main__":
    asyncio.run(main())
