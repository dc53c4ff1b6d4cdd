from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple
from datetime import date
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete
from pydantic import BaseModel, Field

from ..analytics import SprintRecord, calculate_team_capacity
from ..analytics.stats import mean, round_half_up
from ..models.sprint import Sprint

# Type aliases
SprintId = int


# Pydantic models
class SprintInput(BaseModel):
    """Editable fields of a sprint; derived values are never accepted."""

    name: str = Field(min_length=1, max_length=120)
    start_date: date
    end_date: date
    planned_points: float = Field(default=0, ge=0)
    completed_points: float = Field(default=0, ge=0)
    team_availability: float = Field(default=100, ge=0, le=100)
    team_capacity: Optional[float] = Field(default=None, ge=0)
    notes: str = Field(default="", max_length=1000)


class SprintBulkItem(SprintInput):
    id: Optional[SprintId] = None


# Custom exceptions
class SprintServiceError(Exception):
    def __init__(self, message: str, sprint_id: Optional[SprintId] = None) -> None:
        super().__init__(message)
        self.sprint_id = sprint_id


class SprintValidationError(SprintServiceError):
    pass


class SprintNotFoundError(SprintServiceError):
    def __init__(self, sprint_id: SprintId) -> None:
        super().__init__(f"Sprint {sprint_id} not found", sprint_id)


# Main service class
class SprintService:
    """
    Sprint record store.

    Owns every mutation of the sprint collection (add, edit, delete, bulk
    replace, CSV import) and hands immutable snapshots to the analytics core.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self._logger = logging.getLogger(__name__)

    async def list_sprints(self) -> List[Sprint]:
        """Get all sprints, oldest first."""

        stmt = select(Sprint).order_by(Sprint.start_date, Sprint.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_sprint(self, sprint_id: SprintId) -> Sprint:
        """Get sprint by ID."""

        sprint = await self.db.get(Sprint, sprint_id)
        if sprint is None:
            raise SprintNotFoundError(sprint_id)
        return sprint

    async def snapshot(self) -> Tuple[SprintRecord, ...]:
        """Immutable view of the whole collection for one analytics pass."""

        sprints = await self.list_sprints()
        return tuple(SprintRecord.model_validate(sprint) for sprint in sprints)

    async def create_sprint(self, data: SprintInput) -> Sprint:
        """Add a sprint to the store."""

        self._logger.info("Creating sprint '%s'", data.name)

        try:
            average_velocity = await self._average_velocity()
            sprint = Sprint()
            self._apply(sprint, data, average_velocity)

            self.db.add(sprint)
            await self.db.commit()
            await self.db.refresh(sprint)

            self._logger.info("Created sprint %d", sprint.id)
            return sprint

        except Exception as e:
            await self.db.rollback()
            self._logger.error("Failed to create sprint: %s", str(e))
            if isinstance(e, SprintServiceError):
                raise
            raise SprintServiceError(f"Sprint creation failed: {str(e)}")

    async def update_sprint(self, sprint_id: SprintId, data: SprintInput) -> Sprint:
        """Replace the editable fields of an existing sprint."""

        sprint = await self.get_sprint(sprint_id)

        try:
            average_velocity = await self._average_velocity()
            self._apply(sprint, data, average_velocity)

            await self.db.commit()
            await self.db.refresh(sprint)

            self._logger.info("Updated sprint %d", sprint_id)
            return sprint

        except Exception as e:
            await self.db.rollback()
            self._logger.error("Failed to update sprint %d: %s", sprint_id, str(e))
            raise SprintServiceError(f"Sprint update failed: {str(e)}", sprint_id)

    async def delete_sprint(self, sprint_id: SprintId) -> None:
        """Remove a sprint from the store."""

        sprint = await self.get_sprint(sprint_id)

        try:
            await self.db.delete(sprint)
            await self.db.commit()

            self._logger.info("Deleted sprint %d", sprint_id)

        except Exception as e:
            await self.db.rollback()
            self._logger.error("Failed to delete sprint %d: %s", sprint_id, str(e))
            raise SprintServiceError(f"Sprint deletion failed: {str(e)}", sprint_id)

    async def replace_all(self, items: Sequence[SprintBulkItem]) -> List[Sprint]:
        """
        Replace the whole collection in one transaction.

        Items carrying the id of an existing sprint update it in place, the
        rest are added, and sprints missing from ``items`` are deleted.
        """

        self._logger.info("Replacing sprint collection with %d sprints", len(items))

        ids = [item.id for item in items if item.id is not None]
        if len(ids) != len(set(ids)):
            raise SprintValidationError("Duplicate sprint ids in bulk update")

        try:
            existing: Dict[SprintId, Sprint] = {
                sprint.id: sprint for sprint in await self.list_sprints()
            }
            average_velocity = mean([item.completed_points for item in items])

            kept_ids = {item.id for item in items if item.id in existing}
            removed_ids = [sprint_id for sprint_id in existing if sprint_id not in kept_ids]
            if removed_ids:
                await self.db.execute(delete(Sprint).where(Sprint.id.in_(removed_ids)))

            for item in items:
                sprint = existing.get(item.id) if item.id is not None else None
                if sprint is None:
                    sprint = Sprint()
                    self.db.add(sprint)
                self._apply(sprint, item, average_velocity)

            await self.db.commit()

        except Exception as e:
            await self.db.rollback()
            self._logger.error("Bulk replace failed: %s", str(e))
            raise SprintServiceError(f"Bulk replace failed: {str(e)}")

        return await self.list_sprints()

    async def import_sprints(self, items: Sequence[SprintInput]) -> List[Sprint]:
        """Append imported sprints to the collection."""

        self._logger.info("Importing %d sprints", len(items))

        try:
            average_velocity = await self._average_velocity()
            sprints = []
            for item in items:
                sprint = Sprint()
                self._apply(sprint, item, average_velocity)
                self.db.add(sprint)
                sprints.append(sprint)

            await self.db.commit()
            for sprint in sprints:
                await self.db.refresh(sprint)

            self._logger.info("Imported %d sprints", len(sprints))
            return sprints

        except Exception as e:
            await self.db.rollback()
            self._logger.error("Sprint import failed: %s", str(e))
            raise SprintServiceError(f"Sprint import failed: {str(e)}")

    # Private methods

    async def _average_velocity(self) -> float:
        """Mean completed points across the stored collection."""

        result = await self.db.execute(select(func.avg(Sprint.completed_points)))
        return float(result.scalar() or 0)

    def _apply(self, sprint: Sprint, data: SprintInput, average_velocity: float) -> None:
        """Copy editable fields onto a model, deriving capacity when absent."""

        sprint.name = data.name
        sprint.start_date = data.start_date
        sprint.end_date = data.end_date
        sprint.planned_points = data.planned_points
        sprint.completed_points = data.completed_points
        sprint.team_availability = data.team_availability
        sprint.notes = data.notes

        if data.team_capacity is not None:
            sprint.team_capacity = data.team_capacity
        else:
            sprint.team_capacity = calculate_team_capacity(
                round_half_up(average_velocity), data.team_availability
            )

