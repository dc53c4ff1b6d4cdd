from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date
from pydantic import BaseModel, ConfigDict

from ...config import settings
from ...database import get_db
from ...services.sprint_service import (
    SprintBulkItem,
    SprintInput,
    SprintNotFoundError,
    SprintService,
    SprintServiceError,
    SprintValidationError,
)
from ...services.csv_service import (
    CSVImportError,
    export_sprints_to_csv,
    generate_csv_template,
    parse_sprints_csv,
)

router = APIRouter()

class SprintResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    start_date: date
    end_date: date
    planned_points: float
    completed_points: float
    completion_ratio: float
    velocity: float
    team_availability: float
    team_capacity: Optional[float]
    notes: str

class ImportResponse(BaseModel):
    imported: int
    sprints: List[SprintResponse]


def _csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("", response_model=List[SprintResponse])
async def list_sprints(db: AsyncSession = Depends(get_db)):
    """Get all sprints, oldest first"""

    return await SprintService(db).list_sprints()


@router.post("", response_model=SprintResponse, status_code=status.HTTP_201_CREATED)
async def create_sprint(request: SprintInput, db: AsyncSession = Depends(get_db)):
    """Add a sprint"""

    try:
        return await SprintService(db).create_sprint(request)
    except SprintServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("", response_model=List[SprintResponse])
async def replace_sprints(request: List[SprintBulkItem], db: AsyncSession = Depends(get_db)):
    """Replace the whole sprint collection (bulk edit)"""

    try:
        return await SprintService(db).replace_all(request)
    except SprintValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SprintServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/export")
async def export_sprints(db: AsyncSession = Depends(get_db)):
    """Download all sprints as CSV"""

    sprints = await SprintService(db).list_sprints()
    return _csv_response(export_sprints_to_csv(sprints), "sprints_export.csv")


@router.get("/template")
async def download_template():
    """Download an empty CSV import template"""

    return _csv_response(generate_csv_template(), "sprint_template.csv")


@router.post("/import", response_model=ImportResponse, status_code=status.HTTP_201_CREATED)
async def import_sprints(file: UploadFile = File(...), db: AsyncSession = Depends(get_db)):
    """Append sprints from an uploaded CSV file"""

    filename = (file.filename or "").lower()
    if file.content_type != "text/csv" and not filename.endswith(".csv"):
        raise HTTPException(status_code=400, detail="Invalid file type. Please upload a .csv file.")

    content = await file.read(settings.max_csv_upload_bytes + 1)
    if len(content) > settings.max_csv_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File is too large. Maximum allowed size is {settings.max_csv_upload_bytes} bytes."
        )

    try:
        rows = parse_sprints_csv(content.decode("utf-8-sig"))
        sprints = await SprintService(db).import_sprints(rows)
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV file must be UTF-8 encoded")
    except CSVImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SprintServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return ImportResponse(
        imported=len(sprints),
        sprints=[SprintResponse.model_validate(sprint) for sprint in sprints]
    )


@router.get("/{sprint_id}", response_model=SprintResponse)
async def get_sprint(sprint_id: int, db: AsyncSession = Depends(get_db)):
    """Get sprint details"""

    try:
        return await SprintService(db).get_sprint(sprint_id)
    except SprintNotFoundError:
        raise HTTPException(status_code=404, detail="Sprint not found")


@router.put("/{sprint_id}", response_model=SprintResponse)
async def update_sprint(sprint_id: int, request: SprintInput, db: AsyncSession = Depends(get_db)):
    """Edit a sprint"""

    try:
        return await SprintService(db).update_sprint(sprint_id, request)
    except SprintNotFoundError:
        raise HTTPException(status_code=404, detail="Sprint not found")
    except SprintServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{sprint_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sprint(sprint_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a sprint"""

    try:
        await SprintService(db).delete_sprint(sprint_id)
    except SprintNotFoundError:
        raise HTTPException(status_code=404, detail="Sprint not found")
    except SprintServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))
