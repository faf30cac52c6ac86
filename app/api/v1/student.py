"""
Student endpoints: own complaints and apology letters, and the student dashboard.
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.api import deps
from app.core.session import SessionContext
from app.schemas.analytics import StudentAnalytics
from app.schemas.common import SuccessResponse
from app.schemas.filters import FilterConfig
from app.schemas.submissions import ApologyCreate, ComplaintCreate
from app.services.dashboard import build_student_analytics
from app.services.filtering import filter_records
from app.services.integrations.hostel_api import HostelApiClient
from app.services.records import RecordKind
from app.utils.validators import AttachmentInfo, validate_apology, validate_complaint

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student", tags=["Student"])


@router.get("/complaints")
async def list_my_complaints(
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search text"),
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    records = filter_records(
        await client.student_complaints(), FilterConfig(status=status), q, RecordKind.COMPLAINT
    )
    return {"data": records, "count": len(records)}


@router.get("/complaints/{complaint_id}")
async def read_my_complaint(
    complaint_id: str,
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    """One of the student's complaints with its timeline; a missing timeline is empty."""
    complaint = await client.get_student_record(RecordKind.COMPLAINT, complaint_id)
    timeline = await client.get_timeline(complaint_id, tolerate_errors=True)
    return {"data": complaint, "timeline": timeline}


@router.post("/complaints", status_code=201)
async def submit_complaint(
    title: str = Form("", max_length=200),
    type: str = Form(""),
    description: str = Form("", max_length=5000),
    priority: Optional[str] = Form(None),
    attachments: Optional[List[UploadFile]] = File(None),
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    """
    File a complaint with optional JPEG photos.

    Nothing is sent upstream unless every field and file passes validation.
    """
    payload = ComplaintCreate(title=title, type=type, description=description, priority=priority)
    files = [(upload.filename, await upload.read(), upload.content_type) for upload in attachments or []]
    validate_complaint(
        payload,
        [AttachmentInfo(name, content_type, len(content)) for name, content, content_type in files],
    )

    created = await client.create_complaint(
        {
            "title": payload.title,
            "type": payload.type,
            "description": payload.description,
            "priority": payload.priority,
        },
        files,
    )
    logger.info(f"Complaint submitted with {len(files)} attachment(s)")
    return SuccessResponse.create("Complaint submitted successfully", created)


@router.get("/apologies")
async def list_my_apologies(
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search text"),
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    records = filter_records(
        await client.student_apologies(), FilterConfig(status=status), q, RecordKind.APOLOGY
    )
    return {"data": records, "count": len(records)}


@router.get("/apologies/{apology_id}")
async def read_my_apology(
    apology_id: str,
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    return {"data": await client.get_student_record(RecordKind.APOLOGY, apology_id)}


@router.post("/apologies", status_code=201)
async def submit_apology(
    payload: ApologyCreate,
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    validate_apology(payload)
    created = await client.create_apology(payload.model_dump())
    return SuccessResponse.create("Apology letter submitted successfully", created)


@router.get("/dashboard", response_model=StudentAnalytics)
async def student_dashboard(
    session: SessionContext = Depends(deps.require_student),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    complaints, apologies = await asyncio.gather(
        client.student_complaints(),
        client.student_apologies(),
    )
    return build_student_analytics(complaints, apologies)
