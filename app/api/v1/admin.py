"""
Warden (admin) endpoints.

The list, export and analytics endpoints each refresh their own dashboard
view of a list, so a slow response for an old filter never replaces the
result of a newer call to the same endpoint, while different endpoints may
load at the same time.
Advanced filters and the search box are applied here on the fetched list;
``status`` and ``category`` are also forwarded upstream to narrow it.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from app.api import deps
from app.config.settings import Settings
from app.core.session import SessionContext
from app.schemas.analytics import AdminAnalytics, DashboardMetrics
from app.schemas.common import MessageResponse, SuccessResponse
from app.schemas.filters import FilterConfig
from app.schemas.session import DashboardTab
from app.schemas.submissions import (
    ApologyReview,
    PriorityUpdate,
    StatusUpdate,
    TimelineEntryCreate,
)
from app.services.aggregation import aggregate, infer_priority
from app.services.dashboard import (
    DashboardViewRegistry,
    build_admin_analytics,
    load_dashboard_metrics,
)
from app.services.export import ExportFormat, export_records
from app.services.filtering import filter_records
from app.services.integrations.hostel_api import HostelApiClient
from app.services.records import RecordKind, record_title
from app.utils.search import fuzzy_search, highlight_text
from app.utils.validators import (
    validate_review,
    validate_status_update,
    validate_timeline_entry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

FORWARD_NOTE = "Forwarded to Senior Warden."
SEARCH_KEYS = ("title", "message", "description", "type", "student.name", "student.roomNo")


def _kind(tab: DashboardTab) -> RecordKind:
    return RecordKind.APOLOGY if tab is DashboardTab.APOLOGIES else RecordKind.COMPLAINT


def _lookup(record: Dict[str, Any], key: str) -> Any:
    value: Any = record
    for part in key.split("."):
        value = value.get(part) if isinstance(value, dict) else None
    return value


class ListQuery:
    """Query parameters shared by the list, export and analytics endpoints."""

    def __init__(
        self,
        status: Optional[str] = Query(None, description="Status forwarded upstream"),
        category: Optional[str] = Query(None, description="Type forwarded upstream and matched locally"),
        filter_status: Optional[str] = Query(None, description="Advanced filter status"),
        priority: Optional[str] = Query(None),
        date_from: Optional[str] = Query(None, description="Earliest creation date"),
        date_to: Optional[str] = Query(None, description="Latest creation date"),
        q: Optional[str] = Query(None, description="Search text"),
    ):
        self.status = status
        self.category = category
        self.q = q
        self.filters = FilterConfig(
            status=filter_status,
            category=category,
            priority=priority,
            date_from=date_from,
            date_to=date_to,
        )


async def _visible_records(
    kind: RecordKind,
    query: ListQuery,
    token: str,
    client: HostelApiClient,
    views: DashboardViewRegistry,
    settings: Settings,
    endpoint: str,
) -> List[Dict[str, Any]]:
    # one view per endpoint: only a newer call of the same endpoint supersedes
    view = views.get(token, f"{kind.plural}:{endpoint}")
    records = await view.refresh(lambda: client.list_records(kind, query.status, query.category))
    return filter_records(
        records,
        query.filters,
        query.q,
        kind,
        strict_apology_status=settings.STRICT_APOLOGY_STATUS_FILTER,
    )


async def _list_response(kind: RecordKind, query: ListQuery, token, client, views, settings) -> Dict[str, Any]:
    visible = await _visible_records(kind, query, token, client, views, settings, "list")
    return {"data": visible, "count": len(visible), "stats": aggregate(visible)}


# ==================== Lists ====================

@router.get("/complaints")
async def list_complaints(
    query: ListQuery = Depends(),
    session: SessionContext = Depends(deps.require_admin),
    token: str = Depends(deps.get_token),
    client: HostelApiClient = Depends(deps.get_api_client),
    views: DashboardViewRegistry = Depends(deps.get_view_registry),
    settings: Settings = Depends(deps.get_settings),
):
    return await _list_response(RecordKind.COMPLAINT, query, token, client, views, settings)


@router.get("/apologies")
async def list_apologies(
    query: ListQuery = Depends(),
    session: SessionContext = Depends(deps.require_admin),
    token: str = Depends(deps.get_token),
    client: HostelApiClient = Depends(deps.get_api_client),
    views: DashboardViewRegistry = Depends(deps.get_view_registry),
    settings: Settings = Depends(deps.get_settings),
):
    return await _list_response(RecordKind.APOLOGY, query, token, client, views, settings)


@router.get("/{tab}/search")
async def search_records(
    tab: DashboardTab,
    q: str = Query(..., min_length=1),
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    """Rank a list by fuzzy match quality, best first, with the title highlighted."""
    kind = _kind(tab)
    ranked = fuzzy_search(await client.list_records(kind), q, SEARCH_KEYS, getter=_lookup)
    data = [{**record, "highlight": highlight_text(record_title(record), q)} for record in ranked]
    return {"data": data, "count": len(data)}


@router.get("/{tab}/export")
async def export_view(
    tab: DashboardTab,
    format: ExportFormat = Query(ExportFormat.CSV),
    query: ListQuery = Depends(),
    session: SessionContext = Depends(deps.require_admin),
    token: str = Depends(deps.get_token),
    client: HostelApiClient = Depends(deps.get_api_client),
    views: DashboardViewRegistry = Depends(deps.get_view_registry),
    settings: Settings = Depends(deps.get_settings),
):
    """Download the currently visible list."""
    kind = _kind(tab)
    visible = await _visible_records(kind, query, token, client, views, settings, "export")
    export = export_records(visible, kind, format)

    logger.info(f"Exported {export.count} {kind.plural} as {format.value}")
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# ==================== Complaint detail ====================

@router.get("/complaints/{complaint_id}")
async def read_complaint(
    complaint_id: str,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    complaint = await client.get_complaint(complaint_id)
    timeline = await client.get_timeline(complaint_id, tolerate_errors=True)
    return {
        "data": {**complaint, "priority": infer_priority(complaint, timeline)},
        "timeline": timeline,
    }


@router.delete("/complaints/{complaint_id}", response_model=MessageResponse)
async def delete_complaint(
    complaint_id: str,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    await client.delete_complaint(complaint_id)
    return MessageResponse(message="Complaint deleted successfully")


@router.put("/complaints/{complaint_id}/status")
async def update_complaint_status(
    complaint_id: str,
    payload: StatusUpdate,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    status = validate_status_update(payload)
    result = await client.update_complaint_status(complaint_id, status)
    return SuccessResponse.create("Status updated", result)


@router.put("/complaints/{complaint_id}/priority")
async def update_complaint_priority(
    complaint_id: str,
    payload: PriorityUpdate,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    """The API has no priority field to update; the change is noted in the timeline."""
    entry = await client.add_timeline_entry(complaint_id, f"Priority updated to: {payload.priority.value}")
    return SuccessResponse.create("Priority noted in timeline", entry)


@router.post("/complaints/{complaint_id}/forward")
async def forward_complaint(
    complaint_id: str,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    entry = await client.add_timeline_entry(complaint_id, FORWARD_NOTE)
    return SuccessResponse.create("Forwarded note added to timeline", entry)


@router.get("/complaints/{complaint_id}/timeline")
async def read_timeline(
    complaint_id: str,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    timeline = await client.get_timeline(complaint_id)
    return {"data": timeline, "count": len(timeline)}


@router.post("/complaints/{complaint_id}/timeline")
async def add_timeline_entry(
    complaint_id: str,
    payload: TimelineEntryCreate,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    validate_timeline_entry(payload)
    entry = await client.add_timeline_entry(complaint_id, payload.message)
    return SuccessResponse.create("Timeline entry added", entry)


@router.post("/complaints/{complaint_id}/attachments")
async def upload_complaint_attachment(
    complaint_id: str,
    file: UploadFile = File(...),
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    """Upload a file and note it in the complaint's timeline."""
    content = await file.read()
    uploaded = await client.upload_attachment(complaint_id, (file.filename, content, file.content_type))

    meta = []
    if file.content_type:
        meta.append(f"type={file.content_type}")
    if content:
        meta.append(f"size={len(content)}B")
    suffix = f" [{', '.join(meta)}]" if meta else ""
    entry = await client.add_timeline_entry(complaint_id, f"Attachment noted: {file.filename}{suffix}")

    return SuccessResponse.create("Attachment uploaded", {"attachment": uploaded, "timelineEntry": entry})


# ==================== Apology detail ====================

@router.get("/apologies/{apology_id}")
async def read_apology(
    apology_id: str,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    return {"data": await client.get_apology(apology_id)}


@router.put("/apologies/{apology_id}/review")
async def review_apology(
    apology_id: str,
    payload: ApologyReview,
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    validate_review(payload)
    result = await client.review_apology(apology_id, payload.status, payload.comment)
    return SuccessResponse.create("Apology reviewed", result)


# ==================== Dashboard ====================

@router.get("/dashboard/metrics", response_model=DashboardMetrics)
async def dashboard_metrics(
    session: SessionContext = Depends(deps.require_admin),
    client: HostelApiClient = Depends(deps.get_api_client),
):
    return await load_dashboard_metrics(client)


@router.get("/dashboard/analytics", response_model=AdminAnalytics)
async def dashboard_analytics(
    query: ListQuery = Depends(),
    session: SessionContext = Depends(deps.require_admin),
    token: str = Depends(deps.get_token),
    client: HostelApiClient = Depends(deps.get_api_client),
    views: DashboardViewRegistry = Depends(deps.get_view_registry),
    settings: Settings = Depends(deps.get_settings),
):
    """
    Charts for the dashboard.

    Charts always use the filtered complaints; the headline counts use the
    filtered list of the session's active tab.
    """
    complaints = await _visible_records(RecordKind.COMPLAINT, query, token, client, views, settings, "analytics")
    if session.active_tab is DashboardTab.APOLOGIES:
        visible = await _visible_records(RecordKind.APOLOGY, query, token, client, views, settings, "analytics")
    else:
        visible = complaints
    return build_admin_analytics(complaints, visible)
