"""
Client for the upstream hostel REST API.

Every JSON response is passed through the key normalizer before it is
returned, and record lists additionally get their student reference
normalized, so callers only ever see camelCase records with a canonical
``student`` mapping.

Errors:
    - non-2xx responses raise ``UpstreamAPIError`` (``AccessDeniedError``
      for 403) with ``HTTP {status} on {METHOD} {path}: {detail}``
    - transport failures raise ``ExternalServiceError``
    - nothing is retried
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from app.core.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    BaseAppException,
    ExternalServiceError,
    ResourceNotFoundError,
    UpstreamAPIError,
)
from app.services.filtering import server_query_params
from app.services.records import (
    RecordKind,
    normalize_record,
    normalize_records,
    unwrap_item,
    unwrap_list,
)
from app.utils.key_normalizer import normalize_keys

logger = logging.getLogger(__name__)

SERVICE_NAME = "hostel-api"
DEFAULT_UPLOAD_PATH_TEMPLATE = "/complaints/{id}/attachments"

# (filename, content, content type)
UploadedFile = Tuple[str, bytes, Optional[str]]


def create_http_client(
    base_url: str,
    timeout: float = 15.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Shared connection pool for all upstream calls."""
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        transport=transport,
        headers={"Accept": "application/json"},
    )


class HostelApiClient:
    """
    Thin async wrapper over the hostel REST API for one session.

    Args:
        http: Shared ``httpx.AsyncClient`` with the API base URL.
        token: Bearer token of the current session, if any.
        upload_path_template: Path for attachment uploads, ``{id}`` is
            replaced by the complaint id.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: Optional[str] = None,
        upload_path_template: str = DEFAULT_UPLOAD_PATH_TEMPLATE,
    ):
        self.http = http
        self.token = token
        self.upload_path_template = upload_path_template

    # ==================== Transport ====================

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and body.get("error") is not None:
            return str(body["error"])
        return response.reason_phrase

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return normalize_keys(response.json())
        except ValueError:
            return response.text

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        files: Optional[Sequence[Tuple[str, Any]]] = None,
    ) -> Any:
        """
        Perform one upstream call and return the normalized body.

        Raises:
            AccessDeniedError: Upstream answered 403.
            UpstreamAPIError: Any other non-2xx answer.
            ExternalServiceError: The API could not be reached.
        """
        method = method.upper()
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}

        try:
            response = await self.http.request(
                method, path, params=params, json=json, files=files, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ExternalServiceError(
                f"Hostel API unreachable on {method} {path}: {e}",
                service_name=SERVICE_NAME,
                endpoint=path,
            )

        if response.is_error:
            detail = self._error_detail(response)
            logger.warning(f"{method} {path} returned {response.status_code}: {detail}")
            if response.status_code == 403:
                raise AccessDeniedError(method, path, detail)
            raise UpstreamAPIError(response.status_code, method, path, detail)

        logger.debug(f"{method} {path} -> {response.status_code}")
        return self._decode(response)

    # ==================== Session ====================

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for ``{message, token, role}``.

        Raises:
            AuthenticationError: The API answered without a token.
        """
        data = await self.request("POST", "/login", json={"email": email, "password": password})
        if not isinstance(data, dict) or not data.get("token"):
            raise AuthenticationError("Login succeeded but no token returned by server")
        return data

    async def logout(self) -> None:
        await self.request("POST", "/logout")

    # ==================== Lists ====================

    async def _list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return normalize_records(unwrap_list(await self.request("GET", path, params=params or None)))

    async def list_complaints(self, status: Optional[str] = None, category: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self._list("/admin/complaints", server_query_params(status, category))

    async def list_apologies(self, status: Optional[str] = None, category: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self._list("/admin/apologies", server_query_params(status, category))

    async def list_records(
        self,
        kind: RecordKind,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if RecordKind(kind) is RecordKind.APOLOGY:
            return await self.list_apologies(status, category)
        return await self.list_complaints(status, category)

    # ==================== Details ====================

    async def _detail_with_fallback(self, kind: RecordKind, record_id: str) -> Dict[str, Any]:
        """
        Fetch one record by id; when that fails, look it up in the full list.

        Raises:
            ResourceNotFoundError: Neither lookup found the record.
        """
        base = f"/admin/{kind.plural}"
        try:
            record = unwrap_item(await self.request("GET", f"{base}/{record_id}"))
            if record:
                return normalize_record(record)
        except BaseAppException as e:
            logger.info(f"Detail fetch for {kind.value} {record_id} failed ({e.message}), falling back to list")

        return await self._find_in_list(kind, base, record_id)

    async def _find_in_list(self, kind: RecordKind, base: str, record_id: str) -> Dict[str, Any]:
        """
        Look a record up by id in the list at ``base``.

        Raises:
            ResourceNotFoundError: No record with this id; ``redirect``
                points at the list page.
        """
        for record in await self._list(base):
            if str(record.get("id")) == str(record_id):
                return record

        raise ResourceNotFoundError(kind.value.capitalize(), record_id, redirect_to=base)

    async def get_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return await self._detail_with_fallback(RecordKind.COMPLAINT, complaint_id)

    async def get_apology(self, apology_id: str) -> Dict[str, Any]:
        return await self._detail_with_fallback(RecordKind.APOLOGY, apology_id)

    async def get_student_record(self, kind: RecordKind, record_id: str) -> Dict[str, Any]:
        """One of the student's own records; students have no detail endpoint upstream."""
        kind = RecordKind(kind)
        return await self._find_in_list(kind, f"/student/{kind.plural}", record_id)

    async def delete_complaint(self, complaint_id: str) -> None:
        await self.request("DELETE", f"/admin/complaints/{complaint_id}")

    # ==================== Timeline ====================

    async def get_timeline(self, complaint_id: str, tolerate_errors: bool = False) -> List[Dict[str, Any]]:
        """Timeline entries of a complaint; with ``tolerate_errors`` a failure yields ``[]``."""
        try:
            entries = await self.request("GET", f"/complaints/{complaint_id}/timeline")
        except BaseAppException as e:
            if not tolerate_errors:
                raise
            logger.warning(f"Timeline fetch for complaint {complaint_id} failed: {e.message}")
            return []
        return entries if isinstance(entries, list) else unwrap_list(entries)

    async def add_timeline_entry(self, complaint_id: str, message: str) -> Any:
        return await self.request("POST", f"/complaints/{complaint_id}/timeline", json={"message": message})

    # ==================== Warden actions ====================

    async def update_complaint_status(self, complaint_id: str, status: str) -> Dict[str, Any]:
        """
        Change a complaint's status and note the change in its timeline.

        A failing timeline note is logged and does not fail the update.

        Returns:
            ``{"complaint": <upstream answer>, "timelineEntry": <entry or None>}``
        """
        updated = await self.request("PUT", f"/admin/complaints/{complaint_id}/status", json={"status": status})

        entry = None
        try:
            entry = await self.add_timeline_entry(complaint_id, f"Status updated to: {status}")
        except BaseAppException as e:
            logger.warning(f"Timeline note for complaint {complaint_id} failed: {e.message}")

        return {"complaint": updated, "timelineEntry": entry}

    async def review_apology(self, apology_id: str, status: str, comment: Optional[str] = None) -> Any:
        body: Dict[str, Any] = {"status": status}
        if comment:
            body["comment"] = comment
        return await self.request("PUT", f"/admin/apologies/{apology_id}/review", json=body)

    # ==================== Student ====================

    async def student_complaints(self) -> List[Dict[str, Any]]:
        return await self._list("/student/complaints")

    async def student_apologies(self, student_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"student_id": student_id} if student_id else None
        return await self._list("/student/apologies", params)

    async def create_complaint(
        self,
        fields: Dict[str, Optional[str]],
        attachments: Sequence[UploadedFile] = (),
    ) -> Any:
        """Submit a complaint as multipart form data with ``attachments[]`` files."""
        parts: List[Tuple[str, Any]] = [
            (name, (None, value)) for name, value in fields.items() if value is not None
        ]
        parts.extend(("attachments[]", attachment) for attachment in attachments)
        return await self.request("POST", "/student/complaints", files=parts)

    async def create_apology(self, body: Dict[str, Any]) -> Any:
        return await self.request(
            "POST",
            "/student/apologies",
            json={key: value for key, value in body.items() if value not in (None, "")},
        )

    async def upload_attachment(self, complaint_id: str, attachment: UploadedFile) -> Any:
        """Upload one file to the configured attachment path."""
        path = self.upload_path_template.replace("{id}", str(complaint_id))
        return await self.request("POST", path, files=[("file", attachment)])

    # ==================== Metrics ====================

    async def status_summary(self) -> Any:
        return await self.request("GET", "/metrics/status-summary")

    async def resolution_rate(self) -> Any:
        return await self.request("GET", "/metrics/resolution-rate")

    async def pending_count(self) -> Any:
        return await self.request("GET", "/metrics/pending-count")

    async def pending_apologies_count(self) -> int:
        return len(await self.list_apologies(status="submitted"))


__all__ = [
    "SERVICE_NAME",
    "DEFAULT_UPLOAD_PATH_TEMPLATE",
    "UploadedFile",
    "create_http_client",
    "HostelApiClient",
]
