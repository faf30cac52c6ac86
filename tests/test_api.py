import asyncio
import io
import json

import httpx
from openpyxl import load_workbook


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    body = client.get("/api/v1/health").json()
    assert "admin" in body["loaded_modules"]


def test_request_id_header(client):
    response = client.get("/health", headers={"X-Request-ID": "abc"})
    assert response.headers["X-Request-ID"] == "abc"
    assert "X-Process-Time" in response.headers


# ==================== Session ====================

def test_login_returns_role_home(client, upstream):
    upstream.add("POST", "/login", json_body={"message": "Welcome", "token": "t1", "role": "student"})

    response = client.post("/api/v1/session/login", json={"email": "s@hostel.test", "password": "pw"})

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome", "token": "t1", "role": "student", "redirect": "/student/dashboard"}


def test_login_validation_happens_before_upstream(client, upstream):
    response = client.post("/api/v1/session/login", json={"email": "", "password": ""})

    assert response.status_code == 422
    assert response.json()["error"]["details"]["field_errors"]["email"] == ["Email is required"]
    assert upstream.calls == []


def test_requests_without_session_are_rejected(client):
    assert client.get("/api/v1/session").status_code == 401
    assert client.get("/api/v1/admin/complaints", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_students_cannot_use_admin_routes(client, student_headers):
    assert client.get("/api/v1/admin/complaints", headers=student_headers).status_code == 403


def test_active_tab_round_trip(client, admin_headers):
    assert client.get("/api/v1/session", headers=admin_headers).json() == {"role": "admin", "activeTab": "complaints"}

    response = client.put("/api/v1/session/active-tab", json={"tab": "apologies"}, headers=admin_headers)

    assert response.json()["activeTab"] == "apologies"
    assert client.get("/api/v1/session", headers=admin_headers).json()["activeTab"] == "apologies"


def test_logout_closes_session_even_if_upstream_fails(client, upstream, admin_headers):
    upstream.add("POST", "/logout", json_body={"error": "gone"}, status_code=500)

    assert client.post("/api/v1/session/logout", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/session", headers=admin_headers).status_code == 401


# ==================== Admin lists ====================

def test_complaint_list_filters_and_aggregates(client, upstream, admin_headers, complaints):
    upstream.add("GET", "/admin/complaints", json_body={"data": complaints})

    response = client.get(
        "/api/v1/admin/complaints",
        params={"date_from": "2025-01-01", "date_to": "2025-01-31"},
        headers=admin_headers,
    )

    body = response.json()
    assert response.status_code == 200
    assert [record["id"] for record in body["data"]] == [1, 2]
    assert body["count"] == 2
    assert body["stats"] == {"total": 2, "resolved": 1, "pending": 1, "inReview": 0, "resolutionRate": "50%"}


def test_list_forwards_server_filters(client, upstream, admin_headers):
    upstream.add("GET", "/admin/apologies", json_body=[])

    client.get("/api/v1/admin/apologies", params={"status": "submitted", "category": "outing"}, headers=admin_headers)

    params = upstream.last("GET", "/admin/apologies").url.params
    assert (params["status"], params["type"]) == ("submitted", "outing")
    assert upstream.last("GET", "/admin/apologies").headers["Authorization"] == "Bearer tok-admin"


def test_list_search(client, upstream, admin_headers, complaints):
    upstream.add("GET", "/admin/complaints", json_body=complaints)

    body = client.get("/api/v1/admin/complaints", params={"q": "plumb"}, headers=admin_headers).json()

    assert body["count"] == 0


def test_upstream_forbidden_is_reported(client, upstream, admin_headers):
    upstream.add("GET", "/admin/complaints", json_body={"error": "no"}, status_code=403)

    response = client.get("/api/v1/admin/complaints", headers=admin_headers)

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Access denied. Please ensure you're logged in as an admin."


def test_ranked_search(client, upstream, admin_headers, complaints):
    upstream.add("GET", "/admin/complaints", json_body=complaints)

    body = client.get("/api/v1/admin/complaints/search", params={"q": "leak"}, headers=admin_headers).json()

    assert body["data"][0]["id"] == 1
    assert body["data"][0]["highlight"] == "<mark>Leak</mark>ing tap"


def test_csv_export(client, upstream, admin_headers, complaints):
    upstream.add("GET", "/admin/complaints", json_body=complaints)

    response = client.get("/api/v1/admin/complaints/export", params={"format": "csv"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=\"complaints_" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0] == "ID,Title,Status,Category,Priority,Student,Room,Date"
    assert len(lines) == 4


def test_json_export_keeps_records(client, upstream, admin_headers, apologies):
    upstream.add("GET", "/admin/apologies", json_body=apologies)

    response = client.get("/api/v1/admin/apologies/export", params={"format": "json"}, headers=admin_headers)

    assert [record["id"] for record in json.loads(response.text)] == [11, 12]


def test_excel_export(client, upstream, admin_headers, complaints):
    upstream.add("GET", "/admin/complaints", json_body=complaints)

    response = client.get("/api/v1/admin/complaints/export", params={"format": "xlsx"}, headers=admin_headers)

    sheet = load_workbook(io.BytesIO(response.content)).active
    assert sheet.max_row == 4


# ==================== Complaint detail ====================

def test_complaint_detail_infers_priority(client, upstream, admin_headers):
    upstream.add("GET", "/admin/complaints/5", json_body={"data": {"id": 5, "priority": "low"}})
    upstream.add("GET", "/complaints/5/timeline", json_body=[{"message": "Flagged for urgent review"}])

    body = client.get("/api/v1/admin/complaints/5", headers=admin_headers).json()

    assert body["data"]["priority"] == "high"
    assert len(body["timeline"]) == 1


def test_missing_complaint_redirects_to_list(client, upstream, admin_headers):
    upstream.add("GET", "/admin/complaints", json_body=[])

    response = client.get("/api/v1/admin/complaints/99", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["details"]["redirect"] == "/admin/complaints"


def test_status_update_canonicalizes(client, upstream, admin_headers):
    upstream.add("PUT", "/admin/complaints/5/status", json_body={"id": 5, "status": "inprogress"})
    upstream.add("POST", "/complaints/5/timeline", json_body={"id": 1})

    response = client.put("/api/v1/admin/complaints/5/status", json={"status": "In-Progress"}, headers=admin_headers)

    assert response.status_code == 200
    assert upstream.body("PUT", "/admin/complaints/5/status") == {"status": "inprogress"}
    assert upstream.body("POST", "/complaints/5/timeline") == {"message": "Status updated to: inprogress"}


def test_priority_and_forward_notes(client, upstream, admin_headers):
    upstream.add("POST", "/complaints/5/timeline", json_body={"id": 1})

    client.put("/api/v1/admin/complaints/5/priority", json={"priority": "high"}, headers=admin_headers)
    assert upstream.body("POST", "/complaints/5/timeline") == {"message": "Priority updated to: high"}

    client.post("/api/v1/admin/complaints/5/forward", headers=admin_headers)
    assert upstream.body("POST", "/complaints/5/timeline") == {"message": "Forwarded to Senior Warden."}


def test_empty_timeline_entry_is_rejected(client, upstream, admin_headers):
    response = client.post("/api/v1/admin/complaints/5/timeline", json={"message": " "}, headers=admin_headers)

    assert response.status_code == 422
    assert upstream.last("POST", "/complaints/5/timeline") is None


def test_delete_complaint(client, upstream, admin_headers):
    upstream.add("DELETE", "/admin/complaints/5", status_code=204)

    assert client.delete("/api/v1/admin/complaints/5", headers=admin_headers).status_code == 200


def test_attachment_upload_is_noted(client, upstream, admin_headers):
    upstream.add("POST", "/complaints/5/attachments", json_body={"url": "/files/a.jpg"})
    upstream.add("POST", "/complaints/5/timeline", json_body={"id": 2})

    response = client.post(
        "/api/v1/admin/complaints/5/attachments",
        files={"file": ("a.jpg", b"1234", "image/jpeg")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert upstream.body("POST", "/complaints/5/timeline") == {
        "message": "Attachment noted: a.jpg [type=image/jpeg, size=4B]"
    }


def test_apology_review(client, upstream, admin_headers):
    upstream.add("PUT", "/admin/apologies/3/review", json_body={"id": 3, "status": "accepted"})

    response = client.put(
        "/api/v1/admin/apologies/3/review",
        json={"status": "accepted", "comment": "Ok"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert upstream.body("PUT", "/admin/apologies/3/review") == {"status": "accepted", "comment": "Ok"}


# ==================== Dashboard ====================

def test_dashboard_metrics(client, upstream, admin_headers):
    upstream.add("GET", "/metrics/status-summary", json_body={"total": 2, "resolved": 1, "open": 1})
    upstream.add("GET", "/metrics/resolution-rate", json_body={"resolutionRate": 50})
    upstream.add("GET", "/metrics/pending-count", json_body={"pendingCount": 1})
    upstream.add("GET", "/admin/apologies", json_body=[])

    body = client.get("/api/v1/admin/dashboard/metrics", headers=admin_headers).json()

    assert body["resolutionRateLabel"] == "50%"
    assert body["pendingCount"] == 1
    assert body["degraded"] == []


def test_dashboard_analytics_follows_active_tab(client, upstream, admin_headers, complaints, apologies):
    upstream.add("GET", "/admin/complaints", json_body=complaints)
    upstream.add("GET", "/admin/apologies", json_body=apologies)
    client.put("/api/v1/session/active-tab", json={"tab": "apologies"}, headers=admin_headers)

    body = client.get("/api/v1/admin/dashboard/analytics", headers=admin_headers).json()

    assert body["stats"]["total"] == 2
    assert sum(item["value"] for item in body["statusBreakdown"]) == 3


# ==================== Student ====================

def test_student_submits_complaint(client, upstream, student_headers):
    upstream.add("POST", "/student/complaints", json_body={"id": 1}, status_code=201)

    response = client.post(
        "/api/v1/student/complaints",
        data={"title": "Leak", "type": "plumbing", "description": "Drips", "priority": "high"},
        files=[("attachments", ("p.jpg", b"\xff\xd8", "image/jpeg"))],
        headers=student_headers,
    )

    assert response.status_code == 201
    forwarded = upstream.last("POST", "/student/complaints").content.decode("latin-1")
    assert 'name="attachments[]"; filename="p.jpg"' in forwarded


def test_student_complaint_validation(client, upstream, student_headers):
    response = client.post(
        "/api/v1/student/complaints",
        data={"title": "", "type": "plumbing", "description": "Drips"},
        headers=student_headers,
    )

    errors = response.json()["error"]["details"]["field_errors"]
    assert response.status_code == 422
    assert errors["title"] == ["Title is required"]
    assert errors["priority"] == ["Please select a priority"]
    assert upstream.last("POST", "/student/complaints") is None


def test_student_reads_own_complaint_with_timeline(client, upstream, student_headers, complaints):
    upstream.add("GET", "/student/complaints", json_body={"data": complaints})
    upstream.add("GET", "/complaints/2/timeline", json_body=[{"message": "Electrician assigned"}])

    body = client.get("/api/v1/student/complaints/2", headers=student_headers).json()

    assert body["data"]["title"] == "Fan not working"
    assert body["timeline"] == [{"message": "Electrician assigned"}]


def test_student_complaint_without_timeline(client, upstream, student_headers, complaints):
    upstream.add("GET", "/student/complaints", json_body={"data": complaints})
    upstream.add("GET", "/complaints/1/timeline", json_body={"error": "missing"}, status_code=500)

    body = client.get("/api/v1/student/complaints/1", headers=student_headers).json()

    assert body["data"]["id"] == 1
    assert body["timeline"] == []


def test_missing_student_complaint_redirects_to_own_list(client, upstream, student_headers, complaints):
    upstream.add("GET", "/student/complaints", json_body={"data": complaints})

    response = client.get("/api/v1/student/complaints/99", headers=student_headers)

    assert response.status_code == 404
    assert response.json()["error"]["details"]["redirect"] == "/student/complaints"


def test_student_reads_own_apology(client, upstream, student_headers, apologies):
    upstream.add("GET", "/student/apologies", json_body={"data": apologies})

    found = client.get("/api/v1/student/apologies/12", headers=student_headers)
    missing = client.get("/api/v1/student/apologies/404", headers=student_headers)

    assert found.json()["data"]["message"] == "Loud music after hours"
    assert missing.status_code == 404
    assert missing.json()["error"]["details"]["redirect"] == "/student/apologies"


def test_student_submits_apology(client, upstream, student_headers):
    upstream.add("POST", "/student/apologies", json_body={"id": 4})

    response = client.post(
        "/api/v1/student/apologies",
        json={"type": "outing", "message": "Sorry"},
        headers=student_headers,
    )

    assert response.status_code == 201
    assert upstream.body("POST", "/student/apologies") == {"type": "outing", "message": "Sorry"}


def test_student_dashboard(client, upstream, student_headers, complaints, apologies):
    upstream.add("GET", "/student/complaints", json_body={"data": complaints})
    upstream.add("GET", "/student/apologies", json_body={"data": apologies})

    body = client.get("/api/v1/student/dashboard", headers=student_headers).json()

    assert body["complaints"]["total"] == 3
    assert body["apologies"]["total"] == 2
    assert body["averageResponseTime"] == "15h"
    assert len(body["recentApologies"]) == 2


# ==================== Presets and drafts ====================

def test_preset_lifecycle(client, admin_headers):
    created = client.post(
        "/api/v1/presets/admin-complaints-filter",
        json={"name": "Open plumbing", "filters": {"status": "open", "category": "plumbing"}},
        headers=admin_headers,
    )
    assert created.status_code == 201
    preset_id = created.json()["id"]

    listed = client.get("/api/v1/presets/admin-complaints-filter", headers=admin_headers).json()
    assert [p["name"] for p in listed["presets"]] == ["Open plumbing"]
    assert client.get("/api/v1/presets/admin-apologies-filter", headers=admin_headers).json()["presets"] == []

    deleted = client.delete(f"/api/v1/presets/admin-complaints-filter/{preset_id}", headers=admin_headers)
    assert deleted.json() == {"message": "Deleted preset: Open plumbing"}
    assert client.get(f"/api/v1/presets/admin-complaints-filter/{preset_id}", headers=admin_headers).status_code == 404


def test_preset_requires_name(client, admin_headers):
    response = client.post("/api/v1/presets/admin-complaints-filter", json={"name": " "}, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error"]["details"]["field_errors"] == {"name": ["Please enter a preset name"]}


def test_draft_lifecycle(client, student_headers):
    assert client.get("/api/v1/drafts/complaint", headers=student_headers).status_code == 404

    saved = client.put("/api/v1/drafts/complaint", json={"data": {"title": "Half"}}, headers=student_headers)
    assert saved.json()["formId"] == "complaint"
    assert saved.json()["lastSaved"] == "just now"

    restored = client.get("/api/v1/drafts/complaint", headers=student_headers).json()
    assert restored["data"] == {"title": "Half"}

    assert client.delete("/api/v1/drafts/complaint", headers=student_headers).status_code == 204
    assert client.get("/api/v1/drafts/complaint", headers=student_headers).status_code == 404


# ==================== Concurrent loads ====================

def test_list_analytics_and_export_load_together(app, upstream, complaints):
    async def slow_complaints(request):
        await asyncio.sleep(0.05)
        return httpx.Response(200, json={"data": complaints})

    upstream.add("GET", "/admin/complaints", handler=slow_complaints)
    app.state.session_registry.open("tok-admin", "admin")
    headers = {"Authorization": "Bearer tok-admin"}

    async def load_dashboard():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://portal.test") as http:
            return await asyncio.gather(
                http.get("/api/v1/admin/complaints", headers=headers),
                http.get("/api/v1/admin/dashboard/analytics", headers=headers),
                http.get("/api/v1/admin/complaints/export", params={"format": "json"}, headers=headers),
            )

    listed, analytics, exported = asyncio.run(load_dashboard())

    assert [r.status_code for r in (listed, analytics, exported)] == [200, 200, 200]
    assert listed.json()["count"] == 3
    assert analytics.json()["stats"]["total"] == 3
    assert len(json.loads(exported.text)) == 3
