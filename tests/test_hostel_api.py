import asyncio

import httpx
import pytest

from app.core.exceptions import (
    ACCESS_DENIED_MESSAGE,
    AccessDeniedError,
    AuthenticationError,
    ExternalServiceError,
    ResourceNotFoundError,
    UpstreamAPIError,
)


def run(coro):
    return asyncio.run(coro)


def test_bearer_token_and_key_normalization(upstream, api_client):
    upstream.add("GET", "/admin/complaints", json_body={
        "data": [{"ID": 1, "Title": "Leak", "Student": {"User": {"Name": "Asha"}, "room_no": 12}}]
    })

    records = run(api_client.list_complaints())

    assert upstream.last("GET", "/admin/complaints").headers["Authorization"] == "Bearer tok-123"
    assert records == [{
        "id": 1,
        "title": "Leak",
        "student": {"id": None, "name": "Asha", "email": None, "roomNo": "12", "block": None},
    }]


def test_bare_list_responses_are_accepted(upstream, api_client):
    upstream.add("GET", "/admin/apologies", json_body=[{"id": 3, "user": {"name": "Ravi"}}])

    records = run(api_client.list_apologies())

    assert records[0]["student"]["name"] == "Ravi"


def test_server_side_narrowing(upstream, api_client):
    upstream.add("GET", "/admin/complaints", json_body=[])

    run(api_client.list_complaints(status="open", category="all"))

    params = upstream.last("GET", "/admin/complaints").url.params
    assert params.get("status") == "open"
    assert "type" not in params


def test_http_error_message_uses_error_field(upstream, api_client):
    upstream.add("GET", "/admin/complaints", json_body={"error": "boom"}, status_code=500)

    with pytest.raises(UpstreamAPIError) as exc:
        run(api_client.list_complaints())

    assert exc.value.message == "HTTP 500 on GET /admin/complaints: boom"
    assert exc.value.upstream_status == 500
    assert exc.value.status_code == 502


def test_http_error_message_falls_back_to_body_text(upstream, api_client):
    upstream.add("PUT", "/admin/apologies/4/review", text="bad status", status_code=400)

    with pytest.raises(UpstreamAPIError) as exc:
        run(api_client.review_apology("4", "nope"))

    assert exc.value.message == "HTTP 400 on PUT /admin/apologies/4/review: bad status"
    assert exc.value.status_code == 400


def test_forbidden_becomes_access_denied(upstream, api_client):
    upstream.add("GET", "/admin/complaints", json_body={"error": "admins only"}, status_code=403)

    with pytest.raises(AccessDeniedError) as exc:
        run(api_client.list_complaints())

    assert exc.value.message == ACCESS_DENIED_MESSAGE
    assert exc.value.status_code == 403


def test_transport_failure(api_client, upstream):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    upstream.add("GET", "/admin/complaints", handler=refuse)

    with pytest.raises(ExternalServiceError):
        run(api_client.list_complaints())


def test_no_content_is_none(upstream, api_client):
    upstream.add("POST", "/logout", status_code=204)
    assert run(api_client.logout()) is None


def test_login_without_token(upstream, api_client):
    upstream.add("POST", "/login", json_body={"message": "ok", "role": "admin"})

    with pytest.raises(AuthenticationError) as exc:
        run(api_client.login("a@b.c", "pw"))

    assert exc.value.message == "Login succeeded but no token returned by server"


def test_detail_falls_back_to_list(upstream, api_client):
    upstream.add("GET", "/admin/complaints/5", json_body={"error": "boom"}, status_code=500)
    upstream.add("GET", "/admin/complaints", json_body={"data": [{"id": 4}, {"id": 5, "title": "Found"}]})

    record = run(api_client.get_complaint("5"))

    assert record["title"] == "Found"


def test_detail_missing_everywhere(upstream, api_client):
    upstream.add("GET", "/admin/apologies", json_body=[])

    with pytest.raises(ResourceNotFoundError) as exc:
        run(api_client.get_apology("9"))

    assert exc.value.details["redirect"] == "/admin/apologies"


def test_student_record_is_found_in_own_list(upstream, api_client):
    upstream.add("GET", "/student/complaints", json_body={"data": [{"id": "a1", "title": "Mine"}]})

    record = run(api_client.get_student_record("complaint", "a1"))

    assert record["title"] == "Mine"
    assert [request.url.path for request in upstream.calls] == ["/api/student/complaints"]


def test_student_record_missing(upstream, api_client):
    upstream.add("GET", "/student/apologies", json_body=[{"id": 1}])

    with pytest.raises(ResourceNotFoundError) as exc:
        run(api_client.get_student_record("apology", "2"))

    assert exc.value.details["redirect"] == "/student/apologies"


def test_detail_unwraps_data(upstream, api_client):
    upstream.add("GET", "/admin/apologies/2", json_body={"data": {"ID": 2, "Message": "Sorry"}})

    assert run(api_client.get_apology("2"))["message"] == "Sorry"


def test_status_update_notes_timeline(upstream, api_client):
    upstream.add("PUT", "/admin/complaints/7/status", json_body={"id": 7, "status": "resolved"})
    upstream.add("POST", "/complaints/7/timeline", json_body={"id": 1, "message": "Status updated to: resolved"})

    result = run(api_client.update_complaint_status("7", "resolved"))

    assert upstream.body("PUT", "/admin/complaints/7/status") == {"status": "resolved"}
    assert upstream.body("POST", "/complaints/7/timeline") == {"message": "Status updated to: resolved"}
    assert result["timelineEntry"]["message"] == "Status updated to: resolved"


def test_status_update_survives_timeline_failure(upstream, api_client):
    upstream.add("PUT", "/admin/complaints/7/status", json_body={"id": 7})
    upstream.add("POST", "/complaints/7/timeline", json_body={"error": "nope"}, status_code=500)

    result = run(api_client.update_complaint_status("7", "resolved"))

    assert result == {"complaint": {"id": 7}, "timelineEntry": None}


def test_timeline_errors_can_be_tolerated(upstream, api_client):
    upstream.add("GET", "/complaints/7/timeline", json_body={"error": "x"}, status_code=500)

    assert run(api_client.get_timeline("7", tolerate_errors=True)) == []
    with pytest.raises(UpstreamAPIError):
        run(api_client.get_timeline("7"))


def test_create_complaint_is_multipart(upstream, api_client):
    upstream.add("POST", "/student/complaints", json_body={"id": 10}, status_code=201)

    run(api_client.create_complaint(
        {"title": "Leak", "type": "plumbing", "description": "Drips", "priority": None},
        [("photo.jpg", b"\xff\xd8data", "image/jpeg")],
    ))

    request = upstream.last("POST", "/student/complaints")
    body = request.content.decode("latin-1")
    assert request.headers["content-type"].startswith("multipart/form-data")
    assert 'name="title"' in body
    assert 'name="priority"' not in body
    assert 'name="attachments[]"; filename="photo.jpg"' in body


def test_create_apology_drops_empty_fields(upstream, api_client):
    upstream.add("POST", "/student/apologies", json_body={"id": 3})

    run(api_client.create_apology({"type": "outing", "message": "Sorry", "description": "", "student_id": None}))

    assert upstream.body("POST", "/student/apologies") == {"type": "outing", "message": "Sorry"}


def test_upload_uses_path_template(upstream):
    from app.services.integrations.hostel_api import HostelApiClient, create_http_client

    upstream.add("POST", "/files/8/upload", json_body={"url": "/f/8.jpg"})
    client = HostelApiClient(
        create_http_client("http://hostel.test/api", transport=upstream.transport),
        token="t",
        upload_path_template="/files/{id}/upload",
    )

    assert run(client.upload_attachment("8", ("a.jpg", b"x", "image/jpeg"))) == {"url": "/f/8.jpg"}


def test_text_responses_are_returned_as_text(upstream, api_client):
    upstream.add("POST", "/complaints/1/attachments", text="stored")

    assert run(api_client.upload_attachment("1", ("a.pdf", b"x", "application/pdf"))) == "stored"


def test_pending_apologies_count(upstream, api_client):
    upstream.add("GET", "/admin/apologies", json_body={"data": [{"id": 1}, {"id": 2}]})

    assert run(api_client.pending_apologies_count()) == 2
    assert upstream.last("GET", "/admin/apologies").url.params["status"] == "submitted"
