from io import BytesIO
from unittest.mock import patch

import pytest
from openpyxl import load_workbook

from app.core.config import settings
from app.repositories.events import EventRepository
from app.repositories.users import UserRepository
from conftest import sign_in

API = "/api/trpc"


def _create_event(client, **overrides):
    body = {"artistId": 1, "title": "Show de verao", "eventDate": "2025-01-15T22:00:00Z"}
    body.update(overrides)
    response = client.post(f"{API}/events.create", json=body)
    assert response.status_code == 200, response.text
    return response.json()["id"]


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/api/health").json() == {"ok": True}


def test_protected_procedure_requires_session(client):
    response = client.get(f"{API}/artists.list")
    assert response.status_code == 401
    assert response.json()["detail"] == "Credenciais invalidas"


def test_me_without_session_is_null(client):
    response = client.get(f"{API}/auth.me")
    assert response.status_code == 200
    assert response.json() is None


def test_me_with_bearer_token(client, store):
    sign_in(client, store, open_id="bearer-user", name="Bea")
    token = client.cookies.get(settings.SESSION_COOKIE_NAME)
    client.cookies.clear()
    response = client.get(f"{API}/auth.me", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["openId"] == "bearer-user"


def test_inactive_user_is_rejected(client, store):
    user = sign_in(client, store, open_id="gone")
    UserRepository(store).delete(user.id)
    assert client.get(f"{API}/artists.list").status_code == 401


def test_logout_clears_cookie(auth_client):
    response = auth_client.post(f"{API}/auth.logout")
    assert response.json() == {"success": True}
    assert settings.SESSION_COOKIE_NAME in response.headers["set-cookie"]
    assert "Max-Age=0" in response.headers["set-cookie"]


def test_session_exchanges_firebase_token(client, store, monkeypatch):
    monkeypatch.setattr(settings, "OWNER_OPEN_ID", "firebase-uid")
    claims = {
        "uid": "firebase-uid",
        "name": "Dona",
        "email": "dona@example.com",
        "firebase": {"sign_in_provider": "google.com"},
    }
    with patch("app.api.v1.auth.verify_id_token", return_value=claims):
        response = client.post(f"{API}/auth.session", json={"idToken": "token"})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["openId"] == "firebase-uid"
    assert body["role"] == "admin"
    assert body["loginMethod"] == "google.com"
    assert settings.SESSION_COOKIE_NAME in response.cookies
    assert client.get(f"{API}/auth.me").json()["email"] == "dona@example.com"


def test_session_with_invalid_token(client):
    with patch("app.api.v1.auth.verify_id_token", side_effect=ValueError("bad")):
        response = client.post(f"{API}/auth.session", json={"idToken": "x"})
    assert response.status_code == 401


def test_unknown_fields_are_rejected(auth_client):
    response = auth_client.post(f"{API}/artists.create", json={"name": "X", "genre": "forro"})
    assert response.status_code == 422


def test_invalid_email_is_rejected(auth_client):
    response = auth_client.post(f"{API}/contractors.create", json={"name": "X", "email": "nope"})
    assert response.status_code == 422


def test_artist_crud_flow(auth_client):
    created = auth_client.post(f"{API}/artists.create", json={"name": "Bruno", "contactName": "Lia"})
    artist_id = created.json()["id"]
    auth_client.post(f"{API}/artists.create", json={"name": "Álvaro"})

    artist = auth_client.get(f"{API}/artists.getById", params={"id": artist_id}).json()
    assert artist["contactName"] == "Lia"
    assert artist["color"] == "#10B981"

    update = auth_client.post(f"{API}/artists.update", json={"id": artist_id, "color": "#000000"})
    assert update.json() == {"success": True}
    names = [item["name"] for item in auth_client.get(f"{API}/artists.list").json()]
    assert names == ["Álvaro", "Bruno"]

    auth_client.post(f"{API}/artists.delete", json={"id": artist_id})
    names = [item["name"] for item in auth_client.get(f"{API}/artists.list").json()]
    assert names == ["Álvaro"]
    listed = auth_client.get(f"{API}/artists.list", params={"includeInactive": "true"}).json()
    assert len(listed) == 2


def test_get_missing_returns_null(auth_client):
    assert auth_client.get(f"{API}/localPartners.getById", params={"id": 99}).json() is None


def test_event_flow(auth_client, store):
    event_id = _create_event(auth_client, cache="1.500,00", status="confirmado")
    _create_event(auth_client, eventDate="2025-02-01T20:00:00Z", title="Carnaval")

    listed = auth_client.get(
        f"{API}/events.list",
        params={"startDate": "2025-01-01T00:00:00Z", "endDate": "2025-01-31T23:59:59Z"},
    ).json()
    assert [item["id"] for item in listed] == [event_id]
    assert listed[0]["status"] == "confirmado"

    found = auth_client.get(f"{API}/events.search", params={"query": "carnaval"}).json()
    assert [item["title"] for item in found] == ["Carnaval"]
    assert auth_client.get(f"{API}/events.search", params={"query": ""}).json() == []

    auth_client.post(f"{API}/events.update", json={"id": event_id, "isPaid": True})
    assert auth_client.get(f"{API}/events.getById", params={"id": event_id}).json()["isPaid"] is True

    auth_client.post(
        f"{API}/events.addAttachment",
        json={"eventId": event_id, "fileName": "contrato.pdf", "fileUrl": "https://files/contrato.pdf"},
    )
    assert len(auth_client.get(f"{API}/events.attachments", params={"eventId": event_id}).json()) == 1

    assert auth_client.post(f"{API}/events.delete", json={"id": event_id}).json() == {"success": True}
    assert EventRepository(store).get_by_id(event_id) is None
    assert auth_client.get(f"{API}/events.attachments", params={"eventId": event_id}).json() == []


def test_invalid_event_status_is_rejected(auth_client):
    response = auth_client.post(
        f"{API}/events.create",
        json={"artistId": 1, "title": "X", "eventDate": "2025-01-15T22:00:00Z", "status": "talvez"},
    )
    assert response.status_code == 422


def test_upload_and_delete_attachment(auth_client, storage_dir):
    event_id = _create_event(auth_client)
    response = auth_client.post(
        f"{API}/events.uploadAttachment",
        data={"eventId": str(event_id), "type": "contrato"},
        files={"file": ("rider tecnico.pdf", b"%PDF-1.4 conteudo", "application/pdf")},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["fileKey"].startswith(f"events/{event_id}/")
    stored = storage_dir / body["fileKey"]
    assert stored.read_bytes() == b"%PDF-1.4 conteudo"

    attachments = auth_client.get(f"{API}/events.attachments", params={"eventId": event_id}).json()
    assert attachments[0]["type"] == "contrato"
    assert attachments[0]["mimeType"] == "application/pdf"

    auth_client.post(f"{API}/events.deleteAttachment", json={"id": body["id"]})
    assert not stored.exists()
    assert auth_client.get(f"{API}/events.attachments", params={"eventId": event_id}).json() == []


def test_upload_to_missing_event(auth_client, storage_dir):
    response = auth_client.post(
        f"{API}/events.uploadAttachment",
        data={"eventId": "404"},
        files={"file": ("a.pdf", b"x", "application/pdf")},
    )
    assert response.status_code == 404


def test_notifications_flow(auth_client, store):
    me = auth_client.get(f"{API}/auth.me").json()
    for title in ("Primeira", "Segunda"):
        auth_client.post(
            f"{API}/notifications.create",
            json={"userId": me["id"], "title": title, "message": "Evento atualizado"},
        )
    unread = auth_client.get(f"{API}/notifications.list", params={"onlyUnread": "true"}).json()
    assert len(unread) == 2

    auth_client.post(f"{API}/notifications.markAsRead", json={"id": unread[0]["id"]})
    assert len(auth_client.get(f"{API}/notifications.list", params={"onlyUnread": "true"}).json()) == 1
    auth_client.post(f"{API}/notifications.markAllAsRead")
    assert auth_client.get(f"{API}/notifications.list", params={"onlyUnread": "true"}).json() == []


def test_admin_only_procedures(client, store):
    sign_in(client, store, open_id="plain", role="user")
    response = client.post(
        f"{API}/permissions.upsert", json={"userId": 1, "artistId": 1, "canManage": True}
    )
    assert response.status_code == 403


def test_permissions_upsert(auth_client):
    for can_manage in (False, True):
        auth_client.post(f"{API}/permissions.upsert", json={"userId": 5, "artistId": 3, "canManage": can_manage})
    listed = auth_client.get(f"{API}/permissions.listForUser", params={"userId": 5}).json()
    assert len(listed) == 1
    assert listed[0]["canManage"] is True


def test_users_list_and_update(auth_client, store):
    sign_in(auth_client, store, open_id="second", name="Zelia", role="user")
    sign_in(auth_client, store)
    users = auth_client.get(f"{API}/users.list").json()
    target = next(user for user in users if user["openId"] == "second")
    auth_client.post(f"{API}/users.update", json={"id": target["id"], "role": "financeiro"})
    users = auth_client.get(f"{API}/users.list").json()
    assert next(user for user in users if user["openId"] == "second")["role"] == "financeiro"


def test_report_reports_malformed_values(auth_client):
    _create_event(auth_client, cache="1.500,00", status="confirmado")
    _create_event(auth_client, cache="2.500,00", status="confirmado")
    _create_event(auth_client, cache="mil reais")
    params = {"startDate": "2025-01-01T00:00:00Z", "endDate": "2025-01-31T23:59:59Z"}

    response = auth_client.get(f"{API}/reports.performance", params=params)
    assert response.status_code == 200
    assert response.headers["X-Report-Malformed-Values"] == "1"
    assert response.json()[0] == {"status": "confirmado", "count": 2, "total": 4000.0}


def test_report_requires_period(auth_client):
    assert auth_client.get(f"{API}/reports.receivables").status_code == 422


def test_report_export(auth_client):
    _create_event(auth_client, state="pe")
    response = auth_client.get(
        f"{API}/reports.export",
        params={"report": "eventsByState", "startDate": "2025-01-01T00:00:00Z", "endDate": "2025-01-31T23:59:59Z"},
    )
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    ws = load_workbook(BytesIO(response.content))["RELATORIO"]
    assert [cell.value for cell in ws[2]] == ["PE", 1]


@pytest.mark.parametrize(
    "procedure, field",
    [
        ("events.update", "artistId"),
        ("events.update", "title"),
        ("events.update", "status"),
        ("events.update", "eventDate"),
        ("events.update", "cache"),
        ("events.update", "isPaid"),
        ("artists.update", "name"),
        ("artists.update", "color"),
        ("artists.update", "isActive"),
        ("contractors.update", "name"),
        ("contractors.update", "isActive"),
        ("localPartners.update", "name"),
        ("localPartners.update", "isActive"),
        ("users.update", "role"),
    ],
)
def test_update_rejects_null_on_non_nullable_fields(auth_client, procedure, field):
    response = auth_client.post(f"{API}/{procedure}", json={"id": 1, field: None})
    assert response.status_code == 422


def test_null_update_keeps_event_listed(auth_client):
    event_id = _create_event(auth_client)
    response = auth_client.post(
        f"{API}/events.update",
        json={"id": event_id, "eventDate": None, "title": None, "artistId": None},
    )
    assert response.status_code == 422
    listed = auth_client.get(f"{API}/events.list").json()
    assert [(item["id"], item["title"]) for item in listed] == [(event_id, "Show de verao")]


def test_nullable_update_fields_accept_null(auth_client):
    event_id = _create_event(auth_client, city="Recife", contractorId=3)
    response = auth_client.post(
        f"{API}/events.update", json={"id": event_id, "city": None, "contractorId": None}
    )
    assert response.status_code == 200
    event = auth_client.get(f"{API}/events.getById", params={"id": event_id}).json()
    assert event["city"] is None
    assert event["contractorId"] is None
