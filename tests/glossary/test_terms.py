"""用语提交、浏览与编辑接口。"""

from app.packages.glossary.core.constants import (
    MSG_EN_KR_REQUIRED,
    MSG_PERMISSION_DENIED,
    MSG_REQUIRED_FIELDS,
    MSG_TERM_ADDED,
    MSG_TERM_EXISTS,
    MSG_TERM_NOT_FOUND,
    MSG_TERM_UPDATED,
    MSG_UNKNOWN_DISCIPLINE,
)
from app.packages.glossary.models.term import GlossaryTerm
from app.packages.glossary.models.user_profile import UserProfile
from app.packages.glossary.services.term_service import term_service


def _create(client, headers=None, **overrides):
    payload = {"en": "heat exchanger", "kr": "열교환기", "discipline": "Piping"}
    payload.update(overrides)
    return client.post("/api/v1/terms", json=payload, headers=headers or {})


def test_anonymous_submission_is_stored_as_pending(client):
    response = _create(client)

    assert response.status_code == 200
    body = response.json()
    assert body["msg"] == MSG_TERM_ADDED
    term = body["data"]["term"]
    assert term["status"] == "pending"
    assert term["abbreviation"] == "Piping"
    assert term["created_by"] is None
    assert term["description"] == ""


def test_heat_exchanger_lifecycle(client, admin_headers, seed_term):
    """提交 → 审核通过 → 出现在默认列表中 Piping 分组内合适的位置。"""
    seed_term("Check Valve", "체크 밸브", discipline="Piping")
    seed_term("Valve", "밸브", discipline="Piping")
    seed_term("Zone", "구역", discipline="General")

    term_id = _create(client).json()["data"]["term"]["id"]
    assert term_id not in [term["id"] for term in client.get("/api/v1/terms").json()["data"]]

    approved = client.post(f"/api/v1/moderation/terms/{term_id}/approve", headers=admin_headers)
    assert approved.json()["data"]["term"]["status"] == "approved"

    listing = client.get("/api/v1/terms").json()["data"]
    assert [term["en"] for term in listing] == ["Zone", "Check Valve", "heat exchanger", "Valve"]


def test_submission_requires_en_kr_and_discipline(client):
    response = _create(client, en="   ")

    assert response.status_code == 400
    body = response.json()
    assert body["msg"] == MSG_REQUIRED_FIELDS
    assert body["data"]["success"] is False


def test_submission_rejects_unknown_discipline(client):
    response = _create(client, discipline="Plumbing")

    assert response.status_code == 400
    assert response.json()["msg"] == MSG_UNKNOWN_DISCIPLINE


def test_submission_matching_existing_term_is_rejected(client, seed_term):
    seed_term("Pump", "펌프", discipline="Piping")

    response = _create(client, en=" PUMP ", kr="펌프")

    assert response.status_code == 409
    body = response.json()
    assert body["msg"] == MSG_TERM_EXISTS
    assert body["data"]["success"] is False
    assert [term["en"] for term in client.get("/api/v1/terms").json()["data"]] == ["Pump"]


def test_resubmitting_a_pending_term_is_rejected(client):
    assert _create(client).status_code == 200

    again = _create(client, en="Heat Exchanger", discipline="HVAC")

    assert again.status_code == 409
    assert again.json()["msg"] == MSG_TERM_EXISTS


def test_submission_sharing_only_english_is_accepted(client, seed_term):
    seed_term("Pump", "펌프", discipline="Piping")

    response = _create(client, en="pump", kr="양수기")

    assert response.status_code == 200
    assert response.json()["msg"] == MSG_TERM_ADDED


def test_signed_in_submission_records_author(client, user_headers):
    user = client.get("/api/v1/auth/session", headers=user_headers).json()["data"]["user"]

    term = _create(client, headers=user_headers).json()["data"]["term"]

    assert term["created_by"] == user["id"]


def test_default_listing_shows_only_approved(client, seed_term):
    seed_term("Approved")
    seed_term("Waiting", status="pending")

    assert [term["en"] for term in client.get("/api/v1/terms").json()["data"]] == ["Approved"]
    pending = client.get("/api/v1/terms", params={"status": "pending"}).json()["data"]
    assert [term["en"] for term in pending] == ["Waiting"]


def test_author_can_edit_and_discipline_change_recomputes_abbreviation(client, user_headers):
    term_id = _create(client, headers=user_headers).json()["data"]["term"]["id"]

    response = client.put(
        f"/api/v1/terms/{term_id}",
        json={"en": "Heat Exchanger", "discipline": "HVAC"},
        headers=user_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["msg"] == MSG_TERM_UPDATED
    assert body["data"]["term"]["en"] == "Heat Exchanger"
    assert body["data"]["term"]["abbreviation"] == "HVAC"
    assert body["data"]["term"]["kr"] == "열교환기"


def test_other_users_cannot_edit(client, login, user_headers):
    term_id = _create(client, headers=user_headers).json()["data"]["term"]["id"]
    stranger = login("stranger@example.com")

    response = client.put(f"/api/v1/terms/{term_id}", json={"kr": "변경"}, headers=stranger)

    assert response.status_code == 403
    assert response.json()["msg"] == MSG_PERMISSION_DENIED


def test_admin_can_edit_anonymous_submission(client, admin_headers):
    term_id = _create(client).json()["data"]["term"]["id"]

    response = client.put(f"/api/v1/terms/{term_id}", json={"description": " 열을 교환 "}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["term"]["description"] == "열을 교환"


def test_edit_rejects_blank_english_or_korean(client, admin_headers):
    term_id = _create(client).json()["data"]["term"]["id"]

    response = client.put(f"/api/v1/terms/{term_id}", json={"kr": " "}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["msg"] == MSG_EN_KR_REQUIRED


def test_edit_requires_sign_in(client):
    term_id = _create(client).json()["data"]["term"]["id"]

    assert client.put(f"/api/v1/terms/{term_id}", json={"kr": "변경"}).status_code == 401


def test_delete_is_admin_only(client, admin_headers, user_headers, seed_term):
    term = seed_term("Disposable")

    assert client.delete(f"/api/v1/terms/{term.id}", headers=user_headers).status_code == 403
    assert client.delete(f"/api/v1/terms/{term.id}", headers=admin_headers).status_code == 200

    again = client.delete(f"/api/v1/terms/{term.id}", headers=admin_headers)
    assert again.status_code == 404
    assert again.json()["msg"] == MSG_TERM_NOT_FOUND


def test_grouped_listing(client, seed_term):
    seed_term("Valve", discipline="Piping")
    seed_term("Anode", discipline="Cell")
    seed_term("Elbow", discipline="Piping")
    seed_term("Hidden", discipline="HVAC", status="pending")

    groups = client.get("/api/v1/terms/grouped").json()["data"]

    assert [(group["discipline"], group["count"]) for group in groups] == [("Piping", 2), ("Cell", 1)]


def test_search_over_approved_terms(client, seed_term):
    seed_term("Heat Exchanger", "열교환기", discipline="Piping")
    seed_term("Damper", "댐퍼", discipline="HVAC", description="airflow control")
    seed_term("Exchanger Pending", status="pending")

    hits = client.get("/api/v1/terms/search", params={"q": "exchanger"}).json()["data"]
    assert [term["en"] for term in hits] == ["Heat Exchanger"]
    assert client.get("/api/v1/terms/search", params={"q": "AIRFLOW"}).json()["data"][0]["en"] == "Damper"
    assert client.get("/api/v1/terms/search").json()["data"] == []


def test_disciplines_endpoint(client):
    data = client.get("/api/v1/terms/disciplines").json()["data"]

    assert len(data) == 10
    assert data[0] == {"name": "General", "abbreviation": "Gen", "korean_name": "일반", "order": 0}


def test_stats_report_progress_per_discipline(client, seed_term):
    seed_term("Valve", discipline="Piping")
    seed_term("Pump", discipline="Piping", status="pending")
    seed_term("Elbow", discipline="Piping", status="pending")
    seed_term("Anode", discipline="Cell")

    stats = {item["discipline"]: item for item in client.get("/api/v1/terms/stats").json()["data"]}

    assert stats["Piping"]["approved"] == 1
    assert stats["Piping"]["pending"] == 2
    assert stats["Piping"]["total"] == 3
    assert stats["Piping"]["progress"] == 33.3
    assert stats["Cell"]["progress"] == 100.0
    assert stats["General"]["total"] == 0


def test_failed_edit_leaves_loaded_term_untouched(db_session_fixture, seed_term):
    term = seed_term("Valve", "밸브", discipline="Piping", status="pending")
    editor = UserProfile(id="admin-id", email="admin@example.com", role="admin")

    result = term_service.update_term(
        db_session_fixture,
        term.id,
        editor=editor,
        en="Gate Valve",
        kr="게이트 밸브",
        discipline="Plumbing",
    )

    assert result.success is False
    assert result.message == MSG_UNKNOWN_DISCIPLINE
    loaded = db_session_fixture.get(GlossaryTerm, term.id)
    assert (loaded.en, loaded.kr, loaded.discipline) == ("Valve", "밸브", "Piping")
    assert loaded not in db_session_fixture.dirty
