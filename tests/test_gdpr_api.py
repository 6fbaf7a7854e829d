from datetime import datetime, timezone

import pytest
from bson import ObjectId

from healthcare_app.models import AuditLog, User


@pytest.fixture
async def user(db):
    u = User(
        name="Jane Doe",
        email="jane@example.com",
        phone="555-123-4567",
        dateOfBirth=datetime(1990, 5, 17, tzinfo=timezone.utc),
        medicalId="MED-001",
        consentGiven=True,
        dataProcessingPurposes=["treatment"],
    )
    await u.insert()
    return u


async def _actions(user_id: str):
    logs = await AuditLog.find(AuditLog.userId == user_id).to_list()
    return [l.action for l in logs]


async def test_access_returns_personal_data(api, user):
    resp = await api.get(f"/api/gdpr/access/{user.id}", params={"requestedBy": "dpo"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Data access request processed"
    assert body["data"]["personalData"]["email"] == "jane@example.com"
    assert body["data"]["consent"]["purposes"] == ["treatment"]
    assert "processingDate" in body
    assert await _actions(str(user.id)) == ["DATA_ACCESS_REQUEST"]


@pytest.mark.parametrize("user_id", [str(ObjectId()), "nope"])
async def test_unknown_user_is_404(api, db, user_id):
    resp = await api.get(f"/api/gdpr/access/{user_id}")
    assert resp.status_code == 404
    assert resp.json() == {"message": "User not found"}


async def test_rectify_applies_known_fields_only(api, user):
    resp = await api.put(
        f"/api/gdpr/rectify/{user.id}",
        json={"corrections": {"email": "jane.doe@example.com", "role": "admin"}, "requestedBy": "jane"},
    )
    assert resp.status_code == 200
    assert resp.json()["updatedFields"] == ["email"]

    stored = await User.get(user.id)
    assert stored.email == "jane.doe@example.com"
    assert await _actions(str(user.id)) == ["DATA_RECTIFICATION"]


async def test_rectify_rejects_bad_value(api, user):
    resp = await api.put(f"/api/gdpr/rectify/{user.id}", json={"corrections": {"dateOfBirth": "someday"}})
    assert resp.status_code == 400
    assert "dateOfBirth" in resp.json()["message"]


async def test_erase_removes_user(api, user):
    resp = await api.request("DELETE", f"/api/gdpr/erase/{user.id}", json={"reason": "left the clinic"})
    assert resp.status_code == 200
    assert resp.json()["userId"] == str(user.id)

    assert await User.get(user.id) is None
    assert (await api.get(f"/api/gdpr/access/{user.id}")).status_code == 404
    assert await _actions(str(user.id)) == ["DATA_ERASURE"]


async def test_erase_blocked_by_legal_hold(api, user, monkeypatch):
    from healthcare_app.routers import gdpr

    monkeypatch.setattr(gdpr, "legal_hold_reason", lambda u: "Legal exception applies")
    resp = await api.delete(f"/api/gdpr/erase/{user.id}")
    assert resp.status_code == 409
    assert await User.get(user.id) is not None


async def test_restrict_and_object(api, user):
    resp = await api.put(
        f"/api/gdpr/restrict/{user.id}", json={"restrictionType": "marketing", "reason": "no thanks"}
    )
    assert resp.status_code == 200
    assert resp.json()["restrictionType"] == "marketing"

    resp = await api.put(f"/api/gdpr/object/{user.id}", json={"objectionType": "profiling", "reason": "x"})
    assert resp.status_code == 200
    assert resp.json()["objectionType"] == "profiling"

    stored = await User.get(user.id)
    assert stored.processingRestricted is True
    assert stored.restrictionReason == "no thanks"
    assert stored.objectionFiled is True
    assert stored.objectionType == "profiling"


async def test_portability_json_and_xml(api, user):
    resp = await api.get(f"/api/gdpr/portability/{user.id}")
    assert resp.status_code == 200
    assert f'user-data-{user.id}.json' in resp.headers["content-disposition"]
    assert resp.json()["metadata"]["exportDate"]

    resp = await api.get(f"/api/gdpr/portability/{user.id}", params={"format": "xml"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert "<email>jane@example.com</email>" in resp.text
    assert "<purposes>treatment</purposes>" in resp.text


async def test_portability_unknown_format(api, user):
    resp = await api.get(f"/api/gdpr/portability/{user.id}", params={"format": "csv"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Unsupported format. Use 'json' or 'xml'"}


async def test_consent_update_then_withdrawal(api, user):
    resp = await api.post(
        f"/api/gdpr/consent/{user.id}", json={"consentGiven": True, "purposes": ["treatment", "research"]}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Consent updated"
    assert resp.json()["purposes"] == ["treatment", "research"]

    resp = await api.post(f"/api/gdpr/consent/{user.id}", json={"withdrawal": True})
    assert resp.json()["message"] == "Consent withdrawn"
    assert resp.json()["consentGiven"] is False
    assert resp.json()["purposes"] == []

    stored = await User.get(user.id)
    assert stored.consentWithdrawnDate is not None
    assert sorted(await _actions(str(user.id))) == ["CONSENT_UPDATE", "CONSENT_WITHDRAWAL"]


async def test_breach_notification_logged_as_system(api, db):
    resp = await api.post(
        "/api/gdpr/breach-notification",
        json={"breachDetails": {"vector": "lost laptop"}, "affectedUsers": ["u1", "u2"]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["breachId"].startswith("breach-")
    assert body["notificationRequired"] is True

    logs = await AuditLog.find(AuditLog.userId == "SYSTEM").to_list()
    assert len(logs) == 1
    assert logs[0].details["affectedUsersCount"] == 2


async def test_audit_trail_lists_user_actions(api, user):
    await api.get(f"/api/gdpr/access/{user.id}")
    await api.put(f"/api/gdpr/restrict/{user.id}", json={"restrictionType": "all"})

    resp = await api.get(f"/api/gdpr/audit/{user.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["userId"] == str(user.id)
    assert body["totalLogs"] == 2
    assert {l["action"] for l in body["auditLogs"]} == {"DATA_RESTRICTION", "DATA_ACCESS_REQUEST"}


async def test_audit_trail_date_window(api, db):
    await AuditLog(action="OLD", userId="u9", timestamp=datetime(2020, 1, 1, tzinfo=timezone.utc)).insert()
    await AuditLog(action="NEW", userId="u9", timestamp=datetime(2024, 6, 1, tzinfo=timezone.utc)).insert()

    resp = await api.get(
        "/api/gdpr/audit/u9", params={"startDate": "2024-01-01T00:00:00Z", "endDate": "2024-12-31T00:00:00Z"}
    )
    assert [l["action"] for l in resp.json()["auditLogs"]] == ["NEW"]

    # one-sided window is ignored
    resp = await api.get("/api/gdpr/audit/u9", params={"startDate": "2024-01-01T00:00:00Z"})
    assert resp.json()["totalLogs"] == 2


async def test_audit_trail_newest_first(api, db):
    for action, month in (("FIRST", 1), ("THIRD", 3), ("SECOND", 2)):
        await AuditLog(action=action, userId="u7", timestamp=datetime(2024, month, 1, tzinfo=timezone.utc)).insert()

    resp = await api.get("/api/gdpr/audit/u7")
    assert [l["action"] for l in resp.json()["auditLogs"]] == ["THIRD", "SECOND", "FIRST"]
