"""
End-to-end API tests: routers, camelCase bodies, error mapping.
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from harmony.services.sensor_nudges import MEAL_PREP_SUGGESTION

API = "/api/v1"


async def _household(client, members=("user1", "user2")) -> str:
    resp = await client.post(f"{API}/households", json={"name": "Flat 3B", "address": "1 Main St", "members": list(members)})
    assert resp.status_code == 201
    return resp.json()["id"]


# ── Health ───────────────────────────────────────────────────────────────────

class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.json() == {"status": "ok"}
        assert resp.headers["X-Content-Type-Options"] == "nosniff"

    async def test_health_db(self, client):
        resp = await client.get("/health/db")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"


# ── Households ───────────────────────────────────────────────────────────────

class TestHouseholds:
    async def test_create_and_get_camel_case(self, client):
        household_id = await _household(client)
        body = (await client.get(f"{API}/households/{household_id}")).json()
        assert body["members"] == ["user1", "user2"]
        assert "createdAt" in body

    async def test_list_for_member(self, client):
        await _household(client)
        resp = await client.get(f"{API}/households", params={"member": "user2"})
        assert [h["name"] for h in resp.json()] == ["Flat 3B"]

    async def test_validation(self, client):
        resp = await client.post(f"{API}/households", json={"name": "", "members": []})
        assert resp.status_code == 422

    async def test_missing(self, client):
        assert (await client.get(f"{API}/households/nope")).status_code == 404
        resp = await client.patch(f"{API}/households/nope", json={"name": "x"})
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Household not found"}

    async def test_null_for_required_field_rejected(self, client):
        household_id = await _household(client)

        for body in ({"members": None}, {"name": None}):
            resp = await client.patch(f"{API}/households/{household_id}", json=body)
            assert resp.status_code == 422

        household = (await client.get(f"{API}/households/{household_id}")).json()
        assert household["members"] == ["user1", "user2"]
        assert household["name"] == "Flat 3B"

    async def test_delete_cascades(self, client):
        household_id = await _household(client)
        await client.post(f"{API}/bills", json={
            "householdId": household_id, "name": "Water", "amount": "45.00",
            "dueDate": "2026-10-28", "splitBetween": ["user1"],
        })
        resp = await client.delete(f"{API}/households/{household_id}")
        assert resp.status_code == 200
        assert resp.json()["bills"] == 1
        assert (await client.get(f"{API}/households/{household_id}")).status_code == 404

    async def test_export(self, client):
        household_id = await _household(client)
        body = (await client.get(f"{API}/households/{household_id}/export")).json()
        assert body["household"]["id"] == household_id
        assert body["bills"] == []


# ── Rent and bills ───────────────────────────────────────────────────────────

class TestRent:
    async def test_schedule_generate_and_pay(self, client):
        household_id = await _household(client)
        resp = await client.post(f"{API}/rent/schedules", json={
            "householdId": household_id, "monthlyAmount": "1800", "dueDay": 5,
            "splits": [{"userId": "user1", "amount": "900"}, {"userId": "user2", "amount": "900"}],
            "startDate": "2026-01-01",
        })
        assert resp.status_code == 201

        schedule = (await client.get(f"{API}/households/{household_id}/rent/schedule")).json()
        assert schedule["splits"][0]["userId"] == "user1"

        generated = (await client.post(
            f"{API}/households/{household_id}/rent/generate", params={"year": 2026, "month": 11}
        )).json()
        assert len(generated) == 2
        assert {p["dueDate"] for p in generated} == {"2026-11-05"}

        paid = (await client.post(f"{API}/rent/payments/{generated[0]['id']}/paid", json={"userId": "user1"})).json()
        assert paid["status"] == "paid"
        assert paid["paidBy"] == "user1"

    async def test_no_schedule(self, client):
        household_id = await _household(client)
        assert (await client.get(f"{API}/households/{household_id}/rent/schedule")).status_code == 404
        resp = await client.post(f"{API}/households/{household_id}/rent/generate", params={"year": 2026, "month": 11})
        assert resp.status_code == 404

    async def test_stats(self, client):
        household_id = await _household(client)
        today = date.today()
        await client.post(f"{API}/rent/payments", json={
            "householdId": household_id, "userId": "user1", "amount": "900",
            "dueDate": today.replace(day=1).isoformat(),
        })
        stats = (await client.get(f"{API}/households/{household_id}/rent/stats")).json()
        assert Decimal(stats["totalDue"]) == Decimal("900")
        assert stats["isFallback"] is False
        assert len(stats["paymentHistory"]) == 1


class TestBills:
    async def test_crud(self, client):
        household_id = await _household(client)
        created = (await client.post(f"{API}/bills", json={
            "householdId": household_id, "name": "Internet", "amount": "89.99",
            "dueDate": "2026-10-28", "category": "internet", "splitBetween": ["user1", "user2"],
        })).json()
        assert created["status"] == "pending"

        updated = (await client.patch(f"{API}/bills/{created['id']}", json={"notes": "fibre"})).json()
        assert updated["notes"] == "fibre"
        assert updated["name"] == "Internet"

        cleared = await client.patch(f"{API}/bills/{created['id']}", json={"notes": None})
        assert cleared.json()["notes"] is None
        resp = await client.patch(f"{API}/bills/{created['id']}", json={"splitBetween": None})
        assert resp.status_code == 422

        listed = (await client.get(f"{API}/households/{household_id}/bills")).json()
        assert [b["id"] for b in listed] == [created["id"]]

        assert (await client.delete(f"{API}/bills/{created['id']}")).status_code == 204
        assert (await client.delete(f"{API}/bills/{created['id']}")).status_code == 404

    async def test_invalid_amount(self, client):
        resp = await client.post(f"{API}/bills", json={
            "householdId": "h", "name": "x", "amount": "-1", "dueDate": "2026-10-28", "splitBetween": ["u"],
        })
        assert resp.status_code == 422


# ── Chores, sensors, nudges ──────────────────────────────────────────────────

class TestChores:
    async def test_complete_posts_congratulation(self, client):
        household_id = await _household(client)
        chore = (await client.post(f"{API}/chores", json={
            "householdId": household_id, "title": "Take out trash", "points": 10,
        })).json()

        resp = await client.post(f"{API}/chores/{chore['id']}/complete", json={"userId": "user2"})

        assert resp.status_code == 201
        body = resp.json()
        assert body["completion"]["pointsEarned"] == 10
        assert body["nudge"]["type"] == "chore_completed"
        assert body["nudge"]["targetUsers"] == ["user2"]

        completions = (await client.get(f"{API}/households/{household_id}/chores/completions")).json()
        assert len(completions) == 1

    async def test_complete_missing(self, client):
        resp = await client.post(f"{API}/chores/nope/complete", json={"userId": "user2"})
        assert resp.status_code == 404


class TestSensors:
    async def test_event_triggers_nudge(self, client):
        household_id = await _household(client)
        sensor = (await client.post(f"{API}/sensors", json={
            "householdId": household_id, "name": "Bin", "type": "trash", "location": "kitchen",
        })).json()

        resp = await client.post(f"{API}/sensors/{sensor['id']}/events", json={
            "eventType": "threshold_exceeded", "value": {"level": 92}, "metadata": {"battery": 80},
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["event"]["metadata"] == {"battery": 80}
        assert body["nudge"]["title"] == "Trash bin is getting full"

        events = (await client.get(f"{API}/sensors/{sensor['id']}/events")).json()
        assert len(events) == 1
        active = (await client.get(f"{API}/households/{household_id}/sensors")).json()
        assert active[0]["lastReading"]["value"] == {"level": 92}

    async def test_patterns_and_insights(self, client):
        household_id = await _household(client)
        sensor = (await client.post(f"{API}/sensors", json={
            "householdId": household_id, "name": "Kitchen motion", "type": "motion", "location": "kitchen",
        })).json()
        await client.post(f"{API}/sensors/{sensor['id']}/events", json={"eventType": "motion_detected"})

        patterns = (await client.get(f"{API}/households/{household_id}/sensors/patterns")).json()
        assert patterns["mostActiveArea"] == "kitchen"
        assert patterns["mostActiveTime"].endswith(":00")
        assert patterns["choreCompletionRate"] == 0.0
        assert MEAL_PREP_SUGGESTION in patterns["suggestions"]

        insights = (await client.get(f"{API}/households/{household_id}/sensors/insights")).json()
        assert insights == {
            "totalEvents": 1,
            "activeSensors": 1,
            "recentActivity": "1 events in the last 24 hours",
            "efficiencyScore": pytest.approx(10.0),
        }


class TestNudges:
    async def test_user_filter_read_and_dismiss(self, client):
        household_id = await _household(client)
        nudge = (await client.post(f"{API}/nudges", json={
            "householdId": household_id, "title": "Bins", "message": "Bins go out tonight",
            "type": "chore_reminder", "targetUsers": ["user1"],
        })).json()

        assert len((await client.get(f"{API}/households/{household_id}/nudges", params={"userId": "user1"})).json()) == 1
        assert (await client.get(f"{API}/households/{household_id}/nudges", params={"userId": "user2"})).json() == []

        assert (await client.post(f"{API}/nudges/{nudge['id']}/read")).json()["isRead"] is True
        await client.post(f"{API}/nudges/{nudge['id']}/dismiss")
        assert (await client.get(f"{API}/households/{household_id}/nudges")).json() == []


# ── Chat, conflicts, notifications ───────────────────────────────────────────

class TestChatAndConflicts:
    async def test_analyze_recent_chat(self, client):
        household_id = await _household(client)
        sent = []
        for text in ("Who left the dishes?", "Not me", "Let's sort it out"):
            resp = await client.post(f"{API}/chat", json={"householdId": household_id, "userId": "user1", "content": text})
            sent.append(resp.json()["id"])

        edited = (await client.patch(f"{API}/chat/{sent[0]}", json={"content": "Who left the pans?"})).json()
        assert edited["isEdited"] is True

        analysis = (await client.post(f"{API}/households/{household_id}/conflicts/analyze")).json()
        assert analysis["triggerMessageId"] in sent
        assert analysis["analysis"]["sentiment"] == "neutral"

        resolved = (await client.post(f"{API}/conflicts/analyses/{analysis['id']}/resolve")).json()
        assert resolved["isResolved"] is True

    async def test_coach_session_lifecycle(self, client):
        household_id = await _household(client)
        session = (await client.post(f"{API}/conflicts/sessions", json={
            "householdId": household_id, "participants": ["user1", "user2"], "topic": "noise",
        })).json()

        active = (await client.get(f"{API}/households/{household_id}/conflicts/sessions", params={"active": True})).json()
        assert [s["id"] for s in active] == [session["id"]]

        suggested = (await client.post(
            f"{API}/conflicts/sessions/{session['id']}/resolution", json={"context": "late music"}
        )).json()
        assert len(suggested["suggestions"]) == 3

        closed = (await client.patch(f"{API}/conflicts/sessions/{session['id']}", json={"status": "completed"})).json()
        assert closed["endedAt"] is not None


class TestNotifications:
    async def test_user_feed(self, client):
        household_id = await _household(client)
        created = (await client.post(f"{API}/notifications", json={
            "userId": "user1", "householdId": household_id, "type": "bill_due",
            "title": "Water bill", "message": "Due Friday", "metadata": {"billId": "b1"},
        })).json()
        assert created["metadata"] == {"billId": "b1"}

        assert len((await client.get(f"{API}/users/user1/notifications")).json()) == 1
        await client.post(f"{API}/notifications/{created['id']}/read")
        assert (await client.get(f"{API}/users/user1/notifications")).json() == []
        assert len((await client.get(f"{API}/users/user1/notifications", params={"unread": False})).json()) == 1
        assert len((await client.get(f"{API}/households/{household_id}/notifications")).json()) == 1


# ── Dashboard ────────────────────────────────────────────────────────────────

class TestDashboard:
    async def test_real_stats(self, client):
        household_id = await _household(client)
        await client.post(f"{API}/bills", json={
            "householdId": household_id, "name": "Water", "amount": "45.00",
            "dueDate": (date.today() + timedelta(days=3)).isoformat(), "splitBetween": ["user1"],
        })
        body = (await client.get(f"{API}/households/{household_id}/dashboard")).json()
        assert body["isFallback"] is False
        assert Decimal(body["bills"]["totalDue"]) == Decimal("45")
        assert Decimal(body["rent"]["totalDue"]) == 0

    async def test_unknown_household_fallback(self, client):
        body = (await client.get(f"{API}/households/nope/dashboard")).json()
        assert body["isFallback"] is True
        assert Decimal(body["rent"]["totalDue"]) == Decimal("2400")
