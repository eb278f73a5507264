from datetime import date, timedelta

from sqlalchemy.exc import OperationalError

from resq.booking.defaults import today
from resq.booking.ledger import CapacityLedger
from resq.booking.models import LOCATION
from resq.booking.repository import BookingRepository, ResourceRepository


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_get_resource(client, make_resource):
    rid = make_resource(capacity=10, used=7)
    r = client.get(f"/v1/resources/{rid}")
    assert r.status_code == 200
    body = r.json()
    assert body["used"] == 7
    assert body["remaining"] == 3
    assert body["status"] == "available"
    assert body["utilization"] == 70.0


def test_get_unknown_resource(client):
    assert client.get("/v1/resources/999").status_code == 404


def test_reserve_and_cancel(client, make_resource, events):
    rid = make_resource(capacity=2, used=1)
    r = client.post(f"/v1/resources/{rid}/reservations", json={"requester_id": 11})
    assert r.status_code == 201
    booking = r.json()
    assert booking["status"] == "ACTIVE"
    assert client.get(f"/v1/resources/{rid}").json()["status"] == "full"

    r = client.post(f"/v1/bookings/{booking['id']}/cancel")
    assert r.status_code == 200
    assert r.json()["status"] == "CANCELLED"
    assert client.get(f"/v1/resources/{rid}").json()["used"] == 1
    assert [e[0] for e in events] == ["BookingCreated", "BookingCancelled"]


def test_reserve_full_resource_conflicts(client, make_resource):
    rid = make_resource(capacity=1, used=1)
    r = client.post(f"/v1/resources/{rid}/reservations", json={"requester_id": 1})
    assert r.status_code == 409
    assert r.json()["detail"] == {"reason": "CAPACITY_EXCEEDED", "resource_id": rid}


def test_reserve_unknown_resource(client):
    r = client.post("/v1/resources/77/reservations", json={"requester_id": 1})
    assert r.status_code == 404


def test_cancel_unknown_booking(client):
    assert client.post("/v1/bookings/5/cancel").status_code == 404


def test_bookings_for_requester(client, make_resource):
    rid = make_resource(capacity=5)
    for _ in range(2):
        client.post(f"/v1/resources/{rid}/reservations", json={"requester_id": 8})
    client.post(f"/v1/resources/{rid}/reservations", json={"requester_id": 9})
    rows = client.get("/v1/bookings", params={"requester_id": 8}).json()
    assert len(rows) == 2
    assert {b["requester_id"] for b in rows} == {8}
    assert client.get(f"/v1/bookings/{rows[0]['id']}").status_code == 200
    assert client.get("/v1/bookings/999").status_code == 404


def test_list_filters_on_derived_status(client, make_resource):
    make_resource(capacity=3, used=3, name="a")
    make_resource(capacity=3, used=1, name="b")
    make_resource(capacity=3, used=0, name="c", closed=True)
    full = client.get("/v1/resources", params={"status": "full"}).json()
    assert [s["name"] for s in full] == ["a"]
    closed = client.get("/v1/resources", params={"status": "closed"}).json()
    assert [s["name"] for s in closed] == ["c"]
    assert client.get("/v1/resources", params={"status": "bogus"}).status_code == 400


def test_statistics(client, make_resource):
    make_resource(capacity=10, used=5, name="a")
    make_resource(capacity=10, used=10, name="b")
    stats = client.get("/v1/resources/statistics").json()["statistics"]
    assert stats["total"] == 2
    assert stats["available"] == 1
    assert stats["full"] == 1
    assert stats["total_capacity"] == 20
    assert stats["total_used"] == 15
    assert stats["average_utilization"] == 75.0


class TestAdmin:
    def test_create_location(self, client):
        r = client.post("/v1/admin/resources", json={
            "kind": LOCATION,
            "name": "Matara Shelter",
            "capacity": 120,
            "location_type": "shelter",
            "latitude": 5.9549,
            "longitude": 80.555,
        })
        assert r.status_code == 201
        body = r.json()
        assert body["used"] == 0
        assert body["status"] == "available"
        listed = client.get("/v1/resources", params={"kind": LOCATION, "location_type": "shelter"}).json()
        assert [s["name"] for s in listed] == ["Matara Shelter"]

    def test_create_rejects_bad_input(self, client):
        r = client.post("/v1/admin/resources", json={"kind": "boat", "name": "x", "capacity": 1})
        assert r.status_code == 400
        r = client.post("/v1/admin/resources", json={"kind": LOCATION, "name": "x", "capacity": 1,
                                                     "location_type": "castle"})
        assert r.status_code == 400
        r = client.post("/v1/admin/resources", json={"kind": "time_slot", "name": "x", "capacity": -1})
        assert r.status_code == 422

    def test_default_slots_for_date(self, client):
        r = client.post("/v1/admin/time-slots/defaults", params={"date": "2026-10-16"})
        assert r.status_code == 201
        assert len(r.json()) == 12
        again = client.post("/v1/admin/time-slots/defaults", params={"date": "2026-10-16"})
        assert len(again.json()) == 12
        listed = client.get("/v1/resources", params={"date": "2026-10-16"}).json()
        assert len(listed) == 12
        assert all(s["capacity"] == 10 for s in listed)

    def test_close_and_reopen(self, client, make_resource, events):
        rid = make_resource(capacity=4, used=1)
        assert client.post(f"/v1/admin/resources/{rid}/close").json()["status"] == "closed"
        r = client.post(f"/v1/resources/{rid}/reservations", json={"requester_id": 1})
        assert r.status_code == 409
        assert r.json()["detail"]["reason"] == "RESOURCE_CLOSED"
        assert client.post(f"/v1/admin/resources/{rid}/reopen").json()["status"] == "available"
        assert [e[0] for e in events] == ["ResourceClosed", "ResourceReopened"]

    def test_close_unknown_resource(self, client):
        assert client.post("/v1/admin/resources/404/close").status_code == 404


class TestSearchAndUpcoming:
    def test_search_on_name_address_and_type(self, client, make_resource):
        make_resource(kind=LOCATION, name="Galle Safe Zone", location_type="safe_zone",
                      address="Galle Fort", capacity=300)
        make_resource(kind=LOCATION, name="Jaffna Hospital", location_type="hospital",
                      address="Jaffna Central", capacity=200)
        by_address = client.get("/v1/resources", params={"q": "fort"}).json()
        assert [s["name"] for s in by_address] == ["Galle Safe Zone"]
        by_type = client.get("/v1/resources", params={"q": "hospital"}).json()
        assert [s["name"] for s in by_type] == ["Jaffna Hospital"]
        assert client.get("/v1/resources", params={"q": "kandy"}).json() == []

    def test_search_on_time_slot_label(self, client, make_resource):
        make_resource(name="slot a", slot_date=date(2026, 10, 16), time_slot="08:00-10:00")
        make_resource(name="slot b", slot_date=date(2026, 10, 16), time_slot="10:00-12:00")
        found = client.get("/v1/resources", params={"q": "08:00"}).json()
        assert [s["name"] for s in found] == ["slot a"]

    def test_upcoming_days_window(self, client, make_resource):
        start = today()
        for offset in (-1, 0, 3, 10):
            make_resource(name=f"slot {offset}", slot_date=start + timedelta(days=offset),
                          time_slot="08:00-10:00")
        upcoming = client.get("/v1/resources", params={"days": 7}).json()
        assert [s["name"] for s in upcoming] == ["slot 0", "slot 3"]
        assert client.get("/v1/resources", params={"days": -1}).status_code == 422

    def test_statistics_breakdowns(self, client, make_resource):
        make_resource(kind=LOCATION, name="s1", location_type="shelter", capacity=10, used=10)
        make_resource(kind=LOCATION, name="s2", location_type="shelter", capacity=10, used=0)
        make_resource(kind=LOCATION, name="h1", location_type="hospital", capacity=4, used=1)
        make_resource(name="t1", slot_date=date(2026, 10, 16), time_slot="08:00-10:00", capacity=10, used=5)
        stats = client.get("/v1/resources/statistics").json()["statistics"]
        assert set(stats["by_type"]) == {"hospital", "shelter"}
        shelter = stats["by_type"]["shelter"]
        assert shelter["total"] == 2
        assert shelter["full"] == 1
        assert shelter["total_capacity"] == 20
        assert shelter["average_utilization"] == 50.0
        assert stats["by_date"] == {"2026-10-16": {
            "total": 1, "available": 1, "full": 0, "closed": 0,
            "total_capacity": 10, "total_used": 5, "average_utilization": 50.0,
        }}


class TestConflictsAndOutages:
    def test_duplicate_slot_conflicts(self, client):
        slot = {"kind": "time_slot", "name": "Evacuation 08:00", "capacity": 10,
                "slot_date": "2026-10-16", "time_slot": "08:00-10:00"}
        assert client.post("/v1/admin/resources", json=slot).status_code == 201
        r = client.post("/v1/admin/resources", json=slot)
        assert r.status_code == 409
        assert len(client.get("/v1/resources", params={"date": "2026-10-16"}).json()) == 1

    def test_reads_report_store_outage(self, client, make_resource, monkeypatch):
        rid = make_resource()

        def lost(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(ResourceRepository, "list", lost)
        monkeypatch.setattr(BookingRepository, "get", lost)
        monkeypatch.setattr(BookingRepository, "for_requester", lost)
        monkeypatch.setattr(CapacityLedger, "resource", lost)
        assert client.get("/v1/resources").status_code == 503
        assert client.get("/v1/resources/statistics").status_code == 503
        assert client.get(f"/v1/resources/{rid}").status_code == 503
        assert client.get("/v1/bookings/1").status_code == 503
        assert client.get("/v1/bookings", params={"requester_id": 1}).status_code == 503
