from datetime import timedelta

import pytest

from app.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from app.models import Blocked, BlockType, Permanent, Temporary, Unblocked
from app.schemas.barber import BarberBlockRequest
from app.services.barber_service import BarberService
from app.services.scheduling import active_barbers
from app.utils.timeutils import local_now
from conftest import at, booking_payload

T0 = at(9)


def temporary_block(hours=1, reason="Missed two appointments"):
    return BarberBlockRequest(block_reason=reason, block_type="temporary", block_duration_hours=hours)


def test_temporary_block_sets_expiry_once(db, barbers):
    alex = BarberService.block_barber(db, barbers[0].id, temporary_block(hours=1), now=T0)

    assert alex.is_blocked
    assert alex.block_type == BlockType.TEMPORARY
    assert alex.blocked_at == T0
    assert alex.block_expires_at == T0 + timedelta(hours=1)
    assert alex.block_warning_count == 1
    assert alex.block_state.kind == Temporary(expires_at=T0 + timedelta(hours=1))
    assert alex not in active_barbers(db)


def test_sweep_respects_expiry(db, barbers):
    BarberService.block_barber(db, barbers[0].id, temporary_block(hours=1), now=T0)

    assert BarberService.unblock_expired(db, now=T0 + timedelta(minutes=30)) == []
    assert barbers[0].is_blocked

    lifted = BarberService.unblock_expired(db, now=T0 + timedelta(minutes=61))
    assert [b.id for b in lifted] == [barbers[0].id]

    alex = lifted[0]
    assert alex.block_state == Unblocked()
    assert alex.block_reason is None
    assert alex.block_expires_at is None
    assert alex.blocked_at is None
    assert alex.block_type is None
    assert alex.block_duration_hours is None
    assert alex in active_barbers(db)


def test_sweep_lifts_block_exactly_at_expiry(db, barbers):
    BarberService.block_barber(db, barbers[0].id, temporary_block(hours=2), now=T0)
    assert len(BarberService.unblock_expired(db, now=T0 + timedelta(hours=2))) == 1


def test_permanent_block_is_never_swept(db, barbers):
    data = BarberBlockRequest(block_reason="Misconduct", block_type="permanent", block_duration_hours=5)
    brian = BarberService.block_barber(db, barbers[1].id, data, now=T0)

    assert brian.block_type == BlockType.PERMANENT
    assert brian.block_expires_at is None
    assert brian.block_duration_hours is None
    assert isinstance(brian.block_state.kind, Permanent)

    assert BarberService.unblock_expired(db, now=T0 + timedelta(days=365)) == []
    assert brian.is_blocked


def test_block_state_errors(db, barbers):
    BarberService.block_barber(db, barbers[0].id, temporary_block(), now=T0)

    with pytest.raises(InvalidStateError):
        BarberService.block_barber(db, barbers[0].id, temporary_block(), now=T0)

    with pytest.raises(InvalidStateError):
        BarberService.unblock_barber(db, barbers[1].id)

    with pytest.raises(NotFoundError):
        BarberService.block_barber(db, 999, temporary_block(), now=T0)


def test_block_requires_reason_and_duration(db, barbers):
    with pytest.raises(ValidationError):
        BarberService.block_barber(db, barbers[0].id, temporary_block(reason="   "), now=T0)

    with pytest.raises(ValidationError) as exc:
        BarberService.block_barber(db, barbers[0].id, temporary_block(hours=0), now=T0)
    assert exc.value.detail["error"] == "BLOCK_DURATION_REQUIRED"

    assert not barbers[0].is_blocked


def test_manual_unblock_clears_fields(db, barbers):
    BarberService.block_barber(db, barbers[0].id, temporary_block(), now=T0)
    alex = BarberService.unblock_barber(db, barbers[0].id)

    assert not alex.is_blocked
    assert alex.block_expires_at is None
    # warnings are history, not block state
    assert alex.block_warning_count == 1


def test_warning_count_tracks_block_actions(db, barbers):
    chris = barbers[2]
    chris.apply_block_state(Blocked(reason="Restored from backup", kind=Permanent(), blocked_at=T0))
    chris.apply_block_state(Unblocked())
    assert (chris.block_warning_count or 0) == 0

    for _ in range(2):
        BarberService.block_barber(db, chris.id, temporary_block(), now=T0)
        BarberService.unblock_barber(db, chris.id)
    assert chris.block_warning_count == 2


def test_blocked_barber_skipped_by_assignment(client, db, barbers):
    BarberService.block_barber(db, barbers[0].id, temporary_block(), now=T0)

    response = client.post("/api/bookings/", json=booking_payload())
    assert response.status_code == 201
    assert response.json()["barber"]["name"] == "Brian"


def test_block_endpoint_notifies_barber_and_admin(client, barbers, admin_headers, sent_emails):
    response = client.post(
        f"/api/barbers/{barbers[0].id}/block",
        json={"block_reason": "Late arrival", "block_type": "temporary", "block_duration_hours": 24},
        headers=admin_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["barber"]["is_blocked"] is True
    assert body["barber"]["blocked_by"] == "owner"
    assert body["block_expires_at"] is not None

    recipients = [email["to"] for email in sent_emails]
    assert "alex@example.com" in recipients


def test_check_expired_blocks_endpoint(client, db, barbers, admin_headers):
    # the endpoint sweeps against the real clock
    BarberService.block_barber(db, barbers[0].id, temporary_block(hours=1), now=local_now() - timedelta(hours=2))
    BarberService.block_barber(db, barbers[1].id, temporary_block(hours=1), now=local_now())

    response = client.post("/api/barbers/check-expired-blocks", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["unblocked_count"] == 1
    assert response.json()["unblocked_barbers"][0]["name"] == "Alex"


def test_public_list_shows_eligible_barbers(client, db, barbers):
    BarberService.block_barber(db, barbers[1].id, temporary_block(), now=T0)
    response = client.get("/api/barbers/public")
    assert response.status_code == 200
    assert [b["name"] for b in response.json()] == ["Alex", "Chris"]


def test_create_barber_rejects_duplicates(client, barbers, admin_headers):
    response = client.post(
        "/api/barbers/",
        json={"name": "Dan", "phone": "0711000001", "identity_badge_number": "B010"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "DUPLICATE_BARBER"

    response = client.post(
        "/api/barbers/",
        json={"name": "Dan", "phone": "0711000010", "identity_badge_number": "B010"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["is_blocked"] is False


def test_create_barber_requires_admin(client):
    response = client.post("/api/barbers/", json={"name": "Dan", "phone": "0711000010", "identity_badge_number": "B010"})
    assert response.status_code == 401


def test_delete_barber_with_active_booking(client, barbers, admin_headers):
    client.post("/api/bookings/", json=booking_payload())

    response = client.delete(f"/api/barbers/{barbers[0].id}", headers=admin_headers)
    assert response.status_code == 400

    response = client.delete(f"/api/barbers/{barbers[2].id}", headers=admin_headers)
    assert response.status_code == 200


def test_barber_stats(client, barbers, admin_headers):
    created = client.post("/api/bookings/", json=booking_payload()).json()["booking"]
    client.patch(f"/api/bookings/{created['id']}/status", json={"status": "completed"}, headers=admin_headers)

    response = client.get(f"/api/barbers/{barbers[0].id}/stats", headers=admin_headers)
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_bookings"] == 1
    assert stats["completed_bookings"] == 1
    assert stats["total_revenue"] == 1500
    assert stats["total_services"] == 1
