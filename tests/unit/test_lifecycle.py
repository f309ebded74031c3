"""Interview lifecycle transitions, atomicity and concurrency."""

import asyncio

import pytest

from hirepath.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    NotQualifiedError,
    PersistenceError,
    SlotUnavailableError,
)
from hirepath.core.lifecycle.coordinator import InterviewLifecycleCoordinator
from hirepath.core.models.candidate_profile import CandidateProfile
from hirepath.core.models.interview import InterviewRequest

LIFECYCLE_CONFIG = {
    "lifecycle": {
        "invite_threshold": 80.0,
        "available_slots": [
            {"date": "2025-05-15", "slots": ["10:00 AM", "1:00 PM", "3:30 PM"]},
            {"date": "2025-05-16", "slots": ["9:30 AM", "11:00 AM", "2:00 PM"]},
        ],
    }
}


def _candidate(store, rank=91.0) -> CandidateProfile:
    profile = CandidateProfile(user_id="user-1", full_name="Ada Lovelace", email="ada@example.com", rank=rank)
    store.save_candidate(profile)
    return profile


def _coordinator(store, notifier) -> InterviewLifecycleCoordinator:
    return InterviewLifecycleCoordinator(store, notifier, LIFECYCLE_CONFIG)


def test_full_forward_path(store, notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)

    request = asyncio.run(coordinator.invite(profile.id))
    assert store.load_candidate(profile.id).interview_status == "invited"
    assert request.notification_sent
    assert notifier.sent[0][1]["to"] == "ada@example.com"

    asyncio.run(coordinator.schedule(profile.id, request.id, "2025-05-16", "11:00 AM"))
    stored_request = store.load_interview_request(request.id)
    assert stored_request.status == "scheduled"
    assert (stored_request.selected_date, stored_request.selected_time) == ("2025-05-16", "11:00 AM")
    assert store.load_candidate(profile.id).interview_status == "scheduled"

    recording = asyncio.run(coordinator.complete(profile.id, "blob://interview-recordings/x.webm", size_bytes=10))
    done = store.load_candidate(profile.id)
    assert done.interview_status == "completed"
    assert done.interview_completed_at is not None
    assert recording.interview_request_id == request.id
    assert len(store.find_recordings(profile.id)) == 1


def test_threshold_boundary(store, notifier):
    coordinator = _coordinator(store, notifier)
    below = _candidate(store, rank=79.9)
    at = _candidate(store, rank=80.0)

    assert asyncio.run(coordinator.invite_if_qualified(below.id)) is None
    with pytest.raises(NotQualifiedError):
        asyncio.run(coordinator.invite(below.id))
    assert store.load_candidate(below.id).interview_status == "none"

    assert isinstance(asyncio.run(coordinator.invite_if_qualified(at.id)), InterviewRequest)


def test_unranked_candidate_is_not_invited(store, notifier):
    profile = _candidate(store, rank=None)
    assert asyncio.run(_coordinator(store, notifier).invite_if_qualified(profile.id)) is None


def test_double_invite_is_rejected(store, notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)
    asyncio.run(coordinator.invite(profile.id))

    with pytest.raises(InvalidTransitionError):
        asyncio.run(coordinator.invite(profile.id))
    assert len(store.find_interview_requests(profile.id)) == 1


def test_concurrent_invites_create_exactly_one_request(store, notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)

    async def race():
        return await asyncio.gather(
            coordinator.invite(profile.id),
            coordinator.invite(profile.id),
            return_exceptions=True,
        )

    results = asyncio.run(race())
    assert sum(isinstance(r, InterviewRequest) for r in results) == 1
    assert sum(isinstance(r, InvalidTransitionError) for r in results) == 1
    assert len(store.find_interview_requests(profile.id)) == 1
    assert len(notifier.sent) == 1


def test_schedule_rejects_slot_not_offered(store, notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)
    request = asyncio.run(coordinator.invite(profile.id))

    with pytest.raises(SlotUnavailableError):
        asyncio.run(coordinator.schedule(profile.id, request.id, "2025-05-15", "9:30 AM"))
    with pytest.raises(SlotUnavailableError):
        asyncio.run(coordinator.schedule(profile.id, request.id, "2025-06-01", "10:00 AM"))

    assert store.load_candidate(profile.id).interview_status == "invited"
    assert store.load_interview_request(request.id).selected_date is None


def test_schedule_requires_own_request(store, notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)
    asyncio.run(coordinator.invite(profile.id))

    with pytest.raises(NotFoundError):
        asyncio.run(coordinator.schedule(profile.id, "no-such-request", "2025-05-15", "10:00 AM"))


@pytest.mark.parametrize("invite_first", [False, True])
def test_complete_requires_scheduled(store, notifier, invite_first):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)
    if invite_first:
        asyncio.run(coordinator.invite(profile.id))

    with pytest.raises(InvalidTransitionError):
        asyncio.run(coordinator.complete(profile.id, "blob://interview-recordings/x.webm"))
    assert store.find_recordings(profile.id) == []


def test_schedule_before_invite_is_rejected(store, notifier):
    profile = _candidate(store)
    with pytest.raises(InvalidTransitionError):
        asyncio.run(_coordinator(store, notifier).schedule(profile.id, "any", "2025-05-15", "10:00 AM"))


def test_failed_write_rolls_back_invite(store, notifier, monkeypatch):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)

    def broken_save(candidate):
        raise PersistenceError("disk full")

    monkeypatch.setattr(store, "save_candidate", broken_save)
    with pytest.raises(PersistenceError):
        asyncio.run(coordinator.invite(profile.id))
    monkeypatch.undo()

    assert store.find_interview_requests(profile.id) == []
    assert store.load_candidate(profile.id).interview_status == "none"
    assert notifier.sent == []

    # The candidate can still be invited once storage recovers
    asyncio.run(coordinator.invite(profile.id))
    assert store.load_candidate(profile.id).interview_status == "invited"


def test_notification_failure_does_not_block_invite(store, failing_notifier):
    profile = _candidate(store)
    coordinator = _coordinator(store, failing_notifier)

    request = asyncio.run(coordinator.invite(profile.id))
    assert not request.notification_sent
    assert store.load_candidate(profile.id).interview_status == "invited"


def test_notification_flag_write_failure_keeps_invite(store, notifier, monkeypatch):
    profile = _candidate(store)
    coordinator = _coordinator(store, notifier)
    original_save = store.save_interview_request
    saves = {"n": 0}

    def second_save_fails(request):
        saves["n"] += 1
        if saves["n"] > 1:
            raise PersistenceError("disk full")
        original_save(request)

    monkeypatch.setattr(store, "save_interview_request", second_save_fails)
    request = asyncio.run(coordinator.invite(profile.id))

    assert saves["n"] == 2
    assert not request.notification_sent
    assert len(notifier.sent) == 1
    assert store.load_candidate(profile.id).interview_status == "invited"
    assert store.load_interview_request(request.id).notification_sent is False


def test_available_slots_are_copies(store, notifier):
    coordinator = _coordinator(store, notifier)
    slots = coordinator.available_slots()
    slots[0].slots.append("11:59 PM")
    assert "11:59 PM" not in coordinator.available_slots()[0].slots
