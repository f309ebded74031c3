"""Sanity checks for the JSON object store and the blob store."""

import pytest

from hirepath.core.errors import PersistenceError, TransientStoreError
from hirepath.core.models.assessment import ChatSession
from hirepath.core.models.candidate_profile import CandidateProfile, ParsedResume
from hirepath.core.models.interview import InterviewRecording, InterviewRequest, RecruiterFeedback, TimeSlotDay
from hirepath.core.storage.blob_store import RESUMES_BUCKET, BlobStore


def test_object_store_roundtrip(store):
    profile = CandidateProfile(
        user_id="user-1",
        full_name="Ada Lovelace",
        parsed_resume=ParsedResume(skills=["Python"]),
        skills=["Python", "python", "SQL"],
        rank=88.5,
    )
    store.save_candidate(profile)
    loaded = store.load_candidate(profile.id)
    assert loaded and loaded.skills == ["Python", "SQL"]
    assert loaded.rank == 88.5
    assert store.find_candidate_by_user("user-1").id == profile.id
    assert store.find_candidate_by_user("nobody") is None
    assert [c.id for c in store.list_candidates()] == [profile.id]

    request = InterviewRequest(
        candidate_id=profile.id,
        available_slots=[TimeSlotDay(date="2025-05-15", slots=["10:00 AM"])],
    )
    store.save_interview_request(request)
    assert store.load_interview_request(request.id).offers("2025-05-15", "10:00 AM")
    assert store.latest_interview_request(profile.id).id == request.id

    recording = InterviewRecording(candidate_id=profile.id, recording_ref="blob://interview-recordings/a.webm")
    store.save_recording(recording)
    assert store.find_recordings(profile.id)[0].recording_ref == recording.recording_ref

    review = RecruiterFeedback(recruiter_id="rec-1", candidate_id=profile.id, rating=4, feedback="Solid answers")
    store.save_feedback(review)
    assert store.find_feedback(recruiter_id="rec-1")[0].rating == 4
    assert store.find_feedback(candidate_id="other") == []

    session = ChatSession(candidate_id=profile.id)
    store.save_chat_session(session)
    assert store.load_chat_session(profile.id).id == session.id


def test_transaction_restores_records_on_failure(store):
    existing = CandidateProfile(user_id="user-1", full_name="Before")
    store.save_candidate(existing)

    with pytest.raises(RuntimeError):
        with store.transaction():
            existing.full_name = "After"
            store.save_candidate(existing)
            store.save_interview_request(InterviewRequest(candidate_id=existing.id))
            raise RuntimeError("boom")

    assert store.load_candidate(existing.id).full_name == "Before"
    assert store.find_interview_requests(existing.id) == []


def test_nested_transaction_joins_outer(store):
    profile = CandidateProfile(user_id="user-1")

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.save_candidate(profile)
            raise RuntimeError("outer fails after inner block")

    assert store.load_candidate(profile.id) is None


def test_rollback_restores_every_record_it_can(store, monkeypatch):
    first = CandidateProfile(user_id="user-1", full_name="Before")
    second = CandidateProfile(user_id="user-2", full_name="Before")
    store.save_candidate(first)
    store.save_candidate(second)
    stuck_path = store._path("candidates", first.id)
    original_write = store._write_bytes
    original_unlink = store._unlink
    unlink_calls = {"n": 0}

    def write_fails_for_first(path, payload):
        if path == stuck_path:
            raise TransientStoreError("disk gone")
        original_write(path, payload)

    def unlink_busy_once(path):
        unlink_calls["n"] += 1
        if unlink_calls["n"] == 1:
            raise TransientStoreError("resource busy")
        original_unlink(path)

    created = InterviewRequest(candidate_id=second.id)
    with pytest.raises(PersistenceError):
        with store.transaction():
            for profile in (first, second):
                profile.full_name = "After"
                store.save_candidate(profile)
            store.save_interview_request(created)
            monkeypatch.setattr(store, "_write_bytes", write_fails_for_first)
            monkeypatch.setattr(store, "_unlink", unlink_busy_once)
            raise RuntimeError("boom")

    assert store.load_candidate(first.id).full_name == "After"
    assert store.load_candidate(second.id).full_name == "Before"
    assert store.load_interview_request(created.id) is None
    assert unlink_calls["n"] == 2


def test_transient_write_errors_are_retried(store, monkeypatch):
    original = store._write_bytes
    calls = {"n": 0}

    def flaky(path, payload):
        calls["n"] += 1
        if calls["n"] == 1:
            raise TransientStoreError("resource busy")
        original(path, payload)

    monkeypatch.setattr(store, "_write_bytes", flaky)
    profile = CandidateProfile(user_id="user-1")
    store.save_candidate(profile)

    assert calls["n"] == 2
    assert store.load_candidate(profile.id) is not None


def test_persistent_write_errors_surface(store, monkeypatch):
    def always_fails(path, payload):
        raise TransientStoreError("disk gone")

    monkeypatch.setattr(store, "_write_bytes", always_fails)
    with pytest.raises(PersistenceError):
        store.save_candidate(CandidateProfile(user_id="user-1"))


def test_feedback_is_immutable():
    review = RecruiterFeedback(recruiter_id="rec-1", candidate_id="c1", rating=5, feedback="Great")
    with pytest.raises(Exception):
        review.rating = 1


def test_blob_store_roundtrip(tmp_path):
    blobs = BlobStore(tmp_path / "blobs")
    ref = blobs.put(RESUMES_BUCKET, "user-1/resume.pdf", b"%PDF")
    assert ref == "blob://resumes/user-1/resume.pdf"
    assert blobs.exists(ref)
    assert blobs.get(ref) == b"%PDF"

    blobs.delete(ref)
    assert not blobs.exists(ref)

    with pytest.raises(ValueError):
        blobs.path_for("blob://resumes/../../etc/passwd")
    with pytest.raises(ValueError):
        blobs.path_for("s3://resumes/x")


def test_aborted_upload_leaves_nothing(tmp_path):
    blobs = BlobStore(tmp_path / "blobs")
    upload = blobs.open_upload("interview-recordings", "a.webm")
    upload.write(b"partial")
    upload.abort()
    assert not blobs.exists(upload.ref)
    assert list((tmp_path / "blobs" / "interview-recordings").iterdir()) == []
