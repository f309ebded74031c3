"""Video recording session: upload, completion and cancellation."""

import asyncio

import pytest

from hirepath.core.errors import InvalidTransitionError, RecordingError
from hirepath.core.lifecycle.coordinator import InterviewLifecycleCoordinator
from hirepath.core.lifecycle.recording import (
    VIDEO_INTERVIEW_QUESTIONS,
    RecordingSession,
    build_transcript,
)
from hirepath.core.models.candidate_profile import CandidateProfile
from hirepath.core.models.enums import InterviewStatus, RecordingState

CONFIG = {"lifecycle": {"available_slots": [{"date": "2025-05-15", "slots": ["10:00 AM"]}]}}


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


def _recording_files(tmp_path):
    bucket = tmp_path / "blobs" / "interview-recordings"
    return list(bucket.iterdir()) if bucket.exists() else []


def _scheduled_candidate(store, notifier):
    coordinator = InterviewLifecycleCoordinator(store, notifier, CONFIG)
    profile = CandidateProfile(user_id="user-1", rank=90.0)
    store.save_candidate(profile)

    async def advance():
        request = await coordinator.invite(profile.id)
        await coordinator.schedule(profile.id, request.id, "2025-05-15", "10:00 AM")

    asyncio.run(advance())
    return coordinator, profile


def test_recording_completes_interview(tmp_path, store, blobs, notifier):
    coordinator, profile = _scheduled_candidate(store, notifier)
    transcript = build_transcript(["I build web apps."])
    session = RecordingSession(coordinator, blobs, profile.id, transcript=transcript)

    recording = asyncio.run(session.run(_chunks(b"a" * 100, b"b" * 50)))

    assert session.state == RecordingState.DONE
    assert recording.size_bytes == 150
    assert blobs.get(recording.recording_ref) == b"a" * 100 + b"b" * 50
    assert store.load_candidate(profile.id).interview_status == InterviewStatus.COMPLETED.value
    assert store.find_recordings(profile.id)[0].transcript[1].text == "I build web apps."


def test_cancellation_deletes_upload_and_keeps_status(tmp_path, store, blobs, notifier):
    coordinator, profile = _scheduled_candidate(store, notifier)
    session = RecordingSession(coordinator, blobs, profile.id)

    async def cancel_mid_completion():
        lock = coordinator._lock_for(profile.id)
        await lock.acquire()
        task = session.start(_chunks(b"x" * 64, b"y" * 64))
        for _ in range(20):
            await asyncio.sleep(0)
        assert session.state == RecordingState.UPLOADING
        session.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        lock.release()

    asyncio.run(cancel_mid_completion())

    assert session.cancelled
    assert session.state == RecordingState.FAILED
    assert _recording_files(tmp_path) == []
    assert store.load_candidate(profile.id).interview_status == InterviewStatus.SCHEDULED.value
    assert store.find_recordings(profile.id) == []


def test_failed_completion_deletes_upload(tmp_path, store, blobs, notifier):
    coordinator = InterviewLifecycleCoordinator(store, notifier, CONFIG)
    profile = CandidateProfile(user_id="user-1", rank=90.0)
    store.save_candidate(profile)
    session = RecordingSession(coordinator, blobs, profile.id)

    with pytest.raises(InvalidTransitionError):
        asyncio.run(session.run(_chunks(b"video")))

    assert session.state == RecordingState.FAILED
    assert not session.cancelled
    assert _recording_files(tmp_path) == []


def test_empty_and_oversized_recordings_fail(tmp_path, store, blobs, notifier):
    coordinator, profile = _scheduled_candidate(store, notifier)

    with pytest.raises(RecordingError):
        asyncio.run(RecordingSession(coordinator, blobs, profile.id).run(_chunks()))

    with pytest.raises(RecordingError):
        asyncio.run(RecordingSession(coordinator, blobs, profile.id, max_bytes=10).run(_chunks(b"x" * 11)))

    assert _recording_files(tmp_path) == []
    assert store.load_candidate(profile.id).interview_status == InterviewStatus.SCHEDULED.value


def test_transcript_interleaves_questions_and_answers():
    transcript = build_transcript(["First answer", "", "Third answer"])
    texts = [m.text for m in transcript]
    assert texts[0] == VIDEO_INTERVIEW_QUESTIONS[0]
    assert texts[1] == "First answer"
    assert texts[2] == VIDEO_INTERVIEW_QUESTIONS[1]
    assert texts[3] == VIDEO_INTERVIEW_QUESTIONS[2]
    assert texts[4] == "Third answer"
    assert len(transcript) == len(VIDEO_INTERVIEW_QUESTIONS) + 2
