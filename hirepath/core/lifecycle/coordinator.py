"""Interview lifecycle coordinator.

Owns the candidate interview status machine::

    none -> invited -> scheduled -> completed

Each transition writes the profile and the interview records inside one
``ObjectStore.transaction()``, so a failed write leaves every record as it
was. Calls for the same candidate are serialized by a per-candidate lock;
two concurrent invites therefore produce exactly one request.
"""

import asyncio
from typing import Any

from ..errors import (
    InvalidTransitionError,
    NotFoundError,
    NotQualifiedError,
    PersistenceError,
    SlotUnavailableError,
)
from ..models.assessment import TranscriptMessage
from ..models.base import utc_now
from ..models.candidate_profile import CandidateProfile
from ..models.enums import InterviewRequestStatus, InterviewStatus
from ..models.interview import InterviewRecording, InterviewRequest, TimeSlotDay
from ..storage.object_store import ObjectStore
from ...integrations.notifier import Notifier
from ...observability.logger import get_logger

logger = get_logger(__name__)

DEFAULT_INVITE_THRESHOLD = 80.0

INVITATION_SUBJECT = "You're invited to interview"


class InterviewLifecycleCoordinator:
    """Applies interview status transitions for candidates."""

    def __init__(self, store: ObjectStore, notifier: Notifier, config: dict[str, Any] | None = None):
        lifecycle = (config or {}).get("lifecycle", {})
        self.store = store
        self.notifier = notifier
        self.invite_threshold = float(lifecycle.get("invite_threshold", DEFAULT_INVITE_THRESHOLD))
        self.slot_catalog = [TimeSlotDay(**day) for day in lifecycle.get("available_slots", [])]
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, candidate_id: str) -> asyncio.Lock:
        return self._locks.setdefault(candidate_id, asyncio.Lock())

    def available_slots(self) -> list[TimeSlotDay]:
        return [day.model_copy(deep=True) for day in self.slot_catalog]

    def is_qualified(self, profile: CandidateProfile) -> bool:
        return profile.rank is not None and profile.rank >= self.invite_threshold

    def _require_candidate(self, candidate_id: str) -> CandidateProfile:
        profile = self.store.load_candidate(candidate_id)
        if profile is None:
            raise NotFoundError("candidate", candidate_id)
        return profile

    def _reject(self, profile: CandidateProfile, target: InterviewStatus, reason: str | None = None) -> InvalidTransitionError:
        current = InterviewStatus(profile.interview_status).value
        logger.warning(
            "transition_rejected",
            candidate_id=profile.id,
            current=current,
            target=target.value,
            reason=reason,
        )
        return InvalidTransitionError(profile.id, current, target.value, reason)

    # ------------------------------------------------------------------
    # none -> invited
    # ------------------------------------------------------------------
    async def invite_if_qualified(self, candidate_id: str) -> InterviewRequest | None:
        """Invite when the rank clears the threshold; otherwise do nothing."""
        profile = self._require_candidate(candidate_id)
        if not self.is_qualified(profile):
            logger.info(
                "invite_skipped",
                candidate_id=candidate_id,
                rank=profile.rank,
                threshold=self.invite_threshold,
            )
            return None
        return await self.invite(candidate_id)

    async def invite(self, candidate_id: str) -> InterviewRequest:
        """Create the interview request and mark the candidate invited.

        Raises:
            NotFoundError: Unknown candidate
            InvalidTransitionError: Candidate is past ``none`` or already has an outstanding request
            NotQualifiedError: Rank missing or below the threshold
        """
        async with self._lock_for(candidate_id):
            profile = self._require_candidate(candidate_id)
            if profile.interview_status != InterviewStatus.NONE.value:
                raise self._reject(profile, InterviewStatus.INVITED)
            if any(r.is_outstanding for r in self.store.find_interview_requests(candidate_id)):
                raise self._reject(profile, InterviewStatus.INVITED, "an interview request is already outstanding")
            if not self.is_qualified(profile):
                raise NotQualifiedError(
                    f"Candidate {candidate_id} rank {profile.rank} is below the invitation threshold "
                    f"{self.invite_threshold}"
                )

            request = InterviewRequest(candidate_id=candidate_id, available_slots=self.available_slots())
            with self.store.transaction():
                self.store.save_interview_request(request)
                profile.interview_status = InterviewStatus.INVITED
                profile.touch()
                self.store.save_candidate(profile)

            logger.info(
                "interview_invited",
                candidate_id=candidate_id,
                request_id=request.id,
                rank=profile.rank,
            )

            sent = await asyncio.to_thread(self.notifier.notify, candidate_id, self._invitation(profile, request))
            if sent:
                request.notification_sent = True
                try:
                    self.store.save_interview_request(request)
                except PersistenceError:
                    # The invitation is committed; only the delivery flag is lost
                    request.notification_sent = False
                    logger.error(
                        "notification_flag_not_saved",
                        candidate_id=candidate_id,
                        request_id=request.id,
                        exc_info=True,
                    )
            else:
                logger.warning("invitation_not_sent", candidate_id=candidate_id, request_id=request.id)
            return request

    def _invitation(self, profile: CandidateProfile, request: InterviewRequest) -> dict[str, Any]:
        lines = [
            f"Hi {profile.display_name or 'there'},",
            "",
            "Based on your skills assessment you have been invited to a video interview.",
            "Please choose one of the following slots:",
        ]
        for day in request.available_slots:
            lines.append(f"  {day.date}: {', '.join(day.slots)}")
        return {
            "to": profile.email,
            "subject": INVITATION_SUBJECT,
            "body": "\n".join(lines),
            "request_id": request.id,
        }

    # ------------------------------------------------------------------
    # invited -> scheduled
    # ------------------------------------------------------------------
    async def schedule(self, candidate_id: str, request_id: str, date: str, time: str) -> InterviewRequest:
        """Book one of the offered slots.

        Raises:
            NotFoundError: Unknown candidate, or request not belonging to them
            InvalidTransitionError: Candidate is not ``invited`` or the request was already scheduled
            SlotUnavailableError: (date, time) was not offered
        """
        async with self._lock_for(candidate_id):
            profile = self._require_candidate(candidate_id)
            if profile.interview_status != InterviewStatus.INVITED.value:
                raise self._reject(profile, InterviewStatus.SCHEDULED)

            request = self.store.load_interview_request(request_id)
            if request is None or request.candidate_id != candidate_id:
                raise NotFoundError("interview request", request_id)
            if not request.is_outstanding:
                raise self._reject(profile, InterviewStatus.SCHEDULED, "interview request is already scheduled")
            if not request.offers(date, time):
                logger.warning("slot_unavailable", candidate_id=candidate_id, date=date, time=time)
                raise SlotUnavailableError(f"{date} {time} is not one of the offered slots")

            with self.store.transaction():
                request.status = InterviewRequestStatus.SCHEDULED
                request.selected_date = date
                request.selected_time = time
                request.touch()
                self.store.save_interview_request(request)
                profile.interview_status = InterviewStatus.SCHEDULED
                profile.touch()
                self.store.save_candidate(profile)

            logger.info("interview_scheduled", candidate_id=candidate_id, request_id=request_id, date=date, time=time)
            return request

    # ------------------------------------------------------------------
    # scheduled -> completed
    # ------------------------------------------------------------------
    async def complete(
        self,
        candidate_id: str,
        recording_ref: str,
        transcript: list[TranscriptMessage] | None = None,
        size_bytes: int = 0,
    ) -> InterviewRecording:
        """Persist the single recording and mark the interview completed.

        Raises:
            NotFoundError: Unknown candidate
            InvalidTransitionError: Candidate is not ``scheduled``
        """
        async with self._lock_for(candidate_id):
            profile = self._require_candidate(candidate_id)
            if profile.interview_status != InterviewStatus.SCHEDULED.value:
                raise self._reject(profile, InterviewStatus.COMPLETED)
            if self.store.find_recordings(candidate_id):
                raise self._reject(profile, InterviewStatus.COMPLETED, "a recording is already stored")

            request = self.store.latest_interview_request(candidate_id)
            recording = InterviewRecording(
                candidate_id=candidate_id,
                interview_request_id=request.id if request else None,
                recording_ref=recording_ref,
                transcript=transcript or [],
                size_bytes=size_bytes,
            )
            with self.store.transaction():
                self.store.save_recording(recording)
                profile.interview_status = InterviewStatus.COMPLETED
                profile.interview_completed_at = utc_now()
                profile.touch()
                self.store.save_candidate(profile)

            logger.info(
                "interview_completed",
                candidate_id=candidate_id,
                recording_id=recording.id,
                size_bytes=size_bytes,
            )
            return recording
