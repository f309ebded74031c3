"""HirePathWorkflow - candidate and recruiter entry points.

Every public method takes the caller's ``AuthContext`` explicitly and checks
the role before touching storage. The candidate pipeline runs

    upload -> extract -> parse -> questions -> chat -> assess -> rank -> invite

and recruiter methods read profiles, interviews and feedback.
"""

import random
from pathlib import PurePath
from typing import Any

from pydantic import Field, ValidationError

from ..agents.assessment import AssessmentAgent, AssessmentRequest, get_assessment_agent
from ..agents.extraction import ResumeDocument, ResumeExtractionAgent
from ..agents.parser import ResumeParseInput, ResumeParserAgent
from ..agents.questions import QuestionGeneratorAgent, QuestionRequest
from ..chat import record_answer, start_session
from ..directory import CandidateFilter, filter_candidates
from ..errors import (
    AuthorizationError,
    DuplicateFeedbackError,
    InputValidationError,
    InvalidTransitionError,
    NotFoundError,
)
from ..lifecycle.coordinator import InterviewLifecycleCoordinator
from ..lifecycle.recording import RecordingSession, build_transcript
from ..models.assessment import AssessmentResult, ChatSession
from ..models.base import AgentContext, AuthContext, HirePathBaseModel, generate_id, utc_now
from ..models.candidate_profile import NAME_PLACEHOLDER, CandidateProfile
from ..models.enums import InterviewStatus, RankBand, UserRole
from ..models.interview import InterviewRecording, InterviewRequest, RecruiterFeedback, TimeSlotDay
from ..ranking import calculate_candidate_ranking, rank_band
from ..storage.blob_store import RESUMES_BUCKET, BlobStore
from ..storage.object_store import ObjectStore
from ...integrations.notifier import Notifier, get_notifier
from ...observability.logger import get_logger

logger = get_logger(__name__)

MB = 1024 * 1024


class CandidateDetail(HirePathBaseModel):
    """Everything a recruiter sees on a candidate's page."""

    profile: CandidateProfile
    band: RankBand
    interview_request: InterviewRequest | None = None
    recording: InterviewRecording | None = None
    feedback: list[RecruiterFeedback] = Field(default_factory=list)


class ReviewEntry(HirePathBaseModel):
    """One of the recruiter's own reviews, with the candidate's name."""

    feedback: RecruiterFeedback
    candidate_name: str


class DashboardStats(HirePathBaseModel):
    """Recruiter dashboard counters."""

    total_candidates: int = 0
    reviews_given: int = 0
    average_rating: float | None = None
    qualified_candidates: int = 0
    interviews_by_status: dict[str, int] = Field(default_factory=dict)


class HirePathWorkflow:
    """Service layer wiring agents, storage and the interview lifecycle."""

    def __init__(
        self,
        store: ObjectStore,
        blob_store: BlobStore,
        config: dict[str, Any],
        notifier: Notifier | None = None,
        assessment_agent: AssessmentAgent | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.blob_store = blob_store
        self.config = config

        self.extraction = ResumeExtractionAgent()
        self.parser = ResumeParserAgent()
        self.questions = QuestionGeneratorAgent()
        self.assessment = assessment_agent or get_assessment_agent(config, rng=rng)
        self.lifecycle = InterviewLifecycleCoordinator(store, notifier or get_notifier(config), config)

        resume_cfg = config.get("resume", {})
        self.max_resume_bytes = int(float(resume_cfg.get("max_size_mb", 5)) * MB)
        self.allowed_extensions = [e.lower() for e in resume_cfg.get("allowed_extensions", [".pdf"])]
        self.allowed_content_types = resume_cfg.get("allowed_content_types", ["application/pdf"])
        self.auto_invite = bool(config.get("lifecycle", {}).get("auto_invite", True))
        self.max_recording_bytes = int(float(config.get("recording", {}).get("max_size_mb", 500)) * MB)

    @classmethod
    def from_config(cls, config: dict[str, Any], **kwargs: Any) -> "HirePathWorkflow":
        return cls(ObjectStore.from_config(config), BlobStore.from_config(config), config, **kwargs)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _context(self, candidate_id: str, **metadata: Any) -> AgentContext:
        return AgentContext(candidate_id=candidate_id, config=self.config, metadata=metadata)

    @staticmethod
    def _require_role(auth: AuthContext, role: UserRole) -> None:
        if auth.role != role.value:
            logger.warning("authorization_denied", user_id=auth.user_id, role=auth.role, required=role.value)
            raise AuthorizationError(f"This operation requires the {role.value} role")

    def _own_profile(self, auth: AuthContext) -> CandidateProfile:
        self._require_role(auth, UserRole.CANDIDATE)
        profile = self.store.find_candidate_by_user(auth.user_id)
        if profile is None:
            raise NotFoundError("candidate profile for user", auth.user_id)
        return profile

    def _candidate(self, candidate_id: str) -> CandidateProfile:
        profile = self.store.load_candidate(candidate_id)
        if profile is None:
            raise NotFoundError("candidate", candidate_id)
        return profile

    @staticmethod
    def _require_not_interviewing(profile: CandidateProfile, target: str) -> None:
        # The rank that earned an invitation is final
        status = InterviewStatus(profile.interview_status).value
        if status != InterviewStatus.NONE.value:
            raise InvalidTransitionError(
                profile.id, status, target, "the skills assessment is closed once an interview is under way"
            )

    # ------------------------------------------------------------------
    # Candidate side
    # ------------------------------------------------------------------
    def register_candidate(self, auth: AuthContext, full_name: str = "", email: str | None = None) -> CandidateProfile:
        """Create the empty profile for a new candidate account; idempotent per user."""
        self._require_role(auth, UserRole.CANDIDATE)
        existing = self.store.find_candidate_by_user(auth.user_id)
        if existing is not None:
            return existing

        profile = CandidateProfile(user_id=auth.user_id, full_name=full_name, email=email)
        self.store.save_candidate(profile)
        logger.info("candidate_registered", candidate_id=profile.id, user_id=auth.user_id)
        return profile

    def validate_resume(self, filename: str, content: bytes, content_type: str) -> None:
        """Reject anything but a PDF within the size limit, before any processing."""
        extension = PurePath(filename).suffix.lower()
        if extension not in self.allowed_extensions or content_type not in self.allowed_content_types:
            raise InputValidationError("Please upload a PDF file")
        if not content:
            raise InputValidationError("The uploaded file is empty")
        if len(content) > self.max_resume_bytes:
            raise InputValidationError(f"File size should be less than {self.max_resume_bytes // MB}MB")

    async def upload_resume(
        self,
        auth: AuthContext,
        filename: str,
        content: bytes,
        content_type: str = "application/pdf",
    ) -> CandidateProfile:
        """Store the resume, extract and parse it, and update the profile skills."""
        profile = self._own_profile(auth)
        self.validate_resume(filename, content, content_type)

        key = f"{auth.user_id}/resume_{int(utc_now().timestamp())}_{generate_id()[:8]}.pdf"
        ref = self.blob_store.put(RESUMES_BUCKET, key, content)

        try:
            context = self._context(profile.id)
            extracted = await self.extraction.execute(
                ResumeDocument(candidate_id=profile.id, content=content, content_type=content_type, filename=filename),
                context,
            )
            text = extracted.data.text if extracted.data else ""
            parsed = await self.parser.execute(ResumeParseInput(candidate_id=profile.id, raw_text=text), context)

            previous_ref = profile.resume_ref
            profile.resume_ref = ref
            profile.parsed_resume = parsed.data
            if parsed.data is not None:
                profile.skills = parsed.data.skills
                if not profile.full_name and parsed.data.contact.name != NAME_PLACEHOLDER:
                    profile.full_name = parsed.data.contact.name
                if not profile.email and parsed.data.contact.email:
                    profile.email = parsed.data.contact.email
            profile.touch()
            self.store.save_candidate(profile)
        except Exception:
            self.blob_store.delete(ref)
            raise

        if previous_ref and previous_ref != ref:
            self.blob_store.delete(previous_ref)

        logger.info("resume_uploaded", candidate_id=profile.id, ref=ref, skills=len(profile.skills))
        return profile

    async def start_chat(self, auth: AuthContext) -> ChatSession:
        """Generate the verification questions and open a fresh skills chat."""
        profile = self._own_profile(auth)
        self._require_not_interviewing(profile, "chat")
        result = await self.questions.execute(
            QuestionRequest(candidate_id=profile.id, parsed_resume=profile.parsed_resume),
            self._context(profile.id),
        )
        session = start_session(profile.id, result.data.questions if result.data else [])
        self.store.save_chat_session(session)
        return session

    def chat_session(self, auth: AuthContext) -> ChatSession:
        profile = self._own_profile(auth)
        session = self.store.load_chat_session(profile.id)
        if session is None:
            raise NotFoundError("chat session", profile.id)
        return session

    async def answer(self, auth: AuthContext, text: str) -> ChatSession:
        """Record an answer; finishing the chat triggers assessment and ranking."""
        session = record_answer(self.chat_session(auth), text)
        self.store.save_chat_session(session)
        if session.completed:
            await self.assess(auth)
        return session

    async def assess(self, auth: AuthContext) -> CandidateProfile:
        """Assess the finished chat, rank and persist; invite automatically when the rank qualifies.

        Raises:
            InputValidationError: No chat session, or the chat is not finished
            InvalidTransitionError: The candidate is already invited or further along
        """
        profile = self._own_profile(auth)
        self._require_not_interviewing(profile, "assessment")
        session = self.store.load_chat_session(profile.id)
        if session is None or not session.completed:
            raise InputValidationError("The skills chat must be completed before assessment")
        skills = list(profile.skills)

        request = AssessmentRequest(candidate_id=profile.id, skills=skills, transcript=session.messages)
        result = await self.assessment.execute(request, self._context(profile.id, skills=request.skills_to_verify()))
        if not result.success or result.data is None:
            raise InputValidationError(result.error or "Assessment produced no result")

        profile = self.record_assessment(profile.id, result.data)

        if self.auto_invite and profile.interview_status == InterviewStatus.NONE.value:
            await self.lifecycle.invite_if_qualified(profile.id)
            profile = self._candidate(profile.id)
        return profile

    def record_assessment(self, candidate_id: str, assessment: AssessmentResult) -> CandidateProfile:
        profile = self._candidate(candidate_id)
        rank = calculate_candidate_ranking(assessment)
        profile.verified_skills = assessment.verified_skills
        profile.skill_gaps = assessment.skill_gaps
        profile.assessment_summary = assessment.summary
        profile.rank = rank
        profile.touch()
        self.store.save_candidate(profile)
        logger.info("candidate_ranked", candidate_id=candidate_id, rank=rank, band=rank_band(rank).value)
        return profile

    def interview_request(self, auth: AuthContext) -> InterviewRequest | None:
        profile = self._own_profile(auth)
        return self.store.latest_interview_request(profile.id)

    def available_slots(self) -> list[TimeSlotDay]:
        return self.lifecycle.available_slots()

    async def schedule_interview(self, auth: AuthContext, request_id: str, date: str, time: str) -> InterviewRequest:
        profile = self._own_profile(auth)
        return await self.lifecycle.schedule(profile.id, request_id, date, time)

    def start_recording(self, auth: AuthContext, answers: list[str] | None = None) -> RecordingSession:
        """Open a recording session for a scheduled candidate.

        The caller drives it with ``session.run(chunks)`` or ``session.start(chunks)``.
        """
        profile = self._own_profile(auth)
        if profile.interview_status != InterviewStatus.SCHEDULED.value:
            raise InvalidTransitionError(
                profile.id,
                InterviewStatus(profile.interview_status).value,
                InterviewStatus.COMPLETED.value,
                "the interview must be scheduled before recording",
            )
        extension = self.config.get("recording", {}).get("content_type", "video/webm").split("/")[-1]
        return RecordingSession(
            self.lifecycle,
            self.blob_store,
            profile.id,
            transcript=build_transcript(answers or []),
            max_bytes=self.max_recording_bytes,
            extension=extension,
        )

    # ------------------------------------------------------------------
    # Recruiter side
    # ------------------------------------------------------------------
    def list_candidates(self, auth: AuthContext, criteria: CandidateFilter | None = None) -> list[CandidateProfile]:
        self._require_role(auth, UserRole.RECRUITER)
        return filter_candidates(self.store.list_candidates(), criteria or CandidateFilter())

    def candidate_detail(self, auth: AuthContext, candidate_id: str) -> CandidateDetail:
        self._require_role(auth, UserRole.RECRUITER)
        profile = self._candidate(candidate_id)
        recordings = self.store.find_recordings(candidate_id)
        return CandidateDetail(
            profile=profile,
            band=rank_band(profile.rank),
            interview_request=self.store.latest_interview_request(candidate_id),
            recording=recordings[0] if recordings else None,
            feedback=self.store.find_feedback(candidate_id=candidate_id),
        )

    async def invite_candidate(self, auth: AuthContext, candidate_id: str) -> InterviewRequest:
        """Recruiter-triggered invite; the same qualification rules apply."""
        self._require_role(auth, UserRole.RECRUITER)
        return await self.lifecycle.invite(candidate_id)

    def submit_feedback(self, auth: AuthContext, candidate_id: str, rating: int, feedback: str) -> RecruiterFeedback:
        """Record the recruiter's single review of a candidate.

        Raises:
            InputValidationError: Rating outside 1-5 or empty feedback
            DuplicateFeedbackError: This recruiter already reviewed the candidate
        """
        self._require_role(auth, UserRole.RECRUITER)
        try:
            review = RecruiterFeedback(
                recruiter_id=auth.user_id,
                candidate_id=candidate_id,
                rating=rating,
                feedback=feedback,
            )
        except ValidationError as exc:
            raise InputValidationError(
                "Please provide a rating between 1 and 5 and non-empty feedback"
            ) from exc

        self._candidate(candidate_id)
        with self.store.transaction():
            if self.store.find_feedback(recruiter_id=auth.user_id, candidate_id=candidate_id):
                raise DuplicateFeedbackError(f"Recruiter {auth.user_id} already reviewed candidate {candidate_id}")
            self.store.save_feedback(review)

        logger.info("feedback_submitted", recruiter_id=auth.user_id, candidate_id=candidate_id, rating=rating)
        return review

    def my_reviews(self, auth: AuthContext) -> list[ReviewEntry]:
        self._require_role(auth, UserRole.RECRUITER)
        entries: list[ReviewEntry] = []
        for review in self.store.find_feedback(recruiter_id=auth.user_id):
            profile = self.store.load_candidate(review.candidate_id)
            name = profile.display_name if profile else ""
            entries.append(ReviewEntry(feedback=review, candidate_name=name or "Unknown candidate"))
        return entries

    def dashboard_stats(self, auth: AuthContext) -> DashboardStats:
        self._require_role(auth, UserRole.RECRUITER)
        candidates = self.store.list_candidates()
        reviews = self.store.find_feedback(recruiter_id=auth.user_id)

        by_status = {status.value: 0 for status in InterviewStatus}
        for candidate in candidates:
            by_status[InterviewStatus(candidate.interview_status).value] += 1

        return DashboardStats(
            total_candidates=len(candidates),
            reviews_given=len(reviews),
            average_rating=round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else None,
            qualified_candidates=sum(1 for c in candidates if self.lifecycle.is_qualified(c)),
            interviews_by_status=by_status,
        )
