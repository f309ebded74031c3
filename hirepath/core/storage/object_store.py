"""File-based object store for candidates, interviews and reviews.

Each record is one JSON file under ``<base_dir>/<collection>/<id>.json``.
Writes are retried on transient I/O errors and can be grouped into a
``transaction()`` so that a multi-record state change is applied entirely or
not at all.
"""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Type, TypeVar

from pydantic import BaseModel
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import PersistenceError, TransientStoreError
from ..models.assessment import ChatSession
from ..models.candidate_profile import CandidateProfile
from ..models.interview import InterviewRecording, InterviewRequest, RecruiterFeedback
from ...observability.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

CANDIDATES = "candidates"
INTERVIEW_REQUESTS = "interview_requests"
RECORDINGS = "recordings"
FEEDBACK = "feedback"
CHAT_SESSIONS = "chat_sessions"


class ObjectStore:
    """Simple JSON-backed persistence layer."""

    def __init__(
        self,
        base_dir: str | Path | None = None,
        retry_attempts: int = 3,
        retry_wait_min: float = 0.1,
        retry_wait_max: float = 2.0,
    ):
        self.base_dir = Path(base_dir) if base_dir else Path("data/store")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait_min = retry_wait_min
        self.retry_wait_max = retry_wait_max

        self._lock = threading.RLock()
        # Pre-images of every path written inside the active transaction
        self._journal: dict[Path, bytes | None] | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ObjectStore":
        retry_cfg = config.get("retry", {})
        return cls(
            config.get("storage", {}).get("object_store_dir", "data/store"),
            retry_attempts=retry_cfg.get("attempts", 3),
            retry_wait_min=retry_cfg.get("wait_min", 0.1),
            retry_wait_max=retry_cfg.get("wait_max", 2.0),
        )

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------
    def _collection_dir(self, collection: str) -> Path:
        path = self.base_dir / collection
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _path(self, collection: str, record_id: str) -> Path:
        return self._collection_dir(collection) / f"{record_id}.json"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=1, min=self.retry_wait_min, max=self.retry_wait_max),
            retry=retry_if_exception_type(TransientStoreError),
            reraise=True,
        )

    def _write_bytes(self, path: Path, payload: bytes) -> None:
        """Atomically replace ``path``; OS errors are reported as transient."""
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_bytes(payload)
            os.replace(tmp, path)
        except OSError as exc:
            raise TransientStoreError(f"write failed for {path.name}: {exc}") from exc

    def _dump(self, path: Path, data: dict[str, Any]) -> None:
        payload = json.dumps(data, indent=2).encode("utf-8")
        with self._lock:
            if self._journal is not None and path not in self._journal:
                self._journal[path] = path.read_bytes() if path.exists() else None
            for attempt in self._retrying():
                with attempt:
                    self._write_bytes(path, payload)

    def _load(self, path: Path) -> dict[str, Any] | None:
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _save_model(self, collection: str, record_id: str, model: BaseModel) -> None:
        self._dump(self._path(collection, record_id), model.model_dump(mode="json"))

    def _load_model(self, collection: str, record_id: str, model_cls: Type[M]) -> M | None:
        data = self._load(self._path(collection, record_id))
        return model_cls(**data) if data else None

    def _list_models(self, collection: str, model_cls: Type[M]) -> list[M]:
        records: list[M] = []
        for path in sorted(self._collection_dir(collection).glob("*.json")):
            data = self._load(path)
            if data:
                records.append(model_cls(**data))
        return records

    def _find(self, collection: str, model_cls: Type[M], **equals: Any) -> list[M]:
        """Equality query over one collection."""
        return [
            record
            for record in self._list_models(collection, model_cls)
            if all(getattr(record, field) == value for field, value in equals.items())
        ]

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator["ObjectStore"]:
        """Group writes; if the block raises, every touched record is restored.

        Nested calls join the outer transaction.
        """
        with self._lock:
            if self._journal is not None:
                yield self
                return

            self._journal = {}
            try:
                yield self
            except BaseException as exc:
                journal = self._journal
                self._journal = None
                self._rollback(journal)
                logger.warning(
                    "transaction_rolled_back",
                    records=len(journal),
                    error=str(exc),
                )
                raise
            else:
                self._journal = None

    def _unlink(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise TransientStoreError(f"delete failed for {path.name}: {exc}") from exc

    def _rollback(self, journal: dict[Path, bytes | None]) -> None:
        """Restore every journaled record, then report the ones that could not be restored."""
        failed: list[str] = []
        for path, previous in journal.items():
            try:
                for attempt in self._retrying():
                    with attempt:
                        if previous is None:
                            self._unlink(path)
                        else:
                            self._write_bytes(path, previous)
            except PersistenceError:
                logger.error("rollback_write_failed", path=str(path), exc_info=True)
                failed.append(path.name)
        if failed:
            raise PersistenceError(f"rollback left {len(failed)} record(s) unrestored: {', '.join(failed)}")

    # ------------------------------------------------------------------
    # Candidate profiles
    # ------------------------------------------------------------------
    def save_candidate(self, profile: CandidateProfile) -> None:
        self._save_model(CANDIDATES, profile.id, profile)

    def load_candidate(self, candidate_id: str) -> CandidateProfile | None:
        return self._load_model(CANDIDATES, candidate_id, CandidateProfile)

    def find_candidate_by_user(self, user_id: str) -> CandidateProfile | None:
        matches = self._find(CANDIDATES, CandidateProfile, user_id=user_id)
        return matches[0] if matches else None

    def list_candidates(self) -> list[CandidateProfile]:
        return self._list_models(CANDIDATES, CandidateProfile)

    # ------------------------------------------------------------------
    # Interview requests and recordings
    # ------------------------------------------------------------------
    def save_interview_request(self, request: InterviewRequest) -> None:
        self._save_model(INTERVIEW_REQUESTS, request.id, request)

    def load_interview_request(self, request_id: str) -> InterviewRequest | None:
        return self._load_model(INTERVIEW_REQUESTS, request_id, InterviewRequest)

    def find_interview_requests(self, candidate_id: str) -> list[InterviewRequest]:
        """All requests for a candidate, newest first."""
        requests = self._find(INTERVIEW_REQUESTS, InterviewRequest, candidate_id=candidate_id)
        return sorted(requests, key=lambda r: r.created_at, reverse=True)

    def latest_interview_request(self, candidate_id: str) -> InterviewRequest | None:
        requests = self.find_interview_requests(candidate_id)
        return requests[0] if requests else None

    def save_recording(self, recording: InterviewRecording) -> None:
        self._save_model(RECORDINGS, recording.id, recording)

    def find_recordings(self, candidate_id: str) -> list[InterviewRecording]:
        return self._find(RECORDINGS, InterviewRecording, candidate_id=candidate_id)

    # ------------------------------------------------------------------
    # Recruiter feedback
    # ------------------------------------------------------------------
    def save_feedback(self, feedback: RecruiterFeedback) -> None:
        self._save_model(FEEDBACK, feedback.id, feedback)

    def find_feedback(
        self,
        recruiter_id: str | None = None,
        candidate_id: str | None = None,
    ) -> list[RecruiterFeedback]:
        """Feedback filtered by recruiter and/or candidate, newest first."""
        equals: dict[str, Any] = {}
        if recruiter_id is not None:
            equals["recruiter_id"] = recruiter_id
        if candidate_id is not None:
            equals["candidate_id"] = candidate_id
        feedback = self._find(FEEDBACK, RecruiterFeedback, **equals)
        return sorted(feedback, key=lambda f: f.created_at, reverse=True)

    # ------------------------------------------------------------------
    # Skills chat sessions (one per candidate)
    # ------------------------------------------------------------------
    def save_chat_session(self, session: ChatSession) -> None:
        self._save_model(CHAT_SESSIONS, session.candidate_id, session)

    def load_chat_session(self, candidate_id: str) -> ChatSession | None:
        return self._load_model(CHAT_SESSIONS, candidate_id, ChatSession)
