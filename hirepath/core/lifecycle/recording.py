"""Video interview recording session.

A session captures chunks from an async source, uploads them to blob
storage and only then asks the coordinator to complete the interview.
Cancelling the task or any failure before ``done`` removes the uploaded
data and leaves the candidate's interview status untouched.
"""

import asyncio
from typing import AsyncIterator

from ..errors import RecordingError
from ..models.assessment import TranscriptMessage
from ..models.base import generate_id
from ..models.enums import MessageRole, RecordingState
from ..models.interview import InterviewRecording
from ..storage.blob_store import RECORDINGS_BUCKET, BlobStore, BlobUpload
from ...observability.logger import get_logger
from .coordinator import InterviewLifecycleCoordinator

logger = get_logger(__name__)

VIDEO_INTERVIEW_QUESTIONS = [
    "Tell me about yourself and your background in this field.",
    "What are your key strengths that make you a good fit for this role?",
    "Describe a challenging situation you faced at work and how you resolved it.",
    "How do you handle pressure and deadlines?",
    "Where do you see yourself professionally in 5 years?",
]


def build_transcript(answers: list[str], questions: list[str] | None = None) -> list[TranscriptMessage]:
    """Interleave interview questions with the candidate's spoken answers.

    Questions without an answer are still recorded as asked.
    """
    questions = questions or VIDEO_INTERVIEW_QUESTIONS
    transcript: list[TranscriptMessage] = []
    for index, question in enumerate(questions):
        transcript.append(TranscriptMessage(role=MessageRole.INTERVIEWER, text=question))
        if index < len(answers) and answers[index].strip():
            transcript.append(TranscriptMessage(role=MessageRole.CANDIDATE, text=answers[index]))
    return transcript


class RecordingSession:
    """Cancellable capture-and-upload task for one candidate's interview."""

    def __init__(
        self,
        coordinator: InterviewLifecycleCoordinator,
        blob_store: BlobStore,
        candidate_id: str,
        transcript: list[TranscriptMessage] | None = None,
        max_bytes: int | None = None,
        extension: str = "webm",
    ):
        self.coordinator = coordinator
        self.blob_store = blob_store
        self.candidate_id = candidate_id
        self.transcript = transcript or []
        self.max_bytes = max_bytes
        self.extension = extension

        self.state = RecordingState.CAPTURING
        self.cancelled = False
        self.error: str | None = None
        self.recording: InterviewRecording | None = None
        self._upload: BlobUpload | None = None
        self._task: asyncio.Task | None = None

    def start(self, chunks: AsyncIterator[bytes]) -> asyncio.Task:
        """Run the session in the background; await the returned task for the recording."""
        self._task = asyncio.create_task(self.run(chunks))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _set_state(self, state: RecordingState) -> None:
        logger.info("recording_state_changed", candidate_id=self.candidate_id, state=state.value)
        self.state = state

    async def run(self, chunks: AsyncIterator[bytes]) -> InterviewRecording:
        try:
            buffered: list[bytes] = []
            size = 0
            async for chunk in chunks:
                size += len(chunk)
                if self.max_bytes is not None and size > self.max_bytes:
                    raise RecordingError(f"Recording exceeds the {self.max_bytes} byte limit")
                buffered.append(chunk)
            if size == 0:
                raise RecordingError("No video data was captured")

            self._set_state(RecordingState.UPLOADING)
            key = f"interview_{self.candidate_id}_{generate_id()}.{self.extension}"
            self._upload = self.blob_store.open_upload(RECORDINGS_BUCKET, key)
            for chunk in buffered:
                self._upload.write(chunk)
                await asyncio.sleep(0)
            ref = self._upload.commit()

            self.recording = await self.coordinator.complete(
                self.candidate_id, ref, self.transcript, size_bytes=size
            )
            self._set_state(RecordingState.DONE)
            return self.recording

        except asyncio.CancelledError:
            self.cancelled = True
            self._fail("cancelled")
            raise
        except Exception as exc:
            self._fail(str(exc))
            raise

    def _fail(self, reason: str) -> None:
        if self._upload is not None:
            self._upload.abort()
        self.error = reason
        self._set_state(RecordingState.FAILED)
        logger.warning("recording_failed", candidate_id=self.candidate_id, reason=reason, cancelled=self.cancelled)
