"""Skills chat: asks verification questions one at a time and records the transcript."""

from .errors import InputValidationError
from .models.assessment import ChatSession, TranscriptMessage, VerificationQuestion
from .models.enums import MessageRole
from ..observability.logger import get_logger

logger = get_logger(__name__)

WELCOME_MESSAGE = (
    "Hi there! I'm your AI interviewer. I'd like to ask you a few questions about your "
    "experience and skills to learn more about you. Let's get started!"
)

CLOSING_MESSAGE = (
    "Thank you for answering all my questions! I'll analyze your responses and provide "
    "feedback to potential recruiters. Best of luck with your job search!"
)

FOLLOW_UPS = {
    "React": "That's interesting! Could you elaborate on how you handle component state in your React applications?",
    "JavaScript": "Thanks for sharing. Have you worked with any JavaScript frameworks besides React?",
    "CSS": "Great to know. What's your approach to responsive design and cross-browser compatibility?",
    "Performance Optimization": (
        "That's a solid approach. Have you used any specific tools to measure performance improvements?"
    ),
    "Adaptability": (
        "Excellent learning strategy. What's the most recent technology you've learned and how did you apply it?"
    ),
}

DEFAULT_FOLLOW_UP = "Thank you for sharing that. Could you tell me more about how you applied this in a real project?"


def follow_up_for(skill: str) -> str:
    return FOLLOW_UPS.get(skill, DEFAULT_FOLLOW_UP)


def _interviewer(text: str) -> TranscriptMessage:
    return TranscriptMessage(role=MessageRole.INTERVIEWER, text=text)


def start_session(candidate_id: str, questions: list[VerificationQuestion]) -> ChatSession:
    """New session holding the welcome message and the first question."""
    if not questions:
        raise InputValidationError("A skills chat needs at least one question")

    session = ChatSession(
        candidate_id=candidate_id,
        questions=questions,
        messages=[_interviewer(WELCOME_MESSAGE), _interviewer(questions[0].question)],
    )
    logger.info("chat_started", candidate_id=candidate_id, questions=len(questions))
    return session


def record_answer(session: ChatSession, answer: str) -> ChatSession:
    """Append the candidate's answer and the interviewer's reply.

    Between questions the reply is a skill-specific follow-up and the next
    question; after the last one it is the closing message and the session
    is marked completed.
    """
    if session.completed:
        raise InputValidationError("The skills chat is already completed")
    if not answer or not answer.strip():
        raise InputValidationError("Answer must not be empty")

    current = session.questions[session.current_index]
    messages = list(session.messages)
    messages.append(TranscriptMessage(role=MessageRole.CANDIDATE, text=answer))

    next_index = session.current_index + 1
    if next_index < len(session.questions):
        messages.append(_interviewer(follow_up_for(current.skill_to_verify)))
        messages.append(_interviewer(session.questions[next_index].question))
        session.messages = messages
        session.current_index = next_index
    else:
        messages.append(_interviewer(CLOSING_MESSAGE))
        session.messages = messages
        session.completed = True
        logger.info("chat_completed", candidate_id=session.candidate_id, answers=len(session.candidate_answers()))

    session.touch()
    return session


def pending_question(session: ChatSession) -> VerificationQuestion | None:
    if session.completed:
        return None
    return session.questions[session.current_index]
