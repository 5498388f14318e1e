# services/coach.py
from typing import List

from models import ChatTurn
from services import generator
from services.prompts import STUDY_BUDDY


def _shape(text: str) -> dict:
    return {"answer": text}


TASK = generator.Task(
    kind=STUDY_BUDDY,
    field="question",
    label="Study Buddy",
    missing_input="Question is required",
    no_content="No content returned from Study Buddy",
    malformed="Study Buddy returned an unreadable answer",
    failed="Failed to get study buddy response due to internal server error.",
    shape=_shape,
)


def answer(q: str, provider=None) -> str:
    return generator.run(TASK, q, provider)["answer"]


class Conversation:
    """Question/answer history for one session. Lives in memory only."""

    def __init__(self, provider=None):
        self.provider = provider
        self.history: List[ChatTurn] = []

    def ask(self, question: str) -> str:
        question = (question or "").strip()
        if not question:
            raise generator.InputInvalid(TASK.missing_input)
        reply = answer(question, self.provider)
        self.history.append(ChatTurn(question=question, answer=reply))
        return reply
