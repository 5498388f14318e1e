# services/quizzer.py
from typing import List, Optional

from ai_providers.base import MalformedOutput
from models import QuizQuestion
from services import generator
from services.prompts import QUIZ

# seconds a UI keeps the picked answer highlighted before advance()
REVEAL_DELAY = 1.5
OPTION_COUNT = 4


def _check_question(i: int, q) -> None:
    if not isinstance(q, dict):
        raise MalformedOutput(f"question {i} is not an object")
    options = q.get("options")
    correct = q.get("correct")
    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        raise MalformedOutput(f"question {i} needs a list of {OPTION_COUNT} options")
    if not all(isinstance(o, str) for o in options):
        raise MalformedOutput(f"question {i} has non-string options")
    # bool is an int subclass; True must not pass as index 1
    if isinstance(correct, bool) or not isinstance(correct, int):
        raise MalformedOutput(f"question {i} has a non-integer 'correct'")
    if not 0 <= correct < len(options):
        raise MalformedOutput(f"question {i}: correct={correct} outside {len(options)} options")


def _shape(data):
    if not isinstance(data, dict) or data.get("quiz") is None:
        raise MalformedOutput("Parsed JSON missing 'quiz' property.")
    if not isinstance(data["quiz"], list):
        raise MalformedOutput("'quiz' is not a list")
    for i, q in enumerate(data["quiz"]):
        _check_question(i, q)
    return data


TASK = generator.Task(
    kind=QUIZ,
    field="text",
    label="Quiz",
    missing_input="Text is required to generate a quiz",
    no_content="No content returned from LLM",
    failed="Failed to generate quiz due to internal server error.",
    shape=_shape,
)


def generate_quiz(text: str, provider=None) -> List[QuizQuestion]:
    data = generator.run(TASK, text, provider)
    return [QuizQuestion.from_dict(q) for q in data["quiz"]]


class QuizSession:
    """
    One pass through a generated quiz.

    select() locks in an answer for the current question; further picks are
    ignored until advance() scores it and moves on.
    """

    def __init__(self, questions: List[QuizQuestion]):
        self.questions = list(questions)
        self.index = 0
        self.selected: Optional[int] = None
        self.score = 0
        self.finished = not self.questions

    @property
    def current(self) -> Optional[QuizQuestion]:
        return None if self.finished else self.questions[self.index]

    def select(self, answer: int) -> bool:
        if self.finished or self.selected is not None:
            return False
        self.selected = answer
        return True

    def is_correct(self) -> bool:
        return self.selected is not None and self.selected == self.current.correct

    def advance(self) -> None:
        if self.finished or self.selected is None:
            return
        if self.is_correct():
            self.score += 1
        if self.index < len(self.questions) - 1:
            self.index += 1
        else:
            self.finished = True
        self.selected = None

    @property
    def percent(self) -> int:
        if not self.questions:
            return 0
        return round(self.score / len(self.questions) * 100)
