# services/prompts.py
import textwrap
from dataclasses import dataclass
from typing import Optional

FLASHCARDS = "flashcards"
QUIZ = "quiz"
STUDY_BUDDY = "study-buddy"

# Labels in front of the caller's text; LocalStub splits on these too.
NOTES_LABEL = "Notes:"
TEXT_LABEL = "Text:"
QUESTION_LABEL = "Question:"


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str
    schema: Optional[dict] = None

    @property
    def structured(self) -> bool:
        return self.schema is not None


SYSTEM_FLASHCARDS = (
    "You are an expert educational assistant. Your sole purpose is to convert raw notes "
    "into a concise, valid JSON array of flashcards. Do not include any text outside the JSON object."
)

SYSTEM_QUIZ = (
    "You are an expert quiz master. Your sole purpose is to convert raw text into a concise, "
    "valid JSON array of multiple choice quiz questions. Do not include any text outside the JSON object."
)

SYSTEM_STUDY_BUDDY = (
    "You are a helpful, world-class study buddy AI. Answer the following question in a clear, "
    "educational way. Provide detailed explanations, helpful examples, and encourage the user's "
    "learning. Maintain a friendly and supportive tone. Format the response using Markdown for "
    "readability (headings, lists, bolding)."
)

FLASHCARDS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "flashcards": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "front": {"type": "STRING"},
                    "back": {"type": "STRING"},
                },
                "propertyOrdering": ["front", "back"],
            },
        }
    },
}

QUIZ_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "quiz": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "question": {"type": "STRING"},
                    "options": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "correct": {"type": "INTEGER"},
                    "explanation": {"type": "STRING"},
                },
                "propertyOrdering": ["question", "options", "correct", "explanation"],
            },
        }
    },
}


def _flashcards_user(notes: str) -> str:
    return textwrap.dedent("""\
        Create 5-8 flashcards in JSON format from the following notes. Use the exact structure:
        { "flashcards": [ { "front": "Question or term", "back": "Answer or definition" } ] }.
        """) + f"{NOTES_LABEL} {notes}"


def _quiz_user(text: str) -> str:
    return textwrap.dedent("""\
        Create 4-6 multiple choice questions from the following text.
        Generate them in JSON format with the following exact structure.
        The 'correct' field must be the 0-based index of the correct option (0 to 3).
        Make questions challenging but fair.
        {
          "quiz": [
            {
              "question": "Question text here?",
              "options": ["Option A", "Option B", "Option C", "Option D"],
              "correct": 0,
              "explanation": "Why this answer is correct"
            }
          ]
        }
        """) + f"{TEXT_LABEL} {text}"


def build_prompt(kind: str, text: str) -> Prompt:
    """Caller text goes into the prompt verbatim; nothing here guards against injection."""
    if kind == FLASHCARDS:
        return Prompt(SYSTEM_FLASHCARDS, _flashcards_user(text), FLASHCARDS_SCHEMA)
    if kind == QUIZ:
        return Prompt(SYSTEM_QUIZ, _quiz_user(text), QUIZ_SCHEMA)
    if kind == STUDY_BUDDY:
        return Prompt(SYSTEM_STUDY_BUDDY, f"{QUESTION_LABEL} {text}")
    raise ValueError(f"unknown task kind: {kind!r}")
