# services/flashcards.py
from typing import List

from ai_providers.base import MalformedOutput
from models import Flashcard
from services import generator
from services.prompts import FLASHCARDS


def _shape(data):
    # passed through unmodified, only the envelope type is checked
    if not isinstance(data, dict):
        raise MalformedOutput("flashcards payload is not a JSON object")
    return data


TASK = generator.Task(
    kind=FLASHCARDS,
    field="notes",
    label="Flashcards",
    missing_input="Notes are required",
    no_content="No content returned from LLM",
    failed="Failed to generate flashcards due to internal server error.",
    shape=_shape,
)


def make_cards(notes: str, provider=None) -> List[Flashcard]:
    data = generator.run(TASK, notes, provider)
    return [Flashcard.from_dict(c) for c in data.get("flashcards") or []]


class FlashcardDeck:
    """Walks a generated deck one card at a time; moving always shows the front."""

    def __init__(self, cards: List[Flashcard]):
        self.cards = list(cards)
        self.index = 0
        self.flipped = False

    @property
    def current(self):
        return self.cards[self.index] if self.cards else None

    def flip(self) -> None:
        self.flipped = not self.flipped

    def next(self) -> bool:
        if self.index < len(self.cards) - 1:
            self.index += 1
            self.flipped = False
            return True
        return False

    def prev(self) -> bool:
        if self.index > 0:
            self.index -= 1
            self.flipped = False
            return True
        return False
