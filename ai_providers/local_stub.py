import json
import re

from .base import AIProvider

# Keep in sync with the labels services/prompts.py puts before caller text.
_LABELS = ("Notes:", "Text:", "Question:")


def _envelope(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class LocalStub(AIProvider):
    """Offline provider: answers in the upstream envelope shape without any model."""

    name = "stub"

    def _sentences(self, text):
        parts = re.split(r'[\.!\?]\s+', text or '')
        return [p.strip().rstrip('.!?') for p in parts if p and len(p.strip()) > 0]

    def _caller_text(self, payload: dict) -> str:
        user = payload["contents"][0]["parts"][0]["text"]
        for label in _LABELS:
            if label in user:
                return user.rsplit(label, 1)[-1].strip()
        return user.strip()

    def complete(self, payload: dict) -> dict:
        text = self._caller_text(payload)
        schema = (payload.get("generationConfig") or {}).get("responseSchema")
        if schema is None:
            return _envelope(self.answer(text))
        props = schema.get("properties", {})
        if "flashcards" in props:
            return _envelope(json.dumps({"flashcards": self.make_flashcards(text, 5)}))
        if "quiz" in props:
            return _envelope(json.dumps({"quiz": self.generate_quiz(text, 4)}))
        return _envelope("{}")

    def make_flashcards(self, text: str, n: int) -> list:
        sents = self._sentences(text)
        out = []
        for i in range(min(n, max(1, len(sents)))):
            s = sents[i] if sents else text
            q = f"Explain briefly: {s[:80]}..."
            a = s if len(s) < 220 else s[:220] + "..."
            out.append({"front": q, "back": a})
        return out

    def generate_quiz(self, text: str, n: int) -> list:
        sents = self._sentences(text) or [text]
        out = []
        for i in range(n):
            s = sents[i % len(sents)]
            out.append({
                "question": f"Which statement appears in the text? ({i + 1})",
                "options": [s[:120], "None of the above", "All of the above", "It is not mentioned"],
                "correct": 0,
                "explanation": "Taken verbatim from the text (stub).",
            })
        return out

    def answer(self, question: str) -> str:
        return (
            f"**Offline study buddy**\n\nYou asked: _{question}_\n\n"
            "No model is configured, so this is a local stub. Set `GEMINI_API_KEY` for real answers."
        )
