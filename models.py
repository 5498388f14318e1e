from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

DEFAULT_USER_ID = "localUser123"


# ===== LOCAL KEY-VALUE STORAGE =====

class StorageEntry(Base):
    __tablename__ = 'storage_entries'
    id = Column(Integer, primary_key=True)
    key = Column(String(255), nullable=False, unique=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ===== AI RESULTS (ephemeral, never stored) =====

@dataclass
class Flashcard:
    front: str
    back: str

    @classmethod
    def from_dict(cls, data: dict) -> "Flashcard":
        return cls(front=data.get("front", ""), back=data.get("back", ""))


@dataclass
class QuizQuestion:
    question: str
    options: List[str]
    correct: int
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "QuizQuestion":
        return cls(
            question=data.get("question", ""),
            options=list(data.get("options") or []),
            correct=data.get("correct"),
            explanation=data.get("explanation", ""),
        )


@dataclass
class ChatTurn:
    question: str
    answer: str


# ===== STUDY PLAN =====

@dataclass
class Goal:
    id: str
    description: str
    target_date: Optional[str] = None   # ISO-8601
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "targetDate": self.target_date,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        return cls(
            id=data["id"],
            description=data["description"],
            target_date=data.get("targetDate"),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class StudyPlan:
    user_id: str
    last_updated: str                   # ISO-8601
    goals: List[Goal] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "goals": [g.to_dict() for g in self.goals],
            "subjects": list(self.subjects),
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudyPlan":
        return cls(
            user_id=data["userId"],
            last_updated=data["lastUpdated"],
            goals=[Goal.from_dict(g) for g in data.get("goals") or []],
            subjects=list(data.get("subjects") or []),
        )
