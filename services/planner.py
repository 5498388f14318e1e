# services/planner.py
import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Tuple

from models import DEFAULT_USER_ID, Goal, StudyPlan
from services.storage import StorageError

log = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load study plan from local storage."
SAVE_ERROR = "Failed to save study plan to local storage."
ADD_GOAL_ERROR = "Failed to add goal."


def storage_key(user_id: str) -> str:
    return f"studyPlan_{user_id}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_target_date(value) -> Optional[str]:
    """Turn a date/datetime/ISO string into an ISO-8601 UTC timestamp; '' and None mean no date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


class StudyPlanStore:
    """
    Goals and subjects for one user, mirrored to a key-value storage.

    Every mutation rewrites the whole plan. Storage failures never raise;
    they are logged and exposed on `error` for the UI to show inline.
    """

    def __init__(self, storage, user_id: str = DEFAULT_USER_ID,
                 clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.user_id = user_id
        self.key = storage_key(user_id)
        self._clock = clock or _utcnow
        self.plan: Optional[StudyPlan] = None
        self.error: Optional[str] = None
        self._load_failed = False

    def _now(self) -> str:
        return self._clock().isoformat()

    def _default_plan(self) -> StudyPlan:
        return StudyPlan(user_id=self.user_id, last_updated=self._now())

    # ---------- persistence ----------

    def load(self) -> Optional[StudyPlan]:
        try:
            raw = self.storage.get(self.key)
            self._load_failed = False
            if raw:
                self.plan = StudyPlan.from_dict(json.loads(raw))
            else:
                self.plan = self._default_plan()
                self.storage.set(self.key, json.dumps(self.plan.to_dict()))
        except (StorageError, ValueError, KeyError, TypeError) as e:
            log.error("Error loading study plan from local storage: %s", e)
            self.error = LOAD_ERROR
            self._load_failed = True
        return self.plan

    def _save(self) -> None:
        try:
            self.storage.set(self.key, json.dumps(self.plan.to_dict()))
        except StorageError as e:
            log.error("Error saving study plan to local storage: %s", e)
            self.error = SAVE_ERROR

    def _commit(self) -> None:
        self.plan.last_updated = self._now()
        self._save()

    def _current(self) -> Optional[StudyPlan]:
        """The loaded plan; a fresh one only if load() was never attempted.

        After a failed load this stays None so a mutation cannot overwrite
        the stored plan with an empty one.
        """
        if self.plan is None and not self._load_failed:
            self.plan = self._default_plan()
        return self.plan

    # ---------- goals ----------

    def _goals(self) -> List[Goal]:
        plan = self._current()
        return plan.goals if plan else []

    def add_goal(self, description: str, target_date=None) -> Optional[Goal]:
        description = (description or "").strip()
        if not description:
            return None
        try:
            target = normalize_target_date(target_date)
        except ValueError as e:
            log.error("Error adding goal: %s", e)
            self.error = ADD_GOAL_ERROR
            return None

        plan = self._current()
        if plan is None:
            return None
        goal = Goal(id=str(uuid.uuid4()), description=description, target_date=target)
        plan.goals.append(goal)
        self._commit()
        return goal

    def toggle_goal(self, goal_id: str) -> None:
        if self.plan is None:
            return
        for goal in self.plan.goals:
            if goal.id == goal_id:
                goal.completed = not goal.completed
        self._commit()

    def delete_goal(self, goal_id: str) -> None:
        if self.plan is None:
            return
        self.plan.goals = [g for g in self.plan.goals if g.id != goal_id]
        self._commit()

    def active_goals(self) -> List[Goal]:
        return [g for g in self._goals() if not g.completed]

    def completed_goals(self) -> List[Goal]:
        return [g for g in self._goals() if g.completed]

    def progress(self) -> Tuple[int, int, float]:
        """(completed, total, percent)"""
        total = len(self._goals())
        done = len(self.completed_goals())
        percent = (done / total) * 100 if total else 0.0
        return done, total, percent

    # ---------- subjects ----------

    def add_subject(self, name: str) -> bool:
        name = (name or "").strip()
        if not name:
            return False
        plan = self._current()
        if plan is None:
            return False
        plan.subjects = list(dict.fromkeys(plan.subjects + [name]))
        self._commit()
        return True

    def delete_subject(self, name: str) -> None:
        if self.plan is None:
            return
        self.plan.subjects = [s for s in self.plan.subjects if s != name]
        self._commit()
