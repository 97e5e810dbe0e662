"""Process-local daily log storage."""

import threading
from dataclasses import dataclass, field

from nutrisnap.domain.meals import DailyLog, Meal
from nutrisnap.services.daily_log import DailyLogRepository


@dataclass
class InMemoryDailyLogRepository(DailyLogRepository):
    """Keeps daily logs in memory; contents are lost on restart."""

    default_calorie_goal: int = 2000
    logs: dict[str, DailyLog] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get_log(self, owner_id: str) -> DailyLog:
        """Return a snapshot of the owner's log."""
        with self._lock:
            log = self._ensure_log(owner_id)
            return DailyLog(calorie_goal=log.calorie_goal, meals=list(log.meals))

    def append_meal(self, owner_id: str, meal: Meal) -> None:
        """Append a meal to the owner's log."""
        with self._lock:
            self._ensure_log(owner_id).meals.append(meal)

    def set_calorie_goal(self, owner_id: str, goal: int) -> None:
        """Replace the owner's calorie goal."""
        with self._lock:
            self._ensure_log(owner_id).calorie_goal = goal

    def _ensure_log(self, owner_id: str) -> DailyLog:
        log = self.logs.get(owner_id)
        if log is None:
            log = DailyLog(calorie_goal=self.default_calorie_goal)
            self.logs[owner_id] = log
        return log
