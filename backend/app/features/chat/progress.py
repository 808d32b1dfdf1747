"""
Chat feature: Session progress tracker.

Per session, per scenario: the set of completed stages and the set of stages
whose feedback bundle has already been delivered. Both sets only grow for as
long as the session lives; a session ends after `ttl` seconds without a
completion.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass, field

from cachetools import TTLCache

from app.config import get_settings
from app.features.curriculum.catalog import ordered_stage_labels

logger = logging.getLogger(__name__)


@dataclass
class ScenarioProgress:
    completed_stages: set[str] = field(default_factory=set)
    feedback_delivered: set[str] = field(default_factory=set)

    def copy(self) -> "ScenarioProgress":
        return ScenarioProgress(set(self.completed_stages), set(self.feedback_delivered))


class ProgressStore:
    """Keyed progress store, one mapping of scenario id → progress per session.

    Only idle time ends a session; the number of live sessions is unbounded,
    so an active session is never dropped to make room for another. All reads
    return copies; mutation happens under one lock as a set union.
    """

    def __init__(self, ttl: float = 21600, timer=time.monotonic):
        self._sessions: TTLCache = TTLCache(maxsize=math.inf, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def _scenario(self, session_id: str, scenario_id: str) -> ScenarioProgress:
        # Caller holds the lock. Re-assigning refreshes the session TTL.
        scenarios = self._sessions.get(session_id) or {}
        self._sessions[session_id] = scenarios
        return scenarios.setdefault(scenario_id, ScenarioProgress())

    def complete_stage(
        self,
        session_id: str,
        scenario_id: str,
        stage_id: str,
        has_feedback_material: bool,
    ) -> bool:
        """Record a clean completion of one stage.

        Returns:
            True the first time a stage with feedback material completes,
            meaning the feedback bundle should be emitted. False otherwise.
        """
        with self._lock:
            progress = self._scenario(session_id, scenario_id)
            progress.completed_stages.add(stage_id)
            if not has_feedback_material or stage_id in progress.feedback_delivered:
                return False
            progress.feedback_delivered.add(stage_id)

        logger.info(f"Feedback bundle released: session={session_id} scenario={scenario_id} stage={stage_id}")
        return True

    def get(self, session_id: str, scenario_id: str) -> ScenarioProgress:
        with self._lock:
            progress = (self._sessions.get(session_id) or {}).get(scenario_id)
            return progress.copy() if progress else ScenarioProgress()

    def snapshot(self, session_id: str) -> dict[str, ScenarioProgress]:
        with self._lock:
            scenarios = self._sessions.get(session_id) or {}
            return {scenario_id: p.copy() for scenario_id, p in scenarios.items()}

    def completed_stage_labels(self, session_id: str | None, scenario_id: str | None) -> list[str]:
        """Display labels of completed stages, in curriculum order."""
        if not session_id or not scenario_id:
            return []
        return ordered_stage_labels(self.get(session_id, scenario_id).completed_stages)


_progress_store: ProgressStore | None = None


def get_progress_store() -> ProgressStore:
    global _progress_store
    if _progress_store is None:
        _progress_store = ProgressStore(ttl=get_settings().SESSION_TTL_SECONDS)
    return _progress_store
