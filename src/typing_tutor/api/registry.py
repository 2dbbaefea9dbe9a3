"""Per-user service instances with serialised writes."""

import functools
import threading
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from typing_tutor.assessment.skill_assessment import SkillAssessmentService
from typing_tutor.config import get_settings
from typing_tutor.curriculum.level_system import LevelSystem
from typing_tutor.curriculum.progression import ProgressionCoordinator
from typing_tutor.storage.kv_store import JsonFileStore

logger = structlog.get_logger()

DEFAULT_MAX_LEARNERS = 1024


@dataclass
class LearnerContext:
    """Everything owned by one learner. Hold ``lock`` while using it."""

    user_id: str
    coordinator: ProgressionCoordinator
    lock: threading.Lock = field(default_factory=threading.Lock)
    in_use: int = 0  # open checkouts; guarded by the registry lock


class LearnerRegistry:
    """Lazily builds one LearnerContext per user id.

    Nothing is shared between users; each gets its own store directory.
    At most ``max_learners`` idle contexts are cached, least recently used
    first out. An evicted learner is reloaded from disk on the next request.

    Args:
        users_dir: Parent directory of the per-user stores.
        history_limit: Passed to every SkillAssessmentService.
        recent_window: Passed to every SkillAssessmentService.
        max_learners: Cache size.
    """

    def __init__(
        self,
        users_dir: Path,
        history_limit: int = 50,
        recent_window: int = 10,
        max_learners: int = DEFAULT_MAX_LEARNERS,
    ):
        self.users_dir = Path(users_dir)
        self.history_limit = history_limit
        self.recent_window = recent_window
        self.max_learners = max_learners
        self._learners: OrderedDict[str, LearnerContext] = OrderedDict()
        self._lock = threading.RLock()

    def get(self, user_id: str) -> LearnerContext:
        with self._lock:
            context = self._learners.get(user_id)
            if context is None:
                store = JsonFileStore(self.users_dir / user_id)
                assessment = SkillAssessmentService(
                    store,
                    history_limit=self.history_limit,
                    recent_window=self.recent_window,
                )
                levels = LevelSystem(store)
                context = LearnerContext(
                    user_id=user_id,
                    coordinator=ProgressionCoordinator(assessment, levels),
                )
                self._learners[user_id] = context
                logger.debug("learner_loaded", user_id=user_id)
            else:
                self._learners.move_to_end(user_id)
            self._evict()
            return context

    @contextmanager
    def checkout(self, user_id: str) -> Iterator[LearnerContext]:
        """Use one learner's services under their lock.

        A checked-out context is never evicted, so two requests for the
        same user always share one set of services.
        """
        with self._lock:
            context = self.get(user_id)
            context.in_use += 1
        try:
            with context.lock:
                yield context
        finally:
            with self._lock:
                context.in_use -= 1
                self._evict()

    def _evict(self) -> None:
        # The newest entry is the one being handed out
        for user_id in list(self._learners)[:-1]:
            if len(self._learners) <= self.max_learners:
                break
            if self._learners[user_id].in_use == 0:
                del self._learners[user_id]
                logger.debug("learner_evicted", user_id=user_id)


@functools.lru_cache
def get_registry() -> LearnerRegistry:
    """Get the process-wide learner registry."""
    settings = get_settings()
    return LearnerRegistry(
        settings.users_dir,
        history_limit=settings.history_limit,
        recent_window=settings.recent_window,
        max_learners=settings.max_cached_learners,
    )
