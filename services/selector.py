import random
import threading
from typing import Iterable, List, Optional

from models.entities import User


class ReviewerSelector:
    """
    Picks reviewers uniformly at random without replacement.
    One generator is shared by all callers, the shuffle step runs under a lock
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def select(self, candidates: Iterable[User], count: int) -> List[User]:
        pool = list(candidates)
        if not pool or count <= 0:
            return []

        if len(pool) <= count:
            return pool

        with self._lock:
            self._rng.shuffle(pool)

        return pool[:count]
