"""Background puzzle pool with cancellable one-off generation.

Generation is CPU-bound, so the pool runs it on a small thread pool. Priming
schedules one puzzle per task and re-submits itself until the difficulty is
topped up, which lets one-off requests interleave with background work.
All pool mutation happens under a single lock; every job builds its own
:class:`PuzzleGenerator` from a seed drawn under that lock. Writes to the
store hold a per-difficulty lock and snapshot the pool inside it, so the
last write always carries the newest contents.
"""

from __future__ import annotations

import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional

from ..core.constants import POOL_TARGETS, Difficulty, resolve_difficulty
from ..core.exceptions import GenerationCancelled, SudokuError
from ..core.models import Puzzle
from ..utils.logger import get_logger
from .generator import GeneratorConfig, PuzzleGenerator
from .puzzle_store import PuzzleStore


LOGGER = get_logger(__name__)

GeneratorFactory = Callable[[int], PuzzleGenerator]


@dataclass
class PoolConfig:
    targets: Dict[Difficulty, int] = field(default_factory=lambda: dict(POOL_TARGETS))
    max_workers: int = 2
    seed: Optional[int] = None
    max_consecutive_failures: int = 5
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)

    def target(self, difficulty: Difficulty) -> int:
        return self.targets.get(difficulty, 2)


class PuzzlePool:
    """Keeps a few ready puzzles per difficulty and tops them up in the background."""

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        store: Optional[PuzzleStore] = None,
        generator_factory: Optional[GeneratorFactory] = None,
    ) -> None:
        self.config = config or PoolConfig()
        self.store = store
        self.generator_factory = generator_factory or self._default_factory
        self._rng = random.Random(self.config.seed)
        self._lock = threading.Lock()
        self._store_locks: Dict[Difficulty, threading.Lock] = {level: threading.Lock() for level in Difficulty}
        self._closed = False
        self._pools: Dict[Difficulty, List[Puzzle]] = {level: [] for level in Difficulty}
        self._busy: Dict[Difficulty, bool] = {level: False for level in Difficulty}
        self._idle: Dict[Difficulty, threading.Event] = {level: threading.Event() for level in Difficulty}
        for event in self._idle.values():
            event.set()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="sudoku-pool",
        )
        if self.store is not None:
            for level in Difficulty:
                self._pools[level] = self.store.load(level)[: self.config.target(level)]

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------
    def size(self, difficulty: Difficulty | str) -> int:
        level = resolve_difficulty(difficulty)
        with self._lock:
            return len(self._pools[level])

    def prime(self, difficulty: Difficulty | str, count: Optional[int] = None) -> bool:
        """Start topping up ``difficulty``; returns False if already priming or closed."""
        level = resolve_difficulty(difficulty)
        desired = max(count or 0, self.config.target(level))
        with self._lock:
            if self._closed or self._busy[level]:
                return False
            self._busy[level] = True
            self._idle[level].clear()
            self._executor.submit(self._prime_step, level, desired, 0)
        LOGGER.debug("Priming %s pool to %d puzzles", level.value, desired)
        return True

    def wait_until_idle(self, difficulty: Difficulty | str, timeout: Optional[float] = None) -> bool:
        return self._idle[resolve_difficulty(difficulty)].wait(timeout)

    def get(self, difficulty: Difficulty | str) -> Optional[Puzzle]:
        """Pop the oldest pooled puzzle (or None) and top the pool back up."""
        level = resolve_difficulty(difficulty)
        with self._lock:
            pool = self._pools[level]
            item = pool.pop(0) if pool else None
        if item is not None:
            self._persist(level)
        self.prime(level)
        return item

    def generate_async(
        self,
        difficulty: Difficulty | str,
        cancel_event: Optional[threading.Event] = None,
    ) -> "Future[Puzzle]":
        """Generate one puzzle off the calling thread.

        The future fails with :class:`GenerationCancelled` if ``cancel_event``
        is set before the puzzle is handed back; no partial result is kept.
        """
        level = resolve_difficulty(difficulty)
        if cancel_event is not None and cancel_event.is_set():
            future: "Future[Puzzle]" = Future()
            future.set_exception(GenerationCancelled("Generation cancelled before start"))
            return future
        with self._lock:
            if self._closed:
                raise RuntimeError("Puzzle pool is closed")
            return self._executor.submit(self._generate_one, level, cancel_event)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=True)
        for level in Difficulty:
            self._persist(level)
            self._idle[level].set()

    def __enter__(self) -> "PuzzlePool":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Background jobs
    # ------------------------------------------------------------------
    def _prime_step(self, level: Difficulty, desired: int, failures: int) -> None:
        with self._lock:
            done = self._closed or len(self._pools[level]) >= desired
        if done:
            self._finish_priming(level)
            return

        try:
            puzzle = self._new_generator().generate(level)
        except SudokuError as exc:
            failures += 1
            LOGGER.warning(
                "Background %s generation failed (%d/%d): %s",
                level.value, failures, self.config.max_consecutive_failures, exc,
            )
            if failures >= self.config.max_consecutive_failures:
                self._finish_priming(level)
                return
        else:
            failures = 0
            with self._lock:
                self._pools[level].append(puzzle)
            LOGGER.debug("Pooled %s puzzle (%d holes)", level.value, puzzle.holes)

        with self._lock:
            if not self._closed:
                self._executor.submit(self._prime_step, level, desired, failures)
                return
        self._finish_priming(level)

    def _finish_priming(self, level: Difficulty) -> None:
        size = self._persist(level)
        with self._lock:
            self._busy[level] = False
        self._idle[level].set()
        LOGGER.info("%s pool holds %d puzzles", level.value.capitalize(), size)

    def _generate_one(self, level: Difficulty, cancel_event: Optional[threading.Event]) -> Puzzle:
        puzzle = self._new_generator().generate(level, cancel_event=cancel_event)
        if cancel_event is not None and cancel_event.is_set():
            raise GenerationCancelled("Generation cancelled before completion")
        return puzzle

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _new_generator(self) -> PuzzleGenerator:
        with self._lock:
            seed = self._rng.getrandbits(32)
        return self.generator_factory(seed)

    def _default_factory(self, seed: int) -> PuzzleGenerator:
        return PuzzleGenerator(replace(self.config.generator, seed=seed))

    def _persist(self, level: Difficulty) -> int:
        """Write the current ``level`` pool to the store; returns its size."""
        with self._store_locks[level]:
            with self._lock:
                snapshot = list(self._pools[level])
            if self.store is not None:
                self.store.save(level, snapshot, limit=self.config.target(level))
        return len(snapshot)
