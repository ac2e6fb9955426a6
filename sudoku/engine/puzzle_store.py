"""Persistent puzzle pool store.

Pooled puzzles are saved as one JSON document per difficulty under
``local_db/collections/sudoku_pool/`` so a restarted process can serve a
puzzle immediately instead of generating one.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..core.constants import POOL_TARGETS, Difficulty
from ..core.models import Puzzle
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

DEFAULT_STORE_DIR = Path("local_db/collections/sudoku_pool")


class PuzzleStore:
    """Save and reload pooled puzzles, one JSON file per difficulty.

    Storage problems never propagate: a failed read yields an empty list and
    a failed write is logged and dropped.
    """

    def __init__(self, store_dir: Path | str = DEFAULT_STORE_DIR) -> None:
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def load(self, difficulty: Difficulty) -> List[Puzzle]:
        path = self._path(difficulty)
        if not path.exists():
            LOGGER.debug("Pool store miss: %s", path.name)
            return []
        try:
            doc = json.loads(path.read_text(encoding="utf-8"))
            puzzles = [Puzzle.from_jsonable(entry) for entry in doc.get("puzzles", [])]
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError, AttributeError) as exc:
            LOGGER.warning("Pool store read error (%s): %s", path.name, exc)
            return []
        LOGGER.info("Loaded %d pooled %s puzzles", len(puzzles), difficulty.value)
        return puzzles

    def save(self, difficulty: Difficulty, puzzles: List[Puzzle], limit: Optional[int] = None) -> None:
        keep = POOL_TARGETS[difficulty] if limit is None else limit
        doc = {
            "difficulty": difficulty.value,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "puzzles": [puzzle.to_jsonable() for puzzle in puzzles[:keep]],
        }
        path = self._path(difficulty)
        try:
            path.write_text(json.dumps(doc, indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Pool store write error (%s): %s", path.name, exc)
            return
        LOGGER.debug("Saved %d pooled %s puzzles", len(doc["puzzles"]), difficulty.value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, difficulty: Difficulty) -> Path:
        return self.store_dir / f"pool_{difficulty.value}.json"
