"""
High Score Storage
===================
Small persistence port for the single high-score scalar.
"""

from pathlib import Path
from typing import Optional, Protocol, Union
import json
import logging
import math
import os
import secrets

from .config import HIGH_SCORE_KEY, default_state_dir


logger = logging.getLogger(__name__)


class HighScoreStore(Protocol):
    def load(self) -> Optional[int]:
        ...

    def save(self, score: int) -> None:
        ...


class MemoryHighScoreStore:
    """Keeps the high score for the lifetime of the process only."""

    def __init__(self, score: Optional[int] = None):
        self.score = score
        self.saves = 0

    def load(self) -> Optional[int]:
        return self.score

    def save(self, score: int) -> None:
        self.score = int(score)
        self.saves += 1


class JsonHighScoreStore:
    """
    High score persisted as `{"infinite_stairs_highscore": N}` in a JSON file.

    Reading never fails: a missing, unreadable or malformed file loads as None.
    """

    FILENAME = 'highscore.json'

    def __init__(self, state_dir: Union[str, Path, None] = None, key: str = HIGH_SCORE_KEY):
        self.state_dir = Path(state_dir) if state_dir is not None else default_state_dir()
        self.key = key

    @property
    def path(self) -> Path:
        return self.state_dir / self.FILENAME

    def load(self) -> Optional[int]:
        p = self.path
        if not p.exists():
            return None
        try:
            payload = json.loads(p.read_text(encoding='utf-8'))
        except (OSError, ValueError) as exc:
            logger.warning('Ignoring unreadable high score file %s: %s', p, exc)
            return None

        if not isinstance(payload, dict):
            return None
        value = payload.get(self.key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        # json accepts Infinity, NaN and overflowing literals like 1e400.
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return max(0, int(value))

    def save(self, score: int) -> None:
        p = self.path
        # Unique tmp name so parallel runs never share a partial file.
        tmp = p.with_name(f'{p.name}.{os.getpid()}.{secrets.token_hex(6)}.tmp')
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps({self.key: int(score)}, indent=2) + '\n',
                           encoding='utf-8')
            tmp.replace(p)
        except OSError as exc:
            logger.warning('Could not save high score to %s: %s', p, exc)
            if tmp.exists():
                try:
                    tmp.unlink()
                except OSError as cleanup_exc:
                    logger.debug('Could not remove %s: %s', tmp, cleanup_exc)
