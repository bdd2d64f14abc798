"""Leveling Engine - XP thresholds and level-up rollover"""

import logging
import math

from brightminds.config import GamificationConfig
from brightminds.core.exceptions import LevelingInvariantError
from brightminds.models.user import User

logger = logging.getLogger(__name__)


class LevelingEngine:
    """
    Pure XP arithmetic over a student's gamification fields.

    No I/O: callers load and persist the student inside their own transaction.
    """

    def __init__(self, config: GamificationConfig):
        self.config = config

    def xp_threshold_for_level(self, level: int) -> int:
        """
        XP needed to leave ``level``.

        ``base`` for level <= 0, otherwise ``floor(base * multiplier ** (level - 1))``.
        """
        base = self.config.base_xp_threshold
        if level <= 0:
            return base
        return math.floor(base * self.config.level_xp_multiplier ** (level - 1))

    def initial_state(self) -> dict:
        """Gamification fields for a freshly registered student"""
        return {
            "level": 1,
            "current_xp": 0,
            "xp_to_next_level": self.xp_threshold_for_level(1),
        }

    def normalize(self, student: User) -> None:
        """Replace missing or non-positive gamification fields with safe defaults"""
        if student.current_xp is None or student.current_xp < 0:
            student.current_xp = 0
        if student.level is None or student.level <= 0:
            student.level = 1
        if student.xp_to_next_level is None or student.xp_to_next_level <= 0:
            student.xp_to_next_level = self._checked_threshold(student.level)

    def apply_xp(self, student: User, delta: int) -> int:
        """
        Add ``delta`` XP and roll over into as many levels as it covers.

        Overflow carries into the next level. Expects a normalized student.

        Returns:
            Number of levels gained (0 when ``delta <= 0``)
        """
        if delta <= 0:
            return 0

        start_level = student.level
        current_xp = student.current_xp + delta
        level = student.level
        xp_to_next = student.xp_to_next_level

        while current_xp >= xp_to_next:
            current_xp -= xp_to_next
            level += 1
            xp_to_next = self._checked_threshold(level)

        student.current_xp = current_xp
        student.level = level
        student.xp_to_next_level = xp_to_next
        return level - start_level

    def total_xp(self, level: int, current_xp: int) -> int:
        """Cumulative XP represented by a (level, current_xp) pair"""
        return sum(self.xp_threshold_for_level(lvl) for lvl in range(1, level)) + current_xp

    def _checked_threshold(self, level: int) -> int:
        threshold = self.xp_threshold_for_level(level)
        if threshold <= 0:
            logger.error("XP threshold for level %s is %s; refusing to level up", level, threshold)
            raise LevelingInvariantError(
                f"XP threshold for level {level} must be positive, got {threshold}"
            )
        return threshold
