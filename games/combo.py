import math
import logging
from enum import Enum
from typing import Dict, Any, Optional
from .base_game import (
    COMBO_TIMEOUT_MS, COMBO_MAX_MULTIPLIER, COMBO_MULTIPLIER_STEP, COMBO_STREAK_STEP
)

logger = logging.getLogger(__name__)


class ComboTier(Enum):
    NONE = "none"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


# Lower streak bound of each tier, highest first
COMBO_TIERS = [
    (50, ComboTier.PLATINUM),
    (20, ComboTier.GOLD),
    (10, ComboTier.SILVER),
    (5, ComboTier.BRONZE),
]


class ComboState:
    def __init__(self):
        self.count = 0
        self.multiplier = 1.0
        self.last_hit_time: Optional[float] = None
        self.is_active = False
        self.max_combo = 0

    def copy(self) -> 'ComboState':
        state = ComboState()
        state.__dict__.update(self.__dict__)
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'multiplier': self.multiplier,
            'lastHitTime': self.last_hit_time,
            'isActive': self.is_active,
            'maxCombo': self.max_combo
        }


class ComboScorer:
    """Streak state machine driven by obstacle-cleared events.

    Times are milliseconds on the caller's clock (the simulation clock on
    the client), so a replayed session produces the same streaks.
    """

    def __init__(self, timeout_ms: float = COMBO_TIMEOUT_MS,
                 max_multiplier: float = COMBO_MAX_MULTIPLIER,
                 multiplier_step: float = COMBO_MULTIPLIER_STEP,
                 streak_step: int = COMBO_STREAK_STEP):
        self.timeout_ms = timeout_ms
        self.max_multiplier = max_multiplier
        self.multiplier_step = multiplier_step
        self.streak_step = streak_step
        self.state = ComboState()

    def _timed_out(self, now_ms: float) -> bool:
        if self.state.last_hit_time is None:
            return True
        return now_ms - self.state.last_hit_time > self.timeout_ms

    def multiplier_for(self, streak: int) -> float:
        return min(1 + math.floor(streak / self.streak_step) * self.multiplier_step,
                   self.max_multiplier)

    def register_hit(self, now_ms: float) -> Dict[str, Any]:
        """Record one cleared obstacle"""
        is_new = self._timed_out(now_ms)
        if is_new:
            self.state.count = 1
            self.state.multiplier = 1.0
        else:
            self.state.count += 1
            self.state.multiplier = self.multiplier_for(self.state.count)

        self.state.last_hit_time = now_ms
        self.state.is_active = True
        self.state.max_combo = max(self.state.max_combo, self.state.count)

        return {
            'combo': self.state.count,
            'multiplier': self.state.multiplier,
            'isNew': is_new
        }

    def break_combo(self) -> None:
        """Death or miss: back to idle regardless of the timeout"""
        if self.state.count:
            logger.debug(f"Combo broken at streak {self.state.count}")
        self.state.count = 0
        self.state.multiplier = 1.0
        self.state.is_active = False

    def update(self, now_ms: float) -> None:
        """Periodic tick; resets an idle streak once the timeout has passed"""
        if self.state.is_active and self._timed_out(now_ms):
            self.break_combo()

    def calculate_points(self, base_points: int) -> int:
        return math.floor(base_points * self.state.multiplier)

    def tier(self) -> ComboTier:
        for threshold, tier in COMBO_TIERS:
            if self.state.count >= threshold:
                return tier
        return ComboTier.NONE

    def get_state(self) -> ComboState:
        return self.state.copy()

    def reset(self) -> None:
        max_combo = self.state.max_combo
        self.state = ComboState()
        self.state.max_combo = max_combo
