import math
import logging
from typing import NamedTuple, Dict, Any
from .base_game import INITIAL_SPEED, MAX_SPEED, DIFFICULTY_INTERVAL_MS, MAX_DIFFICULTY

logger = logging.getLogger(__name__)


class DifficultyLevel(NamedTuple):
    level: int
    speed: float
    spawn_rate: float
    obstacle_variety: int
    score_multiplier: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'speed': self.speed,
            'spawnRate': self.spawn_rate,
            'obstacleVariety': self.obstacle_variety,
            'scoreMultiplier': self.score_multiplier
        }


class DifficultyController:
    """Maps elapsed session time to a difficulty level.

    Every field of a DifficultyLevel is a pure function of elapsed_ms and the
    constructor arguments, so the server can recompute the hardest level a
    session could have reached from its reported duration alone. Speed grows
    linearly from initial_speed to max_speed across the levels.
    """

    def __init__(self, initial_speed: float = INITIAL_SPEED, max_speed: float = MAX_SPEED,
                 interval_ms: float = DIFFICULTY_INTERVAL_MS, max_level: int = MAX_DIFFICULTY):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        if max_level < 1:
            raise ValueError("max_level must be at least 1")
        if max_speed < initial_speed:
            raise ValueError("max_speed must not be below initial_speed")
        self.initial_speed = initial_speed
        self.max_speed = max_speed
        self.interval_ms = interval_ms
        self.max_level = max_level
        self.current = self.level_at(0)

    def level_for(self, elapsed_ms: float) -> int:
        elapsed_ms = max(elapsed_ms, 0)
        return min(math.floor(elapsed_ms / self.interval_ms) + 1, self.max_level)

    def level_at(self, elapsed_ms: float) -> DifficultyLevel:
        level = self.level_for(elapsed_ms)
        if self.max_level > 1:
            progress = min((level - 1) / (self.max_level - 1), 1)
        else:
            progress = 0.0
        speed = self.initial_speed + (self.max_speed - self.initial_speed) * progress

        return DifficultyLevel(
            level=level,
            speed=speed,
            spawn_rate=1 + level * 0.1,
            obstacle_variety=min(1 + math.floor(level / 2), 5),
            score_multiplier=1 + (level - 1) * 0.2
        )

    def update(self, elapsed_ms: float) -> DifficultyLevel:
        """Recompute the current level for this step"""
        previous = self.current.level
        self.current = self.level_at(elapsed_ms)
        if self.current.level > previous:
            logger.debug(f"Difficulty increased to level {self.current.level} "
                         f"(speed {self.current.speed:.2f})")
        return self.current

    def hardest(self) -> DifficultyLevel:
        """The level every long enough session ends up at"""
        return self.level_at((self.max_level - 1) * self.interval_ms)

    def reset(self) -> None:
        self.current = self.level_at(0)
