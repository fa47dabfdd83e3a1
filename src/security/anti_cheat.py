import math
import logging
from typing import Any, Callable, Dict, Optional
from games.base_game import SessionTelemetry, FRAME_TIME_MS, SCORE_PER_SECOND, SCORE_PER_OBSTACLE
from games.combo import ComboScorer
from games.difficulty import DifficultyController
from games.spawner import ObstacleSpawner
from src.utils.cache import now_ms

logger = logging.getLogger(__name__)


class VerificationResult:
    def __init__(self, valid: bool, reason: Optional[str] = None):
        self.valid = valid
        self.reason = reason

    def __bool__(self):
        return self.valid

    def to_dict(self) -> Dict[str, Any]:
        result = {'valid': self.valid}
        if self.reason is not None:
            result['reason'] = self.reason
        return result


class AntiCheatVerifier:
    """Plausibility checks for client-reported sessions.

    Rules run in order and the first failure wins:
      1. duration of at least min_duration_ms
      2. score per second at most max_score_per_second
      3. obstacles per second at most max_obstacles_per_second
      4. timestamp no older than max_age_ms (and not beyond the clock skew
         allowance in the future)
    A pass bounds what a cheater can claim; it does not prove the run.
    """

    def __init__(self, min_duration_ms: float = 5000,
                 max_score_per_second: float = 50,
                 max_obstacles_per_second: float = 5,
                 max_age_ms: int = 60 * 60 * 1000,
                 max_clock_skew_ms: int = 5 * 60 * 1000,
                 clock: Optional[Callable[[], int]] = None):
        self.min_duration_ms = min_duration_ms
        self.max_score_per_second = max_score_per_second
        self.max_obstacles_per_second = max_obstacles_per_second
        self.max_age_ms = max_age_ms
        self.max_clock_skew_ms = max_clock_skew_ms
        self.clock = clock or now_ms

    @classmethod
    def from_config(cls, cfg, clock: Optional[Callable[[], int]] = None) -> 'AntiCheatVerifier':
        return cls(
            min_duration_ms=cfg.MIN_GAME_DURATION,
            max_score_per_second=cfg.MAX_SCORE_PER_SECOND,
            max_obstacles_per_second=cfg.MAX_OBSTACLES_PER_SECOND,
            max_age_ms=cfg.MAX_SESSION_AGE,
            max_clock_skew_ms=cfg.MAX_CLOCK_SKEW,
            clock=clock
        )

    def verify(self, telemetry: SessionTelemetry) -> VerificationResult:
        result = self._check(telemetry)
        if not result.valid:
            logger.warning(f"Anti-cheat rejected session for {telemetry.address}: {result.reason}")
        return result

    def _check(self, telemetry: SessionTelemetry) -> VerificationResult:
        duration = telemetry.duration

        if duration < self.min_duration_ms:
            return VerificationResult(False, f"Game duration too short ({duration}ms)")
        if duration <= 0:
            return VerificationResult(False, "Game duration must be positive")

        score_per_second = telemetry.score * 1000 / duration
        if score_per_second > self.max_score_per_second:
            return VerificationResult(False, f"Score per second too high ({score_per_second:.2f})")

        obstacles_per_second = telemetry.obstacles_cleared * 1000 / duration
        if obstacles_per_second > self.max_obstacles_per_second:
            return VerificationResult(False, f"Obstacles per second too high ({obstacles_per_second:.2f})")

        age = self.clock() - telemetry.timestamp
        if age > self.max_age_ms:
            return VerificationResult(False, "Game timestamp too old")
        if -age > self.max_clock_skew_ms:
            return VerificationResult(False, "Game timestamp is in the future")

        return VerificationResult(True)


def derive_limits(spawner: Optional[ObstacleSpawner] = None,
                  difficulty: Optional[DifficultyController] = None,
                  combo: Optional[ComboScorer] = None,
                  frame_time_ms: float = FRAME_TIME_MS) -> Dict[str, float]:
    """Kinematic ceilings implied by the gameplay constants.

    The fastest obstacle rate is reached at the hardest level with the
    smallest gap the spawner can choose; every clear at that rate is
    assumed to carry the maximum combo multiplier.
    """
    spawner = spawner or ObstacleSpawner()
    difficulty = difficulty or DifficultyController()
    combo = combo or ComboScorer()
    physics = spawner.physics

    hardest = difficulty.hardest()
    min_gap, _ = spawner.gap_range(hardest)
    if spawner.enforce_jump_arc:
        min_gap = max(min_gap, spawner.minimum_clearable_gap(hardest.speed))

    speed_per_second = hardest.speed * 1000 / frame_time_ms
    max_obstacles_per_second = speed_per_second / (min_gap + spawner.obstacle_width)
    max_points_per_clear = math.floor(SCORE_PER_OBSTACLE * combo.max_multiplier)

    return {
        'jumpHeight': physics.jump_height(),
        'jumpDurationMs': physics.jump_duration_ms(frame_time_ms),
        'jumpArcDistance': physics.jump_arc_distance(hardest.speed),
        'minGap': min_gap,
        'maxObstaclesPerSecond': max_obstacles_per_second,
        'maxScorePerSecond': SCORE_PER_SECOND + max_obstacles_per_second * max_points_per_clear
    }
