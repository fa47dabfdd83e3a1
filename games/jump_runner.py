import math
import time
import random
import logging
from typing import Callable, Optional, Dict, Any
from .base_game import (
    Actor, SessionTelemetry, create_actor, FRAME_TIME_MS,
    SCORE_PER_SECOND, SCORE_PER_OBSTACLE
)
from .physics import PhysicsEngine
from .collision import CollisionDetector
from .difficulty import DifficultyController, DifficultyLevel
from .spawner import ObstacleSpawner
from .combo import ComboScorer, ComboState

logger = logging.getLogger(__name__)


def calculate_score(elapsed_ms: float, combo_points: int) -> int:
    """Whole seconds survived plus combo-boosted obstacle points"""
    return math.floor(elapsed_ms / 1000) * SCORE_PER_SECOND + combo_points


class JumpSession:
    """One single-player run of the obstacle jump game.

    Each call to `step` is one frame: physics, collision, combo, then
    difficulty and spawning. Nothing blocks; stopping a run is simply not
    calling `step` again. All engine instances belong to this session.
    """

    def __init__(self, actor_id: str = "local", color_index: int = 0,
                 seed: Optional[int] = None,
                 physics: Optional[PhysicsEngine] = None,
                 collisions: Optional[CollisionDetector] = None,
                 difficulty: Optional[DifficultyController] = None,
                 spawner: Optional[ObstacleSpawner] = None,
                 combo: Optional[ComboScorer] = None,
                 frame_time_ms: float = FRAME_TIME_MS):
        self.actor: Actor = create_actor(actor_id, color_index)
        self.physics = physics or PhysicsEngine()
        self.collisions = collisions or CollisionDetector()
        self.difficulty = difficulty or DifficultyController()
        self.spawner = spawner or ObstacleSpawner(physics=self.physics, rng=random.Random(seed))
        self.combo = combo or ComboScorer()
        self.frame_time_ms = frame_time_ms

        self.elapsed_ms = 0.0
        self.steps = 0
        self.obstacles_cleared = 0
        self.combo_points = 0
        self.is_over = False
        self.level = self.difficulty.update(0)

    def step(self, jump: bool = False) -> Actor:
        if self.is_over:
            return self.actor

        if jump:
            self.physics.jump(self.actor)

        self.physics.step(self.actor)
        self.elapsed_ms += self.frame_time_ms
        self.steps += 1

        hit, cleared = self.collisions.check(self.actor, self.spawner.obstacles)
        if hit is not None:
            self.end(reason=f"collided with {hit.id}")
        else:
            for _ in cleared:
                self.combo.register_hit(self.elapsed_ms)
                self.combo_points += self.combo.calculate_points(SCORE_PER_OBSTACLE)
                self.obstacles_cleared += 1
            self.combo.update(self.elapsed_ms)

            self.level = self.difficulty.update(self.elapsed_ms)
            self.spawner.update(self.level)

        self.actor.score = calculate_score(self.elapsed_ms, self.combo_points)
        return self.actor

    def run(self, max_steps: int, controller: Optional[Callable[['JumpSession'], bool]] = None) -> Actor:
        """Step until the run ends or max_steps frames have elapsed"""
        for _ in range(max_steps):
            if self.is_over:
                break
            self.step(jump=controller(self) if controller else False)
        return self.actor

    def end(self, reason: str = "stopped") -> None:
        if self.is_over:
            return
        self.actor.is_alive = False
        self.combo.break_combo()
        self.is_over = True
        logger.info(f"Session for {self.actor.id} over after {self.elapsed_ms:.0f}ms: {reason}")

    @property
    def combo_state(self) -> ComboState:
        return self.combo.get_state()

    @property
    def current_difficulty(self) -> DifficultyLevel:
        return self.level

    def telemetry(self, address: str, timestamp_ms: Optional[int] = None) -> SessionTelemetry:
        """Package the run for POST /api/game/verify"""
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return SessionTelemetry(
            address=address,
            score=self.actor.score,
            duration=int(round(self.elapsed_ms)),
            obstacles_cleared=self.obstacles_cleared,
            timestamp=timestamp_ms
        )

    def snapshot(self) -> Dict[str, Any]:
        return {
            'actor': self.actor.to_dict(),
            'obstacles': [o.to_dict() for o in self.spawner.obstacles],
            'elapsedMs': self.elapsed_ms,
            'difficulty': self.level.to_dict(),
            'combo': self.combo.state.to_dict(),
            'comboTier': self.combo.tier().value,
            'obstaclesCleared': self.obstacles_cleared,
            'isOver': self.is_over
        }


def auto_jump(session: JumpSession) -> bool:
    """Jump so the apex lines up with the next obstacle. Used by bots and tests."""
    actor = session.actor
    if not actor.is_grounded:
        return False

    apex_lead = session.level.speed * session.physics.jump_duration_frames() / 2
    actor_center = actor.x + actor.width / 2
    for obstacle in session.spawner.obstacles:
        if obstacle.cleared or obstacle.trailing_edge < actor.x:
            continue
        obstacle_center = obstacle.x + obstacle.width / 2
        return obstacle_center - actor_center <= apex_lead
    return False
