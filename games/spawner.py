import random
import logging
from typing import List, Optional, Tuple
from .base_game import (
    Obstacle, CANVAS_WIDTH, GROUND_Y, PLAYER_HEIGHT, OBSTACLE_WIDTH,
    OBSTACLE_MIN_HEIGHT, OBSTACLE_MAX_HEIGHT, OBSTACLE_SPAWN_DISTANCE,
    OBSTACLE_BASE_GAP, OBSTACLE_MIN_GAP, OBSTACLE_GAP_STEP
)
from .difficulty import DifficultyLevel
from .physics import PhysicsEngine

logger = logging.getLogger(__name__)

# Fraction of one full jump arc that every gap must cover when the arc
# check is enforced. 1.0 means the actor can always land before the next
# obstacle reaches it.
JUMP_ARC_CLEARANCE = 1.0


class ObstacleSpawner:
    """Places obstacles at the right edge of the world and scrolls them left.

    Gaps between successive obstacles are drawn from a difficulty-scaled
    range. With `enforce_jump_arc` on, each gap is also raised to at least
    the horizontal distance of one full jump at the current speed; with it
    off, gaps come from the difficulty range alone.
    """

    def __init__(self, physics: Optional[PhysicsEngine] = None,
                 rng: Optional[random.Random] = None,
                 enforce_jump_arc: bool = True,
                 spawn_x: float = CANVAS_WIDTH,
                 left_boundary: float = 0,
                 obstacle_width: float = OBSTACLE_WIDTH,
                 min_height: float = OBSTACLE_MIN_HEIGHT,
                 max_height: float = OBSTACLE_MAX_HEIGHT,
                 spawn_distance: float = OBSTACLE_SPAWN_DISTANCE,
                 base_gap: float = OBSTACLE_BASE_GAP,
                 min_gap: float = OBSTACLE_MIN_GAP,
                 gap_step: float = OBSTACLE_GAP_STEP,
                 ground_y: float = GROUND_Y,
                 actor_height: float = PLAYER_HEIGHT):
        if min_height > max_height:
            raise ValueError("min_height must not exceed max_height")
        self.physics = physics or PhysicsEngine(ground_y=ground_y)
        self.rng = rng or random.Random()
        self.enforce_jump_arc = enforce_jump_arc
        self.spawn_x = spawn_x
        self.left_boundary = left_boundary
        self.obstacle_width = obstacle_width
        self.min_height = min_height
        self.max_height = max_height
        self.spawn_distance = spawn_distance
        self.base_gap = base_gap
        self.min_gap = min_gap
        self.gap_step = gap_step
        self.ground_y = ground_y
        self.actor_height = actor_height

        self.obstacles: List[Obstacle] = []
        self.spawned_count = 0
        self._next_gap = 0.0

    def gap_range(self, difficulty: DifficultyLevel) -> Tuple[float, float]:
        low = max(self.min_gap, self.base_gap - difficulty.level * self.gap_step)
        high = low + self.spawn_distance / difficulty.spawn_rate
        return low, high

    def minimum_clearable_gap(self, speed: float) -> float:
        return self.physics.jump_arc_distance(speed) * JUMP_ARC_CLEARANCE

    def choose_gap(self, difficulty: DifficultyLevel) -> float:
        low, high = self.gap_range(difficulty)
        gap = self.rng.uniform(low, high)
        if self.enforce_jump_arc:
            gap = max(gap, self.minimum_clearable_gap(difficulty.speed))
        return gap

    def create_obstacle(self, x: float) -> Obstacle:
        height = self.rng.uniform(self.min_height, self.max_height)
        return Obstacle(x, height, width=self.obstacle_width,
                        ground_y=self.ground_y, actor_height=self.actor_height)

    def update(self, difficulty: DifficultyLevel) -> List[Obstacle]:
        """Scroll, drop off-screen obstacles and spawn. Returns new obstacles."""
        for obstacle in self.obstacles:
            obstacle.x -= difficulty.speed

        self.obstacles = [o for o in self.obstacles if o.trailing_edge > self.left_boundary]

        spawned = []
        last = self.obstacles[-1] if self.obstacles else None
        if last is None or self.spawn_x - last.trailing_edge >= self._next_gap:
            obstacle = self.create_obstacle(self.spawn_x)
            self.obstacles.append(obstacle)
            self.spawned_count += 1
            self._next_gap = self.choose_gap(difficulty)
            spawned.append(obstacle)

        return spawned

    def reset(self) -> None:
        self.obstacles = []
        self.spawned_count = 0
        self._next_gap = 0.0
