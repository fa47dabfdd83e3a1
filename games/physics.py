import logging
from .base_game import Actor, GRAVITY, JUMP_FORCE, GROUND_Y, FRAME_TIME_MS

logger = logging.getLogger(__name__)


class PhysicsEngine:
    """Vertical motion for runner actors: gravity, ground clamp, jump impulse.

    Units are pixels and simulation steps. The server derives its plausibility
    bounds from the same constants, so `gravity` and `jump_force` must match
    what the client runs with.
    """

    def __init__(self, gravity: float = GRAVITY, jump_force: float = JUMP_FORCE,
                 ground_y: float = GROUND_Y):
        if gravity <= 0:
            raise ValueError("gravity must be positive")
        if jump_force >= 0:
            raise ValueError("jump_force must be negative (upward)")
        self.gravity = gravity
        self.jump_force = jump_force
        self.ground_y = ground_y

    def step(self, actor: Actor) -> Actor:
        """Advance one actor by one step"""
        if not actor.is_alive:
            return actor

        actor.velocity_y += self.gravity
        actor.y += actor.velocity_y

        if actor.y >= self.ground_y:
            actor.y = self.ground_y
            actor.velocity_y = 0.0
            actor.is_grounded = True
            actor.is_jumping = False
        else:
            actor.is_grounded = False

        return actor

    def jump(self, actor: Actor) -> bool:
        """Apply the jump impulse. Returns False when the request is ignored."""
        if not actor.is_alive or not actor.is_grounded or actor.is_jumping:
            return False

        actor.velocity_y = float(self.jump_force)
        actor.is_jumping = True
        actor.is_grounded = False
        return True

    # Kinematic bounds shared with the anti-cheat layer

    def jump_height(self) -> float:
        return self.jump_force ** 2 / (2 * self.gravity)

    def jump_duration_frames(self) -> float:
        return 2 * abs(self.jump_force) / self.gravity

    def jump_duration_ms(self, frame_time_ms: float = FRAME_TIME_MS) -> float:
        return self.jump_duration_frames() * frame_time_ms

    def jump_arc_distance(self, speed: float) -> float:
        """Horizontal distance the world scrolls during one full jump at `speed` px/step"""
        return speed * self.jump_duration_frames()
