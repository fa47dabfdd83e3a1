from typing import Iterable, List, Optional, Tuple
from .base_game import Actor, Obstacle


def aabb_overlap(ax: float, ay: float, aw: float, ah: float,
                 bx: float, by: float, bw: float, bh: float) -> bool:
    """Axis-aligned box overlap; touching edges do not count"""
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


class CollisionDetector:
    """Actor/obstacle contact and obstacle-cleared transitions"""

    def collides(self, actor: Actor, obstacle: Obstacle) -> bool:
        return aabb_overlap(actor.x, actor.y, actor.width, actor.height,
                            obstacle.x, obstacle.y, obstacle.width, obstacle.height)

    def has_cleared(self, actor: Actor, obstacle: Obstacle) -> bool:
        return obstacle.trailing_edge < actor.x

    def check(self, actor: Actor,
              obstacles: Iterable[Obstacle]) -> Tuple[Optional[Obstacle], List[Obstacle]]:
        """Run one step of contact checks.

        Collisions are evaluated before clear transitions, so an obstacle
        that hits the actor is never reported as cleared in the same step.
        Returns (colliding obstacle or None, newly cleared obstacles).
        """
        obstacles = list(obstacles)

        for obstacle in obstacles:
            if not obstacle.cleared and self.collides(actor, obstacle):
                return obstacle, []

        newly_cleared = []
        for obstacle in obstacles:
            if not obstacle.cleared and self.has_cleared(actor, obstacle):
                obstacle.cleared = True
                newly_cleared.append(obstacle)

        return None, newly_cleared
