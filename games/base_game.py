# /games/base_game.py - shared types and tuning constants for the jump runner
import itertools
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# World geometry (pixels). Actor y is its top edge; GROUND_Y is the resting y.
CANVAS_WIDTH = 800
CANVAS_HEIGHT = 400
GROUND_Y = 320
PLAYER_WIDTH = 40
PLAYER_HEIGHT = 60
PLAYER_START_X = 100

# Physics, per simulation step
GRAVITY = 0.8
JUMP_FORCE = -15
FRAME_TIME_MS = 1000 / 60

# Difficulty curve
INITIAL_SPEED = 5
MAX_SPEED = 12
DIFFICULTY_INTERVAL_MS = 30000
MAX_DIFFICULTY = 10

# Obstacles
OBSTACLE_WIDTH = 30
OBSTACLE_MIN_HEIGHT = 40
OBSTACLE_MAX_HEIGHT = 80
OBSTACLE_SPAWN_DISTANCE = 400
OBSTACLE_BASE_GAP = 300
OBSTACLE_MIN_GAP = 200
OBSTACLE_GAP_STEP = 20

# Scoring
SCORE_PER_SECOND = 10
SCORE_PER_OBSTACLE = 5
COMBO_TIMEOUT_MS = 2000
COMBO_MAX_MULTIPLIER = 5
COMBO_MULTIPLIER_STEP = 0.25
COMBO_STREAK_STEP = 5

PLAYER_COLORS = [
    "#3B82F6",  # blue
    "#EF4444",  # red
    "#10B981",  # green
    "#F59E0B",  # yellow
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#14B8A6",  # teal
    "#F97316",  # orange
]


class Actor:
    """A player body in the simulation. Owned by exactly one session."""

    def __init__(self, actor_id: str, color: str = PLAYER_COLORS[0],
                 x: float = PLAYER_START_X, y: float = GROUND_Y,
                 width: float = PLAYER_WIDTH, height: float = PLAYER_HEIGHT):
        self.id = actor_id
        self.color = color
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.velocity_y = 0.0
        self.is_grounded = True
        self.is_jumping = False
        self.is_alive = True
        self.score = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'velocityY': self.velocity_y,
            'isGrounded': self.is_grounded,
            'isJumping': self.is_jumping,
            'isAlive': self.is_alive,
            'score': self.score,
            'color': self.color
        }


def create_actor(actor_id: str, color_index: int = 0) -> Actor:
    """Create an actor standing on the ground with a palette color"""
    return Actor(actor_id, color=PLAYER_COLORS[color_index % len(PLAYER_COLORS)])


class Obstacle:
    """A ground obstacle scrolling toward the actor."""

    _ids = itertools.count(1)

    def __init__(self, x: float, height: float, width: float = OBSTACLE_WIDTH,
                 ground_y: float = GROUND_Y, actor_height: float = PLAYER_HEIGHT,
                 obstacle_id: Optional[str] = None):
        self.id = obstacle_id or f"obstacle-{next(Obstacle._ids)}"
        self.x = x
        self.width = width
        self.height = height
        # Obstacles stand on the floor line, which is the actor's feet when grounded
        self.y = ground_y + actor_height - height
        self.cleared = False

    @property
    def trailing_edge(self) -> float:
        return self.x + self.width

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height
        }


class SessionTelemetry:
    """Untrusted end-of-session summary sent from the client to the server.

    Durations and timestamps are milliseconds. Instances are immutable once
    built; use `from_request` to rebuild one from a verify request body.
    """

    __slots__ = ('address', 'score', 'duration', 'obstacles_cleared', 'timestamp')

    def __init__(self, address: str, score: int, duration: float,
                 obstacles_cleared: int, timestamp: int):
        object.__setattr__(self, 'address', address)
        object.__setattr__(self, 'score', score)
        object.__setattr__(self, 'duration', duration)
        object.__setattr__(self, 'obstacles_cleared', obstacles_cleared)
        object.__setattr__(self, 'timestamp', timestamp)

    def __setattr__(self, name, value):
        raise AttributeError("SessionTelemetry is immutable")

    def __repr__(self):
        return (f"SessionTelemetry(address={self.address!r}, score={self.score}, "
                f"duration={self.duration}, obstacles_cleared={self.obstacles_cleared}, "
                f"timestamp={self.timestamp})")

    def __eq__(self, other):
        if not isinstance(other, SessionTelemetry):
            return NotImplemented
        return self.to_request() == other.to_request()

    def __hash__(self):
        return hash((self.address, self.score, self.duration,
                     self.obstacles_cleared, self.timestamp))

    @classmethod
    def from_request(cls, data: Dict[str, Any]) -> 'SessionTelemetry':
        game_data = data['gameData']
        return cls(
            address=data['address'],
            score=data['score'],
            duration=game_data['duration'],
            obstacles_cleared=game_data['obstacles'],
            timestamp=game_data['timestamp']
        )

    def to_request(self) -> Dict[str, Any]:
        """Body for POST /api/game/verify"""
        return {
            'address': self.address,
            'score': self.score,
            'gameData': {
                'duration': self.duration,
                'obstacles': self.obstacles_cleared,
                'timestamp': self.timestamp
            }
        }
