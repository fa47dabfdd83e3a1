from .base_game import (
    Actor,
    Obstacle,
    SessionTelemetry,
    create_actor
)
from .physics import PhysicsEngine
from .collision import CollisionDetector, aabb_overlap
from .difficulty import DifficultyController, DifficultyLevel
from .spawner import ObstacleSpawner, JUMP_ARC_CLEARANCE
from .combo import ComboScorer, ComboState, ComboTier
from .jump_runner import JumpSession, calculate_score, auto_jump
