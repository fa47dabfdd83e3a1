import logging
from typing import Callable, Optional
from games.difficulty import DifficultyController
from games.physics import PhysicsEngine
from games.spawner import ObstacleSpawner
from src.features.rewards import RewardCalculator
from src.integrations.signer import ClaimSigner
from src.security.anti_cheat import AntiCheatVerifier
from src.security.nonces import ClaimNonceRegistry
from src.security.rate_limiter import RateLimiter
from src.utils.cache import KeyValueStore, create_store, now_ms
from src.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class GameServices:
    """Everything one app instance needs to serve the game API"""

    def __init__(self, cfg, clock: Optional[Callable[[], int]] = None,
                 store: Optional[KeyValueStore] = None):
        self.config = cfg
        self.clock = clock or now_ms
        self.store = store if store is not None else create_store(cfg, clock=self.clock)

        self.verifier = AntiCheatVerifier.from_config(cfg, clock=self.clock)
        self.rewards = RewardCalculator.from_config(cfg)
        self.nonces = ClaimNonceRegistry(self.store, retention_ms=cfg.NONCE_RETENTION_MS,
                                         clock=self.clock)
        self.limiter = RateLimiter(self.store, clock=self.clock)
        self.signer = self._build_signer()

    def _build_signer(self) -> Optional[ClaimSigner]:
        if not self.config.signing_enabled:
            return None
        try:
            signer = ClaimSigner(self.config.VERIFIER_PRIVATE_KEY)
        except ConfigurationError:
            logger.error("Claim signing disabled: verifier key could not be loaded")
            return None
        logger.info(f"Claim signer address: {signer.address}")
        return signer

    def build_physics(self) -> PhysicsEngine:
        return PhysicsEngine(gravity=self.config.GRAVITY, jump_force=self.config.JUMP_FORCE)

    def build_difficulty(self) -> DifficultyController:
        return DifficultyController(
            initial_speed=self.config.INITIAL_SPEED,
            max_speed=self.config.MAX_SPEED,
            interval_ms=self.config.DIFFICULTY_INTERVAL_MS,
            max_level=self.config.MAX_DIFFICULTY
        )

    def build_spawner(self) -> ObstacleSpawner:
        return ObstacleSpawner(physics=self.build_physics(),
                               enforce_jump_arc=self.config.ENFORCE_JUMP_ARC_GAP)
