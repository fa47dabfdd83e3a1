# config.py
import os
import logging
from dotenv import load_dotenv
from games import base_game

logger = logging.getLogger(__name__)

# Anti-cheat thresholds (reference defaults)
ANTI_CHEAT_RULES = {
    'MIN_GAME_DURATION': 5000,        # ms
    'MAX_SCORE_PER_SECOND': 50,
    'MAX_OBSTACLES_PER_SECOND': 5,
    'MAX_SESSION_AGE': 60 * 60 * 1000,  # ms
    'MAX_CLOCK_SKEW': 5 * 60 * 1000     # ms
}

# Token reward economics, all integers
REWARD_RULES = {
    'BASE_REWARD': 10,               # whole tokens
    'TOKEN_DECIMALS': 18,
    'SCORE_BONUS_DIVISOR': 100,
    'WINNER_MULTIPLIER_BPS': 15000,  # 1.5x in basis points of 10000
    'DISPLAY_DECIMALS': 4
}

MAX_SCORE = 50000

# Load environment variables
load_dotenv()


def parse_rate_limit(value, default):
    """Parse 'max/window_seconds' into (max_requests, window_ms)"""
    if not value:
        return default
    try:
        max_requests, window_seconds = value.split('/', 1)
        return int(max_requests), int(window_seconds) * 1000
    except ValueError:
        logger.warning(f"Invalid rate limit '{value}', using default {default}")
        return default


class Config:

    def __init__(self, **overrides):
        # Core configuration
        self.ENV = os.getenv('ENV', 'production')
        self.PORT = int(os.getenv('PORT', 5000))
        self.SECRET_KEY = os.getenv('SECRET_KEY', 'your_secret_key_here')
        self.CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

        # Logging
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_FILE = os.getenv('LOG_FILE')

        # Claim signing
        self.VERIFIER_PRIVATE_KEY = os.getenv('VERIFIER_PRIVATE_KEY')

        # Shared state backend: 'memory' (single process) or 'redis'
        self.STORE_BACKEND = os.getenv('STORE_BACKEND', 'memory').lower()
        self.REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

        # Nonces
        self.NONCE_RETENTION_MS = int(os.getenv('NONCE_RETENTION_MS', 60 * 60 * 1000))

        # Rate limiting (max requests, window ms)
        self.RATE_LIMIT_STRICT = parse_rate_limit(os.getenv('RATE_LIMIT_STRICT'), (10, 60 * 1000))
        self.RATE_LIMIT_DEFAULT = parse_rate_limit(os.getenv('RATE_LIMIT_DEFAULT'), (100, 15 * 60 * 1000))
        self.RATE_LIMIT_ENABLED = os.getenv('RATE_LIMIT_ENABLED', 'true').lower() == 'true'

        # Score bounds
        self.MAX_SCORE = MAX_SCORE

        # Anti-cheat
        self.MIN_GAME_DURATION = ANTI_CHEAT_RULES['MIN_GAME_DURATION']
        self.MAX_SCORE_PER_SECOND = float(os.getenv(
            'MAX_SCORE_PER_SECOND', ANTI_CHEAT_RULES['MAX_SCORE_PER_SECOND']))
        self.MAX_OBSTACLES_PER_SECOND = float(os.getenv(
            'MAX_OBSTACLES_PER_SECOND', ANTI_CHEAT_RULES['MAX_OBSTACLES_PER_SECOND']))
        self.MAX_SESSION_AGE = ANTI_CHEAT_RULES['MAX_SESSION_AGE']
        self.MAX_CLOCK_SKEW = ANTI_CHEAT_RULES['MAX_CLOCK_SKEW']

        # Rewards
        self.BASE_REWARD = REWARD_RULES['BASE_REWARD']
        self.TOKEN_DECIMALS = REWARD_RULES['TOKEN_DECIMALS']
        self.SCORE_BONUS_DIVISOR = REWARD_RULES['SCORE_BONUS_DIVISOR']
        self.WINNER_MULTIPLIER_BPS = REWARD_RULES['WINNER_MULTIPLIER_BPS']
        self.DISPLAY_DECIMALS = REWARD_RULES['DISPLAY_DECIMALS']

        # Gameplay constants the server re-derives bounds from
        self.GRAVITY = base_game.GRAVITY
        self.JUMP_FORCE = base_game.JUMP_FORCE
        self.INITIAL_SPEED = base_game.INITIAL_SPEED
        self.MAX_SPEED = base_game.MAX_SPEED
        self.DIFFICULTY_INTERVAL_MS = base_game.DIFFICULTY_INTERVAL_MS
        self.MAX_DIFFICULTY = base_game.MAX_DIFFICULTY
        self.ENFORCE_JUMP_ARC_GAP = os.getenv('ENFORCE_JUMP_ARC_GAP', 'true').lower() == 'true'

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown configuration key: {key}")
            setattr(self, key, value)

        if self.STORE_BACKEND not in ('memory', 'redis'):
            raise ValueError(f"Unsupported STORE_BACKEND: {self.STORE_BACKEND}")

        # Log configuration status
        self.log_config_summary()

    @property
    def signing_enabled(self) -> bool:
        return bool(self.VERIFIER_PRIVATE_KEY)

    def log_config_summary(self):
        """Log a secure summary of the configuration"""
        logger.info("Configuration Summary:")
        logger.info(f"Environment: {self.ENV}")
        logger.info(f"State backend: {self.STORE_BACKEND}")
        if self.STORE_BACKEND == 'redis':
            logger.info(f"Redis: {self.secure_mask(self.REDIS_URL)}")
        logger.info(f"Rate limits - strict: {self.RATE_LIMIT_STRICT}, default: {self.RATE_LIMIT_DEFAULT}")
        logger.info(f"Anti-cheat - max score/s: {self.MAX_SCORE_PER_SECOND}, "
                    f"max obstacles/s: {self.MAX_OBSTACLES_PER_SECOND}")

        if self.VERIFIER_PRIVATE_KEY:
            logger.info("Verifier key: configured")
        else:
            logger.warning("VERIFIER_PRIVATE_KEY not set - claim signing disabled")

    def secure_mask(self, value, show_first=6, show_last=4):
        """Mask sensitive information for logging"""
        if not value or len(value) < (show_first + show_last):
            return "[REDACTED]"
        return f"{value[:show_first]}...{value[-show_last:]}"
