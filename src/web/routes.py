import logging
from datetime import datetime
from functools import wraps
from flask import Blueprint, current_app, g, jsonify, request
from games.base_game import SessionTelemetry
from src.security.anti_cheat import derive_limits
from src.security.rate_limiter import get_client_id
from src.utils.errors import ConfigurationError, ValidationError
from src.utils.validators import validate_json_input, validate_eth_address

logger = logging.getLogger(__name__)

# Create blueprint with unique name and prefix
game_bp = Blueprint('game', __name__, url_prefix='/api/game')

ADDRESS_RULES = {'type': 'str', 'pattern': r'^0x[0-9a-fA-F]{40}$'}

VERIFY_SCHEMA = {
    'address': ADDRESS_RULES,
    'score': {'type': 'int', 'min': 0},
    'gameData': {
        'type': 'dict',
        'fields': {
            'duration': {'type': 'number', 'min': 0},
            'obstacles': {'type': 'int', 'min': 0},
            'timestamp': {'type': 'int'}
        }
    }
}

CLAIM_SCHEMA = {
    'address': ADDRESS_RULES,
    'score': {'type': 'int', 'min': 0},
    'isWinner': {'type': 'bool'}
}

ESTIMATE_SCHEMA = {
    'score': {'type': 'int', 'min': 0},
    'isWinner': {'type': 'bool'}
}


def get_services():
    return current_app.extensions['jumpgame']


def rate_limited(scope: str, strict: bool = False):
    """Count the request against the client's window for scope"""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            services = get_services()
            if services.config.RATE_LIMIT_ENABLED:
                rule = services.config.RATE_LIMIT_STRICT if strict else services.config.RATE_LIMIT_DEFAULT
                g.rate_limit = services.limiter.enforce(scope, get_client_id(request), rule)
            return f(*args, **kwargs)
        return wrapper
    return decorator


def _check_score_bound(score: int):
    if score > get_services().config.MAX_SCORE:
        raise ValidationError("Invalid score")


@game_bp.after_request
def add_rate_limit_headers(response):
    result = g.get('rate_limit')
    if result is not None:
        response.headers.extend(result.headers())
    return response


@game_bp.route('/verify', methods=['POST'])
@rate_limited('verify', strict=True)
@validate_json_input(VERIFY_SCHEMA)
def verify_game():
    """Run the anti-cheat checks over a finished session"""
    data = g.validated_data
    services = get_services()

    if not validate_eth_address(data['address']):
        raise ValidationError("Invalid wallet address")
    _check_score_bound(data['score'])

    telemetry = SessionTelemetry.from_request(data)
    result = services.verifier.verify(telemetry)

    response = {
        'valid': result.valid,
        'address': data['address'],
        'score': data['score']
    }
    if not result.valid:
        response['reason'] = result.reason
    else:
        response['gameData'] = data['gameData']
        response['verifiedAt'] = datetime.utcnow().isoformat() + 'Z'
    return jsonify(response)


@game_bp.route('/claim', methods=['POST'])
@rate_limited('claim', strict=True)
@validate_json_input(CLAIM_SCHEMA)
def claim_reward():
    """Issue a fresh nonce and sign the claim for the reward contract"""
    data = g.validated_data
    services = get_services()

    if not validate_eth_address(data['address']):
        raise ValidationError("Invalid wallet address")
    _check_score_bound(data['score'])

    if services.signer is None:
        logger.error("Claim rejected: VERIFIER_PRIVATE_KEY not configured")
        raise ConfigurationError("VERIFIER_PRIVATE_KEY not configured")

    nonce = services.nonces.generate()
    payload = services.signer.sign(data['address'], data['score'], data['isWinner'], nonce)

    return jsonify({
        'nonce': payload['nonce'],
        'signature': payload['signature'],
        'message': "Signature generated successfully"
    })


@game_bp.route('/estimate', methods=['POST'])
@rate_limited('estimate', strict=True)
@validate_json_input(ESTIMATE_SCHEMA)
def estimate_reward():
    data = g.validated_data
    rewards = get_services().rewards
    _check_score_bound(data['score'])

    breakdown = rewards.get_reward_breakdown(data['score'], data['isWinner'])
    return jsonify({
        'reward': breakdown['formattedTotal'],
        'rewardWei': str(breakdown['totalReward']),
        'score': data['score'],
        'isWinner': data['isWinner'],
        'breakdown': {
            'baseReward': rewards.format_reward(breakdown['baseReward']),
            'scoreBonus': rewards.format_reward(breakdown['scoreBonus']),
            'winnerMultiplier': breakdown['winnerMultiplier']
        }
    })


@game_bp.route('/limits', methods=['GET'])
@rate_limited('limits')
def get_limits():
    """Configured anti-cheat ceilings next to the kinematic ones"""
    services = get_services()
    cfg = services.config
    return jsonify({
        'configured': {
            'minGameDuration': cfg.MIN_GAME_DURATION,
            'maxScorePerSecond': cfg.MAX_SCORE_PER_SECOND,
            'maxObstaclesPerSecond': cfg.MAX_OBSTACLES_PER_SECOND,
            'maxSessionAge': cfg.MAX_SESSION_AGE,
            'maxScore': cfg.MAX_SCORE
        },
        'kinematic': derive_limits(services.build_spawner(), services.build_difficulty())
    })
