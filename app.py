from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from config import Config
from src.utils.errors import GameServiceError, RateLimitExceeded
from src.utils.logger import setup_logging
from src.web.routes import game_bp
from src.web.services import GameServices
import os
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

SERVICE_NAME = 'JumpGame'
VERSION = '1.0.0'


def create_app(cfg=None, clock=None, store=None):
    """Application factory pattern"""
    cfg = cfg or Config()

    app = Flask(__name__)
    app.secret_key = cfg.SECRET_KEY

    origins = [o.strip() for o in cfg.CORS_ORIGINS.split(',')] if cfg.CORS_ORIGINS != '*' else '*'
    CORS(app, resources={r"/api/*": {"origins": origins}},
         expose_headers=['X-RateLimit-Limit', 'X-RateLimit-Remaining',
                         'X-RateLimit-Reset', 'Retry-After'])

    # Per-app services; nothing is shared between app instances
    app.extensions['jumpgame'] = GameServices(cfg, clock=clock, store=store)

    # Register blueprints
    app.register_blueprint(game_bp)

    @app.route('/health')
    def health_check():
        """Health check endpoint"""
        services = app.extensions['jumpgame']
        return jsonify({
            'status': 'healthy',
            'service': SERVICE_NAME,
            'version': VERSION,
            'timestamp': datetime.utcnow().isoformat(),
            'signingConfigured': services.signer is not None,
            'storeBackend': cfg.STORE_BACKEND
        }), 200

    @app.errorhandler(GameServiceError)
    def handle_service_error(e):
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        if isinstance(e, RateLimitExceeded):
            response.headers.extend(e.headers())
        return response

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({'error': e.description}), e.code
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


if __name__ == '__main__':
    setup_logging(os.getenv('LOG_LEVEL', 'INFO'), os.getenv('LOG_FILE'))
    config = Config()
    app = create_app(config)
    app.run(host='0.0.0.0', port=config.PORT, debug=config.ENV == 'development')
