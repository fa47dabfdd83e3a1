class GameServiceError(Exception):
    """Base class for errors surfaced through the game API"""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_dict(self):
        return {'error': self.public_message}


class ValidationError(GameServiceError):
    """Malformed request. The message is returned to the caller as-is."""
    status_code = 400

    def to_dict(self):
        return {'error': self.message}


class ConfigurationError(GameServiceError):
    """Server-side misconfiguration; details stay in the logs"""
    status_code = 500
    public_message = "Server configuration error"


class RateLimitExceeded(GameServiceError):
    status_code = 429

    def __init__(self, retry_after: int, limit: int, reset: int):
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds.")
        self.retry_after = retry_after
        self.limit = limit
        self.reset = reset

    def to_dict(self):
        return {'error': self.message, 'retryAfter': self.retry_after}

    def headers(self):
        return {
            'Retry-After': str(self.retry_after),
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': str(self.reset)
        }
