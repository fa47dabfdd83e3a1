import re
import math
import logging
from functools import wraps
from flask import request, g
from eth_utils import is_checksum_address
from src.utils.errors import ValidationError

logger = logging.getLogger(__name__)

ETH_ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')

INVALID_PARAMETERS = "Invalid request parameters"


def validate_eth_address(address) -> bool:
    """Validate 0x-prefixed EVM address (EIP-55 checksum enforced on mixed case)"""
    if not isinstance(address, str) or not ETH_ADDRESS_PATTERN.match(address):
        return False
    digits = address[2:]
    if digits == digits.lower() or digits == digits.upper():
        return True
    return is_checksum_address(address)


def _type_matches(value, expected: str) -> bool:
    # bool is a subclass of int, never accept it as a number
    if expected == 'bool':
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if expected == 'int':
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if expected == 'number':
        return isinstance(value, (int, float)) and math.isfinite(value)
    if expected == 'str':
        return isinstance(value, str)
    if expected == 'dict':
        return isinstance(value, dict)
    return False


def check_schema(data, schema, path=''):
    """Return (cleaned, errors) for data against a field -> rules schema"""
    cleaned = {}
    errors = {}

    for field, rules in schema.items():
        name = f"{path}{field}"
        value = data.get(field)

        # Check required
        if value is None:
            if rules.get('required', True):
                errors[name] = 'This field is required'
            continue

        # Type checking
        if not _type_matches(value, rules['type']):
            errors[name] = f"Must be of type {rules['type']}"
            continue

        if rules['type'] == 'dict':
            nested, nested_errors = check_schema(value, rules['fields'], f"{name}.")
            errors.update(nested_errors)
            cleaned[field] = nested
            continue

        if rules['type'] == 'int':
            value = int(value)

        # Additional validations
        if 'min' in rules and value < rules['min']:
            errors[name] = f'Must be at least {rules["min"]}'
        elif 'max' in rules and value > rules['max']:
            errors[name] = f'Must be at most {rules["max"]}'
        elif 'pattern' in rules and not re.match(rules['pattern'], value):
            errors[name] = 'Invalid format'
        else:
            cleaned[field] = value

    return cleaned, errors


def validate_json_input(schema):
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                logger.warning("Rejected request without a JSON object body")
                raise ValidationError(INVALID_PARAMETERS)

            cleaned, errors = check_schema(data, schema)
            if errors:
                logger.warning(f"Validation errors: {errors}")
                raise ValidationError(INVALID_PARAMETERS)

            # Attach validated data to the request context
            g.validated_data = cleaned
            return f(*args, **kwargs)
        return wrapper
    return decorator
