import logging
from typing import Any, Dict, Optional

from eth_abi.packed import encode_packed
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import keccak, to_checksum_address

from src.utils.errors import ConfigurationError, ValidationError
from src.utils.validators import validate_eth_address

logger = logging.getLogger(__name__)

# Field order and widths the reward contract reconstructs
CLAIM_MESSAGE_TYPES = ['address', 'uint256', 'bool', 'uint256']


class ClaimSigner:
    """Signs reward claims with the server-held verifier key.

    The digest is keccak256(address || uint256 score || bool isWinner ||
    uint256 nonce) in packed encoding, signed with the Ethereum signed
    message prefix so the contract can check it with ecrecover.
    """

    def __init__(self, private_key: Optional[str]):
        if not private_key:
            logger.error("Claim signing requested without VERIFIER_PRIVATE_KEY")
            raise ConfigurationError("VERIFIER_PRIVATE_KEY is not configured")
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            logger.error(f"Invalid verifier private key: {type(e).__name__}")
            raise ConfigurationError("VERIFIER_PRIVATE_KEY is invalid") from e

    @property
    def address(self) -> str:
        return self._account.address

    def message_hash(self, address: str, score: int, is_winner: bool, nonce: int) -> bytes:
        if not validate_eth_address(address):
            raise ValidationError("Invalid wallet address")
        if score < 0 or nonce < 0:
            raise ValidationError("Score and nonce must be non-negative")
        packed = encode_packed(
            CLAIM_MESSAGE_TYPES,
            [to_checksum_address(address), score, bool(is_winner), nonce]
        )
        return keccak(packed)

    def sign(self, address: str, score: int, is_winner: bool, nonce: int,
             timestamp: Optional[int] = None) -> Dict[str, Any]:
        digest = self.message_hash(address, score, is_winner, nonce)
        signed = self._account.sign_message(encode_defunct(primitive=digest))
        signature = '0x' + bytes(signed.signature).hex()

        logger.info(f"Signed claim for {mask_address(address)}: score={score}, nonce={nonce}")
        payload = {
            'address': to_checksum_address(address),
            'score': score,
            'isWinner': bool(is_winner),
            'nonce': nonce,
            'signature': signature
        }
        if timestamp is not None:
            payload['timestamp'] = timestamp
        return payload

    def recover_signer(self, address: str, score: int, is_winner: bool, nonce: int,
                       signature: str) -> str:
        """Address that produced signature over the claim, as ecrecover sees it"""
        digest = self.message_hash(address, score, is_winner, nonce)
        return Account.recover_message(encode_defunct(primitive=digest), signature=signature)

    def verify(self, address: str, score: int, is_winner: bool, nonce: int,
               signature: str) -> bool:
        return self.recover_signer(address, score, is_winner, nonce, signature) == self.address


def mask_address(address: str) -> str:
    if not address or len(address) < 10:
        return "[REDACTED]"
    return f"{address[:6]}...{address[-4:]}"
