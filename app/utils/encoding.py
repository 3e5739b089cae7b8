import logging
import secrets
import string
from typing import Container, Optional

from app.core.exceptions import GenerationExhausted

logger = logging.getLogger(__name__)

# Base36 alphabet, letters emitted uppercase
ALPHABET = string.ascii_uppercase + string.digits
SHORT_CODE_LENGTH = 10
MAX_GENERATION_ATTEMPTS = 100

# Path segments that can never be used as short codes
RESERVED_CODES = frozenset({"admin", "api", "new", "favicon.ico"})
FAVICON = "favicon.ico"
PLACEHOLDER_CODES = frozenset({"null", "undefined"})


def generate_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    """Generate a cryptographically secure random uppercase base36 code."""
    return ''.join(secrets.choice(ALPHABET) for _ in range(length))


def normalize_short_code(code: Optional[str]) -> str:
    """Trim surrounding whitespace. Casing is kept as supplied."""
    return (code or "").strip()


def is_reserved(code: str) -> bool:
    return code.lower() in RESERVED_CODES


class CodeGenerator:
    """Draws random codes until one is absent from a snapshot of taken codes.

    The loop is bounded by ``max_attempts`` so a store that reports every
    candidate as taken surfaces ``GenerationExhausted`` instead of spinning.
    """

    def __init__(self, length: int = SHORT_CODE_LENGTH, max_attempts: int = MAX_GENERATION_ATTEMPTS):
        if length < 1:
            raise ValueError("length must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self.length = length
        self.max_attempts = max_attempts

    def draw(self) -> str:
        return generate_short_code(self.length)

    def generate(self, taken: Container[str]) -> str:
        for attempt in range(self.max_attempts):
            candidate = self.draw()
            if candidate not in taken:
                return candidate
            logger.info(f"Short code collision on attempt {attempt + 1}/{self.max_attempts}")
        raise GenerationExhausted(
            f"Failed to generate unique short code after {self.max_attempts} attempts"
        )
