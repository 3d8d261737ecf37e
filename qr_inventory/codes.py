"""
QR code generation and uniqueness resolution.

``CodeResolver`` turns an optional client-supplied code into one that is not
present in the store at the moment of the check. The check is only an
optimisation: the unique constraint on the code column stays authoritative,
and ``service.create_item`` retries the insert when it loses a race.
"""
import logging
import uuid
from typing import Callable, Optional

from .errors import CodeResolutionExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10


def generate_code() -> str:
    """Return a random 128-bit code rendered as canonical UUID text."""
    return str(uuid.uuid4())


class CodeResolver:
    """
    Resolve requested codes to unique ones.

    Args:
        exists: Callable returning True if a code is already stored
        generate: Candidate generator, ``generate_code`` by default
        max_attempts: Generated candidates to try before giving up
    """

    def __init__(
        self,
        exists: Callable[[str], bool],
        generate: Callable[[], str] = generate_code,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.exists = exists
        self.generate = generate
        self.max_attempts = max_attempts

    def resolve(self, requested: Optional[str] = None) -> str:
        """
        Return a code that is not currently in the store.

        A non-blank requested code is used as is (trimmed) when free. A blank,
        missing or already-taken code falls back to generation.

        Raises:
            CodeResolutionExhaustedError: if every generated candidate was taken
        """
        candidate = (requested or "").strip()
        if candidate:
            if not self.exists(candidate):
                return candidate
            logger.info(f"Requested code '{candidate}' is taken, generating a new one")
        return self.generate_unique()

    def generate_unique(self) -> str:
        """Generate candidates until one is free, at most ``max_attempts`` times."""
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate()
            if not self.exists(candidate):
                return candidate
            logger.warning(f"Generated code collision on attempt {attempt}/{self.max_attempts}")
        logger.error(f"Gave up generating a unique code after {self.max_attempts} attempts")
        raise CodeResolutionExhaustedError(self.max_attempts)
