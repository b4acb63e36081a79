"""
Short task ID generation.

IDs are six uppercase alphanumeric characters (e.g. "K3Q9ZB"), short enough
to type on the command line. Candidates are checked against the IDs already
in the store; after repeated collisions a longer ID is generated instead.
"""

import logging
import secrets
import string
from collections.abc import Collection

from .errors import IdGenerationError

logger = logging.getLogger(__name__)

# Characters for random ID generation (uppercase alphanumeric)
ID_CHARS = string.ascii_uppercase + string.digits
ID_LENGTH = 6
FALLBACK_ID_LENGTH = 8
MAX_ATTEMPTS = 10


def random_id(length: int = ID_LENGTH) -> str:
    """Return a random ID of the given length drawn from ID_CHARS."""
    return "".join(secrets.choice(ID_CHARS) for _ in range(length))


def generate_task_id(
    existing_ids: Collection[str] = (),
    max_attempts: int = MAX_ATTEMPTS,
) -> str:
    """
    Generate a task ID that is not already in use.

    Tries up to ``max_attempts`` IDs of the standard length, then up to
    ``max_attempts`` IDs of the fallback length.

    Args:
        existing_ids: IDs already present in the store
        max_attempts: Maximum attempts per length

    Returns:
        Unique task ID (e.g. "K3Q9ZB")

    Raises:
        IdGenerationError: If every candidate collided
    """
    for length in (ID_LENGTH, FALLBACK_ID_LENGTH):
        for _ in range(max_attempts):
            candidate = random_id(length)
            if candidate not in existing_ids:
                return candidate
            logger.debug(f"Task ID collision on {candidate}, retrying")
        logger.warning(f"Exhausted {max_attempts} attempts for {length}-character task IDs")

    raise IdGenerationError(
        f"Failed to generate unique task ID after {max_attempts * 2} attempts"
    )
