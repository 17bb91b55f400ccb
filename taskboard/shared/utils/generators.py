"""ID generation and identifier syntax checks (CUID2)."""

import re

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

# cuid2 default: a lowercase letter followed by 23 base-36 characters.
ID_PATTERN = re.compile(r"[a-z][0-9a-z]{23}")


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def is_valid_id(value: object) -> bool:
    """Return True if value has the store's identifier syntax."""
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None
