"""Small pure helpers (datetime, identifiers)."""

from taskboard.shared.utils.datetime import ensure_utc, utc_now
from taskboard.shared.utils.generators import generate_cuid, is_valid_id

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "is_valid_id",
    "utc_now",
]
