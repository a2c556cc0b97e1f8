"""Primary key generators for workflow and execution rows."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id (CUID2) for a database row."""
    value = _cuid()
    if not isinstance(value, str):
        raise TypeError(f"cuid generator returned {type(value).__name__}, expected str")
    return value
