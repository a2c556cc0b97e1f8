"""Tenant ID format validation for the tenant header.

Tenant ids are opaque to this service; only their shape is checked before
they are used to scope queries.
"""

import re

# CUID/UUID-style: alphanumeric, hyphen, underscore.
TENANT_ID_MAX_LENGTH = 64
_TENANT_ID_RE = re.compile(
    r"^[a-zA-Z0-9_-]{1," + str(TENANT_ID_MAX_LENGTH) + r"}$"
)


def is_valid_tenant_id_format(value: str) -> bool:
    """Return True if value is an acceptable tenant id."""
    if not value or len(value) > TENANT_ID_MAX_LENGTH:
        return False
    return bool(_TENANT_ID_RE.fullmatch(value))
