"""Tenant dependency: resolve the tenant id from the request header."""

from __future__ import annotations

from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.core.tenant_validation import is_valid_tenant_id_format


async def get_tenant_id(request: Request) -> str:
    """Return the tenant id from the tenant header (400 when missing or malformed).

    Tenants are owned by the account service; this service only checks the
    id format and scopes every query to it.
    """
    name = get_settings().tenant_header_name
    value = request.headers.get(name)
    if not value:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required header: {name}",
        )
    if not is_valid_tenant_id_format(value):
        raise HTTPException(
            status_code=400,
            detail="Invalid tenant ID format (use alphanumeric, hyphen, underscore; max 64 characters)",
        )
    return value
