"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: str  # principal id
    email: str | None = None
    name: str | None = None


class Principal(BaseModel):
    """
    Verified caller identity.

    Returned by the ``get_current_principal`` dependency. ``email`` and
    ``name`` are raw provider values; services normalize them as needed.
    """
    id: str
    email: str | None = None
    name: str | None = None
