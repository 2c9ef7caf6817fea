"""Capability tokens for the public proposal and speaker-review links.

A token maps 1:1 to one resource and IS the authorization: whoever holds
the link can act on that resource. Tokens are looked up by equality on the
resource's own column and never tied to a user identity. Proposal tokens and
firm-offer speaker tokens live in separate columns, so one never opens the
other.
"""

import secrets

TOKEN_BYTES = 24  # 32 url-safe characters


def new_access_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def token_prefix(token: str) -> str:
    """Loggable form of a token."""
    return f"{token[:8]}..."
