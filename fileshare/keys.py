"""Owner and share token generation."""

import secrets

from common.constants import TOKEN_BYTES
from common.types import KeyPair


def generate_token() -> str:
    """
    Generate a single unguessable URL-safe bearer token.

    Returns:
        Token string carrying TOKEN_BYTES bytes of randomness
    """
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_keys() -> KeyPair:
    """
    Generate an owner token and a share token for one upload.

    The two tokens are drawn independently; neither can be derived from the other.

    Returns:
        KeyPair with owner_token (delete rights) and share_token (download rights)
    """
    return KeyPair(owner_token=generate_token(), share_token=generate_token())
