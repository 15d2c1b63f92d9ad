"""Tests for owner/share token generation."""

from fileshare.keys import generate_keys, generate_token


def test_generate_token_is_url_safe():
    token = generate_token()
    assert len(token) >= 43
    assert all(c.isalnum() or c in '-_' for c in token)


def test_generate_keys_returns_two_different_tokens():
    keys = generate_keys()
    assert keys.owner_token != keys.share_token


def test_generate_keys_unique_across_calls():
    pairs = [generate_keys() for _ in range(200)]
    owner_tokens = {p.owner_token for p in pairs}
    share_tokens = {p.share_token for p in pairs}
    assert len(owner_tokens) == 200
    assert len(share_tokens) == 200
    assert owner_tokens.isdisjoint(share_tokens)
