"""Shared test fixtures."""

from __future__ import annotations

import pytest

# Inside the iat/exp window of SAMPLE_CLAIMS
NOW = 1664205300

SECRET = "sign key"

SAMPLE_CLAIMS = {
    "iss": "https://api.example.com",
    "iat": 1664205268,
    "exp": 1664208868,
    "uid": 1,
    "name": "Grass",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep COMPACTJWT_* variables from the outer environment out of tests."""
    for var in (
        "COMPACTJWT_CONFIG",
        "COMPACTJWT_SECRET",
        "COMPACTJWT_ALGORITHM",
        "COMPACTJWT_LEEWAY",
        "COMPACTJWT_VERIFY_CLAIMS",
        "COMPACTJWT_MAX_DEPTH",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def clock():
    """Fixed clock returning NOW."""
    return lambda: NOW


@pytest.fixture
def sample_claims():
    return dict(SAMPLE_CLAIMS)
