"""Global test fixtures."""

import os

import logfire
import pytest

# Secrets must exist before anything builds Secrets.from_env().
# This must happen at module load time, not in a fixture
os.environ.setdefault("COOKIE_SIGNER", "test-cookie-signer-for-unit-tests")
os.environ.setdefault("TEST_USER_AUTH", "test-user-password")

logfire.configure(send_to_logfire=False, console=False)

TEST_PASSWORD = "test-user-password"


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD
