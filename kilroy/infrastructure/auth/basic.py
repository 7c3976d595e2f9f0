"""HTTP Basic credential strategy backed by a single test identity."""

import asyncio
import binascii
import hmac
from base64 import b64decode

from starlette.requests import Request

from kilroy.domain.auth.model.identity import Identity
from kilroy.domain.auth.port.credential_strategy import CredentialStrategy, Verification

TEST_USERNAME = "JS Kilroy"
TEST_IDTAG = "100007663687854"
REALM = "Users"


def challenge(realm: str = REALM) -> str:
    return f'Basic realm="{realm}"'


def parse_basic_authorization(header: str | None) -> tuple[str, str] | None:
    """Extract ``(username, password)`` from an Authorization header value."""
    if not header:
        return None
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None
    try:
        decoded = b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep or not username:
        return None
    return username, password


class BasicCredentialStrategy(CredentialStrategy):
    """The "basic" strategy.

    Missing, malformed and wrong credentials all fail with the challenge
    string as info. Well-formed credentials are handed to verify(), which
    answers a falsy identity for anything but the test user.
    """

    name = "basic"

    def __init__(self, test_user_auth: str, realm: str = REALM) -> None:
        self._test_user_auth = test_user_auth
        self._realm = realm

    async def authenticate(self, request: Request) -> Verification:
        credentials = parse_basic_authorization(request.headers.get("authorization"))
        if credentials is None:
            return Verification(identity=False, info=challenge(self._realm))
        username, password = credentials
        return await self.verify(username, password)

    async def verify(self, username: str, password: str) -> Verification:
        # No I/O here, but callers must not assume this completes synchronously.
        await asyncio.sleep(0)
        matched = username == TEST_USERNAME and hmac.compare_digest(
            password.encode("utf-8"), self._test_user_auth.encode("utf-8")
        )
        if not matched:
            return Verification(identity=False, info=challenge(self._realm))
        return Verification(identity=Identity(idtag=TEST_IDTAG, username=username))
