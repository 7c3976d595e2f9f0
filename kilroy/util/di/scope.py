"""Dishka scopes for Kilroy."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Two lifetimes: APP -> UOW.

    APP holds what is built once at startup: config, secrets, storage,
    the credential strategy and the gate. UOW is one HTTP request and holds
    the request itself and the Identity the gate resolved for it.
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
