"""Custom Dishka scopes for fedlink."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """fedlink dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Process lifetime (engine, selected storage backend, store)
    - UOW: Unit of Work (one CLI invocation or one caller request)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
