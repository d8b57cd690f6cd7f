"""Custom Dishka scopes for composeapp."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """composeapp dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Process lifetime (config, HTTP client, registry client)
    - UOW: One CLI command (resolver, services, progress reporter)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
