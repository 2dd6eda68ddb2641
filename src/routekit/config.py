"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base_url="https://api.example.com/v1", raise_on_missing=False)
    """

    # URL every expanded route path is joined onto
    base_url: str = ""

    # Lookup misses: raise RouteNotFound (True) or return None (False)
    raise_on_missing: bool = True

    # Overrides each route's should_escape_path when not None
    escape_paths: bool | None = None
