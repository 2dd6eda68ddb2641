"""Routekit exception hierarchy.

Shared across Route, URITemplate, RouteSet and Router so every module
raises and catches the same types.
"""


class RouteKitError(Exception):
    """Base for all routekit-specific errors."""


class InvalidRouteError(RouteKitError, ValueError):
    """Raised when a route cannot be constructed from the given arguments.

    Covers empty identifiers, a missing object class, a method mask that
    is zero or (for named routes) not exactly one method, and unknown
    method strings. Always raised before an instance exists.
    """


class TemplateSyntaxError(InvalidRouteError):
    """A URI template string could not be parsed.

    Carries the source template and the offset of the offending
    character so callers can point at it.
    """

    def __init__(self, template: str, position: int, reason: str) -> None:
        self.template = template
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} at position {position} in {template!r}")


class DuplicateRouteError(RouteKitError, ValueError):
    """A route with the same identity is already registered."""


class RouteNotFound(RouteKitError, LookupError):  # noqa: N818 — mirrors lookup-miss naming
    """No registered route matches the requested name, class or relationship."""
