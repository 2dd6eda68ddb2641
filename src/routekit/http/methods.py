"""HTTP method bit-mask.

Concrete methods occupy the low bits and combine with ``|``. ``ANY``
lives on its own high bit so "any method" can never be confused with
"no methods" (zero) or with a union of every concrete method.
"""

import enum
import re

from routekit.errors import InvalidRouteError


class HTTPMethod(enum.IntFlag):
    """Request methods a route is valid for.

    Usage::

        mask = HTTPMethod.GET | HTTPMethod.POST
        mask.includes(HTTPMethod.POST)   # True
        HTTPMethod.ANY.includes(HTTPMethod.DELETE)  # True
    """

    GET = 1 << 0
    POST = 1 << 1
    PUT = 1 << 2
    DELETE = 1 << 3
    HEAD = 1 << 4
    PATCH = 1 << 5
    OPTIONS = 1 << 6
    ANY = 1 << 31

    @property
    def is_any(self) -> bool:
        """True if the mask carries the wildcard sentinel."""
        return bool(self & HTTPMethod.ANY)

    @property
    def is_specific(self) -> bool:
        """True if the mask is exactly one concrete method."""
        return not self.is_any and self in _CONCRETE

    @property
    def concrete_methods(self) -> tuple["HTTPMethod", ...]:
        """Concrete members of the mask, in declaration order.

        The wildcard expands to every concrete method.
        """
        if self.is_any:
            return _CONCRETE
        return tuple(m for m in _CONCRETE if self & m)

    def includes(self, method: "HTTPMethod | str") -> bool:
        """Test whether *method* is a member of this mask.

        *method* may also be a name such as ``"GET"``. Every concrete
        method is a member of ``ANY``. A zero method is never a member
        of anything.
        """
        if isinstance(method, str):
            method = method_from_string(method)
        else:
            method = HTTPMethod(method)
        if not method:
            return False
        if self.is_any:
            return True
        return bool(self & method & _CONCRETE_BITS)


_CONCRETE: tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.POST,
    HTTPMethod.PUT,
    HTTPMethod.DELETE,
    HTTPMethod.HEAD,
    HTTPMethod.PATCH,
    HTTPMethod.OPTIONS,
)
_CONCRETE_BITS = HTTPMethod(sum(_CONCRETE))
_KNOWN_BITS = int(_CONCRETE_BITS | HTTPMethod.ANY)

_SEPARATORS = re.compile(r"[|,\s]+")


def validate_method(method: HTTPMethod) -> HTTPMethod:
    """Return *method* as a mask, rejecting masks that name no method.

    Zero, bits outside the declared members, and masks with neither a
    concrete method nor ``ANY`` raise ``InvalidRouteError``.
    """
    mask = HTTPMethod(method)
    if not mask:
        msg = "HTTP method mask must not be empty"
        raise InvalidRouteError(msg)
    if int(mask) & ~_KNOWN_BITS:
        msg = f"Unknown bits in HTTP method mask {int(mask):#x}"
        raise InvalidRouteError(msg)
    if not mask.is_any and not mask & _CONCRETE_BITS:
        msg = f"HTTP method mask {int(mask):#x} names no method"
        raise InvalidRouteError(msg)
    return mask


def method_from_string(value: str) -> HTTPMethod:
    """Parse a method name or union into a mask.

    Accepts any case, ``"ANY"`` or ``"*"`` for the wildcard, and unions
    written ``"GET|POST"`` or ``"GET, POST"``.

    Raises ``InvalidRouteError`` for empty input or unknown names.
    """
    tokens = [t for t in _SEPARATORS.split(value.strip()) if t]
    if not tokens:
        msg = f"No HTTP method in {value!r}"
        raise InvalidRouteError(msg)

    mask = HTTPMethod(0)
    for token in tokens:
        if token == "*":
            mask |= HTTPMethod.ANY
            continue
        try:
            mask |= HTTPMethod[token.upper()]
        except KeyError:
            msg = f"Unknown HTTP method {token!r}"
            raise InvalidRouteError(msg) from None
    return mask


def string_from_method(method: HTTPMethod) -> str:
    """Render a mask as ``"GET"``, ``"GET|POST"`` or ``"ANY"``."""
    method = validate_method(method)
    if method.is_any:
        return "ANY"
    return "|".join(m.name for m in method.concrete_methods if m.name)
