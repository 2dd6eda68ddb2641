"""Route — a routable path descriptor.

A route pairs a method mask with a URI template and one of three
identities:

1. **Named routes** are identified by a symbolic name, e.g. ``"airlines_list"``
   as a GET to ``/airlines.json``.
2. **Class routes** are identified by the class of object they build a
   path for, e.g. ``Article`` for a POST to ``/articles.json``.
3. **Relationship routes** are identified by a relationship name on an
   owning class, e.g. the ``"comments"`` of ``Article`` as a GET to
   ``/articles/:articleID/comments``.

``Route`` is a class cluster. Instances come only from ``Route.named()``,
``Route.for_class()`` and ``Route.for_relationship()``; calling a route
class directly raises ``TypeError``.

Free-threading safety:
    - Every attribute except ``should_escape_path`` is read-only
    - Nothing is locked; owners that flip ``should_escape_path`` from
      several threads must serialize those writes themselves
"""

from typing import Any

from routekit.errors import InvalidRouteError
from routekit.http.methods import HTTPMethod, method_from_string, validate_method
from routekit.routing.template import URITemplate

_FACTORY = object()


def _coerce_method(method: HTTPMethod | int | str) -> HTTPMethod:
    if isinstance(method, str):
        mask = method_from_string(method)
    elif isinstance(method, int) and not isinstance(method, bool) and method >= 0:
        mask = HTTPMethod(method)
    else:
        msg = f"Route method must be an HTTPMethod, got {method!r}"
        raise InvalidRouteError(msg)
    return validate_method(mask)


def _require_name(value: object, what: str) -> str:
    if not isinstance(value, str) or not value:
        msg = f"{what} must be a non-empty string, got {value!r}"
        raise InvalidRouteError(msg)
    return value


def _require_class(value: object) -> type:
    if not isinstance(value, type):
        msg = f"Route object class must be a class, got {value!r}"
        raise InvalidRouteError(msg)
    return value


class Route:
    """Shared read-only interface of the three route variants."""

    __slots__ = (
        "_method",
        "_name",
        "_object_class",
        "_relationship_name",
        "_should_escape_path",
        "_uri_template",
    )

    def __init__(
        self,
        *,
        uri_template: URITemplate,
        method: HTTPMethod,
        name: str | None = None,
        object_class: type | None = None,
        relationship_name: str | None = None,
        _token: object = None,
    ) -> None:
        if _token is not _FACTORY:
            msg = (
                f"{type(self).__name__} cannot be instantiated directly. "
                "Use Route.named(), Route.for_class() or Route.for_relationship()."
            )
            raise TypeError(msg)
        self._uri_template = uri_template
        self._method = method
        self._name = name
        self._object_class = object_class
        self._relationship_name = relationship_name
        self._should_escape_path = False

    # -- Factories --

    @classmethod
    def named(
        cls,
        name: str,
        template: str | URITemplate,
        method: HTTPMethod | str = HTTPMethod.GET,
    ) -> "NamedRoute":
        """Create a named route.

        *method* must be exactly one concrete HTTP method; unions and
        ``HTTPMethod.ANY`` raise ``InvalidRouteError``.
        """
        name = _require_name(name, "Route name")
        mask = _coerce_method(method)
        if not mask.is_specific:
            msg = f"Named route {name!r} needs exactly one HTTP method, got {mask!r}"
            raise InvalidRouteError(msg)
        return NamedRoute(
            uri_template=URITemplate.parse(template),
            method=mask,
            name=name,
            _token=_FACTORY,
        )

    @classmethod
    def for_class(
        cls,
        object_class: type,
        template: str | URITemplate,
        method: HTTPMethod | str = HTTPMethod.ANY,
    ) -> "ClassRoute":
        """Create a class route. *method* may be a union or ``HTTPMethod.ANY``."""
        object_class = _require_class(object_class)
        mask = _coerce_method(method)
        return ClassRoute(
            uri_template=URITemplate.parse(template),
            method=mask,
            object_class=object_class,
            _token=_FACTORY,
        )

    @classmethod
    def for_relationship(
        cls,
        relationship_name: str,
        object_class: type,
        template: str | URITemplate,
        method: HTTPMethod | str = HTTPMethod.ANY,
    ) -> "RelationshipRoute":
        """Create a route for *relationship_name* on *object_class*."""
        relationship_name = _require_name(relationship_name, "Relationship name")
        object_class = _require_class(object_class)
        mask = _coerce_method(method)
        return RelationshipRoute(
            uri_template=URITemplate.parse(template),
            method=mask,
            object_class=object_class,
            relationship_name=relationship_name,
            _token=_FACTORY,
        )

    # -- Attributes --

    @property
    def name(self) -> str | None:
        """Identifying name. Always ``None`` for class and relationship routes."""
        return self._name

    @property
    def object_class(self) -> type | None:
        """Class the route is appropriate for. Always ``None`` for named routes."""
        return self._object_class

    @property
    def relationship_name(self) -> str | None:
        return self._relationship_name

    @property
    def method(self) -> HTTPMethod:
        return self._method

    @property
    def uri_template(self) -> URITemplate:
        return self._uri_template

    @property
    def should_escape_path(self) -> bool:
        """Percent-escape interpolated values on expansion. Default ``False``."""
        return self._should_escape_path

    @should_escape_path.setter
    def should_escape_path(self, value: bool) -> None:
        self._should_escape_path = bool(value)

    # -- Inspecting route types --

    def is_named_route(self) -> bool:
        return self._name is not None

    def is_class_route(self) -> bool:
        return self._object_class is not None and self._relationship_name is None

    def is_relationship_route(self) -> bool:
        return self._object_class is not None and self._relationship_name is not None

    # -- Applying the route --

    def responds_to(self, method: HTTPMethod | str) -> bool:
        """True if *method* is a member of this route's mask."""
        return self._method.includes(method)

    def path_for(self, bindings: Any = None, *, escape: bool | None = None) -> str:
        """Expand the template against *bindings*.

        *escape* defaults to ``should_escape_path`` as it is at call time.
        """
        if escape is None:
            escape = self._should_escape_path
        return self._uri_template.expand(bindings, escape=escape)

    def match_path(self, path: str) -> dict[str, Any] | None:
        """Bindings extracted from *path*, or ``None`` if it does not fit."""
        return self._uri_template.match(path)

    def __repr__(self) -> str:
        if self._relationship_name is not None:
            identity = (
                f"relationship_name={self._relationship_name!r} "
                f"object_class={_class_name(self._object_class)}"
            )
        elif self._object_class is not None:
            identity = f"object_class={_class_name(self._object_class)}"
        else:
            identity = f"name={self._name!r}"
        return (
            f"<{type(self).__name__} {identity} method={self._method!r} "
            f"template={self._uri_template.source!r}>"
        )


class NamedRoute(Route):
    """A route identified by a symbolic name."""

    __slots__ = ()


class ClassRoute(Route):
    """A route identified by object class."""

    __slots__ = ()


class RelationshipRoute(Route):
    """A route identified by a relationship name on an owning class."""

    __slots__ = ()


def _class_name(cls: type | None) -> str:
    if cls is None:
        return "None"
    return cls.__qualname__
