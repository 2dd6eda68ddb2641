"""Route registry — stores routes and looks them up by name, class or relationship.

Free-threading safety:
    - Registration and lookup are serialized by a single ``threading.Lock``
    - Routes themselves are read-only once built; see ``Route``
"""

import logging
import threading
from collections.abc import Iterable, Iterator

from routekit.errors import DuplicateRouteError, RouteNotFound
from routekit.http.methods import HTTPMethod
from routekit.routing.route import Route

logger = logging.getLogger("routekit.routing")


def _best_for_method(candidates: Iterable[Route], method: HTTPMethod) -> Route | None:
    """Pick the route for *method* among routes sharing one identity.

    A route whose mask names the method explicitly beats a wildcard
    route. Among equals the first registered wins.
    """
    wildcard: Route | None = None
    for route in candidates:
        if route.method.is_any:
            if wildcard is None:
                wildcard = route
        elif route.responds_to(method):
            return route
    return wildcard


class RouteSet:
    """An ordered collection of routes.

    Usage::

        routes = RouteSet()
        routes.add_route(Route.for_class(Article, "/articles.json", HTTPMethod.POST))
        routes.add_route(Route.named("airlines_list", "/airlines.json"))
        routes.route_for_class(Article, HTTPMethod.POST)
        routes.route_for_name("airlines_list")
    """

    __slots__ = ("_lock", "_routes")

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: list[Route] = []
        self._lock = threading.Lock()
        self.add_routes(routes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self.all_routes)

    def __contains__(self, route: object) -> bool:
        return self.contains_route(route)

    # -- Registration --

    def add_route(self, route: Route) -> None:
        """Register *route*.

        Raises ``DuplicateRouteError`` if a route with the same identity
        (name; class and method; or class, relationship and method) is
        already registered.
        """
        if not isinstance(route, Route):
            msg = f"Expected a Route, got {route!r}"
            raise TypeError(msg)

        with self._lock:
            conflict = self._find_conflict(route)
            if conflict is not None:
                msg = f"Cannot add {route!r}: conflicts with registered {conflict!r}"
                raise DuplicateRouteError(msg)
            self._routes.append(route)

        logger.debug("Registered %r", route)

    def add_routes(self, routes: Iterable[Route]) -> None:
        for route in routes:
            self.add_route(route)

    def remove_route(self, route: Route) -> None:
        """Unregister *route*. Raises ``RouteNotFound`` if it is not registered."""
        with self._lock:
            for index, registered in enumerate(self._routes):
                if registered is route:
                    del self._routes[index]
                    break
            else:
                msg = f"{route!r} is not registered"
                raise RouteNotFound(msg)

        logger.debug("Removed %r", route)

    def contains_route(self, route: object) -> bool:
        with self._lock:
            return any(registered is route for registered in self._routes)

    def _find_conflict(self, route: Route) -> Route | None:
        for registered in self._routes:
            if registered is route:
                return registered
            if route.is_named_route():
                if registered.is_named_route() and registered.name == route.name:
                    return registered
            elif (
                registered.object_class is route.object_class
                and registered.relationship_name == route.relationship_name
                and registered.method == route.method
            ):
                return registered
        return None

    # -- Views --

    @property
    def all_routes(self) -> list[Route]:
        """Every registered route, in registration order."""
        with self._lock:
            return list(self._routes)

    @property
    def named_routes(self) -> list[Route]:
        return [r for r in self.all_routes if r.is_named_route()]

    @property
    def class_routes(self) -> list[Route]:
        return [r for r in self.all_routes if r.is_class_route()]

    @property
    def relationship_routes(self) -> list[Route]:
        return [r for r in self.all_routes if r.is_relationship_route()]

    # -- Lookup --

    def route_for_name(self, name: str) -> Route | None:
        for route in self.named_routes:
            if route.name == name:
                return route
        return None

    def routes_for_class(self, object_class: type) -> list[Route]:
        """Class routes registered for exactly *object_class*."""
        return [r for r in self.class_routes if r.object_class is object_class]

    def route_for_class(self, object_class: type, method: HTTPMethod) -> Route | None:
        """Class route for exactly *object_class* that responds to *method*.

        Superclasses are not searched; see ``route_for_object``.
        """
        return _best_for_method(self.routes_for_class(object_class), method)

    def route_for_object(self, obj: object, method: HTTPMethod) -> Route | None:
        """Class route for the class of *obj*, searching up its MRO.

        The nearest class with a matching route wins.
        """
        routes = self.class_routes
        for cls in type(obj).__mro__:
            candidates = [r for r in routes if r.object_class is cls]
            route = _best_for_method(candidates, method)
            if route is not None:
                return route
        return None

    def routes_for_relationship(self, relationship_name: str) -> list[Route]:
        return [
            r for r in self.relationship_routes if r.relationship_name == relationship_name
        ]

    def route_for_relationship(
        self,
        relationship_name: str,
        object_class: type,
        method: HTTPMethod,
    ) -> Route | None:
        """Relationship route on *object_class* or its nearest ancestor."""
        routes = self.routes_for_relationship(relationship_name)
        for cls in object_class.__mro__:
            candidates = [r for r in routes if r.object_class is cls]
            route = _best_for_method(candidates, method)
            if route is not None:
                return route
        return None
