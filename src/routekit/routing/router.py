"""Router — builds URLs from registered routes.

Resolves a route from the route set, expands its template against an
object and joins the result onto the configured base URL.
"""

import logging
from typing import Any

from routekit.config import RouterConfig
from routekit.errors import RouteNotFound
from routekit.http.methods import HTTPMethod, string_from_method
from routekit.routing.route import Route
from routekit.routing.route_set import RouteSet

logger = logging.getLogger("routekit.routing")


def join_url(base_url: str, path: str) -> str:
    """Append *path* to *base_url*.

    The path is always relative to the full base URL, so
    ``join_url("https://h/v1", "/users")`` is ``"https://h/v1/users"``.
    """
    if not base_url:
        return path
    if not path:
        return base_url
    if path[0] in "?#":
        return base_url + path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class Router:
    """URL builder over a ``RouteSet``.

    Usage::

        router = Router(RouterConfig(base_url="https://api.example.com"))
        router.route_set.add_route(Route.for_class(Article, "/articles/:articleID"))
        router.url_for_object(article, HTTPMethod.GET)
        # "https://api.example.com/articles/42"
    """

    __slots__ = ("config", "route_set")

    def __init__(
        self,
        config: RouterConfig | None = None,
        route_set: RouteSet | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self.route_set = route_set if route_set is not None else RouteSet()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def url_for_route(self, route: Route, bindings: Any = None) -> str:
        """Expand *route* against *bindings* and join it onto the base URL."""
        path = route.path_for(bindings, escape=self.config.escape_paths)
        return join_url(self.config.base_url, path)

    def url_for_name(
        self,
        name: str,
        bindings: Any = None,
        method: HTTPMethod | None = None,
    ) -> str | None:
        """URL for the named route *name*.

        If *method* is given, the named route must respond to it.
        """
        route = self.route_set.route_for_name(name)
        if route is not None and method is not None and not route.responds_to(method):
            route = None
        if route is None:
            return self._missing(f"No route named {name!r}", method)
        return self.url_for_route(route, bindings)

    def url_for_object(self, obj: object, method: HTTPMethod) -> str | None:
        """URL for the class route matching ``type(obj)`` and *method*."""
        route = self.route_set.route_for_object(obj, method)
        if route is None:
            return self._missing(f"No route for class {type(obj).__qualname__!r}", method)
        return self.url_for_route(route, obj)

    def url_for_relationship(
        self,
        relationship_name: str,
        obj: object,
        method: HTTPMethod,
    ) -> str | None:
        """URL for *relationship_name* of *obj*, expanded against *obj*."""
        route = self.route_set.route_for_relationship(relationship_name, type(obj), method)
        if route is None:
            return self._missing(
                f"No route for relationship {relationship_name!r} "
                f"of class {type(obj).__qualname__!r}",
                method,
            )
        return self.url_for_route(route, obj)

    def _missing(self, what: str, method: HTTPMethod | None) -> None:
        if method is not None:
            what = f"{what} and method {string_from_method(method)}"
        logger.debug("Route lookup miss: %s", what)
        if self.config.raise_on_missing:
            raise RouteNotFound(what)
        return None
