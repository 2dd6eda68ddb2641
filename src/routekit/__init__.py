"""Routekit — routable path descriptors for client-side request routing.

Describe where objects live on a remote API once, then build URLs from
objects, classes, relationships or symbolic names.

Basic usage::

    from routekit import HTTPMethod, Route, Router, RouterConfig

    router = Router(RouterConfig(base_url="https://api.example.com"))
    router.route_set.add_routes([
        Route.named("airlines_list", "/airlines.json", HTTPMethod.GET),
        Route.for_class(Article, "/articles/:articleID", HTTPMethod.GET | HTTPMethod.PUT),
        Route.for_relationship("comments", Article, "/articles/:articleID/comments"),
    ])

    router.url_for_object(article, HTTPMethod.PUT)
    router.url_for_relationship("comments", article, HTTPMethod.GET)
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ClassRoute",
    "DuplicateRouteError",
    "HTTPMethod",
    "InvalidRouteError",
    "NamedRoute",
    "RelationshipRoute",
    "Route",
    "RouteKitError",
    "RouteNotFound",
    "RouteSet",
    "Router",
    "RouterConfig",
    "TemplateSyntaxError",
    "URITemplate",
    "method_from_string",
    "string_from_method",
]

# public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ClassRoute": "routekit.routing.route",
    "NamedRoute": "routekit.routing.route",
    "RelationshipRoute": "routekit.routing.route",
    "Route": "routekit.routing.route",
    "RouteSet": "routekit.routing.route_set",
    "Router": "routekit.routing.router",
    "URITemplate": "routekit.routing.template",
    "HTTPMethod": "routekit.http.methods",
    "method_from_string": "routekit.http.methods",
    "string_from_method": "routekit.http.methods",
    "RouterConfig": "routekit.config",
    "DuplicateRouteError": "routekit.errors",
    "InvalidRouteError": "routekit.errors",
    "RouteKitError": "routekit.errors",
    "RouteNotFound": "routekit.errors",
    "TemplateSyntaxError": "routekit.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import routekit`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
