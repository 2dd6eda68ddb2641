"""Tests for routekit.routing.route_set — registration and lookup."""

import logging
import threading

import pytest

from routekit.errors import DuplicateRouteError, RouteNotFound
from routekit.http.methods import HTTPMethod
from routekit.routing.route import Route
from routekit.routing.route_set import RouteSet


class Article:
    pass


class FeaturedArticle(Article):
    pass


class Comment:
    pass


class TestRegistration:
    def test_add_and_contains(self) -> None:
        routes = RouteSet()
        route = Route.named("airlines_list", "/airlines.json")
        routes.add_route(route)
        assert route in routes
        assert routes.contains_route(route)
        assert len(routes) == 1

    def test_constructor_routes(self) -> None:
        a = Route.named("a", "/a")
        b = Route.for_class(Article, "/articles")
        routes = RouteSet([a, b])
        assert routes.all_routes == [a, b]
        assert list(routes) == [a, b]

    def test_rejects_non_route(self) -> None:
        with pytest.raises(TypeError):
            RouteSet().add_route("/articles")  # type: ignore[arg-type]

    def test_remove(self) -> None:
        route = Route.named("a", "/a")
        routes = RouteSet([route])
        routes.remove_route(route)
        assert route not in routes
        assert len(routes) == 0

    def test_remove_unregistered_raises(self) -> None:
        with pytest.raises(RouteNotFound):
            RouteSet().remove_route(Route.named("a", "/a"))

    def test_views_by_kind(self) -> None:
        named = Route.named("a", "/a")
        cls = Route.for_class(Article, "/articles")
        rel = Route.for_relationship("comments", Article, "/articles/:id/comments")
        routes = RouteSet([named, cls, rel])
        assert routes.named_routes == [named]
        assert routes.class_routes == [cls]
        assert routes.relationship_routes == [rel]

    def test_logs_registration(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="routekit.routing"):
            RouteSet().add_route(Route.named("airlines_list", "/airlines.json"))
        assert "airlines_list" in caplog.text


class TestDuplicates:
    def test_same_route_twice(self) -> None:
        route = Route.named("a", "/a")
        routes = RouteSet([route])
        with pytest.raises(DuplicateRouteError):
            routes.add_route(route)

    def test_duplicate_name(self) -> None:
        routes = RouteSet([Route.named("a", "/a", HTTPMethod.GET)])
        with pytest.raises(DuplicateRouteError, match="conflicts"):
            routes.add_route(Route.named("a", "/other", HTTPMethod.POST))

    def test_duplicate_class_and_method(self) -> None:
        routes = RouteSet([Route.for_class(Article, "/articles", HTTPMethod.POST)])
        with pytest.raises(DuplicateRouteError):
            routes.add_route(Route.for_class(Article, "/other", HTTPMethod.POST))

    def test_same_class_other_method_allowed(self) -> None:
        routes = RouteSet([Route.for_class(Article, "/articles", HTTPMethod.POST)])
        routes.add_route(Route.for_class(Article, "/articles/:id", HTTPMethod.GET))
        routes.add_route(Route.for_class(Article, "/articles/:id", HTTPMethod.ANY))
        assert len(routes) == 3

    def test_duplicate_relationship(self) -> None:
        routes = RouteSet([Route.for_relationship("comments", Article, "/c", HTTPMethod.GET)])
        with pytest.raises(DuplicateRouteError):
            routes.add_route(Route.for_relationship("comments", Article, "/d", HTTPMethod.GET))

    def test_class_and_relationship_do_not_conflict(self) -> None:
        routes = RouteSet([Route.for_class(Article, "/articles", HTTPMethod.GET)])
        routes.add_route(Route.for_relationship("comments", Article, "/c", HTTPMethod.GET))
        assert len(routes) == 2

    def test_named_and_relationship_share_no_namespace(self) -> None:
        routes = RouteSet([Route.named("comments", "/comments")])
        routes.add_route(Route.for_relationship("comments", Article, "/c"))
        assert routes.route_for_name("comments") is routes.named_routes[0]


class TestLookupByName:
    def test_hit(self) -> None:
        route = Route.named("airlines_list", "/airlines.json")
        assert RouteSet([route]).route_for_name("airlines_list") is route

    def test_miss(self) -> None:
        assert RouteSet().route_for_name("nope") is None


class TestLookupByClass:
    def test_exact_method(self) -> None:
        get = Route.for_class(Article, "/articles/:id", HTTPMethod.GET)
        post = Route.for_class(Article, "/articles", HTTPMethod.POST)
        routes = RouteSet([get, post])
        assert routes.route_for_class(Article, HTTPMethod.GET) is get
        assert routes.route_for_class(Article, HTTPMethod.POST) is post
        assert routes.route_for_class(Article, HTTPMethod.DELETE) is None

    def test_explicit_method_beats_wildcard(self) -> None:
        wildcard = Route.for_class(Article, "/articles/:id", HTTPMethod.ANY)
        post = Route.for_class(Article, "/articles", HTTPMethod.POST)
        routes = RouteSet([wildcard, post])
        assert routes.route_for_class(Article, HTTPMethod.POST) is post
        assert routes.route_for_class(Article, HTTPMethod.DELETE) is wildcard

    def test_union_mask(self) -> None:
        route = Route.for_class(Article, "/articles/:id", HTTPMethod.PUT | HTTPMethod.PATCH)
        routes = RouteSet([route])
        assert routes.route_for_class(Article, HTTPMethod.PATCH) is route

    def test_no_superclass_search(self) -> None:
        routes = RouteSet([Route.for_class(Article, "/articles", HTTPMethod.GET)])
        assert routes.route_for_class(FeaturedArticle, HTTPMethod.GET) is None

    def test_routes_for_class(self) -> None:
        a = Route.for_class(Article, "/articles", HTTPMethod.GET)
        c = Route.for_class(Comment, "/comments", HTTPMethod.GET)
        assert RouteSet([a, c]).routes_for_class(Comment) == [c]


class TestLookupByObject:
    def test_own_class(self) -> None:
        route = Route.for_class(Article, "/articles", HTTPMethod.GET)
        assert RouteSet([route]).route_for_object(Article(), HTTPMethod.GET) is route

    def test_walks_mro(self) -> None:
        route = Route.for_class(Article, "/articles", HTTPMethod.GET)
        routes = RouteSet([route])
        assert routes.route_for_object(FeaturedArticle(), HTTPMethod.GET) is route

    def test_nearest_class_wins(self) -> None:
        base = Route.for_class(Article, "/articles", HTTPMethod.GET)
        sub = Route.for_class(FeaturedArticle, "/featured", HTTPMethod.ANY)
        routes = RouteSet([base, sub])
        assert routes.route_for_object(FeaturedArticle(), HTTPMethod.GET) is sub
        assert routes.route_for_object(Article(), HTTPMethod.GET) is base

    def test_subclass_without_method_falls_back(self) -> None:
        base = Route.for_class(Article, "/articles", HTTPMethod.DELETE)
        sub = Route.for_class(FeaturedArticle, "/featured", HTTPMethod.GET)
        routes = RouteSet([base, sub])
        assert routes.route_for_object(FeaturedArticle(), HTTPMethod.DELETE) is base

    def test_miss(self) -> None:
        assert RouteSet().route_for_object(Comment(), HTTPMethod.GET) is None


class TestLookupByRelationship:
    def test_hit(self) -> None:
        route = Route.for_relationship("comments", Article, "/articles/:id/comments")
        routes = RouteSet([route])
        assert routes.route_for_relationship("comments", Article, HTTPMethod.GET) is route
        assert routes.routes_for_relationship("comments") == [route]

    def test_inherited(self) -> None:
        route = Route.for_relationship("comments", Article, "/articles/:id/comments")
        routes = RouteSet([route])
        assert routes.route_for_relationship("comments", FeaturedArticle, HTTPMethod.GET) is route

    def test_method_tie_break(self) -> None:
        wildcard = Route.for_relationship("comments", Article, "/a", HTTPMethod.ANY)
        post = Route.for_relationship("comments", Article, "/b", HTTPMethod.POST)
        routes = RouteSet([wildcard, post])
        assert routes.route_for_relationship("comments", Article, HTTPMethod.POST) is post
        assert routes.route_for_relationship("comments", Article, HTTPMethod.GET) is wildcard

    def test_miss(self) -> None:
        routes = RouteSet([Route.for_relationship("comments", Article, "/c")])
        assert routes.route_for_relationship("tags", Article, HTTPMethod.GET) is None
        assert routes.route_for_relationship("comments", Comment, HTTPMethod.GET) is None


class TestConcurrency:
    def test_parallel_registration(self) -> None:
        routes = RouteSet()

        def register(start: int) -> None:
            for i in range(start, start + 50):
                routes.add_route(Route.named(f"route_{i}", f"/r/{i}"))

        threads = [threading.Thread(target=register, args=(n * 50,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(routes) == 200
