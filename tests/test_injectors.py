"""Tests for injectors and problems modules."""

import pytest

from halkit.core.injectors import PaginationInjector, SelfLinkInjector
from halkit.core.links import Link
from halkit.core.problems import ApiProblem, PaginationProblem
from halkit.core.resources import Collection, Entity, Paginator


def paginated(total, page=1, page_size=10, route="users", **kwargs):
    """Build a paginated collection over ``total`` integers."""
    return Collection(
        Paginator(list(range(total))),
        collection_route=route,
        page=page,
        page_size=page_size,
        **kwargs,
    )


def page_links(collection):
    """Map relation -> requested page number."""
    return {link.relation: link.route_options["query"]["page"] for link in collection.links}


class TestSelfLinkInjector:
    """Tests for SelfLinkInjector class."""

    def test_entity_self_link(self):
        """Test entities get their identifier as a route param."""
        entity = Entity({"uid": 5}, 5)

        SelfLinkInjector().inject(entity, "user", "uid")

        [link] = entity.links.get("self")
        assert link.route == "user"
        assert link.route_params == {"uid": 5}

    def test_entity_without_id(self):
        """Test entities without identifier get an empty param map."""
        entity = Entity({})

        SelfLinkInjector().inject(entity, "user")

        assert entity.links.get("self")[0].route_params == {}

    def test_collection_self_link(self):
        """Test collections use their own route params and options."""
        collection = Collection(
            [], collection_route_params={"org": 1}, collection_route_options={"query": {"q": "x"}}
        )

        SelfLinkInjector().inject(collection, "users")

        [link] = collection.links.get("self")
        assert link.route_params == {"org": 1}
        assert link.route_options == {"query": {"q": "x"}}

    def test_existing_self_link_kept(self):
        """Test an existing self link is not replaced."""
        entity = Entity({"id": 1}, 1)
        entity.links.add(Link.to_url("self", "/mine"))

        SelfLinkInjector().inject(entity, "user")

        assert [link.href for link in entity.links.get("self")] == ["/mine"]


class TestPaginationInjector:
    """Tests for PaginationInjector class."""

    @pytest.mark.parametrize(
        "page,expected",
        [
            (1, {"self": 1, "first": 1, "next": 2, "last": 3}),
            (2, {"self": 2, "first": 1, "prev": 1, "next": 3, "last": 3}),
            (3, {"self": 3, "first": 1, "prev": 2, "last": 3}),
        ],
    )
    def test_links_per_page(self, page, expected):
        """Test relations present on each page."""
        collection = paginated(25, page=page)

        assert PaginationInjector().inject(collection) is None
        assert page_links(collection) == expected

    def test_single_page(self):
        """Test a single page has no prev or next."""
        collection = paginated(5)

        PaginationInjector().inject(collection)

        assert page_links(collection) == {"self": 1, "first": 1, "last": 1}

    def test_configures_paginator(self):
        """Test the paginator receives the page size and number."""
        collection = paginated(25, page=2, page_size=10)

        PaginationInjector().inject(collection)

        assert list(collection.collection) == list(range(10, 20))

    def test_page_out_of_range(self):
        """Test requesting a page past the end returns a problem."""
        collection = paginated(25, page=4)

        problem = PaginationInjector().inject(collection)

        assert isinstance(problem, PaginationProblem)
        assert problem.status == 409
        assert problem.page == 4
        assert problem.page_count == 3
        assert len(collection.links) == 0

    def test_empty_collection(self):
        """Test empty paginators only get a self link."""
        collection = paginated(0, page=2)

        assert PaginationInjector().inject(collection) is None
        assert page_links(collection) == {"self": 2}

    def test_pagination_disabled(self):
        """Test page size -1 injects nothing and puts every item on one page."""
        collection = paginated(25, page_size=-1)

        assert PaginationInjector().inject(collection) is None
        assert len(collection.links) == 0
        assert collection.collection.page_count == 1
        assert len(list(collection.collection)) == 25

    def test_inject_twice(self):
        """Test injecting twice yields exactly one link per relation."""
        collection = paginated(25, page=2)
        injector = PaginationInjector()

        injector.inject(collection)
        injector.inject(collection)

        assert all(len(collection.links.get(rel)) == 1 for rel in collection.links.relations())
        assert page_links(collection) == {"self": 2, "first": 1, "prev": 1, "next": 3, "last": 3}

    def test_reinject_after_page_change(self):
        """Test links from a previous page are replaced."""
        collection = paginated(25, page=2)
        injector = PaginationInjector()
        injector.inject(collection)

        collection.page = 1
        injector.inject(collection)

        assert page_links(collection) == {"self": 1, "first": 1, "next": 2, "last": 3}

    def test_plain_list_ignored(self):
        """Test non-paginated collections are left untouched."""
        collection = Collection([1, 2], collection_route="users")

        assert PaginationInjector().inject(collection) is None
        assert len(collection.links) == 0

    def test_no_collection_route(self):
        """Test collections without a route get no pagination links."""
        collection = paginated(25, route=None)

        assert PaginationInjector().inject(collection) is None
        assert len(collection.links) == 0

    def test_existing_self_replaced(self):
        """Test pagination overwrites an existing self link."""
        collection = paginated(25, page=2)
        collection.links.add(Link.to_url("self", "/users"))

        PaginationInjector().inject(collection)

        [link] = collection.links.get("self")
        assert link.route_options["query"]["page"] == 2

    def test_query_options_preserved(self):
        """Test existing query options are kept beside the page."""
        collection = paginated(25, collection_route_params={"org": 1}, collection_route_options={"query": {"sort": "name"}})

        PaginationInjector().inject(collection)

        [link] = collection.links.get("next")
        assert link.route_params == {"org": 1}
        assert link.route_options == {"query": {"sort": "name", "page": 2}}
        assert collection.collection_route_options == {"query": {"sort": "name"}}


class TestProblems:
    """Tests for problem details."""

    def test_api_problem_defaults(self):
        """Test title defaults to the status phrase."""
        problem = ApiProblem(status=404, detail="No such user", additional={"user": 3})

        assert problem.to_dict() == {
            "type": "http://www.w3.org/Protocols/rfc2616/rfc2616-sec10.html",
            "title": "Not Found",
            "status": 404,
            "detail": "No such user",
            "user": 3,
        }

    def test_pagination_problem(self):
        """Test pagination problem payload."""
        problem = PaginationProblem(page=5, page_count=2)

        data = problem.to_dict()
        assert data["title"] == "Conflict"
        assert data["detail"] == "Invalid page provided"
        assert data["page"] == 5
        assert data["page_count"] == 2
        assert problem.valid_range == (1, 2)
