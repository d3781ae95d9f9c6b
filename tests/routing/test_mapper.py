from gohive.routing.mapper import (
    ProxyRoute,
    RouteTable,
    build_default_routes,
    matches_prefix,
    prefix_rewrite,
)
from gohive.settings import Settings


def _table() -> RouteTable:
    return build_default_routes(
        Settings(
            user_service_url="http://users:3001",
            post_service_url="http://posts:3002",
            mentor_service_url="http://mentor:3003",
        )
    )


def test_matches_prefix_respects_segment_boundaries():
    assert matches_prefix("/api/login", "/api/login")
    assert matches_prefix("/api/login/x", "/api/login")
    assert not matches_prefix("/api/loginx", "/api/login")
    assert matches_prefix("/anything", "/")


def test_rewrite_is_applied_once_at_the_start():
    route = ProxyRoute("/api/login", "http://A", prefix_rewrite("/api/login", "/login"))

    assert route.rewrite_path("/api/login/x") == "/login/x"
    assert route.upstream_url("/api/login/x") == "http://A/login/x"
    # A second occurrence of the prefix further down the path is untouched.
    assert route.rewrite_path("/api/login/api/login") == "/login/api/login"


def test_route_without_rewrite_forwards_path_unchanged():
    route = ProxyRoute("/api/generate-goal", "http://mentor:3003/")

    assert route.upstream_url("/api/generate-goal", "a=1") == (
        "http://mentor:3003/api/generate-goal?a=1"
    )


def test_default_table_maps_prefixes_to_services():
    table = _table()

    goals = table.match("/api/goals/all")
    assert goals is not None
    assert goals.upstream_url("/api/goals/all") == "http://posts:3002/goals/all"

    users = table.match("/api/users/42")
    assert users is not None
    assert users.upstream_url("/api/users/42") == "http://users:3001/users/42"

    oauth = table.match("/api/register/oauth/google")
    assert oauth is not None
    assert oauth.upstream_url("/api/register/oauth/google") == (
        "http://users:3001/register/oauth/google"
    )

    assert table.match("/api/unknown") is None
    assert table.match("/api/goalsx") is None


def test_public_paths_skip_the_token_check():
    table = _table()

    login = table.match("/api/login")
    assert login is not None
    assert table.needs_token(login, "/api/login") is False
    assert table.needs_token(table.match("/api/register/email"), "/api/register/email") is False

    logout = table.match("/api/logout")
    assert logout is not None
    assert table.needs_token(logout, "/api/logout") is True
    assert table.needs_token(table.match("/api/generate-goal"), "/api/generate-goal") is True


def test_first_matching_route_wins():
    table = RouteTable(
        [
            ProxyRoute("/api/a", "http://first"),
            ProxyRoute("/api", "http://second"),
        ],
        public_paths=(),
    )

    assert table.match("/api/a/b").target == "http://first"
    assert table.match("/api/b").target == "http://second"
