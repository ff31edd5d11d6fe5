"""Tests for prowl.routes.naming — prefix table and naming rule."""

import pytest

from prowl.routes.naming import (
    DEFAULT_PREFIXES,
    HttpMethod,
    PrefixRule,
    RouteDescriptor,
    is_exported,
    is_public,
    join_path,
    lower_first,
    match_prefix,
    parse_route,
)


class TestLowerFirst:
    """lower_first — only the first character changes."""

    def test_lowers_first_letter(self) -> None:
        assert lower_first("Widget") == "widget"

    def test_keeps_remainder(self) -> None:
        assert lower_first("UserInfo") == "userInfo"
        assert lower_first("APIKey") == "aPIKey"

    def test_empty(self) -> None:
        assert lower_first("") == ""

    def test_already_lower(self) -> None:
        assert lower_first("detail") == "detail"

    def test_non_letter_untouched(self) -> None:
        assert lower_first("_Private") == "_Private"
        assert lower_first("9Lives") == "9Lives"


class TestIsPublic:
    """is_public — underscore prefix means private."""

    def test_public(self) -> None:
        assert is_public("GetDetail")
        assert is_public("internalHelper")

    def test_private(self) -> None:
        assert not is_public("_helper")
        assert not is_public("__init__")

    def test_empty(self) -> None:
        assert not is_public("")


class TestIsExported:
    """is_exported — method names must start with an upper-case letter."""

    def test_exported(self) -> None:
        assert is_exported("GetDetail")
        assert is_exported("X")

    def test_not_exported(self) -> None:
        assert not is_exported("internalHelper")
        assert not is_exported("_GetDetail")
        assert not is_exported("get_detail")
        assert not is_exported("\u00c9tat")
        assert not is_exported("")


class TestDefaultPrefixes:
    """The default table covers the seven standard prefixes in order."""

    def test_order(self) -> None:
        assert [rule.prefix for rule in DEFAULT_PREFIXES] == [
            "Get", "Post", "Put", "Delete", "Patch", "Head", "Option",
        ]

    def test_option_maps_to_options(self) -> None:
        assert DEFAULT_PREFIXES[-1].method is HttpMethod.OPTIONS

    def test_rule_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_PREFIXES[0].prefix = "Fetch"  # type: ignore[misc]


class TestMatchPrefix:
    """match_prefix — first literal match in declared order wins."""

    def test_get(self) -> None:
        assert match_prefix("GetDetail", DEFAULT_PREFIXES) == (HttpMethod.GET, "Detail")

    def test_delete(self) -> None:
        assert match_prefix("DeleteInfo", DEFAULT_PREFIXES) == (HttpMethod.DELETE, "Info")

    def test_no_match(self) -> None:
        assert match_prefix("FetchDetail", DEFAULT_PREFIXES) is None

    def test_case_sensitive(self) -> None:
        assert match_prefix("getDetail", DEFAULT_PREFIXES) is None

    def test_empty_remainder(self) -> None:
        assert match_prefix("Get", DEFAULT_PREFIXES) is None

    def test_update_prefix_with_empty_remainder(self) -> None:
        rules = (PrefixRule("Update", HttpMethod.PUT),)
        assert match_prefix("Update", rules) is None
        assert match_prefix("UpdateName", rules) == (HttpMethod.PUT, "Name")

    def test_first_rule_wins(self) -> None:
        rules = (
            PrefixRule("Put", HttpMethod.PUT),
            PrefixRule("PutAll", HttpMethod.POST),
        )
        assert match_prefix("PutAllItems", rules) == (HttpMethod.PUT, "AllItems")

    def test_no_fallthrough_after_empty_remainder(self) -> None:
        rules = (
            PrefixRule("GetAll", HttpMethod.GET),
            PrefixRule("Get", HttpMethod.POST),
        )
        # "GetAll" matches first and leaves nothing; "Get" is never tried
        assert match_prefix("GetAll", rules) is None

    def test_empty_table(self) -> None:
        assert match_prefix("GetDetail", ()) is None


class TestParseRoute:
    """parse_route — verb plus naming-ruled path segment."""

    def test_default_rule(self) -> None:
        route = parse_route("GetDetail", DEFAULT_PREFIXES)
        assert route == RouteDescriptor(path="/detail", verb=HttpMethod.GET)

    def test_camel_remainder(self) -> None:
        route = parse_route("PostUserInfo", DEFAULT_PREFIXES)
        assert route is not None
        assert route.path == "/userInfo"
        assert route.verb is HttpMethod.POST

    def test_custom_naming_rule(self) -> None:
        route = parse_route("GetUserInfo", DEFAULT_PREFIXES, str.lower)
        assert route is not None
        assert route.path == "/userinfo"

    def test_no_route(self) -> None:
        assert parse_route("Helper", DEFAULT_PREFIXES) is None
        assert parse_route("Get", DEFAULT_PREFIXES) is None

    def test_naming_rule_emptying_segment(self) -> None:
        assert parse_route("GetDetail", DEFAULT_PREFIXES, lambda _: "") is None


class TestJoinPath:
    """join_path — rooted, no duplicate or trailing empty segments."""

    def test_root(self) -> None:
        assert join_path() == "/"
        assert join_path("/") == "/"
        assert join_path("", "") == "/"

    def test_simple(self) -> None:
        assert join_path("widget", "detail") == "/widget/detail"

    def test_strips_duplicates(self) -> None:
        assert join_path("/widget/", "/detail/") == "/widget/detail"
        assert join_path("//api//", "v1") == "/api/v1"

    def test_multi_segment_piece(self) -> None:
        assert join_path("/", "v1/items") == "/v1/items"

    def test_param_segment(self) -> None:
        assert join_path("/widget/detail", ":id") == "/widget/detail/:id"
