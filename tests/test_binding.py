"""Tests for prowl.routes.binding — request binding and response encoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from prowl._errors import BindError
from prowl._types import Context
from prowl.routes.binding import bind_request, coerce, encode, make_callback_handler, read_body
from prowl.schema.introspect import tags


@dataclass
class Extent:
    a: str = field(default="", metadata=tags(json="a"))


@dataclass
class ItemUpdateReq:
    id: int = field(metadata=tags(path="id"))
    name: str = field(metadata=tags(json="name"))
    page: int = field(default=1, metadata=tags(query="page"))
    remark: str = field(default="", metadata=tags(json="remark"))
    tags_: list[str] = field(default_factory=list, metadata=tags(json="tags"))
    extent: Extent | None = field(default=None, metadata=tags(json="extent"))


@dataclass
class ItemUpdateResp:
    id: int = field(metadata=tags(json="id"))
    name: str = field(metadata=tags(json="name"))
    secret: str = field(default="hidden", metadata=tags(json="-"))
    children: list[Extent] = field(default_factory=list)


@dataclass
class FlagReq:
    enabled: bool = field(metadata=tags(query="enabled"))
    ratio: float = field(default=0.0, metadata=tags(query="ratio"))


class JsonRequest:
    """Request exposing an async json() reader, like chirp's."""

    def __init__(self, data: Any) -> None:
        self.path_params: dict[str, str] = {}
        self.query: dict[str, str] = {}
        self._data = data

    async def json(self) -> Any:
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


class Items:
    async def PutItem(self, ctx: Context, req: ItemUpdateReq) -> ItemUpdateResp:
        return ItemUpdateResp(id=req.id, name=req.name, children=[Extent(a="x")])

    def PostBoom(self, ctx: Context, req: FlagReq) -> ItemUpdateResp:
        raise RuntimeError("boom")


class TestBindRequest:
    """bind_request — path, then query, then body."""

    @pytest.mark.asyncio
    async def test_all_sources(self, make_request) -> None:
        request = make_request(
            path_params={"id": "7"},
            query={"page": "3"},
            body={"name": "widget", "tags": ["a", "b"], "extent": {"a": "z"}},
        )
        bound = await bind_request(request, ItemUpdateReq)
        assert bound == ItemUpdateReq(
            id=7,
            name="widget",
            page=3,
            tags_=["a", "b"],
            extent=Extent(a="z"),
        )

    @pytest.mark.asyncio
    async def test_defaults_used(self, make_request) -> None:
        request = make_request(path_params={"id": "1"}, body={"name": "n"})
        bound = await bind_request(request, ItemUpdateReq)
        assert bound.page == 1
        assert bound.remark == ""
        assert bound.extent is None

    @pytest.mark.asyncio
    async def test_missing_required(self, make_request) -> None:
        request = make_request(body={"name": "n"})
        with pytest.raises(BindError, match="ItemUpdateReq.id"):
            await bind_request(request, ItemUpdateReq)

    @pytest.mark.asyncio
    async def test_invalid_int(self, make_request) -> None:
        request = make_request(path_params={"id": "seven"}, body={"name": "n"})
        with pytest.raises(BindError, match="Invalid int"):
            await bind_request(request, ItemUpdateReq)

    @pytest.mark.asyncio
    async def test_fractional_body_value_rejected(self, make_request) -> None:
        request = make_request(body={"id": 3.7, "name": "n"})
        with pytest.raises(BindError, match="Invalid int for body key 'id'"):
            await bind_request(request, ItemUpdateReq)

    @pytest.mark.asyncio
    async def test_bool_and_float(self, make_request) -> None:
        request = make_request(query={"enabled": "yes", "ratio": "0.5"})
        assert await bind_request(request, FlagReq) == FlagReq(enabled=True, ratio=0.5)

    @pytest.mark.asyncio
    async def test_bad_bool(self, make_request) -> None:
        request = make_request(query={"enabled": "maybe"})
        with pytest.raises(BindError):
            await bind_request(request, FlagReq)

    @pytest.mark.asyncio
    async def test_json_reader(self) -> None:
        request = JsonRequest({"name": "n"})
        request.path_params = {"id": "2"}
        bound = await bind_request(request, ItemUpdateReq)
        assert bound.name == "n"

    @pytest.mark.asyncio
    async def test_json_reader_error(self) -> None:
        request = JsonRequest(ValueError("bad json"))
        request.path_params = {"id": "2"}
        with pytest.raises(BindError, match="not valid JSON"):
            await bind_request(request, ItemUpdateReq)


class TestReadBody:
    """read_body — bytes, str, mappings and empty bodies."""

    @pytest.mark.asyncio
    async def test_bytes(self, make_request) -> None:
        assert await read_body(make_request(body=b'{"a": 1}')) == {"a": 1}

    @pytest.mark.asyncio
    async def test_empty(self, make_request) -> None:
        assert await read_body(make_request(body=b"")) == {}
        assert await read_body(make_request()) == {}

    @pytest.mark.asyncio
    async def test_invalid(self, make_request) -> None:
        with pytest.raises(BindError):
            await read_body(make_request(body="{not json"))


class TestCoerce:
    """coerce — scalar and container conversion."""

    def test_scalars(self) -> None:
        assert coerce("5", int) == 5
        assert coerce("2.5", float) == 2.5
        assert coerce(5, str) == "5"
        assert coerce("off", bool) is False

    def test_fractional_float_not_int(self) -> None:
        with pytest.raises(BindError, match="Invalid int"):
            coerce(3.7, int)

    def test_integral_float_to_int(self) -> None:
        assert coerce(3.0, int) == 3

    def test_bool_not_int(self) -> None:
        with pytest.raises(BindError):
            coerce(True, int)

    def test_optional_none(self) -> None:
        assert coerce(None, int | None) is None

    def test_required_none(self) -> None:
        with pytest.raises(BindError, match="Null"):
            coerce(None, int)

    def test_single_value_to_list(self) -> None:
        assert coerce("3", list[int]) == [3]

    def test_tuple(self) -> None:
        assert coerce(["1", "2"], tuple[int, ...]) == (1, 2)

    def test_nested_model_requires_mapping(self) -> None:
        with pytest.raises(BindError, match="object"):
            coerce("x", Extent)

    def test_unknown_type_passthrough(self) -> None:
        marker = object()
        assert coerce(marker, Any) is marker


class TestEncode:
    """encode — json keys, dropped fields, nesting."""

    def test_model(self) -> None:
        resp = ItemUpdateResp(id=1, name="n", children=[Extent(a="x")])
        assert encode(resp) == {"id": 1, "name": "n", "children": [{"a": "x"}]}

    def test_containers(self) -> None:
        assert encode({"k": (Extent(a="y"),)}) == {"k": [{"a": "y"}]}

    def test_scalar(self) -> None:
        assert encode(3) == 3


class TestMakeCallbackHandler:
    """make_callback_handler — bind, call, encode."""

    @pytest.mark.asyncio
    async def test_round_trip(self, make_request) -> None:
        handler = make_callback_handler(Items().PutItem, ItemUpdateReq)
        request = make_request(path_params={"id": "9"}, body={"name": "w"})
        assert await handler(request) == {"id": 9, "name": "w", "children": [{"a": "x"}]}

    @pytest.mark.asyncio
    async def test_context_is_request(self, make_request) -> None:
        seen: list[Any] = []

        def method(ctx: Any, req: Any) -> dict[str, int]:
            seen.append(ctx)
            return {"ok": 1}

        handler = make_callback_handler(method, FlagReq)
        request = make_request(query={"enabled": "1"})
        assert await handler(request) == {"ok": 1}
        assert seen == [request]

    @pytest.mark.asyncio
    async def test_failure_propagates(self, make_request) -> None:
        handler = make_callback_handler(Items().PostBoom, FlagReq)
        with pytest.raises(RuntimeError, match="boom"):
            await handler(make_request(query={"enabled": "0"}))

    def test_handler_named_after_method(self) -> None:
        handler = make_callback_handler(Items().PutItem, ItemUpdateReq)
        assert handler.__name__ == "PutItem"
