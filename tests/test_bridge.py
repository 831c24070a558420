"""Tests for the compatibility bridge."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from sonarqube_client.deprecation import (
    USERS_V1_TO_V2_MAPPINGS,
    ApiMapping,
    get_ledger,
    resolve_path,
    with_compatibility,
)
from sonarqube_client.errors import CompatibilityBridgeError, ErrorCode


class RecordingUsers:
    """Users resource stub recording every call."""

    def __init__(self):
        self.calls = []

    def search(self, *args, **kwargs):
        self.calls.append(("search", args, kwargs))
        return {"items": ["v1"]}

    def searchV2(self, *args, **kwargs):
        self.calls.append(("searchV2", args, kwargs))
        return {"users": ["alice", "bob"], "page": {"pageIndex": 1}}


class StubClient:
    def __init__(self):
        self.users = RecordingUsers()
        self.base_url = "http://localhost:9000"
        self.tags = ["a", "b"]
        self.token = None


class TestInterceptionBridgeRegistry:
    """Tests for mapping registration."""

    def test_register_and_get_mapping(self, bridge):
        mapping = bridge.register(ApiMapping(old_api="a.b", new_api="a.c"))

        assert bridge.get_mapping("a.b") is mapping
        assert bridge.get_mapping("a.c") is None
        assert bridge.mappings == [mapping]

    def test_register_from_fields(self, bridge):
        mapping = bridge.register(old_api="a.b", new_api="a.c")
        assert isinstance(mapping, ApiMapping)

    def test_register_replaces_same_old_api(self, bridge):
        bridge.register(old_api="a.b", new_api="a.c")
        bridge.register(old_api="a.b", new_api="a.d")

        assert [m.new_api for m in bridge.mappings] == ["a.d"]

    def test_lookup_unmapped_returns_none(self, bridge):
        assert bridge.lookup("a.b", {}) is None


class TestProxyForwarding:
    """Tests for forwarding deprecated calls."""

    def test_forward_with_dict_client(self, bridge):
        """Test a.b is redirected to a.c with the original arguments."""
        calls = []
        client = {
            "a": {
                "b": lambda *args: calls.append(("b", args)) or "old",
                "c": lambda *args: calls.append(("c", args)) or "new",
            }
        }

        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="a.b", new_api="a.c")])

        assert wrapped.a.b(1, 2) == "new"
        assert calls == [("c", (1, 2))]

    def test_transformer_result_is_sole_argument(self, bridge):
        """Test the transformed first argument is the only argument passed on."""
        client = StubClient()
        wrapped = bridge.with_compatibility(
            client,
            [
                ApiMapping(
                    old_api="users.search",
                    new_api="users.searchV2",
                    transformer=lambda params: {"pageSize": params["ps"]},
                )
            ],
        )

        wrapped.users.search({"ps": 10}, "ignored", extra=True)

        assert client.users.calls == [("searchV2", ({"pageSize": 10},), {})]

    def test_transformer_without_arguments_receives_none(self, bridge):
        received = []
        client = StubClient()
        wrapped = bridge.with_compatibility(
            client,
            [ApiMapping(old_api="users.search", new_api="users.searchV2", transformer=lambda p: received.append(p))],
        )

        wrapped.users.search()

        assert received == [None]

    def test_forwarding_warns_about_old_api(self, bridge, ledger, deprecation_warnings):
        mapping = ApiMapping(old_api="users.search", new_api="users.searchV2")
        wrapped = bridge.with_compatibility(StubClient(), [mapping])

        wrapped.users.search()
        wrapped.users.search()

        messages = deprecation_warnings()
        assert len(messages) == 1
        assert "API: users.search" in messages[0]
        assert "Replacement: users.searchV2" in messages[0]
        assert "superseded" in messages[0]
        assert ledger.get_warned_apis() == ["users.search"]

    def test_result_transformer(self, bridge):
        wrapped = bridge.with_compatibility(
            StubClient(),
            [
                ApiMapping(
                    old_api="users.search",
                    new_api="users.searchV2",
                    result_transformer=lambda r: r["users"],
                )
            ],
        )

        assert wrapped.users.search() == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_result_transformer_on_awaitable(self, bridge):
        """Test async results are transformed after they resolve."""

        class AsyncUsers:
            async def search(self, params):
                return {"items": []}

            async def searchV2(self, params):
                return {"users": [params["pageSize"]]}

        client = {"users": AsyncUsers()}
        wrapped = bridge.with_compatibility(
            client,
            [
                ApiMapping(
                    old_api="users.search",
                    new_api="users.searchV2",
                    transformer=lambda p: {"pageSize": p["ps"]},
                    result_transformer=lambda r: r["users"],
                )
            ],
        )

        assert await wrapped.users.search({"ps": 25}) == [25]

    def test_deep_paths(self, bridge):
        calls = []
        client = {"api": {"v1": {"users": {}}, "v2": {"users": {"list": lambda: calls.append("v2") or "ok"}}}}
        client["api"]["v1"]["users"]["list"] = lambda: "old"

        mapping = ApiMapping(old_api="api.v1.users.list", new_api="api.v2.users.list")
        wrapped = bridge.with_compatibility(client, [mapping])

        assert wrapped.api.v1.users.list() == "ok"
        assert wrapped["api"]["v1"]["users"]["list"]() == "ok"
        assert calls == ["v2", "v2"]

    def test_replacement_keeps_its_receiver(self, bridge):
        client = StubClient()
        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="users.search", new_api="users.searchV2")])

        wrapped.users.search(q="john")

        assert client.users.calls == [("searchV2", (), {"q": "john"})]

    def test_mapping_registered_after_wrapping_applies(self, bridge):
        client = StubClient()
        wrapped = bridge.create_proxy(client)
        bridge.register(old_api="users.search", new_api="users.searchV2")

        wrapped.users.search()

        assert client.users.calls[0][0] == "searchV2"

    def test_missing_target_raises(self, bridge):
        wrapped = bridge.with_compatibility(
            {"a": {"b": lambda: None}}, [ApiMapping(old_api="a.b", new_api="a.missing")]
        )

        with pytest.raises(CompatibilityBridgeError) as exc_info:
            wrapped.a.b()

        error = exc_info.value
        assert str(error) == "Compatibility bridge error: New API 'a.missing' not found"
        assert error.error_code == ErrorCode.BRIDGE_TARGET_MISSING
        assert error.context.extra["missing_segment"] == "missing"

    def test_non_callable_target_raises(self, bridge):
        client = {"a": {"b": lambda: None, "c": 5}}
        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="a.b", new_api="a.c")])

        with pytest.raises(CompatibilityBridgeError) as exc_info:
            wrapped.a.b()

        assert exc_info.value.error_code == ErrorCode.BRIDGE_TARGET_NOT_CALLABLE

    def test_replacement_called_directly_does_not_warn(self, bridge, deprecation_warnings):
        calls = []
        client = {"a": {"b": lambda *args: "old", "c": lambda *args: calls.append(args) or "new"}}
        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="a.b", new_api="a.c")])

        assert wrapped.a.c(1, 2) == "new"
        assert calls == [(1, 2)]
        assert deprecation_warnings() == []

    def test_warning_issued_when_replacement_fails(self, bridge, ledger, deprecation_warnings):
        def failing_search_v2(*args):
            raise RuntimeError("server unavailable")

        client = {"users": {"search": lambda: None, "searchV2": failing_search_v2}}
        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="users.search", new_api="users.searchV2")])

        with pytest.raises(RuntimeError, match="server unavailable"):
            wrapped.users.search()

        assert len(deprecation_warnings()) == 1
        assert ledger.has_warned("users.search")

    def test_transformer_errors_propagate_unchanged(self, bridge):
        def strict_params(params):
            raise KeyError("ps")

        client = StubClient()
        wrapped = bridge.with_compatibility(
            client, [ApiMapping(old_api="users.search", new_api="users.searchV2", transformer=strict_params)]
        )

        with pytest.raises(KeyError) as exc_info:
            wrapped.users.search({})

        assert not isinstance(exc_info.value, CompatibilityBridgeError)
        assert client.users.calls == []

    def test_slotted_objects_are_wrapped(self, bridge, deprecation_warnings):
        """Test mapped paths below objects without __dict__ are redirected."""

        @dataclass(slots=True)
        class SlotUsers:
            calls: list = field(default_factory=list)

            def search(self):
                self.calls.append("search")
                return "v1"

            def searchV2(self):
                self.calls.append("searchV2")
                return "v2"

        @dataclass(slots=True)
        class SlotClient:
            users: SlotUsers = field(default_factory=SlotUsers)

        client = SlotClient()
        wrapped = bridge.with_compatibility(client, [ApiMapping(old_api="users.search", new_api="users.searchV2")])

        assert wrapped.users.search() == "v2"
        assert client.users.calls == ["searchV2"]
        assert len(deprecation_warnings()) == 1

    def test_unmapped_old_api_on_missing_member_fails_normally(self, bridge):
        wrapped = bridge.with_compatibility(StubClient(), [])
        with pytest.raises(AttributeError):
            wrapped.users.nothing_here


class TestProxyTransparency:
    """Tests that wrapping without applicable mappings changes nothing."""

    def test_zero_mappings_behaves_like_original(self, bridge, deprecation_warnings):
        client = StubClient()
        wrapped = bridge.with_compatibility(client, [])

        assert wrapped.users.search(q="x") == {"items": ["v1"]}
        assert client.users.calls == [("search", (), {"q": "x"})]
        assert deprecation_warnings() == []

    def test_primitives_and_lists_pass_through(self, bridge):
        client = StubClient()
        wrapped = bridge.with_compatibility(client, [])

        assert wrapped.base_url == "http://localhost:9000"
        assert wrapped.tags is client.tags
        assert wrapped.token is None

    def test_value_objects_pass_through(self, bridge):
        client = StubClient()
        client.created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
        client.cache_dir = Path("/tmp/sonar")
        client.timeout = Decimal("2.5")
        wrapped = bridge.with_compatibility(client, [])

        assert wrapped.created_at is client.created_at
        assert wrapped.cache_dir is client.cache_dir
        assert wrapped.timeout is client.timeout

    def test_proxy_looks_like_wrapped_object(self, bridge):
        client = StubClient()
        wrapped = bridge.with_compatibility(client, [])

        assert isinstance(wrapped, StubClient)
        assert isinstance(wrapped.users, RecordingUsers)
        assert wrapped == client
        assert wrapped.__wrapped__ is client

    def test_writes_go_to_original(self, bridge):
        client = StubClient()
        wrapped = bridge.with_compatibility(client, [])

        wrapped.base_url = "https://sonar.example.com"

        assert client.base_url == "https://sonar.example.com"

    def test_mapping_protocol_on_dict_nodes(self, bridge):
        client = {"a": {"b": 1, "c": 2}}
        wrapped = bridge.with_compatibility(client, [])

        assert len(wrapped.a) == 2
        assert "b" in wrapped.a
        assert sorted(wrapped.a) == ["b", "c"]


class TestBuiltinMappings:
    """Tests for the Users API v1 -> v2 mappings."""

    def test_default_mappings_used_when_none_given(self, bridge):
        client = StubClient()
        wrapped = bridge.with_compatibility(client)

        result = wrapped.users.search({"ps": 50, "p": 2, "q": "john"})

        assert client.users.calls == [("searchV2", ({"pageSize": 50, "page": 2, "q": "john"},), {})]
        assert result["items"] == result["users"] == ["alice", "bob"]
        assert bridge.mappings == USERS_V1_TO_V2_MAPPINGS

    def test_module_level_helper_uses_global_ledger(self, deprecation_warnings):
        wrapped = with_compatibility(StubClient())

        wrapped.users.search()

        assert get_ledger().has_warned("users.search")
        assert len(deprecation_warnings()) == 1


class TestResolvePath:
    """Tests for dotted path resolution."""

    def test_resolves_attributes_and_keys(self):
        client = {"users": RecordingUsers()}
        func = resolve_path(client, "users.searchV2")
        assert func()["users"] == ["alice", "bob"]

    def test_missing_segment(self):
        with pytest.raises(CompatibilityBridgeError):
            resolve_path({"a": {}}, "a.b.c")
