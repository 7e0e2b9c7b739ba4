"""Unit tests for horizon.platform.client — PlatformClient against httpx.MockTransport."""

import json

import httpx
import pytest

from horizon.engine.errors import HorizonLoadError, HorizonPlatformError, HorizonWorkingCopyError
from horizon.platform.client import (
    OnlineWorkingCopy,
    PlatformClient,
    derived_app_name,
    needs_default_branch,
)
from horizon.platform.models import UnitRef

BASE_URL = "https://platform.test/api"
DEFAULTS = {"svn": "trunk", "git": "main"}


class FakePlatform:
    """Routes requests to canned responses and records every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path, request))
        key = (request.method, request.url.path.removeprefix("/api"))
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        status, body = self.routes[key]
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def paths(self):
        return [(method, path.removeprefix("/api")) for method, path, _ in self.calls]


def make_client(platform, token=None):
    return PlatformClient(BASE_URL, token=token, transport=httpx.MockTransport(platform))


class TestHelpers:
    @pytest.mark.parametrize("branch", [None, "", "trunk", "main"])
    def test_needs_default(self, branch):
        assert needs_default_branch(branch)

    @pytest.mark.parametrize("branch", ["develop", "release/1.0", "Main"])
    def test_explicit(self, branch):
        assert not needs_default_branch(branch)

    def test_derived_app_name(self):
        assert derived_app_name("T1") == "App-T1"


class TestResolveBranch:
    @pytest.mark.asyncio
    async def test_svn_defaults_to_trunk(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (200, {"type": "svn"})})
        async with make_client(platform) as client:
            assert await client.resolve_branch("T1", None, DEFAULTS) == "trunk"

    @pytest.mark.asyncio
    async def test_git_trunk_becomes_main(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (200, {"type": "git"})})
        async with make_client(platform) as client:
            assert await client.resolve_branch("T1", "trunk", DEFAULTS) == "main"

    @pytest.mark.asyncio
    async def test_unknown_type_falls_back_to_git_default(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (200, {"type": "hg"})})
        async with make_client(platform) as client:
            assert await client.resolve_branch("T1", "", DEFAULTS) == "main"

    @pytest.mark.asyncio
    async def test_explicit_branch_makes_no_request(self):
        platform = FakePlatform({})
        async with make_client(platform) as client:
            assert await client.resolve_branch("T1", "develop", DEFAULTS) == "develop"
        assert platform.calls == []

    @pytest.mark.asyncio
    async def test_repository_query_failure(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (500, {"error": "down"})})
        async with make_client(platform) as client:
            with pytest.raises(HorizonPlatformError) as exc_info:
                await client.resolve_branch("T1", None, DEFAULTS)
        assert exc_info.value.status_code == 500


class TestWorkingCopy:
    @pytest.mark.asyncio
    async def test_create_sends_branch(self):
        platform = FakePlatform({("POST", "/apps/T1/working-copies"): (201, {"id": "wc-9"})})
        async with make_client(platform) as client:
            wc = await client.create_temporary_working_copy("T1", "main")

        assert isinstance(wc, OnlineWorkingCopy)
        assert wc.id == "wc-9"
        _, _, request = platform.calls[0]
        assert json.loads(request.content) == {"branch": "main"}

    @pytest.mark.asyncio
    async def test_refusal_becomes_working_copy_error(self):
        platform = FakePlatform({("POST", "/apps/T1/working-copies"): (503, {"error": "busy"})})
        async with make_client(platform) as client:
            with pytest.raises(HorizonWorkingCopyError) as exc_info:
                await client.create_temporary_working_copy("T1", "main")

        err = exc_info.value
        assert err.status_code == 503
        assert err.tree_id == "T1"
        assert err.branch == "main"
        assert err.app_name == "App-T1"

    @pytest.mark.asyncio
    async def test_missing_id_becomes_working_copy_error(self):
        platform = FakePlatform({("POST", "/apps/T1/working-copies"): (200, {})})
        async with make_client(platform) as client:
            with pytest.raises(HorizonWorkingCopyError, match="working copy id"):
                await client.create_temporary_working_copy("T1", "main")

    @pytest.mark.asyncio
    async def test_transport_error_becomes_working_copy_error(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with PlatformClient(BASE_URL, transport=httpx.MockTransport(unreachable)) as client:
            with pytest.raises(HorizonWorkingCopyError, match="connection refused"):
                await client.create_temporary_working_copy("T1", "main")

    @pytest.mark.asyncio
    async def test_open_model_load_and_release(self, sales_index, sales_units):
        platform = FakePlatform({
            ("POST", "/apps/T1/working-copies"): (201, {"id": "wc-1"}),
            ("GET", "/working-copies/wc-1/model"): (200, sales_index),
            ("GET", "/working-copies/wc-1/units/doc-customer"): (200, sales_units["doc-customer"]),
            ("DELETE", "/working-copies/wc-1"): (204, None),
        })
        async with make_client(platform) as client:
            async with await client.create_temporary_working_copy("T1", "main") as wc:
                tree = await wc.open_model()
                ref = tree.modules[0].documents[0]
                document = await wc.load_unit(ref)

        assert tree.modules[0].name == "Sales"
        assert document.type == "Pages$Page"
        assert document.qualified_name == "Sales.Customer"
        assert platform.paths()[-1] == ("DELETE", "/working-copies/wc-1")

    @pytest.mark.asyncio
    async def test_missing_unit_becomes_load_error(self):
        platform = FakePlatform({
            ("POST", "/apps/T1/working-copies"): (201, {"id": "wc-1"}),
            ("DELETE", "/working-copies/wc-1"): (204, None),
        })
        async with make_client(platform) as client:
            wc = await client.create_temporary_working_copy("T1", "main")
            with pytest.raises(HorizonLoadError) as exc_info:
                await wc.load_unit(UnitRef(id="gone"))

        assert exc_info.value.unit_id == "gone"
        assert exc_info.value.tree_id == "T1"

    @pytest.mark.asyncio
    async def test_invalid_model_index(self):
        platform = FakePlatform({
            ("POST", "/apps/T1/working-copies"): (201, {"id": "wc-1"}),
            ("GET", "/working-copies/wc-1/model"): (200, {"modules": [{"name": "NoUnits"}]}),
        })
        async with make_client(platform) as client:
            wc = await client.create_temporary_working_copy("T1", "main")
            with pytest.raises(HorizonPlatformError, match="Invalid model index"):
                await wc.open_model()


class TestRelease:
    def _platform(self):
        return FakePlatform({
            ("POST", "/apps/T1/working-copies"): (201, {"id": "wc-1"}),
            ("DELETE", "/working-copies/wc-1"): (500, {"error": "locked"}),
        })

    @pytest.mark.asyncio
    async def test_release_failure_keeps_load_error(self):
        platform = self._platform()
        async with make_client(platform) as client:
            with pytest.raises(HorizonLoadError):
                async with await client.create_temporary_working_copy("T1", "main") as wc:
                    await wc.load_unit(UnitRef(id="gone"))

        assert platform.paths()[-1] == ("DELETE", "/working-copies/wc-1")

    @pytest.mark.asyncio
    async def test_release_failure_after_clean_exit_raises(self):
        async with make_client(self._platform()) as client:
            with pytest.raises(HorizonPlatformError) as exc_info:
                async with await client.create_temporary_working_copy("T1", "main"):
                    pass

        assert exc_info.value.status_code == 500


class TestRequest:
    @pytest.mark.asyncio
    async def test_bearer_token(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (200, {"type": "git"})})
        async with make_client(platform, token="secret") as client:
            await client.get_repository_info("T1")

        _, _, request = platform.calls[0]
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_no_token_no_auth_header(self):
        platform = FakePlatform({("GET", "/apps/T1/repository"): (200, {"type": "git"})})
        async with make_client(platform) as client:
            await client.get_repository_info("T1")

        _, _, request = platform.calls[0]
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self):
        platform = FakePlatform({("DELETE", "/working-copies/x"): (204, None)})
        async with make_client(platform) as client:
            assert await client.request("DELETE", "/working-copies/x") is None

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        async with PlatformClient(BASE_URL, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(HorizonPlatformError, match="non-JSON"):
                await client.request("GET", "/apps/T1/repository")
