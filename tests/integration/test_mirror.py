"""Integration tests for the client-side catalog mirror."""

import httpx
import pytest

from lolcatalog.mirror import CatalogMirror

pytestmark = pytest.mark.integration

DATASET_URL = "https://loldrivers.example/api/drivers.json"


def mirror_for(handler, clock) -> CatalogMirror:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CatalogMirror(DATASET_URL, client=client, clock=clock)


class TestCatalogMirror:
    """Test fetching, fallback and local queries."""

    @pytest.mark.asyncio
    async def test_load_from_url(self, nested_record, clock):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=[nested_record])

        mirror = mirror_for(handler, clock)
        samples = await mirror.load()

        assert [s.Filename for s in samples] == ["gdrv.sys", "gdrv32.sys"]
        assert mirror.error is None
        assert mirror.using_sample_data is False
        assert mirror.last_fetch == clock.now
        assert str(requests[0].url) == DATASET_URL

    @pytest.mark.asyncio
    async def test_http_error_falls_back_to_sample_data(self, clock):
        mirror = mirror_for(lambda request: httpx.Response(404, text="not found"), clock)

        samples = await mirror.load()

        assert len(samples) == 3
        assert mirror.using_sample_data is True
        assert mirror.error.startswith("Data file unavailable. Showing sample data. Error:")

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back_to_sample_data(self, clock):
        mirror = mirror_for(lambda request: httpx.Response(200, text="<html>oops</html>"), clock)

        await mirror.load()

        assert mirror.using_sample_data is True

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self, clock):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        mirror = mirror_for(handler, clock)
        await mirror.load()

        assert len(mirror.samples) == 3
        assert "connection refused" in mirror.error

    @pytest.mark.asyncio
    async def test_successful_reload_clears_error(self, sample_payload, clock):
        responses = iter([httpx.Response(503), httpx.Response(200, json=sample_payload)])
        mirror = mirror_for(lambda request: next(responses), clock)

        await mirror.load()
        assert mirror.using_sample_data is True

        await mirror.load()
        assert mirror.error is None

    @pytest.mark.asyncio
    async def test_metadata_block_is_not_a_record(self, nested_record, clock):
        payload = {
            "gdrv": nested_record,
            "solo": {"Filename": "solo.sys"},
            "_metadata": {"hvciBlocklistCheck": {"matchedDrivers": 4, "source": "microsoft"}},
        }
        mirror = mirror_for(lambda request: httpx.Response(200, json=payload), clock)

        samples = await mirror.load()

        assert [s.Filename for s in samples] == ["gdrv.sys", "gdrv32.sys", "solo.sys"]
        stats = mirror.statistics()
        assert stats.total == 3
        assert stats.hvci_blocklist_check.matched_drivers == 4
        assert stats.to_response()["hvciBlocklistCheck"]["source"] == "microsoft"

    @pytest.mark.asyncio
    async def test_view_and_statistics(self, sample_payload, clock):
        mirror = mirror_for(lambda request: httpx.Response(200, json={"drivers": sample_payload}), clock)
        await mirror.load()

        assert [s.display_name for s in mirror.view("razer")] == ["Rzpnk.sys"]
        assert [s.display_name for s in mirror.view(filters={"hvci": True})] == ["WinDriver.sys"]
        assert mirror.view("razer", {"hvci": True}) == []
        assert len(mirror.view()) == 3

        stats = mirror.statistics()
        assert stats.total == 3
        assert stats.signed == 2
