"""
Tests for HttpFileDiscovery using httpx.MockTransport (no network).
"""

import asyncio
import json

import httpx
import pytest

from app.clients.discovery_client import HttpFileDiscovery
from app.domain.errors import DiscoveryError
from app.domain.models import FileRef, RepositoryRef


REPO = RepositoryRef(url="https://github.com/user/repo", branch="develop")


def discover(handler):
    client = HttpFileDiscovery("http://discovery.local/", transport=httpx.MockTransport(handler))
    return asyncio.run(client.discover_files(REPO))


def test_returns_file_refs_in_service_order():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"files": ["src/b.py", "src/a.py"]})

    files = discover(handler)

    assert files == [FileRef("src/b.py"), FileRef("src/a.py")]
    assert seen["url"] == "http://discovery.local/discover"
    assert seen["body"] == {"repositoryUrl": REPO.url, "branch": "develop"}


def test_empty_listing_is_valid():
    assert discover(lambda request: httpx.Response(200, json={"files": []})) == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="internal"),
        httpx.Response(404, json={"detail": "unknown repository"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"paths": ["a.py"]}),
        httpx.Response(200, json={"files": ["a.py", 3]}),
        httpx.Response(200, json=["a.py"]),
    ],
)
def test_bad_responses_raise_discovery_error(response):
    with pytest.raises(DiscoveryError):
        discover(lambda request: response)


def test_transport_errors_raise_discovery_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DiscoveryError):
        discover(handler)
