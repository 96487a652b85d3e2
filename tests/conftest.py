"""
Root conftest.py for remarkable-cloud tests.

This file provides:
1. A fake reMarkable cloud served in-process through httpx.MockTransport
2. Settings isolated from the developer's environment
3. Client fixtures (fresh, and already holding a session token)
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from remarkable_cloud import RemarkableClient, RemarkableSettings

STORAGE_HOST = "storage.test"
NOTIFY_HOST = "notify.test"
BLOB_HOST = "blobs.test"


# =============================================================================
# FAKE SERVICE
# =============================================================================


class FakeCloud:
    """In-memory stand-in for the auth, discovery, storage and blob services.

    Every request is recorded in ``calls`` as ``(method, host, path)`` so tests
    can assert on ordering and call counts. Failure switches:

      - fail_refresh      user/new answers 500
      - fail_request      upload/request answers Success=false
      - omit_put_url      upload/request answers Success=true without BlobURLPut
      - transfer_status   status code of the blob PUT
      - fail_update       update-status answers Success=false
      - omit_update_id    update-status answers Success=true without ID
    """

    def __init__(self, device_token: str = "dtok", session_token: str = "stok"):
        self.device_token = device_token
        self.session_token = session_token
        self.calls: List[tuple[str, str, str]] = []
        self.requests: List[httpx.Request] = []
        self.items: Dict[str, Dict[str, Any]] = {}
        self.blobs: Dict[str, bytes] = {}

        self.fail_refresh = False
        self.fail_request = False
        self.omit_put_url = False
        self.transfer_status = 200
        self.fail_update = False
        self.omit_update_id = False

    # helpers ---------------------------------------------------------------

    def add_item(
        self,
        doc_id: str,
        name: str = "Doc",
        *,
        version: int = 1,
        blob: Optional[bytes] = None,
    ) -> None:
        self.items[doc_id] = {
            "ID": doc_id,
            "Version": version,
            "Message": "",
            "Success": True,
            "Type": "DocumentType",
            "VissibleName": name,
            "CurrentPage": 0,
            "Bookmarked": False,
            "Parent": "",
        }
        if blob is not None:
            self.blobs[doc_id] = blob

    def paths(self) -> List[str]:
        return [path for _, _, path in self.calls]

    def count(self, path_suffix: str) -> int:
        return sum(1 for p in self.paths() if p.endswith(path_suffix))

    def last_json(self, path_suffix: str) -> Any:
        for req in reversed(self.requests):
            if req.url.path.endswith(path_suffix):
                return json.loads(req.content)
        raise AssertionError(f"no request to {path_suffix}")

    # routing -------------------------------------------------------------------

    def _authorized(self, request: httpx.Request, token: str) -> bool:
        return request.headers.get("authorization") == f"Bearer {token}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        host, path = request.url.host, request.url.path
        self.calls.append((request.method, host, path))
        self.requests.append(request)

        if host == "my.remarkable.com":
            return self._auth(request, path)
        if host.startswith("service-manager"):
            return self._discovery(request, path)
        if host == STORAGE_HOST:
            if not self._authorized(request, self.session_token):
                return httpx.Response(401)
            return self._storage(request, path)
        if host == BLOB_HOST:
            return self._blob(request, path)
        return httpx.Response(404)

    def _auth(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/token/json/2/device/new":
            body = json.loads(request.content)
            if body.get("code") != "ABC123":
                return httpx.Response(400, text="invalid code")
            return httpx.Response(200, text=self.device_token)
        if path == "/token/json/2/user/new":
            if self.fail_refresh:
                return httpx.Response(500)
            if not self._authorized(request, self.device_token):
                return httpx.Response(401)
            return httpx.Response(200, text=self.session_token)
        return httpx.Response(404)

    def _discovery(self, request: httpx.Request, path: str) -> httpx.Response:
        if not self._authorized(request, self.session_token):
            return httpx.Response(401)
        if path == "/service/json/1/document-storage":
            return httpx.Response(200, json={"Host": STORAGE_HOST, "Status": "OK"})
        if path == "/service/json/1/notifications":
            return httpx.Response(200, json={"Host": NOTIFY_HOST, "Status": "OK"})
        return httpx.Response(404)

    def _storage(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/document-storage/json/2/docs":
            doc = request.url.params.get("doc")
            with_blob = request.url.params.get("withBlob") == "true"
            records = []
            for doc_id, item in self.items.items():
                if doc is not None and doc_id != doc:
                    continue
                record = dict(item)
                if with_blob and doc_id in self.blobs:
                    record["BlobURLGet"] = f"https://{BLOB_HOST}/get/{doc_id}"
                records.append(record)
            return httpx.Response(200, json=records)

        body = json.loads(request.content)
        if path == "/document-storage/json/2/delete":
            results = []
            for entry in body:
                item = self.items.get(entry["ID"])
                ok = item is not None and item["Version"] == entry["Version"]
                if ok:
                    del self.items[entry["ID"]]
                    self.blobs.pop(entry["ID"], None)
                results.append({"ID": entry["ID"], "Success": ok, "Message": "" if ok else "version mismatch"})
            return httpx.Response(200, json=results)

        if path == "/document-storage/json/2/upload/request":
            entry = body[0]
            if self.fail_request:
                return httpx.Response(200, json=[{"ID": entry["ID"], "Success": False}])
            result = {"ID": entry["ID"], "Version": entry["Version"], "Success": True}
            if not self.omit_put_url:
                result["BlobURLPut"] = f"https://{BLOB_HOST}/put/{entry['ID']}"
            return httpx.Response(200, json=[result])

        if path == "/document-storage/json/2/upload/update-status":
            entry = body[0]
            if self.fail_update:
                return httpx.Response(200, json=[{"ID": entry["ID"], "Success": False}])
            self.add_item(entry["ID"], entry["VissibleName"], version=entry["version"])
            if self.omit_update_id:
                return httpx.Response(200, json=[{"Success": True}])
            return httpx.Response(200, json=[{"ID": entry["ID"], "Success": True}])

        return httpx.Response(404)

    def _blob(self, request: httpx.Request, path: str) -> httpx.Response:
        _, action, doc_id = path.split("/", 2)
        if action == "put" and request.method == "PUT":
            if self.transfer_status == 200:
                self.blobs[doc_id] = request.content
            return httpx.Response(self.transfer_status)
        if action == "get" and doc_id in self.blobs:
            return httpx.Response(200, content=self.blobs[doc_id])
        return httpx.Response(404)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def settings(tmp_path) -> RemarkableSettings:
    """Settings that ignore any local .env file."""
    return RemarkableSettings(
        _env_file=None,
        device_token=None,
        device_token_file=tmp_path / "device_token",
        device_desc="desktop-linux",
    )


@pytest_asyncio.fixture
async def make_client(cloud: FakeCloud, settings: RemarkableSettings):
    """Factory building clients wired to the fake cloud."""
    opened: list[httpx.AsyncClient] = []

    def _make(device_token: Optional[str] = None) -> RemarkableClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(cloud.handler))
        opened.append(http)
        return RemarkableClient(device_token=device_token, settings=settings, http_client=http)

    yield _make

    for http in opened:
        await http.aclose()


@pytest_asyncio.fixture
async def client(make_client) -> RemarkableClient:
    """A client that has not been registered yet."""
    rm = make_client()
    yield rm
    await rm.aclose()


@pytest_asyncio.fixture
async def authed_client(make_client) -> RemarkableClient:
    """A client holding device token "dtok" and session token "stok"."""
    rm = make_client(device_token="dtok")
    await rm.refresh_token()
    yield rm
    await rm.aclose()
