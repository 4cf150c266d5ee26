"""Mock HTTP servers for the drop feed and DNS-over-HTTPS resolver."""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from fixtures.sample_data import ACCESS_TOKEN, CLIENT_ID, CLIENT_SECRET

NOERROR = 0
NXDOMAIN = 3


@pytest.fixture
async def mock_feed_server(sample_feed_zip):
    """
    Mock auction house API.

    POST /authorize exchanges client credentials for a token and
    GET /download serves the zipped drop list to bearers of that token.
    """
    requests = {"authorize": 0, "download": 0}

    async def handle_authorize(request):
        requests["authorize"] += 1
        payload = await request.json()
        if payload.get("clientId") != CLIENT_ID or payload.get("clientSecret") != CLIENT_SECRET:
            return web.json_response({"error": "invalid_client"}, status=401)
        return web.json_response({"token": ACCESS_TOKEN})

    async def handle_download(request):
        requests["download"] += 1
        if request.headers.get("Authorization") != f"Bearer {ACCESS_TOKEN}":
            return web.json_response({"error": "unauthorized"}, status=401)
        if request.query.get("fileType") != "Csv":
            return web.json_response({"error": "unsupported fileType"}, status=400)
        return web.Response(body=sample_feed_zip, content_type="application/zip")

    app = web.Application()
    app.router.add_post("/authorize", handle_authorize)
    app.router.add_get("/download", handle_download)

    server = TestServer(app)
    await server.start_server()
    server.requests = requests

    yield server

    await server.close()


@pytest.fixture
async def mock_doh_server(resolving_domains):
    """Mock JSON DoH resolver (Google/Cloudflare response shape)."""

    async def handle_resolve(request):
        name = request.query.get("name", "").rstrip(".").lower()
        record_type = request.query.get("type", "A")

        if name in resolving_domains:
            answer = [{"name": f"{name}.", "type": 1, "TTL": 300, "data": "192.0.2.10"}]
            return web.json_response({"Status": NOERROR, "Answer": answer})

        return web.json_response(
            {"Status": NXDOMAIN, "Question": [{"name": f"{name}.", "type": record_type}]}
        )

    app = web.Application()
    app.router.add_get("/resolve", handle_resolve)

    server = TestServer(app)
    await server.start_server()

    yield server

    await server.close()
