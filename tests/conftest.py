import base64
import inspect
import json
from urllib.parse import parse_qs

import httpx
import pytest
import pytest_asyncio

TENANT_ID = "72f988bf-86f1-41af-91ab-2d7cd011db47"
CLIENT_ID = "0f1e2d3c-4b5a-6978-8796-a5b4c3d2e1f0"


def make_jwt(claims):
    def encode(part):
        raw = json.dumps(part).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{encode({'alg': 'RS256', 'typ': 'JWT'})}.{encode(claims)}.signature"


def form_of(request):
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest.fixture
def oidc_token():
    return make_jwt(
        {
            "iss": "https://app.harness.io/ng/api/oidc/account/abc",
            "sub": "pipeline:build",
            "aud": "api://AzureADTokenExchange",
            "exp": 1893456000,
        }
    )


@pytest.fixture
def token_body():
    return {"token_type": "Bearer", "expires_in": 3600, "access_token": "abc"}


@pytest.fixture
def recorder():
    """Collects every request that reaches the fake token endpoint."""

    return []


@pytest_asyncio.fixture
async def make_client(recorder):
    clients = []

    def factory(handler):
        async def recording_handler(request):
            recorder.append(request)
            response = handler(request)
            if inspect.isawaitable(response):
                response = await response
            # Serve the undecoded body as a stream, as a network transport does.
            return httpx.Response(
                response.status_code, headers=response.headers, stream=response.stream
            )

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
