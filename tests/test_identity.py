import asyncio
import threading

import httpx
import pytest

from ieee_quiz.errors import Unauthenticated
from ieee_quiz.identity import LocalTokenIdentity, RemoteIdentity, bearer_token
from ieee_quiz.store import RecordStore


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token("Bearer ") is None
    assert bearer_token(None) is None


def test_local_tokens_resolve_to_user(session):
    identity = LocalTokenIdentity(RecordStore(session))
    token = identity.issue("user-1")

    assert asyncio.run(identity.resolve(token)) == "user-1"
    with pytest.raises(Unauthenticated):
        asyncio.run(identity.resolve("not-a-token"))


def remote(handler):
    return RemoteIdentity("https://auth.test/", api_key="anon", transport=httpx.MockTransport(handler))


def test_remote_identity_resolves_user_id():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"id": "remote-42", "email": "ada@example.org"})

    assert asyncio.run(remote(handler).resolve("tok")) == "remote-42"
    assert seen == {"url": "https://auth.test/auth/v1/user", "auth": "Bearer tok", "apikey": "anon"}


@pytest.mark.parametrize("response", [
    httpx.Response(401, json={"msg": "invalid JWT"}),
    httpx.Response(200, json={}),
    httpx.Response(200, text="not json"),
    httpx.Response(200, json=["remote-42"]),
    httpx.Response(200, content=b"null"),
])
def test_remote_identity_rejections(response):
    with pytest.raises(Unauthenticated):
        asyncio.run(remote(lambda request: response).resolve("tok"))


def test_remote_identity_unreachable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(Unauthenticated):
        asyncio.run(remote(handler).resolve("tok"))


def test_local_token_lookup_runs_in_worker_thread(session):
    records = RecordStore(session)
    identity = LocalTokenIdentity(records)
    token = identity.issue("user-1")
    threads = []
    original_get = records.get

    def recording_get(key):
        threads.append(threading.get_ident())
        return original_get(key)

    records.get = recording_get

    assert asyncio.run(identity.resolve(token)) == "user-1"
    assert threads and threads[0] != threading.get_ident()
