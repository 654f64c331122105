import asyncio

import httpx
import pytest

from carejourney.client.api_client import catch_async_error, get_client
from carejourney.client.query_cache import Mutation, QueryCache
from carejourney.client import storage as storage_module
from carejourney.client.storage import Keys, TokenStore


def test_set_and_get_query_data():
    cache = QueryCache()
    assert cache.get_query_data(("posts", "breast")) is None

    cache.set_query_data(("posts", "breast"), [{"_id": "1"}])
    cache.set_query_data(["posts", "breast"], lambda old: old + [{"_id": "2"}])
    assert cache.get_query_data(("posts", "breast")) == [{"_id": "1"}, {"_id": "2"}]


def test_invalidate_by_prefix():
    cache = QueryCache()
    cache.set_query_data(("posts", "breast"), [])
    cache.set_query_data(("posts", "lung"), [])
    cache.set_query_data(("profile-posts", "u1"), [])

    assert not cache.is_stale(("posts", "breast"))
    assert cache.invalidate_queries("posts") == 2
    assert cache.is_stale(("posts", "breast"))
    assert cache.is_stale(("posts", "lung"))
    assert not cache.is_stale(("profile-posts", "u1"))


async def test_fetch_query_uses_fresh_data():
    cache = QueryCache()
    calls = []

    async def fetcher():
        calls.append(1)
        return ["a"]

    assert await cache.fetch_query("folders-length", fetcher) == ["a"]
    assert await cache.fetch_query("folders-length", fetcher) == ["a"]
    assert len(calls) == 1

    cache.invalidate_queries("folders-length")
    await cache.fetch_query("folders-length", fetcher)
    assert len(calls) == 2


async def test_cancel_queries_keeps_previous_data():
    cache = QueryCache()
    cache.set_query_data(("followers", "p1"), ["old"])
    cache.invalidate_queries(("followers", "p1"))
    started = asyncio.Event()

    async def slow():
        started.set()
        await asyncio.sleep(10)
        return ["new"]

    fetch = asyncio.ensure_future(cache.fetch_query(("followers", "p1"), slow))
    await started.wait()
    assert await cache.cancel_queries("followers") == 1
    assert await fetch == ["old"]


async def test_mutation_lifecycle_order():
    events = []

    async def run(variables):
        events.append(("fn", variables))
        return "done"

    mutation = Mutation(
        mutation_fn=run,
        on_mutate=lambda v: events.append("mutate") or {"ctx": v},
        on_success=lambda data, v, ctx: events.append(("success", data, ctx)),
        on_settled=lambda data, error, v, ctx: events.append(("settled", data, error)),
    )
    assert await mutation.mutate(1) == "done"
    assert events == ["mutate", ("fn", 1), ("success", "done", {"ctx": 1}), ("settled", "done", None)]
    assert mutation.is_loading is False


async def test_mutation_error_path():
    seen = {}

    async def fail(variables):
        raise RuntimeError("boom")

    mutation = Mutation(
        mutation_fn=fail,
        on_mutate=lambda v: "snapshot",
        on_error=lambda error, v, ctx: seen.update(error=str(error), ctx=ctx),
    )
    assert await mutation.mutate("x") is None
    assert seen == {"error": "boom", "ctx": "snapshot"}

    with pytest.raises(RuntimeError):
        await mutation.mutate_async("x")


def test_token_store(tmp_path):
    store = TokenStore(tmp_path / "nested" / "storage.json")
    assert store.get(Keys.AUTH_TOKEN) is None
    store.set(Keys.AUTH_TOKEN, "abc")
    assert TokenStore(tmp_path / "nested" / "storage.json").get("AUTH_TOKEN") == "abc"
    store.remove(Keys.AUTH_TOKEN)
    assert store.get(Keys.AUTH_TOKEN) is None


def test_token_store_failed_write_keeps_previous_file(tmp_path, monkeypatch):
    store = TokenStore(tmp_path / "storage.json")
    store.set(Keys.AUTH_TOKEN, "abc")

    def broken_dump(data, fp):
        fp.write('{"AUTH_TOK')
        raise OSError("disk full")

    monkeypatch.setattr(storage_module.json, "dump", broken_dump)
    with pytest.raises(OSError):
        store.set(Keys.AUTH_TOKEN, "def")
    monkeypatch.undo()

    assert store.get(Keys.AUTH_TOKEN) == "abc"
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]


async def test_overlapping_mutations_stay_loading_until_all_finish():
    release = {"slow": asyncio.Event(), "fast": asyncio.Event()}

    async def run(name):
        await release[name].wait()
        return name

    mutation = Mutation(mutation_fn=run)
    slow = asyncio.ensure_future(mutation.mutate("slow"))
    fast = asyncio.ensure_future(mutation.mutate("fast"))
    await asyncio.sleep(0)
    assert mutation.is_loading is True

    release["fast"].set()
    assert await fast == "fast"
    assert mutation.is_loading is True

    release["slow"].set()
    assert await slow == "slow"
    assert mutation.is_loading is False


async def test_get_client_adds_bearer_header(tmp_path):
    store = TokenStore(tmp_path / "storage.json")
    seen = []

    def handler(request):
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={})

    transport = httpx.MockTransport(handler)
    async with await get_client(store=store, base_url="http://api.test", transport=transport) as client:
        await client.get("/auth/is-auth")

    store.set(Keys.AUTH_TOKEN, "tok")
    async with await get_client(store=store, base_url="http://api.test", transport=transport) as client:
        await client.get("/auth/is-auth")

    assert seen == [None, "Bearer tok"]


def test_catch_async_error():
    request = httpx.Request("GET", "http://api.test/post/posts")
    response = httpx.Response(403, json={"error": "Unauthorized request"}, request=request)
    error = httpx.HTTPStatusError("forbidden", request=request, response=response)
    assert catch_async_error(error) == "Unauthorized request"

    plain = httpx.Response(500, text="oops", request=request)
    assert catch_async_error(httpx.HTTPStatusError("x", request=request, response=plain)) == \
        "Request failed with status code 500"

    assert catch_async_error(httpx.ConnectError("down", request=request)) == \
        "Network error, please check your connection"
    assert catch_async_error(ValueError("bad value")) == "bad value"
