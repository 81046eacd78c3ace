"""
TESTES DO CACHE DE CATÁLOGO
===========================

HIT não chama o provedor, TTL por classe de operação,
store fora do ar degrada para o provedor e erro do provedor não é cacheado.
"""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from iptv_panel.application.services import AccessContext, CatalogCache, build_cache_key
from iptv_panel.domain.entities import MediaClass
from iptv_panel.domain.exceptions import TenantNotFound, UpstreamError
from tests.utils import FailingCacheStore, MOVIES


@pytest.fixture
def ctx() -> AccessContext:
    return AccessContext("042", "alice", "secret")


@pytest.fixture
def catalog(container) -> CatalogCache:
    return container.catalog


# =============================================================================
# HIT / MISS
# =============================================================================

@pytest.mark.asyncio
async def test_cache_hit_suppresses_upstream_call(catalog, ctx, provider):
    first = await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    second = await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    assert first == second
    assert [item["stream_id"] for item in first] == [1, 2]
    assert provider.count("get_vod_streams") == 1


@pytest.mark.asyncio
async def test_equivalent_parameters_share_the_same_entry(catalog, ctx, provider):
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    await catalog.list_items(AccessContext(" 042", "alice", "secret"), MediaClass.MOVIES, " 10 ")

    assert provider.count("get_vod_streams") == 1


@pytest.mark.asyncio
async def test_different_categories_use_different_entries(catalog, ctx, provider):
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    other = await catalog.list_items(ctx, MediaClass.MOVIES, "20")
    everything = await catalog.list_items(ctx, MediaClass.MOVIES)

    assert [item["stream_id"] for item in other] == [3]
    assert everything == MOVIES
    assert provider.count("get_vod_streams") == 3


@pytest.mark.asyncio
async def test_empty_list_is_cached(catalog, ctx, provider):
    assert await catalog.list_items(ctx, MediaClass.SERIES, "99") == []
    assert await catalog.list_items(ctx, MediaClass.SERIES, "99") == []

    assert provider.count("get_series") == 1


@pytest.mark.asyncio
async def test_servers_do_not_share_entries(catalog, provider):
    await catalog.list_categories(AccessContext("042", "alice", "secret"), MediaClass.MOVIES)
    await catalog.list_categories(AccessContext("777", "alice", "secret"), MediaClass.MOVIES)

    assert provider.count("get_vod_categories") == 2


# =============================================================================
# TTL
# =============================================================================

@pytest.mark.asyncio
async def test_vod_entry_expires_after_ttl(catalog, ctx, provider, clock):
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    clock.advance(seconds=299)
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    assert provider.count("get_vod_streams") == 1

    clock.advance(seconds=2)
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    assert provider.count("get_vod_streams") == 2

    # Recarregado: volta a ser HIT
    await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    assert provider.count("get_vod_streams") == 2


@pytest.mark.asyncio
async def test_live_channels_use_short_ttl(catalog, ctx, provider, clock):
    await catalog.list_items(ctx, MediaClass.LIVE)
    await catalog.list_items(ctx, MediaClass.MOVIES)

    clock.advance(seconds=31)
    await catalog.list_items(ctx, MediaClass.LIVE)
    await catalog.list_items(ctx, MediaClass.MOVIES)

    assert provider.count("get_live_streams") == 2
    assert provider.count("get_vod_streams") == 1


@pytest.mark.asyncio
async def test_guide_and_profile_ttls(catalog, ctx, provider, clock):
    await catalog.get_guide_data(ctx, "101")
    await catalog.get_profile(ctx)

    clock.advance(seconds=31)
    await catalog.get_guide_data(ctx, "101")
    await catalog.get_profile(ctx)
    assert provider.count("get_simple_data_table") == 1
    assert provider.count("profile") == 2

    clock.advance(seconds=90)
    await catalog.get_guide_data(ctx, "101")
    assert provider.count("get_simple_data_table") == 2


# =============================================================================
# STORE FORA DO AR
# =============================================================================

@pytest.mark.asyncio
async def test_store_outage_falls_back_to_upstream(container, ctx, provider):
    store = FailingCacheStore()
    catalog = CatalogCache(container.servers, store, client_factory=container.catalog.client_factory)

    first = await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    second = await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    assert first == second == MOVIES[:2]
    assert provider.count("get_vod_streams") == 2
    assert store.attempts == 4


class SlowCacheStore:
    backend = "slow"

    async def get(self, key):
        await asyncio.sleep(1)

    async def set(self, key, value, ttl):
        await asyncio.sleep(1)

    async def delete(self, key):
        await asyncio.sleep(1)


@pytest.mark.asyncio
async def test_slow_store_is_treated_as_miss(container, ctx, provider):
    catalog = CatalogCache(
        container.servers,
        SlowCacheStore(),
        client_factory=container.catalog.client_factory,
        cache_timeout=0.01,
    )

    movies = await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    assert movies == MOVIES[:2]
    assert provider.count("get_vod_streams") == 1


@pytest.mark.asyncio
async def test_corrupted_entry_is_treated_as_miss(catalog, ctx, provider, cache_store):
    key = build_cache_key("042", "movies_items", {"category": "10"})
    await cache_store.set(key, "{not json", 300)

    movies = await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    assert movies == MOVIES[:2]
    assert provider.count("get_vod_streams") == 1


# =============================================================================
# ERROS
# =============================================================================

@pytest.mark.asyncio
async def test_upstream_failure_is_not_cached(catalog, ctx, provider):
    provider.fail_with = 500
    with pytest.raises(UpstreamError) as exc_info:
        await catalog.list_items(ctx, MediaClass.MOVIES, "10")
    assert exc_info.value.status_code == 500
    assert exc_info.value.retryable

    provider.fail_with = None
    movies = await catalog.list_items(ctx, MediaClass.MOVIES, "10")

    assert movies == MOVIES[:2]
    assert provider.count("get_vod_streams") == 2


@pytest.mark.asyncio
async def test_upstream_timeout_becomes_upstream_error(catalog, ctx, provider):
    provider.raise_error = httpx.ReadTimeout("timed out")

    with pytest.raises(UpstreamError):
        await catalog.list_categories(ctx, MediaClass.LIVE)


@pytest.mark.asyncio
async def test_unknown_server_fails_before_upstream(catalog, provider):
    with pytest.raises(TenantNotFound):
        await catalog.list_items(AccessContext("404", "alice", "secret"), MediaClass.MOVIES)

    with pytest.raises(TenantNotFound):
        await catalog.list_items(AccessContext("999", "alice", "secret"), MediaClass.MOVIES)

    assert provider.calls == []


@pytest.mark.asyncio
async def test_live_detail_is_rejected(catalog, ctx):
    with pytest.raises(ValueError):
        await catalog.get_item_detail(ctx, MediaClass.LIVE, "101")


# =============================================================================
# DETALHES, PERFIL, INVALIDAÇÃO
# =============================================================================

@pytest.mark.asyncio
async def test_item_detail_is_cached_per_item(catalog, ctx, provider):
    movie = await catalog.get_item_detail(ctx, MediaClass.MOVIES, "1")
    await catalog.get_item_detail(ctx, MediaClass.MOVIES, "1")
    series = await catalog.get_item_detail(ctx, MediaClass.SERIES, "501")

    assert movie["info"]["name"] == "Filme A"
    assert series["info"]["name"] == "Série X"
    assert provider.count("get_vod_info") == 1
    assert provider.count("get_series_info") == 1


@pytest.mark.asyncio
async def test_profile_is_cached_without_password(catalog, ctx, cache_store):
    profile = await catalog.get_profile(ctx)

    assert "password" not in profile["user_info"]
    raw = await cache_store.get(build_cache_key("042", "user_info", {"username": "alice"}))
    assert raw is not None
    assert "secret" not in raw


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(catalog, ctx, provider):
    await catalog.list_categories(ctx, MediaClass.SERIES)
    await catalog.invalidate("042", "series_categories")
    await catalog.list_categories(ctx, MediaClass.SERIES)

    assert provider.count("get_series_categories") == 2


# =============================================================================
# URL DE REPRODUÇÃO
# =============================================================================

@pytest.mark.asyncio
async def test_playback_url_is_never_cached(catalog, ctx, provider, cache_store):
    url = await catalog.build_playback_url(ctx, "101", MediaClass.LIVE)
    movie_url = await catalog.build_playback_url(ctx, "1", MediaClass.MOVIES, extension="mp4")

    assert url == "http://provider.test:8080/live/alice/secret/101.m3u8"
    assert movie_url == "http://provider.test:8080/movie/alice/secret/1.mp4"
    assert provider.calls == []
    assert cache_store._entries == {}


@pytest.mark.asyncio
async def test_playback_url_with_timeshift(catalog, ctx):
    url = await catalog.build_playback_url(
        ctx,
        "101",
        MediaClass.LIVE,
        timeshift_start=datetime(2024, 7, 10, 20, 30, tzinfo=timezone.utc),
        timeshift_minutes=60,
    )

    assert url == "http://provider.test:8080/timeshift/alice/secret/60/2024-07-10:20-30/101.m3u8"
