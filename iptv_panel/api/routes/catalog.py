"""
CATÁLOGO - Filmes, séries, canais e EPG
=======================================

Rotas finas sobre o CatalogCache. Navegação não conta na cota.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from iptv_panel.api.dependencies import get_access_context, get_catalog
from iptv_panel.api.schemas.schemas import ErrorResponse, StreamUrlResponse
from iptv_panel.application.services import AccessContext, CatalogCache
from iptv_panel.domain.entities import MediaClass

router = APIRouter(
    tags=["Catálogo"],
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


# =============================================================================
# PERFIL
# =============================================================================

@router.get("/user-info")
async def get_user_info(
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.get_profile(ctx)


# =============================================================================
# CATEGORIAS
# =============================================================================

@router.get("/movies/categories")
async def get_movie_categories(
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_categories(ctx, MediaClass.MOVIES)


@router.get("/series/categories")
async def get_series_categories(
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_categories(ctx, MediaClass.SERIES)


@router.get("/channels/categories")
async def get_channel_categories(
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_categories(ctx, MediaClass.LIVE)


# =============================================================================
# LISTAGENS
# =============================================================================

@router.get("/movies")
async def get_movies(
    category: Optional[str] = None,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_items(ctx, MediaClass.MOVIES, category)


@router.get("/series")
async def get_series(
    category: Optional[str] = None,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_items(ctx, MediaClass.SERIES, category)


@router.get("/channels")
async def get_channels(
    category: Optional[str] = None,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.list_items(ctx, MediaClass.LIVE, category)


# =============================================================================
# DETALHES
# =============================================================================

@router.get("/movies/{movie_id}")
async def get_movie(
    movie_id: str,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.get_item_detail(ctx, MediaClass.MOVIES, movie_id)


@router.get("/series/{series_id}")
async def get_series_info(
    series_id: str,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.get_item_detail(ctx, MediaClass.SERIES, series_id)


@router.get("/channels/{channel_id}/epg")
async def get_channel_epg(
    channel_id: str,
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    return await catalog.get_guide_data(ctx, channel_id)


# =============================================================================
# STREAM (sem cache)
# =============================================================================

@router.get("/stream-url", response_model=StreamUrlResponse)
async def get_stream_url(
    stream_id: str = Query(..., min_length=1),
    type: MediaClass = Query(MediaClass.LIVE),
    extension: Optional[str] = Query(None, pattern=r"^[a-z0-9]{2,5}$"),
    ctx: AccessContext = Depends(get_access_context),
    catalog: CatalogCache = Depends(get_catalog),
):
    url = await catalog.build_playback_url(ctx, stream_id, type, extension=extension)
    return StreamUrlResponse(url=url)
