import asyncio
from datetime import datetime, timedelta
from typing import Optional

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError


class ManualClock:
    """Relógio controlado pelo teste (viagem no tempo sem sleep)."""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)

    def set(self, moment: datetime) -> None:
        self.current = moment


class FailingCacheStore:
    """Store que falha em toda leitura e escrita (Redis fora do ar)."""

    backend = "failing"

    def __init__(self):
        self.attempts = 0

    async def get(self, key):
        self.attempts += 1
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ttl):
        self.attempts += 1
        raise RedisConnectionError("Connection refused")

    async def delete(self, key):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")

    async def close(self):
        pass


MOVIES = [
    {"stream_id": 1, "name": "Filme A", "category_id": "10"},
    {"stream_id": 2, "name": "Filme B", "category_id": "10"},
    {"stream_id": 3, "name": "Filme C", "category_id": "20"},
]

CHANNELS = [
    {"stream_id": 101, "name": "Canal 1", "category_id": "1"},
    {"stream_id": 102, "name": "Canal 2", "category_id": "2"},
]

SERIES = [
    {"series_id": 501, "name": "Série X", "category_id": "30"},
]


class FakeXtreamProvider:
    """
    Provedor Xtream falso atrás de httpx.MockTransport.

    Sem `users` qualquer usuário com senha "secret" é aceito.
    Cada chamada é registrada em `calls` (ação ou "profile").
    """

    def __init__(self, users: Optional[dict] = None):
        self.users = users
        self.calls: list[str] = []
        self.fail_with: Optional[int] = None
        self.raise_error: Optional[Exception] = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, action: str) -> int:
        return self.calls.count(action)

    def _valid(self, username: str, password: str) -> bool:
        if self.users is None:
            return password == "secret"
        return self.users.get(username) == password

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        action = params.get("action")
        self.calls.append(action or "profile")

        if self.raise_error is not None:
            raise self.raise_error
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="provider down")

        username = params.get("username", "")
        password = params.get("password", "")

        if not self._valid(username, password):
            if action is None:
                return httpx.Response(200, json={"user_info": {"auth": 0}})
            return httpx.Response(401, text="unauthorized")

        category = params.get("category_id")

        if action is None:
            return httpx.Response(200, json={
                "user_info": {
                    "username": username,
                    "password": password,
                    "auth": 1,
                    "status": "Active",
                    "max_connections": "1",
                },
                "server_info": {"url": request.url.host, "timezone": "UTC"},
            })
        if action == "get_vod_streams":
            return httpx.Response(200, json=_filter(MOVIES, category))
        if action == "get_live_streams":
            return httpx.Response(200, json=_filter(CHANNELS, category))
        if action == "get_series":
            return httpx.Response(200, json=_filter(SERIES, category))
        if action in ("get_vod_categories", "get_live_categories", "get_series_categories"):
            return httpx.Response(200, json=[{"category_id": "10", "category_name": "Ação"}])
        if action == "get_vod_info":
            return httpx.Response(200, json={"info": {"name": "Filme A"}, "movie_data": {"stream_id": params.get("vod_id")}})
        if action == "get_series_info":
            return httpx.Response(200, json={"info": {"name": "Série X"}, "episodes": {"1": []}})
        if action == "get_simple_data_table":
            return httpx.Response(200, json={"epg_listings": [{"title": "Jornal", "channel_id": params.get("stream_id")}]})

        return httpx.Response(404, text="unknown action")


def _filter(items: list, category: Optional[str]) -> list:
    if not category:
        return items
    return [item for item in items if item["category_id"] == category]


class BrokenSession:
    """Sessão cujo banco está fora do ar."""

    async def __aenter__(self):
        raise OperationalError("SELECT 1", {}, Exception("database down"))

    async def __aexit__(self, *exc_info):
        return False


class HangingSession:
    async def __aenter__(self):
        await asyncio.sleep(1)

    async def __aexit__(self, *exc_info):
        return False
