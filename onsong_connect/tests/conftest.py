"""
Fixtures compartidas para los tests
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import pytest_asyncio

from onsong_connect.callback.server import CallbackServer
from onsong_connect.client.token_store import TokenStore

Route = Union[Tuple[int, Dict[str, Any]], Callable[[httpx.Request], httpx.Response]]


class FakeOnSong:
    """Simula la API Connect de OnSong sobre httpx.MockTransport"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []
        self.targets: List[Any] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if handler is not None:
            self.routes[(method, path)] = handler
        elif text is not None:
            self.routes[(method, path)] = (status, {"text": text})
        else:
            self.routes[(method, path)] = (status, {"json": json})

    @staticmethod
    def api_path(request: httpx.Request) -> str:
        """Path sin el prefijo /api/{token}"""
        parts = request.url.path.split("/", 3)
        return "/" + parts[3] if len(parts) > 3 else "/"

    @staticmethod
    def token_of(request: httpx.Request) -> str:
        return request.url.path.split("/")[2]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, self.api_path(request)))
        if route is None:
            return httpx.Response(404, text="Not Found")
        if callable(route):
            return route(request)
        status, kwargs = route
        return httpx.Response(status, **kwargs)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fake_onsong():
    """Fixture para la API Connect simulada"""
    return FakeOnSong()


@pytest.fixture
def token_store():
    """Store aislado por test"""
    return TokenStore()


@pytest_asyncio.fixture
async def callback_server():
    """Servidor de callbacks en un puerto libre de loopback"""
    server = CallbackServer(port=0)
    await server.start()

    yield server

    await server.stop()
