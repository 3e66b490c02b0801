"""
Servidor de callbacks de export.

OnSong recibe un `returnURL` apuntando a http://127.0.0.1:{port}/callback/{request_id}
y hace POST ahí cuando el usuario confirma el export. Cada request_id pendiente
tiene su propio timeout.
"""

import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from ..core.config import config
from ..core.exceptions import (
    OnSongExportError,
    OnSongExportTimeoutError,
    OnSongInvalidInputError,
)
from ..shared.models import ExportCallbackData
from .parsing import CallbackParseError, parse_callback_body

logger = logging.getLogger(__name__)

CALLBACK_HOST = "127.0.0.1"
DEFAULT_WAIT_TIMEOUT = 30.0
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@dataclass
class PendingRequest:
    """Espera registrada: resultado de asignación única + timer del deadline"""

    future: asyncio.Future
    timer: asyncio.TimerHandle


def _mark_retrieved(future: asyncio.Future) -> None:
    # Un rechazo puede quedar sin nadie esperándolo (p. ej. tras cancel_wait)
    if not future.cancelled():
        future.exception()


class CallbackServer:
    """Servidor HTTP local (loopback) que entrega callbacks a quien los espera"""

    def __init__(self, port: Optional[int] = None, host: str = CALLBACK_HOST):
        self.host = host
        self.port = config.callback_port if port is None else port
        self.state = "stopped"

        self._pending: Dict[str, PendingRequest] = {}
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self._start_lock = asyncio.Lock()
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        """Crea la aplicación FastAPI"""

        app = FastAPI(
            title="OnSong Export Callback Server",
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
        )

        @app.exception_handler(StarletteHTTPException)
        async def http_error(request: Request, exc: StarletteHTTPException):
            return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

        @app.api_route("/callback/{request_id:path}", methods=_ALL_METHODS)
        async def callback(request_id: str, request: Request):
            """Recibe el resultado de un export. Solo POST."""
            logger.debug(f"Callback recibido: {request.method} {request_id}")

            if request_id not in self._pending:
                logger.warning(f"Callback para request desconocido: {request_id}")
                return JSONResponse(
                    {"error": "Request not found or expired"},
                    status_code=status.HTTP_404_NOT_FOUND,
                )

            if request.method != "POST":
                return JSONResponse(
                    {"error": "Method not allowed"},
                    status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                )

            try:
                raw = await request.body()
            except ClientDisconnect:
                logger.error(f"El cliente cortó la conexión durante el callback {request_id}")
                self._settle(
                    request_id,
                    error=OnSongExportError({"message": "Client disconnected while sending callback"}),
                )
                return JSONResponse({"error": "Client disconnected"}, status_code=status.HTTP_400_BAD_REQUEST)

            body = raw.decode("utf-8", errors="replace")

            try:
                data = parse_callback_body(body, request.headers.get("content-type"))
            except CallbackParseError as e:
                logger.error(f"No se pudo parsear el callback {request_id}: {e}")
                # Se avisa a los dos lados: 400 a OnSong y rechazo al que espera
                self._settle(request_id, error=OnSongExportError({"message": str(e)}))
                return JSONResponse({"error": str(e)}, status_code=status.HTTP_400_BAD_REQUEST)

            if not self._settle(request_id, result=data):
                # Expiró mientras se leía el body
                return JSONResponse(
                    {"error": "Request not found or expired"},
                    status_code=status.HTTP_404_NOT_FOUND,
                )

            logger.info(f"Callback {request_id} recibido con {len(data.files)} archivos")
            return JSONResponse({"success": True})

        return app

    @property
    def is_listening(self) -> bool:
        return self.state == "listening"

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_callback_url(self, request_id: str) -> str:
        return f"http://{self.host}:{self.port}/callback/{quote(request_id, safe='')}"

    async def start(self) -> None:
        """Abre el listener. No hace nada si ya está escuchando."""
        if self.is_listening:
            return

        async with self._start_lock:
            if self.is_listening:
                return

            self.state = "starting"
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind((self.host, self.port))
            except OSError as e:
                sock.close()
                self.state = "stopped"
                logger.error(f"No se pudo abrir el servidor de callbacks en {self.host}:{self.port}: {e}")
                raise OnSongExportError({"message": str(e), "port": self.port}) from e

            # Con port=0 el SO asigna uno libre
            self.port = sock.getsockname()[1]

            server = uvicorn.Server(uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                log_config=None,
                access_log=False,
                lifespan="off",
                timeout_graceful_shutdown=5,
            ))
            task = asyncio.create_task(self._serve(server, sock))

            while not server.started:
                if task.done():
                    sock.close()
                    self.state = "stopped"
                    raise OnSongExportError({"message": "El servidor de callbacks no arrancó"})
                await asyncio.sleep(0.01)

            self._server = server
            self._task = task
            self.state = "listening"
            logger.info(f"Servidor de callbacks escuchando en {self.host}:{self.port}")

    @staticmethod
    async def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            await server.serve(sockets=[sock])
        except SystemExit:
            # uvicorn hace sys.exit() si falla el arranque
            logger.error("uvicorn terminó durante el arranque")
        finally:
            sock.close()

    async def stop(self) -> None:
        """Rechaza todas las esperas pendientes, cierra el listener y luego retorna.

        Un start() ya lanzado termina antes de que stop() compruebe el estado.
        """
        # Deja que un start() recién programado tome el lock
        await asyncio.sleep(0)

        async with self._start_lock:
            if not self.is_listening or self._server is None:
                return

            for request_id in list(self._pending):
                self._settle(request_id, error=OnSongExportError({"message": "Server shutting down"}))

            self._server.should_exit = True
            if self._task is not None:
                await self._task

            self._server = None
            self._task = None
            self.state = "stopped"
            logger.info("Servidor de callbacks detenido")

    def register_wait(self, request_id: str, timeout: float = DEFAULT_WAIT_TIMEOUT) -> asyncio.Future:
        """
        Registra una espera y devuelve el future que se resolverá con el callback.

        El registro es síncrono: al retornar, un POST para `request_id` ya
        encuentra su entrada. Requiere el servidor escuchando.
        """
        if not self.is_listening:
            raise OnSongExportError({"message": "El servidor de callbacks no está escuchando"})
        if request_id in self._pending:
            raise OnSongInvalidInputError({"message": f"Ya hay una espera para {request_id}"})

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        future.add_done_callback(_mark_retrieved)
        future.add_done_callback(lambda f: self._discard_cancelled(request_id, f))
        timer = loop.call_later(timeout, self._on_timeout, request_id, timeout)

        self._pending[request_id] = PendingRequest(future=future, timer=timer)
        logger.debug(f"Esperando callback {request_id} (timeout {timeout}s)")
        return future

    async def wait_for_callback(
        self, request_id: str, timeout: float = DEFAULT_WAIT_TIMEOUT
    ) -> ExportCallbackData:
        """
        Espera el callback de `request_id`. Arranca el servidor si hace falta.

        Raises:
            OnSongExportTimeoutError: si no llega nada en `timeout` segundos
            OnSongExportError: cancelación, apagado del servidor o body inválido
        """
        if not self.is_listening:
            await self.start()
        return await self.register_wait(request_id, timeout)

    def cancel_wait(self, request_id: str) -> None:
        """Abandona una espera. Sin efecto si el id no existe o ya se resolvió."""
        if self._settle(request_id, error=OnSongExportError({"message": "Request cancelled"})):
            logger.debug(f"Espera cancelada: {request_id}")

    def _on_timeout(self, request_id: str, timeout: float) -> None:
        logger.warning(f"Timeout esperando callback {request_id} ({timeout}s)")
        self._settle(
            request_id,
            error=OnSongExportTimeoutError({"request_id": request_id, "timeout": timeout}),
        )

    def _discard_cancelled(self, request_id: str, future: asyncio.Future) -> None:
        # El que esperaba fue cancelado: limpiar la entrada y su timer
        if future.cancelled():
            pending = self._pending.get(request_id)
            if pending is not None and pending.future is future:
                self._pending.pop(request_id)
                pending.timer.cancel()

    def _settle(
        self,
        request_id: str,
        result: Optional[ExportCallbackData] = None,
        error: Optional[Exception] = None,
    ) -> bool:
        """Resuelve o rechaza una espera exactamente una vez. Devuelve False si ya no existía."""
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return False

        pending.timer.cancel()
        if pending.future.done():
            return False

        if error is not None:
            pending.future.set_exception(error)
        else:
            pending.future.set_result(result)
        return True
