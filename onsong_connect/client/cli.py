import asyncio
import json
import logging
import sys
from typing import Optional

import click

from .connect_client import ConnectClient
from .discovery import DiscoveryService
from .factory import create_authenticated_client
from .token_store import default_token_store
from .url_scheme import UrlSchemeService
from ..callback.server import CallbackServer
from ..core.config import config, validate_host
from ..core.exceptions import (
    OnSongError,
    OnSongHostNotAllowedError,
    OnSongInvalidTargetError,
    format_error,
)
from ..core.logging import setup_logging
from ..services.export_service import EXPORT_SCOPES, FORMAT_EXTENSIONS, ExportService
from ..services.import_service import ImportService
from ..shared.models import SearchParams, Target

logger = logging.getLogger(__name__)


def setup_cli():
    """Configuración centralizada del CLI"""
    config.validate()
    setup_logging()


def echo_json(data):
    """Imprime el resultado como JSON en stdout"""
    if hasattr(data, "model_dump"):
        data = data.model_dump(exclude_none=True)
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def run(coro):
    """Ejecuta una corrutina y traduce los errores de OnSong a salida de error"""
    try:
        return asyncio.run(coro)
    except OnSongError as e:
        click.echo(click.style(f"✗ Error: {format_error(e)}", fg="red"), err=True)
        sys.exit(1)


class OnSongContext:
    """Contexto compartido para comandos CLI"""

    def __init__(
        self,
        host: Optional[str],
        port: Optional[int],
        token: Optional[str],
        verbose: bool = False,
        dry_run: bool = False,
    ):
        self.host = host
        self.port = port
        self.token = token
        self.verbose = verbose
        self.url_scheme = UrlSchemeService(dry_run=dry_run or None)

    def target(self) -> Target:
        try:
            if self.host is None:
                target = config.default_target()
            else:
                target = Target(
                    host=self.host,
                    port=self.port or config.default_port,
                    token=self.token or config.default_token,
                )
        except ValueError as e:
            raise OnSongInvalidTargetError({"message": str(e)}) from e

        if target is None:
            raise OnSongInvalidTargetError({"message": "Falta --host (u ONSONG_HOST)"})
        if not validate_host(target.host, config.allowed_hosts):
            raise OnSongHostNotAllowedError({"host": target.host})
        return target

    async def client(self) -> ConnectClient:
        return await create_authenticated_client(self.target(), default_token_store)


@click.group()
@click.option("--host", default=None, help="Host del dispositivo OnSong (por defecto ONSONG_HOST)")
@click.option("--port", default=None, type=int, help="Puerto de la API Connect (por defecto ONSONG_PORT)")
@click.option("--token", default=None, help="Token ya registrado (opcional)")
@click.option("--verbose", "-v", is_flag=True, help="Logging verbose")
@click.option("--dry-run", is_flag=True, help="Registra las URLs onsong:// sin abrirlas")
@click.pass_context
def cli(ctx, host: Optional[str], port: Optional[int], token: Optional[str], verbose: bool, dry_run: bool):
    """OnSong Connect - control remoto de OnSong"""
    try:
        setup_cli()
    except OnSongError as e:
        click.echo(click.style(f"✗ Error: {format_error(e)}", fg="red"), err=True)
        sys.exit(1)

    if verbose:
        logging.getLogger("onsong_connect").setLevel(logging.DEBUG)

    ctx.obj = OnSongContext(host, port, token, verbose, dry_run)


@cli.command()
@click.pass_context
def ping(ctx):
    """Comprueba que el dispositivo responde"""

    async def do_ping():
        client = await ctx.obj.client()
        echo_json(await client.ping())

    run(do_ping())


@cli.command()
@click.pass_context
def state(ctx):
    """Muestra la canción, set y posición actuales"""

    async def do_state():
        client = await ctx.obj.client()
        echo_json(await client.get_state())

    run(do_state())


@cli.command()
@click.argument("query", required=False)
@click.option("--title", default=None, help="Filtrar por título")
@click.option("--artist", default=None, help="Filtrar por artista")
@click.option("--key", default=None, help="Filtrar por tonalidad")
@click.option("--limit", default=25, type=click.IntRange(1, 100), help="Límite de resultados")
@click.option("--start", default=None, type=int, help="Desplazamiento")
@click.pass_context
def search(ctx, query, title, artist, key, limit, start):
    """Busca canciones en la biblioteca"""

    async def do_search():
        client = await ctx.obj.client()
        params = SearchParams(q=query, title=title, artist=artist, key=key, limit=limit, start=start)
        echo_json(await client.search_songs(params))

    run(do_search())


@cli.command()
@click.pass_context
def sets(ctx):
    """Lista los sets"""

    async def do_sets():
        client = await ctx.obj.client()
        echo_json(await client.list_sets())

    run(do_sets())


@cli.command("set-create")
@click.argument("name")
@click.pass_context
def set_create(ctx, name: str):
    """Crea un set"""

    async def do_create():
        client = await ctx.obj.client()
        echo_json(await client.create_set(name))

    run(do_create())


@cli.command("set-show")
@click.argument("set_id")
@click.pass_context
def set_show(ctx, set_id: str):
    """Muestra un set con sus canciones"""

    async def do_show():
        client = await ctx.obj.client()
        echo_json(await client.get_set(set_id))

    run(do_show())


@cli.command("set-add-song")
@click.argument("set_id")
@click.argument("song_id")
@click.pass_context
def set_add_song(ctx, set_id: str, song_id: str):
    """Añade una canción a un set"""

    async def do_add():
        client = await ctx.obj.client()
        echo_json(await client.add_song_to_set(set_id, song_id))

    run(do_add())


@cli.command("song-content")
@click.argument("song_id")
@click.pass_context
def song_content(ctx, song_id: str):
    """Imprime el contenido de una canción"""

    async def do_content():
        client = await ctx.obj.client()
        click.echo(await client.get_song_content(song_id))

    run(do_content())


@cli.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--local", is_flag=True, help="Importar vía URL scheme en vez de la API REST")
@click.option("--filename", default=None, help="Nombre del archivo para el URL scheme")
@click.pass_context
def import_(ctx, file_path: str, local: bool, filename: Optional[str]):
    """Importa una partitura ChordPro/OnSong"""

    async def do_import():
        service = ImportService(default_token_store, ctx.obj.url_scheme)
        target = None if local else ctx.obj.target()
        echo_json(await service.import_chart(target=target, file_path=file_path, filename=filename))

    run(do_import())


@cli.command()
@click.argument("scope", type=click.Choice(EXPORT_SCOPES))
@click.argument("identifier")
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.option("--format", "format_", default="chordpro", type=click.Choice(list(FORMAT_EXTENSIONS)))
@click.pass_context
def export(ctx, scope: str, identifier: str, output_dir: str, format_: str):
    """Exporta una canción, un set o la biblioteca completa"""

    async def do_export():
        callback_server = CallbackServer(config.callback_port)
        service = ExportService(callback_server, ctx.obj.url_scheme)
        try:
            echo_json(await service.export(scope, identifier, format_, output_dir))
        finally:
            await callback_server.stop()

    run(do_export())


@cli.command()
@click.argument("action_name")
@click.option("--arg", "args", multiple=True, help="Argumento clave=valor")
@click.pass_context
def action(ctx, action_name: str, args):
    """Ejecuta una acción de OnSong (pedales, scroll, metrónomo...)"""
    url_scheme: UrlSchemeService = ctx.obj.url_scheme
    action_args = dict(a.split("=", 1) for a in args if "=" in a)

    if not url_scheme.is_known_action(action_name):
        known = ", ".join(url_scheme.get_known_actions())
        click.echo(click.style(f"⚠ Acción desconocida: {action_name}. Conocidas: {known}", fg="yellow"), err=True)

    run(url_scheme.run_action(action_name, action_args))
    echo_json({"ok": True, "performed_via": "url_scheme"})


@cli.command("open")
@click.argument("kind", type=click.Choice(["song", "set"]))
@click.argument("identifier")
@click.pass_context
def open_(ctx, kind: str, identifier: str):
    """Abre una canción o un set"""
    url_scheme: UrlSchemeService = ctx.obj.url_scheme
    if kind == "song":
        run(url_scheme.open_song(identifier))
    else:
        run(url_scheme.open_set(identifier))
    echo_json({"ok": True})


@cli.command()
@click.argument("index")
@click.pass_context
def navigate(ctx, index: str):
    """Navega a first/last/next/previous o a una posición numérica"""
    position = int(index) if index.lstrip("-").isdigit() else index
    run(ctx.obj.url_scheme.navigate(position))
    echo_json({"ok": True})


@cli.command()
@click.option("--timeout", default=config.discovery_timeout, type=float, help="Segundos de búsqueda")
def discover(timeout: float):
    """Busca dispositivos OnSong en la red local"""

    async def do_discover():
        devices = await DiscoveryService().discover(timeout)
        echo_json({"devices": [d.model_dump(exclude_none=True) for d in devices]})

    run(do_discover())


def main():
    cli(prog_name="onsong")


if __name__ == "__main__":
    main()
