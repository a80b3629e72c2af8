"""CLI application entry point."""

import asyncio
import sys
from typing import Optional

import click

from pairline import __version__
from pairline.utils import load_config, settings, setup_logging
from pairline.utils.logger import get_logger

logger = get_logger(__name__)


def _configure(config_path: Optional[str], log_level: Optional[str]):
    config = settings.apply(load_config(config_path))
    setup_logging(
        log_level=log_level or config.logging.level,
        log_file=config.logging.file,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
    )
    return config


@click.group()
@click.version_option(version=__version__)
def cli():
    """Two-party signaling service."""
    pass


@cli.command()
@click.option("--host", default=None, help="Server host (overrides config)")
@click.option("--port", type=int, default=None, help="Server port (overrides config)")
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.option("--log-level", default=None, help="Log level (overrides config)")
def server(host: Optional[str], port: Optional[int], config_path: Optional[str], log_level: Optional[str]):
    """Start the signaling server."""
    from pairline.signaling.server import SignalingServer

    config = _configure(config_path, log_level)
    signaling_server = SignalingServer(host=host, port=port, config=config.server)

    click.echo("=" * 60)
    click.echo("pairline signaling server")
    click.echo(f"Listening on: ws://{signaling_server.host}:{signaling_server.port}")
    click.echo(f"Health check: http://{signaling_server.host}:{signaling_server.port}{config.server.health_path}")
    click.echo("=" * 60)

    try:
        asyncio.run(signaling_server.start())
    except KeyboardInterrupt:
        click.echo("\nShutting down server...")
    finally:
        click.echo("Server stopped.")


@cli.command()
@click.option("--room", "room_id", required=True, help="Room to join")
@click.option("--url", default="ws://localhost:5000", help="Signaling server URL")
@click.option("--log-level", default=None, help="Log level (overrides config)")
def client(room_id: str, url: str, log_level: Optional[str]):
    """Join a room and log the signaling traffic it receives."""
    from pairline.signaling.client import SignalingClient

    _configure(None, log_level)
    signaling_client = SignalingClient(url)

    async def on_ready(should_offer: bool):
        click.echo(f"Room ready, role={signaling_client.role.value}")
        if should_offer:
            await signaling_client.send_offer({"type": "offer", "sdp": ""})

    async def on_offer(offer, rolled_back: bool):
        click.echo(f"Offer received{' (rolled back local offer)' if rolled_back else ''}")
        await signaling_client.send_answer({"type": "answer", "sdp": ""})

    signaling_client.on_created = lambda room: click.echo(f"Created room {room}, waiting for a peer...")
    signaling_client.on_joined = lambda room: click.echo(f"Joined room {room}")
    signaling_client.on_full = lambda room: click.echo(f"Room {room} is full")
    signaling_client.on_ready = on_ready
    signaling_client.on_offer = on_offer
    signaling_client.on_answer = lambda answer: click.echo("Answer received, negotiation complete")
    signaling_client.on_ice_candidate = lambda candidate: click.echo(f"ICE candidate: {candidate}")
    signaling_client.on_peer_media = lambda media: click.echo(
        f"Peer media: audio={media.audio_enabled} video={media.video_enabled}"
    )
    signaling_client.on_peer_left = lambda: click.echo("Peer left, waiting for a new peer...")

    async def run():
        if not await signaling_client.connect():
            raise click.ClickException(f"Could not connect to {url}")
        await signaling_client.join(room_id)
        try:
            while signaling_client.is_connected:
                await asyncio.sleep(0.5)
        finally:
            await signaling_client.disconnect()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        click.echo("\nLeaving...")


def main():
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
