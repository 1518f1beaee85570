"""TickerHug - Entry Point.

Serves a tiny HTTP surface for an external scheduler (cron, uptime pinger):

    GET /          welcome text
    GET /health    liveness probe
    GET /run-cron  fetch the account state and text the digest

A failed SMS send answers 500 so the scheduler sees the run as failed.
"""

import asyncio
import logging
import signal
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Tuple

from .alerting.dispatcher import SmsDispatcher, build_channel
from .config import Settings
from .digest import DigestRunner
from .signing import iso_timestamp

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome to TickerHug! 🚀"
RUN_OK_TEXT = "Cron job executed successfully."
RUN_FAILED_TEXT = "Cron job failed."


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def run_digest(runner: DigestRunner) -> Tuple[int, str]:
    """Run one digest and map the outcome to an HTTP status and body."""
    try:
        result = asyncio.run(runner.run())
    except Exception as e:
        logger.error(f"Cron job failed: {e}", exc_info=True)
        return 500, RUN_FAILED_TEXT

    if not result.success:
        logger.error(f"Cron job failed: SMS not delivered ({result.dispatch.error})")
        return 500, RUN_FAILED_TEXT

    logger.info(f"cron ran at {iso_timestamp()}")
    return 200, RUN_OK_TEXT


def make_handler(runner_factory: Callable[[], DigestRunner]):
    """Build the request handler class bound to a digest runner factory."""

    class _Handler(BaseHTTPRequestHandler):
        def _reply(self, status: int, body: str) -> None:
            payload = body.encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def do_GET(self):
            path = self.path.split("?", 1)[0]
            if path == "/":
                logger.info(WELCOME_TEXT)
                self._reply(200, WELCOME_TEXT)
            elif path == "/health":
                self._reply(200, "ok")
            elif path == "/run-cron":
                status, body = run_digest(runner_factory())
                self._reply(status, body)
            else:
                self._reply(404, "Not found")

        def log_message(self, *args):
            pass  # suppress HTTP access logs

    return _Handler


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, shutting down...")
    sys.exit(0)


def main():
    """Main entry point."""
    settings = Settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info("TICKERHUG")
    logger.info("=" * 60)

    channel = build_channel(settings)
    dispatcher = SmsDispatcher(channel, settings.recipient_phone_number)

    logger.info(f"OKX credentials configured: {settings.okx_enabled}")
    logger.info(f"Instruments: {', '.join(settings.instruments)}")
    logger.info(f"SMS channel: {channel.channel_type.value} (enabled: {channel.enabled})")
    logger.info(f"Message budget: {settings.message_budget} chars")

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    handler = make_handler(lambda: DigestRunner(settings, dispatcher))
    server = ThreadingHTTPServer(("", settings.port), handler)
    logger.info(f"Server running on port {settings.port}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
