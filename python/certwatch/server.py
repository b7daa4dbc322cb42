import asyncio
import logging
import signal
from typing import Optional

from aiohttp import web
from aiohttp.web_app import Application
from aiohttp.web_response import json_response
from aiohttp.web_runner import AppRunner, TCPSite

from certwatch import CertWatchBaseException, metrics
from certwatch.certs.loader import LoadedCertificate
from certwatch.certs.probe import CertificateSource
from certwatch.datamodel import CertWatchConfig
from certwatch.exceptions import ShutdownRequested
from certwatch.files.watchdog import FilesWatchdog
from certwatch.utils.async_utils import add_async_signal_handler, remove_signal_handler
from certwatch.watcher import CertWatcher, PreemptiveInvoker

logger = logging.getLogger(__name__)


class CertificateServer:
    """
    HTTPS server bound to a single certificate. Used as the consumer of the certificate
    watcher: every invocation serves until it is cancelled, and the listening socket is closed
    before the invocation finishes, so the next one can bind the same address.
    """

    def __init__(self, listen: str, port: int) -> None:
        self._listen = listen
        self._port = port

    def _create_app(self, cert: LoadedCertificate) -> Application:
        async def handler_index(_request: web.Request) -> web.Response:
            return json_response(
                {
                    "msg": "certwatch is running",
                    "status": "RUNNING",
                    "certificate": {
                        "subject": cert.subject,
                        "serial": f"{cert.serial_number:x}",
                        "not-valid-after": cert.not_valid_after.isoformat(),
                        "sha256": cert.fingerprint(),
                    },
                }
            )

        async def handler_metrics(_request: web.Request) -> web.Response:
            report = metrics.report_prometheus()
            if report is None:
                raise web.HTTPNotFound(text="Prometheus metrics are not available, 'prometheus_client' is missing")
            return web.Response(body=report, headers={"Content-Type": str(metrics.METRICS_CONTENT_TYPE)})

        app = Application()
        app.add_routes(
            [
                web.get("/", handler_index),
                web.get("/metrics", handler_metrics),
            ]
        )
        return app

    async def __call__(self, cert: LoadedCertificate) -> None:
        runner = AppRunner(self._create_app(cert))
        await runner.setup()
        try:
            site = TCPSite(runner, self._listen, self._port, ssl_context=cert.ssl_context())
            await site.start()
            logger.info(f"Serving HTTPS on https://{self._listen}:{self._port} with {cert}")

            # serve until cancelled
            await asyncio.Event().wait()
        finally:
            logger.info(f"Stopping HTTPS server on https://{self._listen}:{self._port}")
            await runner.cleanup()


async def start_server(config: CertWatchConfig) -> int:
    """
    Run the HTTPS server with certificate rotation until it is stopped by a signal
    or fails. Returns the process exit code.
    """

    source = CertificateSource(config.source.to_path())
    consumer = CertificateServer(str(config.server.listen), int(config.server.port))
    invoker = PreemptiveInvoker(consumer, config.drain_timeout_seconds())

    wakeup: Optional[asyncio.Event] = None
    files_watchdog: Optional[FilesWatchdog] = None
    if config.watchdog:
        wakeup = asyncio.Event()
        files_watchdog = FilesWatchdog(source, wakeup)

    watcher = CertWatcher(source, invoker, config.interval_seconds(), wakeup)

    async def stop_handler() -> None:
        logger.info("Received termination signal, triggering graceful shutdown")
        watcher.stop()

    add_async_signal_handler(signal.SIGTERM, stop_handler)
    add_async_signal_handler(signal.SIGINT, stop_handler)
    try:
        if files_watchdog is not None:
            files_watchdog.start()
        await watcher.run()
        logger.info("HTTPS server finished on its own")
        return 0
    except ShutdownRequested:
        logger.info("Graceful shutdown finished")
        return 0
    except CertWatchBaseException as e:
        logger.error(e)
        return 1
    except Exception:
        logger.error("HTTPS server failed with an unexpected exception", exc_info=True)
        return 1
    finally:
        if files_watchdog is not None:
            files_watchdog.stop()
        remove_signal_handler(signal.SIGTERM)
        remove_signal_handler(signal.SIGINT)
