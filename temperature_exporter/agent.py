"""
agent.py

Defines the ExporterAgent class, responsible for running the HTTP server
that serves scrapes until the process is asked to stop. There is no polling
loop: every scrape is triggered by an inbound metrics request.

Classes:
    ExporterAgent

Usage:
    agent = ExporterAgent(...)
    agent.run(stop_event)  # blocks until stop_event is set
"""

import logging
import threading
from wsgiref.simple_server import WSGIServer


class ExporterAgent:
    """
    ExporterAgent serves the metrics endpoint on a background thread and
    shuts it down when asked to stop.

    Args:
        logger: Logger instance.
        server: Bound WSGI server.
        shutdown_timeout: Seconds to wait for the serving thread on stop.
    """

    def __init__(
        self,
        logger: logging.Logger,
        server: WSGIServer,
        shutdown_timeout: float = 10.0,
    ) -> None:
        self._logger = logger
        self._server = server
        self._shutdown_timeout = shutdown_timeout
        self._thread: threading.Thread | None = None
        self._error: BaseException | None = None

    def _serve(self, stop_event: threading.Event) -> None:
        try:
            self._server.serve_forever()
        except Exception as e:
            self._error = e
            self._logger.error(f"HTTP server error: {e}")
        finally:
            stop_event.set()

    def run(self, stop_event: threading.Event) -> None:
        """
        Serve until ``stop_event`` is set, then shut the server down.

        The event is also set if the server loop dies on its own; the error
        that killed it is re-raised here.
        """
        self._thread = threading.Thread(
            target=self._serve, args=(stop_event,), name="exporter-http", daemon=True
        )
        self._thread.start()
        self._logger.info("ExporterAgent started.")

        # Short waits keep the main thread responsive to signals.
        while not stop_event.wait(timeout=0.5):
            pass

        self.stop()
        if self._error is not None:
            raise self._error

    def stop(self) -> None:
        """Stop the server loop and release the listening socket."""
        self._logger.info("Shutting down HTTP server...")
        if self._thread is not None and self._thread.is_alive():
            self._server.shutdown()
            self._thread.join(self._shutdown_timeout)
            if self._thread.is_alive():
                self._logger.warning("HTTP server did not stop within %.1fs", self._shutdown_timeout)
        self._server.server_close()
        self._logger.info("HTTP server stopped.")
