import logging
import threading
from unittest.mock import MagicMock

import pytest

from temperature_exporter.agent import ExporterAgent


class FakeServer:
    """Blocks in serve_forever until shutdown() is called."""

    def __init__(self, error=None):
        self._stopped = threading.Event()
        self._error = error
        self.serving = threading.Event()
        self.closed = False

    def serve_forever(self):
        self.serving.set()
        if self._error:
            raise self._error
        self._stopped.wait(5)

    def shutdown(self):
        self._stopped.set()

    def server_close(self):
        self.closed = True


def make_agent(server):
    logger = MagicMock(spec=logging.Logger)
    return ExporterAgent(logger=logger, server=server, shutdown_timeout=1.0), logger


def test_run_serves_until_stop_event():
    server = FakeServer()
    agent, _ = make_agent(server)
    stop_event = threading.Event()

    runner = threading.Thread(target=agent.run, args=(stop_event,))
    runner.start()
    assert server.serving.wait(2)
    stop_event.set()
    runner.join(5)

    assert not runner.is_alive()
    assert server.closed


def test_server_error_propagates():
    server = FakeServer(error=OSError("socket gone"))
    agent, logger = make_agent(server)

    with pytest.raises(OSError, match="socket gone"):
        agent.run(threading.Event())

    assert server.closed
    logger.error.assert_called_once()


def test_stop_without_run_closes_server():
    server = FakeServer()
    agent, _ = make_agent(server)
    agent.stop()
    assert server.closed
