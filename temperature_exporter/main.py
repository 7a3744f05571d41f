"""
main.py

Bootstrap entry point for the temperature exporter. Parses command-line
flags, loads configuration, sets up logging, builds the discovery backends
and the collector, binds the HTTP server and runs the exporter agent until
SIGINT or SIGTERM.
"""

import argparse
import logging
import signal
import threading

from prometheus_client import CollectorRegistry

from temperature_exporter.__version__ import __version__
from temperature_exporter.agent import ExporterAgent
from temperature_exporter.config_loader import ConfigLoader
from temperature_exporter.inputs.sensors.factory import BackendFactory
from temperature_exporter.logging_setup import setup_logging
from temperature_exporter.outputs.http_server import build_server, make_exporter_app, with_request_logging
from temperature_exporter.telemetry import TemperatureCollector


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser. Every flag defaults to None so that only
    flags given explicitly override the config file.
    """
    parser = argparse.ArgumentParser(
        prog="temperature-exporter",
        description="Expose hwmon, thermal zone and lm-sensors temperatures as Prometheus metrics.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--listen", help="HTTP listen address, e.g. :9102")
    parser.add_argument("--path", dest="metrics_path", help="HTTP path serving the metrics")
    parser.add_argument("--hwmon", dest="hwmon_path", help="Base path of the hwmon sensors")
    parser.add_argument("--thermal", dest="thermal_path", help="Base path of the thermal zones")
    parser.add_argument("--enable-hwmon", action=argparse.BooleanOptionalAction, default=None,
                        help="Read temperatures from hwmon")
    parser.add_argument("--enable-thermal", action=argparse.BooleanOptionalAction, default=None,
                        help="Read temperatures from thermal zones")
    parser.add_argument("--enable-sensors-cli", action=argparse.BooleanOptionalAction, default=None,
                        help="Read temperatures from 'sensors -j' (requires lm-sensors)")
    parser.add_argument("--sensors-cli-path", help="Path of the 'sensors' command")
    parser.add_argument("--sensors-timeout", help="Timeout for 'sensors -j', e.g. 2s")
    parser.add_argument("--namespace", help="Prometheus metric name prefix")
    parser.add_argument("--read-timeout", help="HTTP connection read timeout, e.g. 5s")
    parser.add_argument("--shutdown-timeout", help="Graceful shutdown timeout, e.g. 10s")
    parser.add_argument("--log-requests", action=argparse.BooleanOptionalAction, default=None,
                        help="Log HTTP requests (method, path, status, duration)")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--log-dir", help="Directory for a rotating log file")
    return parser


def main(argv=None):
    """
    Initialize and run the exporter.

    Configuration errors and HTTP bind failures propagate and end the
    process; everything that happens during a scrape is handled by the
    collector.
    """
    args = build_arg_parser().parse_args(argv)

    bootstrap_logger = logging.getLogger("bootstrap")
    bootstrap_logger.setLevel(logging.INFO)
    bootstrap_logger.addHandler(logging.StreamHandler())

    loader = ConfigLoader(logger=bootstrap_logger, overrides=vars(args))
    config = loader.as_dict()

    logger = setup_logging(
        log_dir=config["log_dir"],
        log_file_name="temperature_exporter.log",
        log_level=config["log_level"],
    )
    bootstrap_logger.propagate = False

    backends = BackendFactory().build_all(loader.backends_config())
    if not backends:
        logger.warning("No backends enabled. Only the scrape duration will be exported.")

    collector = TemperatureCollector(backends=backends, namespace=config["namespace"])
    registry = CollectorRegistry()
    registry.register(collector)

    app = make_exporter_app(registry, metrics_path=config["metrics_path"])
    if config["log_requests"]:
        app = with_request_logging(app)

    server = build_server(app, config["listen"], read_timeout=config["read_timeout"])

    logger.info(
        f"Starting temperature exporter {__version__} on {config['listen']}{config['metrics_path']} "
        f"(backends: {', '.join(b.source.value for b in backends) or 'none'})"
    )

    stop_event = threading.Event()

    def _handle_signal(signum, _frame):
        logger.info(f"Received signal {signal.Signals(signum).name}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    agent = ExporterAgent(logger=logger, server=server, shutdown_timeout=config["shutdown_timeout"])
    agent.run(stop_event)


if __name__ == "__main__":
    main()
