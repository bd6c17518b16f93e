"""CLI interface for sonarqube_exporter."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time

from . import __version__
from .collector.manager import Collector
from .config import load_config
from .exporter.prometheus import build_registry, full_name, render, serve


def _cmd_serve(args: argparse.Namespace) -> None:
    """Serve metrics until interrupted."""
    cfg = load_config(args.config)
    if not cfg.sonar.url:
        logging.getLogger(__name__).warning("SONAR_URL is not set; every scrape will report up=0")

    collector = Collector.from_config(cfg)
    registry = build_registry(collector, cfg.scrape.namespace)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    server = serve(registry, cfg.server.port, cfg.server.address)
    print(f"sonarqube_exporter listening on {cfg.server.address}:{cfg.server.port} (target={cfg.sonar.url or '(unset)'})")
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        server.shutdown()
        server.server_close()
    print("\nExporter stopped.")


def _cmd_scrape(args: argparse.Namespace) -> None:
    """Run a single scrape and print the exposition text (or JSON samples)."""
    cfg = load_config(args.config)
    collector = Collector.from_config(cfg)
    if args.json:
        result = collector.scrape()
        payload = {
            "available": result.available,
            "error": str(result.error) if result.error else None,
            "failed_sources": list(result.failed_sources),
            "samples": result.to_dict(),
        }
        print(json.dumps(payload, indent=2))
        return
    registry = build_registry(collector, cfg.scrape.namespace)
    sys.stdout.write(render(registry).decode("utf-8"))


def _cmd_describe(args: argparse.Namespace) -> None:
    """Print the declared metric schema."""
    cfg = load_config(args.config)
    collector = Collector.from_config(cfg)
    for descriptor in collector.metrics:
        labels = ",".join(descriptor.label_names)
        name = full_name(cfg.scrape.namespace, descriptor.name)
        print(f"{name}{{{labels}}}  {descriptor.documentation}" if labels else f"{name}  {descriptor.documentation}")


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"sonarqube_exporter {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the sonarqube-exporter CLI."""
    parser = argparse.ArgumentParser(
        prog="sonarqube-exporter",
        description="Expose SonarQube server metrics for Prometheus",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to sonarqube_exporter.yaml")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command")

    serve_p = sub.add_parser("serve", help="Start the metrics listener")
    serve_p.set_defaults(func=_cmd_serve)

    scrape_p = sub.add_parser("scrape", help="Scrape once and print metrics to stdout")
    scrape_p.add_argument("--json", action="store_true", help="Print samples as JSON instead of exposition text")
    scrape_p.set_defaults(func=_cmd_scrape)

    describe_p = sub.add_parser("describe", help="List exported metric names and labels")
    describe_p.set_defaults(func=_cmd_describe)

    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
