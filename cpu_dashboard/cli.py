"""Command-line interface for the CPU usage dashboard generator."""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from .config import GrafanaSettings, InvalidEnvironmentValueError, load_dotenv_file
from .dashboards import build_cpu_dashboard
from .grafana import GrafanaClient, PublishResult
from .logging_integration import configure_logging
from .utils.http import HTTPSession

SEND_ACTION = "send"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def report_publish(result: PublishResult) -> int:
    if result.success:
        print("\nDashboard successfully sent to Grafana!")
        print(f"Dashboard URL: {result.grafana_url}")
        return 0
    if result.status_code is None:
        print(f"Error sending dashboard to Grafana: {result.error}", file=sys.stderr)
    else:
        print("Failed to send dashboard to Grafana", file=sys.stderr)
        print(f"Status Code: {result.status_code}", file=sys.stderr)
        print(f"Response: {result.body}", file=sys.stderr)
    return 1


def handle_generate(args: argparse.Namespace, session: Optional[HTTPSession] = None) -> int:
    dashboard_json = build_cpu_dashboard()
    print(dashboard_json)

    if args.action != SEND_ACTION:
        return 0

    try:
        if args.env_file:
            load_dotenv_file(args.env_file)
        settings = GrafanaSettings.from_env()
    except (FileNotFoundError, InvalidEnvironmentValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    client = GrafanaClient.from_settings(settings, session=session)
    return report_publish(client.publish(dashboard_json))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate the CPU usage Grafana dashboard")
    parser.add_argument(
        "action",
        nargs="?",
        choices=[SEND_ACTION],
        help="Upload the generated dashboard to Grafana after printing it",
    )
    parser.add_argument("--env-file", help="Dotenv file with GRAFANA_* settings")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level for diagnostics on stderr",
    )
    return parser


def main(argv: list[str] | None = None, *, session: Optional[HTTPSession] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return handle_generate(args, session=session)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
