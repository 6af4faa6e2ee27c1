#!/usr/bin/env python3
"""
Command-line access to the reporting service.

Usage:
    python -m reporting_client --service-url http://tank:8080 timing-csv 42
    python -m reporting_client periodic-csv 42 --period 30 --min-date 2024-01-01T00:00:00
    python -m reporting_client file agent/debug.log --from 2048 -o debug.log
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import httpx

from reporting_client import config
from reporting_client.client import ReportServiceClient
from reporting_client.errors import ReportingError
from reporting_client.streams import ReportStream


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for a command run."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def byte_offset(value: str) -> int:
    offset = int(value)
    if offset < 0:
        raise argparse.ArgumentTypeError(f"offset must not be negative: {value}")
    return offset


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reporting_client",
        description="Fetch, trigger and delete performance-test timing data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Raw timing data for job 42
    python -m reporting_client --service-url http://tank:8080 timing-csv 42

    # 30 second buckets from a given start time, written to a file
    python -m reporting_client periodic-csv 42 --period 30 --min-date 2024-01-01T00:00:00 -o out.csv

    # Tail an agent log from byte 2048
    python -m reporting_client file 42/agent.log --from 2048

The service URL and proxy default to REPORT_SERVICE_URL, REPORT_PROXY_SERVER
and REPORT_PROXY_PORT.
        """,
    )

    parser.add_argument("--service-url", default=config.SERVICE_URL, help="Reporting service base URL")
    parser.add_argument("--proxy-server", default=config.PROXY_SERVER, help="Forward requests through this host")
    parser.add_argument("--proxy-port", type=int, default=config.PROXY_PORT, help="Port of the proxy host")
    parser.add_argument("--timeout", type=float, default=300.0, help="Request timeout in seconds (default: 300)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)

    periodic = commands.add_parser("periodic-csv", help="Timing data bucketed by period")
    periodic.add_argument("job_id")
    periodic.add_argument("--period", type=int, choices=config.VALID_PERIODS, default=None)
    periodic.add_argument("--min-date", type=datetime.fromisoformat, default=None, help="Inclusive, ISO format")
    periodic.add_argument("--max-date", type=datetime.fromisoformat, default=None, help="Exclusive, ISO format")

    downloads = [periodic]
    for name, help_text in (("timing-csv", "Raw timing data"), ("summary-csv", "Summary timing data")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("job_id")
        downloads.append(sub)

    file_cmd = commands.add_parser("file", help="A file below the service's logs directory")
    file_cmd.add_argument("file_path")
    file_cmd.add_argument("--from", dest="start", type=byte_offset, default=None, help="Bytes to skip")

    downloads.append(file_cmd)

    for sub in downloads:
        sub.add_argument("-o", "--output", type=Path, default=None, help="Write to a file instead of stdout")

    process = commands.add_parser("process", help="Trigger summary processing for a job")
    process.add_argument("job_id")

    delete = commands.add_parser("delete", help="Delete raw timing data for a job")
    delete.add_argument("job_id")

    return parser


def _write_stream(stream: ReportStream, output: Path | None) -> int:
    with stream:
        if output is None:
            size = stream.copy_to(sys.stdout.buffer)
            sys.stdout.buffer.flush()
            return size
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "wb") as f:
            return stream.copy_to(f)


def run(args: argparse.Namespace, client: ReportServiceClient) -> None:
    """Execute one parsed command against the client."""
    if args.command == "process":
        client.process_summary(args.job_id)
        logging.info(f"Triggered summary processing for job {args.job_id}")
        return
    if args.command == "delete":
        client.delete_timing(args.job_id)
        logging.info(f"Deleted timing data for job {args.job_id}")
        return

    if args.command == "periodic-csv":
        stream = client.get_bucket_timing_data(args.job_id, args.period, args.min_date, args.max_date)
    elif args.command == "timing-csv":
        stream = client.get_timing_csv(args.job_id)
    elif args.command == "summary-csv":
        stream = client.get_summary_timing_csv(args.job_id)
    else:
        stream = client.get_file(args.file_path, args.start)

    size = _write_stream(stream, args.output)
    logging.info(f"Received {size} bytes")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the reporting CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.service_url:
        print("Error: --service-url or REPORT_SERVICE_URL is required", file=sys.stderr)
        return 1

    try:
        with ReportServiceClient(
            args.service_url,
            proxy_server=args.proxy_server,
            proxy_port=args.proxy_port,
            timeout=args.timeout,
        ) as client:
            run(args, client)
        return 0

    except (ReportingError, httpx.TransportError) as e:
        logging.debug("Request failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
