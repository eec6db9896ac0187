"""
Export the results of one Splunk search to CSV without running the gateway.

It will:
- Run the SPL query against Splunk's /services/search/jobs/export endpoint
- Locate the result records in the response
- Write them to <output-dir>/splunk_results_YYYYMMDD_HHMMSS.csv
- Print the path of the written file

Usage:
  python splunk_export.py --query "search index=main error | stats count by host"

Env vars (optional defaults):
  SPLUNK_BASE_URL, SPLUNK_AUTH_TOKEN, SPLUNK_VERIFY, SPLUNK_TIMEOUT, EXPORT_OUTPUT_DIRECTORY
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from export.config import ExportConfig
from export.csv_writer import CsvResultWriter
from orchestrator.orchestrator import AggregationOrchestrator
from shared.exceptions import SplunkAggregatorException
from shared.logger import setup_logging
from splunk_integration.client import SplunkClient
from splunk_integration.config import SplunkConfig


def build_orchestrator(args: argparse.Namespace) -> AggregationOrchestrator:
    """Build settings from CLI flags, letting unset flags fall back to the environment."""
    splunk_overrides: Dict[str, Any] = {}
    if args.base_url:
        splunk_overrides["base_url"] = args.base_url
    if args.token:
        splunk_overrides["auth_token"] = args.token
    if args.no_verify:
        splunk_overrides["verify"] = False
    if args.timeout is not None:
        splunk_overrides["timeout"] = args.timeout

    export_overrides: Dict[str, Any] = {}
    if args.output_dir:
        export_overrides["output_directory"] = args.output_dir

    return AggregationOrchestrator(
        splunk_client=SplunkClient(SplunkConfig(**splunk_overrides)),
        csv_writer=CsvResultWriter(ExportConfig(**export_overrides)),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export Splunk search results to a CSV file")
    parser.add_argument("--query", required=True, help="SPL query, passed to Splunk verbatim")
    parser.add_argument("--base-url", help="Splunk management URL (default: env SPLUNK_BASE_URL)")
    parser.add_argument("--token", help="Bearer token (default: env SPLUNK_AUTH_TOKEN)")
    parser.add_argument("--output-dir", help="Directory for CSV files (default: env EXPORT_OUTPUT_DIRECTORY or ./output)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default: none)")
    parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Disable TLS verification (useful for self-signed certs)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level for structured logs on stdout")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_level)

    orchestrator = build_orchestrator(args)
    try:
        file_path = asyncio.run(orchestrator.aggregate(args.query))
    except SplunkAggregatorException as e:
        print(f"Export failed: {e}", file=sys.stderr)
        raise SystemExit(1) from e

    print(file_path)


if __name__ == "__main__":
    main()
