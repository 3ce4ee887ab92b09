"""
Command-line interface for the jail activity publisher.
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from arrestpub.ads import AdvertisementService
from arrestpub.airtable import AirtableClient
from arrestpub.config import Config, load_config
from arrestpub.dates import local_today
from arrestpub.fixtures import SAMPLE_DATE, get_scenario, mock_advertisement, scenario_names
from arrestpub.log import configure_logging, get_logger
from arrestpub.model import ArrestPubError, ConfigError
from arrestpub.pipeline import run_daily_post
from arrestpub.render import FORMAT_HTML, OUTPUT_FORMATS, render_document

logger = get_logger(__name__)


def publish_command(args: argparse.Namespace, config: Config) -> int:
    result = run_daily_post(config, target_date=args.date, draft=args.draft, output_format=args.format)
    if args.json:
        print(json.dumps(result, indent=2))
    logger.info(f"Published {result['record_count']} records for {result['target_date']}: {result['url']}")
    return 0


def render_command(args: argparse.Namespace, config: Config) -> int:
    records = get_scenario(args.scenario)
    ad = mock_advertisement() if args.with_ad else None
    body = render_document(records, args.date, config, ad=ad, output_format=args.format)

    output = args.output
    if output is None:
        extension = "html" if args.format == FORMAT_HTML else "json"
        output = os.path.join(config.server.output_dir, f"preview-{args.scenario}.{extension}")
    os.makedirs(os.path.dirname(os.path.abspath(output)), exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        if isinstance(body, str):
            f.write(body)
        else:
            json.dump(body, f, indent=2, ensure_ascii=False)

    logger.info(f"Rendered {len(records)} records ({args.scenario}) to {output}")
    return 0


def serve_command(args: argparse.Namespace, config: Config) -> int:
    # uvicorn and the UI are only needed here
    from arrestpub.server import serve

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    serve(config, with_ui=args.with_ui)
    return 0


def diagnose_command(args: argparse.Namespace, config: Config) -> int:
    """Print the records-store tables and the fields of a few sample rows."""
    if not config.airtable.api_key or not config.airtable.base_id:
        raise ConfigError("Missing required environment variables: AIRTABLE_API_KEY, AIRTABLE_BASE_ID",
                          missing=["AIRTABLE_API_KEY", "AIRTABLE_BASE_ID"])

    client = AirtableClient.for_records(config)

    schema = client.get_base_schema()
    for table in schema.get("tables", []):
        print(f"Table: {table.get('name')} ({table.get('id')})")
        for field in table.get("fields", []):
            print(f"  - {field.get('name')}: {field.get('type')}")

    rows = client.list_records(config.airtable.table_id, view=config.airtable.view_id, max_records=args.samples)
    print(f"\nSample records from {config.airtable.table_id}: {len(rows)}")
    for row in rows:
        print(f"\n--- {row.get('id')} ---")
        for name, value in sorted(row.get("fields", {}).items()):
            print(f"{name}: {value!r}")
    return 0


def ads_command(args: argparse.Namespace, config: Config) -> int:
    service = AdvertisementService.from_config(config)

    if args.ads_command == "stats":
        result = service.get_advertisement_stats()
    elif args.ads_command == "pending":
        result = service.list_pending_advertisements()
    elif args.ads_command == "review":
        result = service.review_advertisement(args.record_id, args.action, args.notes)
    else:
        result = service.fetch_active_advertisement(local_today(config.publication.timezone))

    print(json.dumps(result, indent=2))
    return 0


COMMANDS = {
    "publish": publish_command,
    "render": render_command,
    "serve": serve_command,
    "diagnose": diagnose_command,
    "ads": ads_command,
}


def process_command(args: argparse.Namespace) -> int:
    """
    Process command-line arguments.

    Args:
        args: Command-line arguments

    Returns:
        Exit code
    """
    config = load_config(args.config)
    configure_logging(config, args.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        for name in e.missing:
            logger.error(f"  - {name}")
        return 1
    except ArrestPubError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Daily jail activity publisher")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    subparsers.required = True

    # Publish command
    publish_parser = subparsers.add_parser("publish", help="Fetch, render and publish the daily article")
    publish_parser.add_argument("--date", help="Date to report on (YYYY-MM-DD), defaults to yesterday")
    publish_parser.add_argument("--draft", action="store_true", help="Create a draft instead of publishing")
    publish_parser.add_argument("--format", choices=OUTPUT_FORMATS, help="Body format sent to the CMS")
    publish_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render a sample scenario to a file")
    render_parser.add_argument("--scenario", default="default", choices=scenario_names(), help="Sample scenario")
    render_parser.add_argument("--date", default=SAMPLE_DATE, help="Date to report on (YYYY-MM-DD)")
    render_parser.add_argument("--format", default=FORMAT_HTML, choices=OUTPUT_FORMATS, help="Output format")
    render_parser.add_argument("--output", help="Output file")
    render_parser.add_argument("--with-ad", action="store_true", help="Include the sample advertisement")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the local preview server")
    serve_parser.add_argument("--host", help="Host to bind")
    serve_parser.add_argument("--port", type=int, help="Port to listen on")
    serve_parser.add_argument("--with-ui", action="store_true", help="Mount the preview UI at /ui")

    # Diagnose command
    diagnose_parser = subparsers.add_parser("diagnose", help="Inspect the records-store schema and sample rows")
    diagnose_parser.add_argument("--samples", type=int, default=3, help="Number of sample rows")

    # Advertisement commands
    ads_parser = subparsers.add_parser("ads", help="Manage advertisements")
    ads_subparsers = ads_parser.add_subparsers(dest="ads_command", help="Advertisement command")
    ads_subparsers.required = True
    ads_subparsers.add_parser("active", help="Show the advertisement that would run today")
    ads_subparsers.add_parser("stats", help="Count advertisements per status")
    ads_subparsers.add_parser("pending", help="List submissions awaiting review")
    review_parser = ads_subparsers.add_parser("review", help="Approve or reject a submission")
    review_parser.add_argument("record_id", help="Advertisement record id")
    review_parser.add_argument("action", choices=["approve", "reject"], help="Review action")
    review_parser.add_argument("--notes", help="Admin notes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    args = build_parser().parse_args(argv)

    try:
        return process_command(args)
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
