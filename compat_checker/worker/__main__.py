"""
One-shot compatibility check - Run with: python -m compat_checker.worker

Loads an add-on enumeration from a JSON file (a list of
{id, name, enabled, type, installType} objects), fetches the remote report,
rebuilds the table and prints the badge and the ranked detail rows.
"""

# Load .env file before other imports that might use env vars
from dotenv import load_dotenv
load_dotenv()

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Add-on compatibility check")
    parser.add_argument(
        "--addons",
        required=True,
        type=Path,
        help="JSON file listing installed add-ons"
    )
    parser.add_argument(
        "--host-version",
        default=None,
        help="Version of the running host build (e.g., 128.5.0esr)"
    )
    parser.add_argument(
        "--report-url",
        default=None,
        help="Override COMPAT_REPORT_URL"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the detail view as JSON"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging"
    )
    return parser.parse_args(argv)


async def run_check(settings, addons, host_version=None):
    """Run a single refresh and return (status, detail)."""
    from .jobs import Job, JobKind
    from .platform import InventoryAddonSource, StaticHostInfo
    from .service import CompatService

    service = CompatService.from_settings(
        settings,
        addon_source=InventoryAddonSource(addons),
        host_info=StaticHostInfo(host_version),
    )
    service.scheduler.enqueue(Job(kind=JobKind.REBUILD, throttle=False))
    await service.scheduler.wait_idle()
    return await service.get_status(), await service.get_detail()


def main(argv=None):
    """Main entry point for the one-shot check."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logger = logging.getLogger("compat")

    from dataclasses import replace
    from ..config import load_settings
    from ..models import LocalAddon

    settings = load_settings()
    if args.report_url:
        settings = replace(settings, report_url=args.report_url)

    try:
        raw = json.loads(args.addons.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read add-on list {args.addons}: {e}")
        return 2
    addons = [LocalAddon.model_validate(item) for item in raw]

    status, detail = asyncio.run(run_check(settings, addons, args.host_version))

    if status["summary"] is None:
        logger.error("No compatibility data (report fetch failed?)")
        return 1

    if args.json:
        print(json.dumps(detail.to_dict(), indent=2, ensure_ascii=False, default=str))
        return 0

    summary = status["summary"]
    print(f"Badge: {summary['badgeText']} ({summary['badgeColor']})")
    print(f"Report generated: {detail.last_update}")
    print()
    header = "".join(f"{column.type} {column.app_version or ''}".ljust(22) for column in detail.columns)
    print(f"{'rank':<6}{'add-on':<40}{header}")
    for row in detail.rows:
        cells = "".join(row.cells[column.type].state.ljust(22) for column in detail.columns)
        name = row.name if row.enabled else f"{row.name} (disabled)"
        print(f"{row.rank:<6}{name[:38]:<40}{cells}")
    if detail.status:
        print()
        print(f"Status: {detail.status.state} - {detail.status.suggestion}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
