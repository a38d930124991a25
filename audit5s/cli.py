"""CLI for audit5s — run a 5S assessment on a photo and write reports."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path


async def cmd_assess(args):
    """Assess one area from its photo and export text/Excel/JSON reports."""
    from audit5s.agents.five_s.graph import assess_area
    from audit5s.agents.five_s.tools import generate_improvement_plan
    from audit5s.agents.llm_provider import get_llm_provider
    from audit5s.config import load_settings
    from audit5s.exceptions import AnalysisFailedError, ConfigError, ProviderNotConfiguredError
    from audit5s.schemas import TOTAL_MAX, Area
    from audit5s.services.report_generator import ReportGenerator

    if not os.path.exists(args.config):
        print("Error: Configuration file not found.")
        sys.exit(1)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    area = Area(
        name=args.area or Path(args.image).stem,
        image_path=args.image,
        department=args.department or None,
        assessed_by=args.assessor or None,
    )

    try:
        provider = get_llm_provider(settings)
    except ProviderNotConfiguredError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        assessment = await assess_area(area, provider, settings, args.max_retries)
    except AnalysisFailedError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if assessment is None:
        print(f"Error: image '{area.image_path}' could not be validated or compressed.")
        sys.exit(1)

    output_dir = args.output_dir or settings.reports.output_dir
    reports = ReportGenerator(output_dir, settings.reports.prefix).batch_export(assessment, area)

    print(f"Assessment Results: {area.name}")
    print(f"  Total score: {assessment.total_score:g}/{TOTAL_MAX}")
    for category, entry in assessment.scores.items():
        print(f"  {category:<12} {entry.score:g}")
    if assessment.safety_hazards:
        print(f"  Safety hazards: {len(assessment.safety_hazards)}")

    plan = generate_improvement_plan(assessment)
    for horizon, actions in plan.items():
        if actions:
            print(f"\n{horizon.replace('_', ' ').title()}:")
            for action in actions:
                print(f"  - {action}")

    print("\nReports:")
    for kind, path in reports.items():
        print(f"  {kind}: {path}")


def cmd_serve(args):
    """Run the HTTP API."""
    import uvicorn

    if args.config:
        if not os.path.exists(args.config):
            print("Error: Configuration file not found.")
            sys.exit(1)
        os.environ["AUDIT5S_CONFIG"] = args.config
    uvicorn.run("audit5s.main:app", host=args.host, port=args.port)


def main():
    parser = argparse.ArgumentParser(description="5S workplace audit CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # assess
    ass = subparsers.add_parser("assess", help="Assess an area from a photo")
    ass.add_argument("-a", "--area", default="", help="Name of the area being assessed (defaults to the image name)")
    ass.add_argument("-i", "--image", required=True, help="Path to the image file")
    ass.add_argument("-d", "--department", default="", help="Name of the department")
    ass.add_argument("--assessor", default="", help="Name of the assessor")
    ass.add_argument("-c", "--config", required=True, help="Path to the configuration file")
    ass.add_argument("-o", "--output-dir", default="", help="Report directory (overrides config)")
    ass.add_argument("--max-retries", type=int, default=None, help="Maximum analysis attempts")

    # serve
    srv = subparsers.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("-c", "--config", default="", help="Path to the configuration file")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "assess":
        asyncio.run(cmd_assess(args))
    elif args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
