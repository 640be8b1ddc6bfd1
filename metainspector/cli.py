#!/usr/bin/env python3
"""
Command-line entry point for MetaInspector.
Analyze a single page from the terminal or run the dashboard server.
"""

import argparse
import json
import sys

from .analyzer import AnalysisResult
from .config import load_config, validate_config
from .inspector import analyze_with_isolation
from .logging_setup import setup_logging
from .validators import normalize_url


def print_report(result: AnalysisResult) -> None:
    """Plain-text summary of an analysis."""
    score = result.score
    print(f"URL: {result.url}")
    print(f"Overall score: {score.overall}%")
    print(
        f"  Essential: {score.essential:.1f}/10  Social: {score.social:.1f}/10  "
        f"Structure: {score.structure:.1f}/10  Performance: {score.performance:.1f}/10"
    )
    print("\nMeta tags:")
    for tag in result.meta_tags:
        print(f"  [{tag.status.upper():7}] {tag.name}: {tag.status_message}")
    if result.recommendations:
        print("\nRecommendations:")
        for rec in result.recommendations:
            print(f"  - ({rec.type}) {rec.title}: {rec.description}")


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="metainspector",
        description="SEO Meta Inspector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  metainspector analyze https://example.com          # Text report
  metainspector analyze example.com --json           # JSON, same shape as the API
  metainspector serve --port 8000                    # Dashboard + REST API
  metainspector health                               # Run health checks
  metainspector validate                             # Check configuration
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a single page")
    analyze_parser.add_argument("url", help="Page URL (https:// is assumed if missing)")
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the dashboard server")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    subparsers.add_parser("health", help="Run health checks and exit")
    subparsers.add_parser("validate", help="Validate configuration and exit")

    args = parser.parse_args(argv)

    setup_logging()
    config = load_config()

    if args.command == "validate":
        errors = validate_config(config)
        if errors:
            print("Configuration errors:")
            for error in errors:
                print(f"  - {error}")
            return 1
        print("Configuration valid")
        return 0

    if args.command == "health":
        from .healthcheck import main as health_main
        return health_main()

    if args.command == "serve":
        import uvicorn

        uvicorn.run(
            "metainspector.server:app",
            host=args.host or config.server.host,
            port=args.port or config.server.port,
        )
        return 0

    result, error = analyze_with_isolation(normalize_url(args.url), config)
    if error:
        print(error, file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
