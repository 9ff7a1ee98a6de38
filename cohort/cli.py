"""
Command line interface.

Usage:
    cohort ask "How many students attended in 2025?"
    cohort reindex [--dry-run]
    cohort stats
    cohort check
"""

import argparse
import asyncio
import logging
import sys

from .common.config import load_config, missing_credentials
from .common.errors import CohortError, ConfigurationMissing
from .service import AssistantService

logger = logging.getLogger("cohort.cli")


def _build_service(args) -> AssistantService:
    config = load_config()
    if args.data:
        config.data.path = args.data
    return AssistantService.from_config(config)


async def _ask(service: AssistantService, question: str) -> int:
    result = await service.query(question)
    print(result.answer)
    print()
    if result.used_fallback:
        print("(answered from keyword fallback)")
    if result.sources:
        print("Sources:")
        for source in result.sources:
            score = f"{source.similarity:.2f}" if source.similarity is not None else "-"
            print(f"  - {source.id} ({score})")
    print(
        f"[{result.processing_time:.2f}s, "
        f"{result.usage.input_tokens} in / {result.usage.output_tokens} out tokens]"
    )
    return 0


async def _reindex(service: AssistantService, dry_run: bool) -> int:
    if dry_run:
        stats = service.get_stats()
        print(f"Would rebuild index for {stats['programs']} programs, {stats['students']} students")
        print(f"Currently stored embeddings: {stats['total_embeddings']}")
        return 0
    count = await service.refresh_embeddings()
    print(f"Stored {count} embeddings")
    return 0


def _stats(service: AssistantService) -> int:
    for key, value in service.get_stats().items():
        print(f"{key}: {value}")
    return 0


def _check() -> int:
    config = load_config()
    missing = missing_credentials(config)
    if missing:
        print(f"Missing required configuration: {', '.join(missing)}")
        return 1
    print("Configuration OK")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Ask questions about program rosters")
    parser.add_argument("--data", help="Path to the roster corpus (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a question")
    ask.add_argument("question")

    reindex = sub.add_parser("reindex", help="Delete and rebuild the embedding index")
    reindex.add_argument("--dry-run", action="store_true", help="Print what would be done")

    sub.add_parser("stats", help="Show index and roster counts")
    sub.add_parser("check", help="Verify required credentials are configured")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "check":
        return _check()

    try:
        service = _build_service(args)
        if args.command == "ask":
            return asyncio.run(_ask(service, args.question))
        if args.command == "reindex":
            return asyncio.run(_reindex(service, args.dry_run))
        if args.command == "stats":
            return _stats(service)
    except ConfigurationMissing as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except (CohortError, OSError) as e:
        logger.error("%s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
