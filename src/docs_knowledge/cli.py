"""Command-line entry point: ``docs-knowledge ingest | search | serve``."""

from __future__ import annotations

import argparse
import logging
import sys

from docs_knowledge.config import settings
from docs_knowledge.errors import IndexNotFound, KnowledgeBaseError

logger = logging.getLogger("docs_knowledge")


def _configure_logging(level: str) -> None:
    # stdout is the MCP protocol channel, so logs always go to stderr.
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _cmd_ingest(args: argparse.Namespace) -> int:
    from docs_knowledge.ingestion.pipeline import ingest_corpus

    print(f"Starting ingestion from {args.docs_dir or settings.docs_dir}")
    try:
        report = ingest_corpus(settings, docs_dir=args.docs_dir)
    except KnowledgeBaseError as exc:
        logger.error("Ingestion failed: %s", exc, exc_info=True)
        print(f"Ingestion failed: {exc}", file=sys.stderr)
        return 1

    if report.empty:
        print(f"Warning: {report.summary()}")
    else:
        print(report.summary())
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    from docs_knowledge.retrieval.retriever import KnowledgeRetriever

    print(f'Searching for: "{args.question}"...')
    try:
        hits = KnowledgeRetriever().search(args.question, k=args.k)
    except IndexNotFound:
        print("No results found. Did you run 'docs-knowledge ingest'?")
        return 1
    except KnowledgeBaseError as exc:
        logger.error("Error during search: %s", exc, exc_info=True)
        return 1

    if not hits:
        print("No results found. Did you run 'docs-knowledge ingest'?")
        return 0
    for hit in hits:
        print(f"\nSource: {hit.record.title} ({hit.record.path}, score={hit.score:.3f})")
        print(f"Content snippet: {hit.record.content[:150]}...")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    from docs_knowledge.serving.mcp_server import run_stdio

    run_stdio()
    return 0


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docs-knowledge", description="Documentation knowledge base")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Rebuild the index from the docs folder")
    ingest.add_argument("--docs-dir", default=None, help="Override the configured docs folder")
    ingest.set_defaults(func=_cmd_ingest)

    search = sub.add_parser("search", help="Print the best matches for a question")
    search.add_argument("question")
    search.add_argument("-k", type=_positive_int, default=1, help="Number of matches (default: %(default)s)")
    search.set_defaults(func=_cmd_search)

    serve = sub.add_parser("serve", help="Run the MCP tool server on stdio")
    serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
