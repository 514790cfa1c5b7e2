"""Command-line entry point: ``story-indexer {index,chunk,serve}``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from story_indexer.config import settings
from story_indexer.errors import IndexingError
from story_indexer.ingestion.chunker import chunk_markdown
from story_indexer.models import StorageObject

logger = logging.getLogger(__name__)


def parse_gcs_uri(uri: str) -> StorageObject:
    """Split ``gs://bucket/key`` into a :class:`StorageObject`."""
    if not uri.startswith("gs://"):
        raise ValueError(f"Expected a gs:// URI, got {uri!r}")
    bucket, _, name = uri[len("gs://") :].partition("/")
    if not bucket or not name:
        raise ValueError(f"URI must name a bucket and an object: {uri!r}")
    return StorageObject(bucket=bucket, name=name)


def _gcs_uri_arg(value: str) -> StorageObject:
    try:
        return parse_gcs_uri(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be a non-negative integer, got {value}")
    return number


def _cmd_index(args: argparse.Namespace) -> int:
    from story_indexer.backends.factory import build_pipeline

    obj = args.uri
    try:
        result = build_pipeline(settings).run(obj)
    except IndexingError:
        logger.exception("Indexing %s failed", obj.uri)
        return 1
    print(result.model_dump_json(indent=2))
    return 0


def _cmd_chunk(args: argparse.Namespace) -> int:
    text = Path(args.path).read_text(encoding="utf-8")
    chunks = chunk_markdown(text, args.chunk_size, args.chunk_overlap)
    for chunk in chunks:
        print(json.dumps({"index": chunk.sequence_index, "chars": len(chunk.text), "text": chunk.text}))
    logger.info("Produced %d chunks from %s", len(chunks), args.path)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("story_indexer.serving.app:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="story-indexer", description="Story document indexer")
    sub = parser.add_subparsers(dest="command", required=True)

    index = sub.add_parser("index", help="Index one object, e.g. gs://bucket/users/.../x.md")
    index.add_argument("uri", type=_gcs_uri_arg)
    index.set_defaults(func=_cmd_index)

    chunk = sub.add_parser("chunk", help="Print the chunks of a local Markdown file")
    chunk.add_argument("path")
    chunk.add_argument("--chunk-size", type=_positive_int, default=settings.chunk_size)
    chunk.add_argument("--chunk-overlap", type=_non_negative_int, default=settings.chunk_overlap)
    chunk.set_defaults(func=_cmd_chunk)

    serve = sub.add_parser("serve", help="Run the HTTP event receiver")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
