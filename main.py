import argparse
import logging
import sys
from typing import Sequence

from pydantic import ValidationError

from config import ConfigError, JobConfig, Settings
from scheduler import RunResult, count_words

log = logging.getLogger(__name__)

USAGE = "%(prog)s FILE [FILE ...] [--max-threads=N] [--batch-size=N(1000)]"


def parse_args(
    settings: Settings, argv: Sequence[str] | None = None
) -> tuple[argparse.Namespace, list[str]]:
    """Parse flags over environment defaults.

    Unrecognised "--" options are returned rather than rejected, and any
    other leftover token is taken as a file, as the old command line did.
    """
    parser = argparse.ArgumentParser(
        prog="wordcount",
        description="Count word frequencies across text files in parallel.",
        usage=USAGE,
    )
    parser.add_argument("files", nargs="+", metavar="FILE", help="Text files to read")
    parser.add_argument(
        "--max-threads",
        type=int,
        default=settings.MAX_THREADS,
        help="Worker threads shared by files and batches (default: %(default)s)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.BATCH_SIZE,
        help="Words per unit of work (default: %(default)s)",
    )
    parser.add_argument(
        "--shards",
        type=int,
        default=settings.NUM_SHARDS,
        help="Lock shards in the shared counter (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Stop dispatching work after this many seconds",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)

    args, extras = parser.parse_known_args(argv)
    args.files.extend(x for x in extras if not x.startswith("--"))
    return args, [x for x in extras if x.startswith("--")]


def print_report(result: RunResult) -> None:
    for error in result.errors:
        print(f"Error - {error.message}", file=sys.stderr)

    for word, count in result.counts:
        print(f"{word}: {count}")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error - invalid WORDCOUNT_* environment setting: {e}", file=sys.stderr)
        return 2

    args, ignored = parse_args(settings, argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(message)s",
    )
    if ignored:
        log.debug("Ignoring unknown option(s): %s", " ".join(ignored))

    try:
        config = JobConfig(
            files=tuple(args.files),
            max_threads=args.max_threads,
            batch_size=args.batch_size,
            num_shards=args.shards,
            timeout=args.timeout,
        )
    except ConfigError as e:
        print(f"Error - {e}", file=sys.stderr)
        return 2

    result = count_words(config)
    print_report(result)
    log.info("Reported %d word(s) from %d file(s)", result.total_words, len(config.files))

    if result.timed_out:
        print("Warning - timed out, counts are partial", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
