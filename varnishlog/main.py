#!/usr/bin/env python3
"""varnishlog-parse — turn varnishlog output into transaction records."""

import argparse
import logging
import os
import signal
import sys

from varnishlog.channel import LineChannel
from varnishlog.config import OUTPUT_FORMATS, load_config, load_yaml_config
from varnishlog.errors import EndOfStream, MalformedInput
from varnishlog.formatter import get_formatter
from varnishlog.reader import read_transaction
from varnishlog.sources import FileFollower, VarnishlogProcess, start_file_feeder

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="varnishlog-parse",
        description="Parse varnishlog output into transactions.",
    )
    parser.add_argument(
        "file", nargs="?",
        help="varnishlog text output to read (default: run --command)",
    )
    parser.add_argument(
        "--follow", action="store_true", default=None,
        help="Keep reading FILE as it grows (like tail -f)",
    )
    parser.add_argument(
        "--command",
        help="varnishlog command to spawn when no FILE is given",
    )
    parser.add_argument(
        "--output", choices=OUTPUT_FORMATS,
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--skip-malformed", action="store_true", default=None,
        help="Log malformed input and keep reading instead of exiting",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: INFO)",
    )
    return parser


def _signal_handler(sig, frame):
    # run() stops the sources in its finally block
    raise KeyboardInterrupt


def run(config, out=sys.stdout) -> int:
    """Start the configured source, print transactions, return exit status."""
    channel = LineChannel(maxsize=config.queue_size)
    formatter = get_formatter(config.output)

    follower = None
    process = None
    if config.log_file and config.follow:
        follower = FileFollower(config.log_file, channel)
        follower.start()
    elif config.log_file:
        start_file_feeder(config.log_file, channel)
    else:
        process = VarnishlogProcess(config.command, channel)
        process.start()

    count = 0
    errors = 0
    try:
        while True:
            try:
                tx = read_transaction(channel)
            except EndOfStream:
                break
            except MalformedInput as e:
                errors += 1
                if not config.skip_malformed:
                    logger.error("%s", e)
                    return 1
                logger.warning("Skipping malformed input: %s", e)
                continue
            count += 1
            print(formatter(tx), file=out, flush=True)
    finally:
        if follower is not None:
            follower.stop()
        if process is not None:
            process.stop()

    logger.info("Read %d transaction(s), %d malformed", count, errors)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    yaml_data = load_yaml_config(args.config)
    try:
        config = load_config(args, yaml_data)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [VARNISHLOG] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if config.follow and not config.log_file:
        print("Error: --follow requires a FILE", file=sys.stderr)
        return 1

    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        return run(config)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Shutdown signal received, stopped.")
        return 0
    except BrokenPipeError:
        # stdout reader went away; keep the interpreter from flushing into it again
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 0


if __name__ == "__main__":
    sys.exit(main())
