"""
Entrypoint: load config and .env, init logging, fetch one URL and report the outcome
"""

import argparse
import asyncio
import sys

import structlog
from dotenv import load_dotenv

from cfetch.config import Config, FetcherSettings
from cfetch.errors import FetchError
from cfetch.fetcher import HTTPFetcher
from cfetch.logging_setup import setup_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BAD_STATUS = 2


def parse_header(value: str):
    name, sep, header_value = value.partition(':')
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a URL with browser headers and challenge detection")
    parser.add_argument("url")
    parser.add_argument("-X", "--method", default="GET")
    parser.add_argument("-H", "--header", dest="headers", action="append", type=parse_header, default=[])
    parser.add_argument("-d", "--data", default=None, help="request body")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--print", dest="print_body", action="store_true", help="write the body to stdout")
    return parser


async def run(args, settings: FetcherSettings) -> int:
    """Fetch args.url and map the outcome to an exit code."""
    async with HTTPFetcher(settings) as fetcher:
        try:
            result = await fetcher.fetch(
                args.url,
                method=args.method.upper(),
                headers=dict(args.headers),
                content=args.data.encode() if args.data is not None else None,
            )
        except FetchError as e:
            logger.error("fetch_error", url=e.url, error=e.message)
            return EXIT_ERROR

    if result.challenge_detected:
        logger.warning("challenge_page_returned", url=result.final_url, status_code=result.status_code, marker=result.challenge)

    if result.ok:
        logger.info("content_retrieved", url=result.final_url, status_code=result.status_code, size=result.size)
        if args.print_body:
            sys.stdout.write(result.text)
        return EXIT_OK

    logger.warning("fetch_failed", url=result.final_url, status_code=result.status_code, error=result.error)
    return EXIT_BAD_STATUS


def main(argv=None) -> int:
    """Initialize dependencies and run a single fetch"""
    args = build_parser().parse_args(argv)

    load_dotenv()

    config = Config(args.config)
    setup_logging(config.logging.get('level', 'INFO'), config.logging.get('format', 'json'))

    return asyncio.run(run(args, FetcherSettings.from_config(config)))


if __name__ == "__main__":
    sys.exit(main())
