"""
mockthereum — standalone mock Ethereum node.

Serves the default stub answers (or forwards everything to a real node with
--proxy-to) until interrupted. Useful for pointing a wallet, dapp or script
at a predictable JSON-RPC endpoint.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from mockthereum import get_local
from mockthereum.common.config import DEFAULT_HOST, STUB, ProxyConfig
from mockthereum.node import MockthereumNode


logger = logging.getLogger("mockthereum")


async def run_until_stopped(node: MockthereumNode, port: int) -> None:
    """Run until shutdown signal is received."""
    stop_event = asyncio.Event()

    def _signal_handler():
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await node.start(port)
    logger.info("Mock Ethereum node listening on %s", node.url)
    await stop_event.wait()
    await node.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mockthereum",
        description="Mock Ethereum JSON-RPC node",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=DEFAULT_HOST,
        help=f"Listen address (default: {DEFAULT_HOST})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8545,
        help="JSON-RPC listen port (default: 8545)",
    )
    parser.add_argument(
        "--proxy-to",
        type=str,
        default=None,
        help="Forward unmatched requests to this node URL instead of stubbing them",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    unmatched = ProxyConfig(proxy_to=args.proxy_to) if args.proxy_to else STUB
    node = get_local(unmatched_requests=unmatched, host=args.host)

    try:
        asyncio.run(run_until_stopped(node, args.port))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
