"""Protean Engine runner for Cartxis domains.

Starts Engine workers that process events asynchronously:
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Usage:
    python src/server.py                  # Run every domain engine
    python src/server.py --domain sales   # Run only the sales engine
"""

import argparse
import asyncio

from protean.server.engine import Engine
from shared.logging import configure_logging

DOMAIN_NAMES = ["catalog", "customers", "sales"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "catalog":
        from catalog.domain import catalog

        domain = catalog
    elif name == "customers":
        from customers.domain import customers

        domain = customers
    elif name == "sales":
        from sales.domain import sales

        domain = sales
    else:
        raise ValueError(f"Unknown domain: {name}")

    domain.init()
    return domain


async def run(domain_names):
    engines = [Engine(_get_domain(name)) for name in domain_names]
    await asyncio.gather(*(engine.run() for engine in engines))


def main():
    parser = argparse.ArgumentParser(description="Cartxis Engine runner")
    parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        help="Run a single domain engine (default: run all)",
    )
    args = parser.parse_args()

    configure_logging()
    domain_names = [args.domain] if args.domain else DOMAIN_NAMES

    asyncio.run(run(domain_names))


if __name__ == "__main__":
    main()
