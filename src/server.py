"""Protean Engine runner for the storefront domain.

Starts the Engine workers that deliver order events to the notification
dispatcher when event processing is asynchronous (PROTEAN_ENV=production):
- OutboxProcessor: polls the outbox table and publishes events to the broker
- StreamSubscriptions: reads the broker and invokes event handlers

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import asyncio

from protean.server.engine import Engine


def _get_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


async def run():
    engine = Engine(_get_domain())
    await engine.run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
