"""
Continuous source with automatic resubscription.

A simulated price feed delivers a few ticks and then drops the
connection. The subscription publishes every tick as a success state,
publishes the error, and resubscribes after the backoff delay. Because
each feed instance was healthy before it dropped, every resubscription
starts a fresh backoff cycle.

## Run with
```bash
PYTHONPATH=src python examples/price_feed.py
```
"""

import asyncio
import logging
import random

from pyasyncstate import RetryPolicy, Status, create, when

logging.basicConfig(level=logging.INFO)


async def price_feed(symbol: str = "ACME"):
    price = 100.0
    for _ in range(3):
        await asyncio.sleep(0.05)
        price += random.uniform(-1.0, 1.0)
        yield round(price, 2)
    raise ConnectionResetError(f"{symbol} feed dropped")


def render(state) -> None:
    print(
        when(
            state,
            idle=lambda: "waiting",
            loading=lambda attempt: f"connecting (attempt {attempt})...",
            success=lambda price: f"ACME {price:.2f}",
            error=lambda record: f"feed error: {record.message}",
        )
    )


async def main():
    policy = RetryPolicy(max_attempts=3, base_delay=0.1, multiplier=2.0, max_delay=1.0)

    async with create(price_feed, policy, name="acme-feed") as subscription:
        subscription.subscribe(render)
        subscription.start()

        errors = 0
        async with subscription.states() as stream:
            async for state in stream:
                if state.status is Status.ERROR:
                    errors += 1
                    if errors == 3:
                        break


if __name__ == "__main__":
    asyncio.run(main())
