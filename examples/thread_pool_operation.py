"""
One-shot operation running on a worker thread.

The operation factory submits blocking work to a ThreadPoolExecutor and
returns the concurrent.futures.Future. Its completion is marshalled back
onto the event loop before any state changes, so observers always run on
the loop thread.

## Run with
```bash
PYTHONPATH=src python examples/thread_pool_operation.py
```
"""

import asyncio
import hashlib
import time
from concurrent.futures import ThreadPoolExecutor

from pyasyncstate import RetryPolicy, create, is_success, unwrap


def checksum(payload: bytes) -> str:
    time.sleep(0.1)  # blocking work
    return hashlib.sha256(payload).hexdigest()


async def main():
    with ThreadPoolExecutor(max_workers=2) as pool:
        subscription = create(
            lambda: pool.submit(checksum, b"report.csv"),
            RetryPolicy.NONE,
            name="checksum",
        )
        subscription.subscribe(lambda state: print(f"  {state.status}"))
        subscription.start()

        state = await subscription.wait_for(is_success, timeout=5.0)
        print(f"sha256 = {unwrap(state)}")
        subscription.cancel()


if __name__ == "__main__":
    asyncio.run(main())
