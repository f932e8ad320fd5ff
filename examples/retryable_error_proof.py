"""
Retryable Errors - Proof of Concept

This example demonstrates:
- Transient failures are retried automatically with exponential backoff
- Permanent failures (is_retryable() = False) become a terminal error immediately
- Invocation counters proving the supervisor respects is_retryable()

## Scenario
Two subscriptions run side by side. Scenario A raises ApiTimeout twice
before succeeding, so the operation runs 3 times. Scenario B raises
ItemNotFound, which is not retryable, so the operation runs once and the
subscription stays in the error state until a manual retry().

## Run with
```bash
PYTHONPATH=src python examples/retryable_error_proof.py
```
"""

import asyncio

from pyasyncstate import Error, RetryableError, RetryPolicy, Success, create

POLICY = RetryPolicy(max_attempts=5, base_delay=0.05, multiplier=2.0, max_delay=1.0)


class InventoryError(RetryableError):
    """Base class for inventory errors."""

    pass


class ApiTimeout(InventoryError):
    """Transient error, retried."""

    def __str__(self):
        return "API timeout - transient network error"


class ItemNotFound(InventoryError):
    """Permanent error, not retried."""

    def __init__(self, item: str):
        super().__init__(item)
        self.item = item

    def __str__(self):
        return f"Item '{self.item}' not found in catalog"

    def is_retryable(self) -> bool:
        return False


class CheckStock:
    def __init__(self, item: str, failures: int):
        self.item = item
        self.failures = failures
        self.executions = 0

    async def __call__(self) -> int:
        self.executions += 1
        if self.executions <= self.failures:
            raise ApiTimeout()
        return 12


class LookupItem:
    def __init__(self, item: str):
        self.item = item
        self.executions = 0

    async def __call__(self) -> int:
        self.executions += 1
        raise ItemNotFound(self.item)


def settled(subscription):
    def check(state) -> bool:
        if isinstance(state, Success):
            return True
        return isinstance(state, Error) and not subscription.retry_pending

    return check


async def main():
    check_stock = CheckStock("widget", failures=2)
    lookup = LookupItem("gizmo")

    async with create(check_stock, POLICY, name="scenario-a") as a, create(
        lookup, POLICY, name="scenario-b"
    ) as b:
        a.subscribe(lambda state: print(f"  [A] {state}"))
        b.subscribe(lambda state: print(f"  [B] {state}"))
        a.start()
        b.start()

        state_a, state_b = await asyncio.gather(
            a.wait_for(settled(a), timeout=5.0),
            b.wait_for(settled(b), timeout=5.0),
        )

    print(f"Scenario A: {state_a} after {check_stock.executions} executions")
    print(f"Scenario B: {state_b} after {lookup.executions} executions")
    assert check_stock.executions == 3
    assert lookup.executions == 1


if __name__ == "__main__":
    asyncio.run(main())
