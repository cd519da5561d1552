"""Async load generator for the card transaction endpoint."""

import argparse
import asyncio
import random
import statistics
import time
from collections import Counter
from uuid import uuid4

import httpx


async def send_one(client: httpx.AsyncClient, base_url: str, idx: int):
    """Send one transaction request and return (status_code, final_status, latency_ms)."""

    started = time.perf_counter()
    payload = {
        "card_number": "4242424242424242",
        "cvc": "123",
        "exp_month": "12",
        "exp_year": "29",
        "card_holder_name": f"Load Tester {idx}",
        "document_number": str(10_000_000 + idx),
        "document_type": "CC",
        "amount_in_cents": random.randint(100, 2_500_000),
        "customer_email": f"load-{idx}@example.com",
        "installments": random.randint(1, 12),
    }
    try:
        resp = await client.post(f"{base_url}/transactions", json=payload, headers={"x-trace-id": str(uuid4())})
        latency = (time.perf_counter() - started) * 1000
        final_status = resp.json().get("status", "ERROR") if resp.status_code < 300 else "ERROR"
        return resp.status_code, final_status, latency
    except Exception:
        latency = (time.perf_counter() - started) * 1000
        return 599, "ERROR", latency


async def run(total: int, concurrency: int, base_url: str):
    """Execute a bounded-concurrency load run and print summary stats."""

    sem = asyncio.Semaphore(concurrency)
    results = []

    async with httpx.AsyncClient(timeout=60.0) as client:
        async def worker(i: int):
            async with sem:
                return await send_one(client, base_url, i)

        tasks = [asyncio.create_task(worker(i)) for i in range(total)]
        for task in asyncio.as_completed(tasks):
            results.append(await task)

    codes = [c for c, _, _ in results]
    statuses = Counter(s for _, s, _ in results)
    lats = sorted(latency for _, _, latency in results)
    success = sum(1 for c in codes if 200 <= c < 300)
    errors = total - success

    def pct(values, p):
        """Simple percentile helper for sorted latency values."""

        if not values:
            return 0.0
        idx = min(len(values) - 1, max(0, int((p / 100.0) * len(values)) - 1))
        return values[idx]

    print(f"total={total}")
    print(f"success={success}")
    print(f"errors={errors}")
    print(f"error_rate={(errors / total) * 100:.2f}%")
    print(f"final_statuses={dict(statuses)}")
    print(f"p50_ms={pct(lats, 50):.2f}")
    print(f"p95_ms={pct(lats, 95):.2f}")
    print(f"p99_ms={pct(lats, 99):.2f}")
    print(f"avg_ms={statistics.mean(lats):.2f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--total", type=int, default=100)
    parser.add_argument("--concurrency", type=int, default=10)
    parser.add_argument("--base-url", default="http://localhost:8000")
    args = parser.parse_args()
    asyncio.run(run(args.total, args.concurrency, args.base_url))
