"""
read_load.py - simple async load script that resolves aliases

Every successful resolution probes the target URL, so point the links at
hosts you control (or expect most of them to answer 404 as unreachable).

Usage:
  python read_load.py --base http://127.0.0.1:8000 --in links_created.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import random
import time
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _load_aliases(path):
    aliases = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                alias = json.loads(line).get("alias")
            except ValueError:
                continue
            if alias:
                aliases.append(alias)
    return aliases

async def _hit_one(client: httpx.AsyncClient, base: str, alias: str):
    try:
        r = await client.get(f"{base}/shortened-links/shortened/{alias}", timeout=15)
        return r.status_code == 200
    except httpx.HTTPError:
        return False

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--in", dest="aliases_file", default="links_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    aliases = _load_aliases(args.aliases_file)
    if not aliases:
        print(f"No aliases found in {args.aliases_file}. Run write_load.py first.")
        return

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            nonlocal success
            async with sem:
                ok = await _hit_one(client, args.base, random.choice(aliases))
                if ok:
                    success += 1

        await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    end_iso = _now_iso()
    print(f"START: {start_iso}")
    print(f"END:   {end_iso}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, ok={success}, fail={args.count - success}")
    if dt > 0:
        print(f"RPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
