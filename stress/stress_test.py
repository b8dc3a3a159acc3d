#!/usr/bin/env python3
"""
stress_test.py

Usage examples:
  python stress_test.py            # runs default test (mode=poisson)
  python stress_test.py --mode ramp --duration 600 --total 2000

What it does:
- Posts MRZ text samples to API_URL (a mix of valid, corrupted and malformed MRZs).
- Supports modes: uniform, poisson, ramp, constant.
- Controls concurrency (max concurrent requests).
- Logs each request to logs/ and appends a CSV summary.
"""

import argparse
import asyncio
import random
import time
import json
import csv
from pathlib import Path
from datetime import datetime, timezone
import httpx
import statistics

# -------------------------
# CONFIG (tweak these)
# -------------------------
API_URL = "http://localhost:8000/api/v1/mrz/parse"
SAMPLES_FILE = Path("mrz_samples.txt")   # optional: MRZ blocks separated by blank lines
LOG_DIR = Path("logs")
CSV_SUMMARY = LOG_DIR / "summary.csv"

DEFAULT_TOTAL = 1800
DEFAULT_DURATION = 600        # seconds
DEFAULT_CONCURRENCY = 100
DEFAULT_TIMEOUT = 10.0        # per-request timeout seconds

BUILTIN_SAMPLES = [
    "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\nL898902C<3UTO6908061F9406236ZE184226B<<<<<14",
    "I<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<\nD231458907UTO7408122F1204159<<<<<<<6",
    "I<UTOD231458907<<<<<<<<<<<<<<<\n7408122F1204159UTO<<<<<<<<<<<6\nERIKSSON<<ANNA<MARIA<<<<<<<<<<",
    # OCR noise: wrong check digit, filler check digit, spaces for fillers
    "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\nL898902C<4UTO6908061F9406236ZE184226B<<<<<14",
    "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<\nL898902C<<UTO6908061F9406236ZE184226B<<<<<14",
    "P UTOERIKSSON  ANNA MARIA\nL898902C 3UTO6908061F9406236ZE184226B     14",
    # not an MRZ at all
    "GARBAGE\nLINES\nFROM\nOCR",
]


def load_samples():
    if not SAMPLES_FILE.exists():
        return BUILTIN_SAMPLES
    blocks = [b.strip() for b in SAMPLES_FILE.read_text().split("\n\n")]
    return [b for b in blocks if b] or BUILTIN_SAMPLES


# -------------------------
# Schedule generators
# -------------------------
def uniform_schedule(total, duration):
    return sorted(random.uniform(0, duration) for _ in range(total))

def poisson_schedule(total, duration):
    # inter-arrival ~ exponential with mean = duration/total
    if total <= 0:
        return []
    lam = total / duration
    offsets = []
    t = 0.0
    for _ in range(total):
        t += random.expovariate(lam)
        offsets.append(min(t, duration))
    return sorted(offsets)

def ramp_schedule(total, duration, ramp_up_fraction=0.2):
    # rate grows over the first ramp_up_fraction of the duration, then steady
    ramp_time = duration * ramp_up_fraction
    remaining_time = duration - ramp_time
    ramp_count = int(total * ramp_up_fraction)
    remainder = total - ramp_count
    ramp_offsets = [ramp_time * ((i / max(1, ramp_count - 1)) ** 1.8) for i in range(ramp_count)]
    steady_offsets = [ramp_time + random.uniform(0, remaining_time) for _ in range(remainder)]
    return sorted(ramp_offsets + steady_offsets)

def constant_schedule(total, duration):
    return [i * (duration / total) for i in range(total)]

SCHEDULES = {
    "uniform": uniform_schedule,
    "poisson": poisson_schedule,
    "ramp": ramp_schedule,
    "constant": constant_schedule,
}

# -------------------------
# Runner
# -------------------------
async def call_api(client: httpx.AsyncClient, text: str, timeout: float):
    r = {
        "started_at": time.time(),
        "duration_sec": None,
        "http_status": None,
        "valid": None,
        "error_count": None,
        "error": None,
    }
    start = time.time()
    try:
        resp = await client.post(API_URL, json={"text": text}, timeout=timeout)
        r["http_status"] = resp.status_code
        r["duration_sec"] = round(time.time() - start, 4)
        if resp.status_code == 200:
            body = resp.json()
            r["valid"] = body.get("valid")
            r["error_count"] = len(body.get("data", {}).get("parsing_errors", []))
        else:
            r["error"] = f"HTTP {resp.status_code}: {resp.text[:400]}"
    except Exception as e:
        r["duration_sec"] = round(time.time() - start, 4)
        r["error"] = f"{type(e).__name__}: {e}"
    return r

async def handle_interaction(client, interaction_id, offset, samples, sem, timeout):
    await asyncio.sleep(offset)
    text = random.choice(samples)

    async with sem:
        result = await call_api(client, text, timeout)

    result.update({
        "interaction_id": interaction_id,
        "scheduled_offset": offset,
        "timestamp_iso": datetime.now(timezone.utc).isoformat(),
        "sample": text.split("\n", 1)[0],
    })

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    filename = LOG_DIR / f"req_{interaction_id}.json"
    with open(filename, "w") as jf:
        json.dump(result, jf, indent=2)
    return result


async def run_test(mode, total, duration, concurrency, timeout):
    samples = load_samples()
    schedule = SCHEDULES[mode](total, duration)

    sem = asyncio.Semaphore(concurrency)
    results = []
    async with httpx.AsyncClient() as client:
        start_time = time.time()
        tasks = [
            asyncio.create_task(handle_interaction(client, idx, offset, samples, sem, timeout))
            for idx, offset in enumerate(schedule, start=1)
        ]
        for coro in asyncio.as_completed(tasks):
            res = await coro
            results.append(res)
            if len(results) % 100 == 0:
                elapsed = time.time() - start_time
                print(f"[{len(results)}/{total}] elapsed {elapsed:.1f}s last_status={res.get('http_status')} dur={res.get('duration_sec')}s")
    return results

# -------------------------
# Simple analysis (summary)
# -------------------------
def analyze_results(results):
    durations = [r["duration_sec"] for r in results if r.get("duration_sec") is not None]
    successes = [r for r in results if r.get("http_status") == 200]
    failures = [r for r in results if r.get("http_status") != 200 or r.get("error")]

    summary = {
        "total_requests": len(results),
        "successful": len(successes),
        "failed": len(failures),
        "valid_mrz": sum(1 for r in successes if r.get("valid")),
    }
    if len(durations) >= 2:
        centiles = statistics.quantiles(durations, n=100)
        summary.update({
            "avg_ms": round(statistics.mean(durations) * 1000, 2),
            "median_ms": round(statistics.median(durations) * 1000, 2),
            "p95_ms": round(centiles[94] * 1000, 2),
            "p99_ms": round(centiles[98] * 1000, 2),
            "min_ms": round(min(durations) * 1000, 2),
            "max_ms": round(max(durations) * 1000, 2),
        })
    return summary

# -------------------------
# CLI
# -------------------------
def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--mode", default="poisson", choices=sorted(SCHEDULES))
    p.add_argument("--total", type=int, default=DEFAULT_TOTAL)
    p.add_argument("--duration", type=int, default=DEFAULT_DURATION, help="Test duration in seconds")
    p.add_argument("--concurrency", type=int, default=DEFAULT_CONCURRENCY)
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    return p.parse_args()

def write_csv_summary(summary, args):
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    header = ["timestamp", "mode", "total", "duration", "concurrency", "successful", "failed",
              "valid_mrz", "avg_ms", "median_ms", "p95_ms", "p99_ms", "min_ms", "max_ms"]
    row = [
        datetime.now(timezone.utc).isoformat(),
        args.mode,
        args.total,
        args.duration,
        args.concurrency,
        summary.get("successful", 0),
        summary.get("failed", 0),
        summary.get("valid_mrz", 0),
        summary.get("avg_ms", ""),
        summary.get("median_ms", ""),
        summary.get("p95_ms", ""),
        summary.get("p99_ms", ""),
        summary.get("min_ms", ""),
        summary.get("max_ms", ""),
    ]
    new_file = not CSV_SUMMARY.exists()
    with open(CSV_SUMMARY, "a", newline="") as fh:
        writer = csv.writer(fh)
        if new_file:
            writer.writerow(header)
        writer.writerow(row)

if __name__ == "__main__":
    args = parse_args()
    print(f"Starting stress test: mode={args.mode} total={args.total} duration={args.duration}s concurrency={args.concurrency}")
    results = asyncio.run(run_test(args.mode, args.total, args.duration, args.concurrency, args.timeout))
    summary = analyze_results(results)
    print("Test summary:", json.dumps(summary, indent=2))
    write_csv_summary(summary, args)
    print(f"Per-request logs written to {LOG_DIR}. Summary appended to {CSV_SUMMARY}.")
