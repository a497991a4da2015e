#!/usr/bin/env python3
"""Benchmark script for easyprof overhead.

Measures session start/stop cost and the uncontended cost of the
instrumented lock. Outputs results in JSON format compatible with
github-action-benchmark.
"""

from __future__ import annotations

import argparse
import json
import tempfile
import threading
import time
from pathlib import Path

ITERATIONS = 10_000


def benchmark_import_time() -> float:
    """Measure import time of easyprof package."""
    start = time.perf_counter()
    import easyprof  # noqa: F401

    return time.perf_counter() - start


def benchmark_session_cycle(mode: str, output_dir: Path, cycles: int = 50) -> float:
    """Measure mean start+stop time of a session in mode."""
    import easyprof

    start = time.perf_counter()
    for i in range(cycles):
        easyprof.start(mode=mode, output_dir=str(output_dir), file_prefix=str(i)).stop()
    return (time.perf_counter() - start) / cycles


def benchmark_lock(lock: object) -> float:
    """Measure ITERATIONS uncontended acquire/release pairs."""
    start = time.perf_counter()
    for _ in range(ITERATIONS):
        with lock:  # type: ignore[attr-defined]
            pass
    return time.perf_counter() - start


def main() -> None:
    """Run benchmarks and output results."""
    parser = argparse.ArgumentParser(description="Run easyprof benchmarks")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("benchmark-results.json"),
        help="Output file for benchmark results",
    )
    args = parser.parse_args()

    results = [{"name": "Import Time", "unit": "seconds", "value": benchmark_import_time()}]

    from easyprof import sync

    with tempfile.TemporaryDirectory() as tmp:
        for mode in ("heap", "goroutine", "mutex", "cpu"):
            results.append(
                {
                    "name": f"Session start/stop ({mode})",
                    "unit": "seconds",
                    "value": benchmark_session_cycle(mode, Path(tmp)),
                }
            )

    baseline = benchmark_lock(threading.Lock())
    instrumented = benchmark_lock(sync.Lock())
    results.append({"name": f"threading.Lock ({ITERATIONS // 1000}k)", "unit": "seconds", "value": baseline})
    results.append({"name": f"sync.Lock ({ITERATIONS // 1000}k)", "unit": "seconds", "value": instrumented})

    args.output.write_text(json.dumps(results, indent=2))
    print(f"Benchmark results written to {args.output}")
    for r in results:
        print(f"  {r['name']}: {r['value']:.6f} {r['unit']}")


if __name__ == "__main__":
    main()
