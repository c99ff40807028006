"""WRMF benchmark on synthetic implicit-feedback data.

Usage:
    python benchmarks/bench_wrmf.py                      # small + medium
    python benchmarks/bench_wrmf.py --size large --jobs 1 4 8
    python benchmarks/bench_wrmf.py --json results.json

Compares sequential and threaded optimizer passes on the same matrix.
"""

from __future__ import annotations

import argparse
import gc
import json
import time
from pathlib import Path

import numpy as np
from scipy import sparse

import wrmf

SIZES = {
    "small": (2_000, 1_000, 0.01),
    "medium": (20_000, 5_000, 0.002),
    "large": (100_000, 20_000, 0.0005),
}

FACTORS = 32
ITERS = 5
C_POS = 4.0
REG = 0.05
TOP_N = 200  # users to time for recommend latency


def make_matrix(n_users: int, n_items: int, density: float, seed: int = 42) -> sparse.csr_matrix:
    """Random user × item matrix with a long-tailed item popularity."""
    rng = np.random.default_rng(seed)
    nnz = int(n_users * n_items * density)
    users = rng.integers(0, n_users, size=nnz)
    popularity = rng.zipf(1.3, size=n_items).astype(np.float64)
    items = rng.choice(n_items, size=nnz, p=popularity / popularity.sum())
    mat = sparse.csr_matrix((np.ones(nnz, dtype=np.float32), (users, items)), shape=(n_users, n_items))
    mat.sum_duplicates()
    return mat


def run_method(mat: sparse.csr_matrix, n_jobs: int) -> dict:
    t0 = time.perf_counter()
    model = wrmf.WRMF(factors=FACTORS, c_pos=C_POS, regularization=REG, iterations=ITERS, seed=42, n_jobs=n_jobs)
    model.fit(mat)
    fit_s = time.perf_counter() - t0

    n_rec = min(TOP_N, mat.shape[0])
    t0 = time.perf_counter()
    for uid in range(n_rec):
        model.recommend_items(uid, n=10, exclude_seen=True)
    rec_ms = (time.perf_counter() - t0) / n_rec * 1000

    print(f"    n_jobs={n_jobs:<3} fit: {fit_s:.1f}s ({fit_s / ITERS:.2f}s/iter)  |  rec/user: {rec_ms:.2f}ms", flush=True)
    del model
    gc.collect()
    return {"n_jobs": n_jobs, "fit_s": fit_s, "rec_ms": rec_ms}


def run_scenario(label: str, mat: sparse.csr_matrix, jobs: list[int]) -> dict:
    n_users, n_items = mat.shape
    print(f"\n  ─── {label} ───")
    print(f"  {n_users:,}u × {n_items:,}i  |  {mat.nnz:,} nnz  |  factors={FACTORS}", flush=True)
    return {
        "label": label,
        "n_users": n_users,
        "n_items": n_items,
        "nnz": int(mat.nnz),
        "methods": [run_method(mat, n) for n in jobs],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--size", choices=sorted(SIZES), action="append", help="Scenario(s) to run.")
    parser.add_argument("--jobs", type=int, nargs="+", default=[1, -1], help="n_jobs values to compare.")
    parser.add_argument("--json", type=Path, default=None, help="Write results to this JSON file.")
    args = parser.parse_args()

    sizes = args.size or ["small", "medium"]
    results = []
    for size in sizes:
        n_users, n_items, density = SIZES[size]
        results.append(run_scenario(size, make_matrix(n_users, n_items, density), args.jobs))

    if args.json is not None:
        args.json.write_text(json.dumps(results, indent=2))
        print(f"\n  Results written to {args.json}")


if __name__ == "__main__":
    main()
