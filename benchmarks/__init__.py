"""
Benchmark suite for trunkjson parsing performance.

Compares the strict path against standard JSON libraries including:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

Also measures partial recovery of truncated documents and memory usage.
"""
