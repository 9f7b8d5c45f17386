"""Resumable batch solving over a dataset manifest.

This package provides:
- Manifest parsing (dataset root plus dataset references)
- A CSV results table that doubles as the resume checkpoint
- The batch runner that isolates per-dataset failures

The runner is designed to be robust to interruption: re-running the same
manifest against the same results table continues with the first dataset
that has no row yet.
"""
