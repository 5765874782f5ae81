"""
DAWN package
============

This package contains DAWN (Data-centre Aggregation of Water & eNergy), an
offline analysis engine for per-country energy, water-use-efficiency and
climate datasets.

- The CLI entry point is in `dawn/cli.py`.
- The core engine (filters, rankings, savings) is in `dawn/engine.py`.
- Dataset loading is in `dawn/loader.py`.
"""

__version__ = '0.3.0'
