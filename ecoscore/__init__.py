"""
Ecoscore product scoring engine.

This package contains the deterministic scoring core and its
cache-aside layer, following Clean Architecture principles.

Structure:
- domain/: Product inputs, rule tables, classifiers and aggregator
- infrastructure/: Cache backends, indices and logging configuration
- application/: Use cases orchestrating scoring and caching
- tests/: Test suite
"""

__version__ = "1.0.0"
