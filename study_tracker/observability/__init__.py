"""
Observability module for study-tracker.

This module provides:
- Metrics collection with Prometheus
"""

__all__ = ["metrics"]
