"""
Observability module for reflxy.

This module provides:
- Metrics collection with Prometheus
"""

__all__ = ["metrics"]
