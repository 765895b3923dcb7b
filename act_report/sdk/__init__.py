"""
Client for the partner billing API.

Provides access to per-server usage statistics.
"""

from .statistics_client import DEFAULT_API_URL, StatisticsClient

__all__ = ["DEFAULT_API_URL", "StatisticsClient"]
