"""Trending lists: lock-guarded aggregation and cheap cached reads."""

from chii.trending.aggregator import TRENDING_LIMIT, TrendingAggregator

__all__ = ["TRENDING_LIMIT", "TrendingAggregator"]
