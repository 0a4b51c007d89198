from parlourease.reporting.revenue import RevenueAggregator, RevenueSummary

__all__ = ["RevenueAggregator", "RevenueSummary"]
