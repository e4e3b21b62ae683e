"""
Query configuration for AI Usage Insights.
"""
