"""
Storage layer for AI Usage Insights.

Record models and file loading.
"""
