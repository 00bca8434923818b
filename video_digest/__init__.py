"""
Parse AI-generated video summaries into timestamped points and keep them
in a bounded, recency-evicted cache.
"""
__version__ = "0.1.0"
