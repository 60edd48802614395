"""
Bulk asset upload pipeline.

Indexes a directory, skips content the store already holds, packs the rest
into bounded batches and uploads them with a small worker pool.
"""

__version__ = "0.1.0"
