"""
thumbnail_ingest - fetch images listed in a CSV and store square thumbnails.

Failed rows are kept in a failure ledger so they can be retried later.
"""

__version__ = "1.0.0"
