"""
Pipeline services: row source, thumbnail pipeline, record store, batch
processing and retries.

Modules are imported directly (``from thumbnail_ingest.services.batch_processor
import BatchProcessor``); the database layer depends on the logger service, so
this package does not import its submodules eagerly.
"""
