"""
Catalog pipeline: acquisition, cleaning and querying of the venue sheet.

Submodules are imported directly (``catalog_pipeline.catalog_builder``,
``catalog_pipeline.search.query_engine``...); this package keeps no
re-exports so that ``core.config`` can import the leaf modules without a
cycle.
"""
