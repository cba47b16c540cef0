"""
datafile_ingestion -- Tabular data import into entity graphs.

Reads rows from a tabular source, coerces cells to attribute types, resolves
dotted bindings (looking up or creating referenced entities) and returns one
entity per row with a problem report.

Architecture:
    datafile_ingestion/ is a top-level package built on datafile_kernel.
    Nothing in datafile_kernel imports from ingestion.
"""
