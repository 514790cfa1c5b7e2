"""
Ingestion — path classification, chunking, embedding, and upserting.

This module holds the core of the indexer: it turns one story document
into a set of datapoints in the vector index.  External services are
reached only through the interfaces in :mod:`story_indexer.backends`.
"""
