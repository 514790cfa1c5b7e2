"""
Story indexer — chunk newly written story documents, embed each chunk,
and upsert the vectors into a searchable vector index.
"""

__version__ = "0.1.0"
