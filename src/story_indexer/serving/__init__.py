"""
Serving — the invocation boundary for storage events.

Exposes the indexing pipeline as an HTTP endpoint for Eventarc / Cloud
Storage "object finalized" notifications, plus a small CLI.
"""
