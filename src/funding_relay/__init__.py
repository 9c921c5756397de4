"""Funding rate relay: snapshots exchange ticker and funding rate into a document store."""
