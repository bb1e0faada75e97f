"""Ingestion layer.

Receives status reports pushed by the device and hands them to the
state/store layer.
"""

from gatebridge.ingestion.server import StatusIngestor

__all__ = ["StatusIngestor"]
