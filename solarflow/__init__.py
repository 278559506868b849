"""Mini README: Core package initializer for the SolarFlow energy ledger.

This module exposes convenience imports so callers can reach the ledger
service without knowing the exact module structure. It stays lightweight:
the web interface is imported separately so the engine can be used (and
tested) without web framework dependencies.
"""

from .ledger import LedgerService
from .logging_utils import get_logger

__all__ = ["LedgerService", "get_logger"]
