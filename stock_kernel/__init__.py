"""
Stock Kernel

An append-only stock movement ledger with:
- Atomic quantity update + ledger append per movement
- Non-negative stock enforced inside the write transaction
- Advisory min/max threshold signals
- Typed errors with machine-readable codes
"""

__version__ = "0.1.0"
