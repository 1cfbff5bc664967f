"""
Top-level package for the Bakery Reservation API.

All functionality lives in submodules under ``app``; the package
itself exports nothing.
"""

__all__ = []
