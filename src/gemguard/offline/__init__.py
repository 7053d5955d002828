"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: offline/__init__.py.
"""

from .responder import OfflineResponder

__all__ = ["OfflineResponder"]
