"""
Command Service - Remote Control Endpoint

Responsibilities:
- Accept threshold writes
- Expose the manual observation toggle
- Report node state and health
"""

from .server import CommandServer

__all__ = ["CommandServer"]
