"""
Database init - Exports for routes
"""

from .base import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
