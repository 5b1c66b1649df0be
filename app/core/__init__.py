"""Core configuration, domain records and API models for the care form template engine."""

from app.core.records import DocumentType

__all__ = ["DocumentType"]
