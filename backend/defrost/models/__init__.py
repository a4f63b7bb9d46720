"""Database models."""

from defrost.models.report import Report

__all__ = ["Report"]
