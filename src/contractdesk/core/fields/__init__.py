"""Field extraction stage. Each extractor is a pure function of (text, config)."""

from contractdesk.core.fields.engine import FieldExtractionEngine

__all__ = ["FieldExtractionEngine"]
