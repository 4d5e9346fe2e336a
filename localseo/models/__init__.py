"""ORM models; importing this package registers them with ``Base.metadata``."""

from localseo.models.analysis import BusinessAnalysis, CitationRecord

__all__ = ["BusinessAnalysis", "CitationRecord"]
