"""Local SEO analyzer: NAP matching, citation checks and local scoring."""

__version__ = "1.0.0"
