"""Local SEO analysis.

NAP normalization and matching, citation checks across business directories,
Google Business Profile and on-page analysis, scoring, recommendations and
report rendering.
"""

from localseo.modules.local_seo.nap_matcher import (
    MatchResult,
    NAPRecord,
    NAPWeights,
    NormalizedNAP,
    compare_nap,
    normalize_nap,
)
from localseo.modules.local_seo.citation_checker import CitationChecker
from localseo.modules.local_seo.gbp_analyzer import GBPAnalyzer
from localseo.modules.local_seo.onpage_analyzer import OnPageAnalyzer
from localseo.modules.local_seo.report_generator import LocalSEOReportGenerator
from localseo.modules.local_seo.scoring import CategoryWeights, calculate_local_seo_score

__all__ = [
    "MatchResult",
    "NAPRecord",
    "NAPWeights",
    "NormalizedNAP",
    "compare_nap",
    "normalize_nap",
    "CitationChecker",
    "GBPAnalyzer",
    "OnPageAnalyzer",
    "LocalSEOReportGenerator",
    "CategoryWeights",
    "calculate_local_seo_score",
]
