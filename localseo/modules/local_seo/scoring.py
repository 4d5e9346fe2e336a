"""Weighted 0-100 Local SEO score over GBP, citations, on-page and NAP."""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

KEY_PLATFORMS = ["yelp", "foursquare", "yellow_pages"]
PLATFORM_LABELS = {"yelp": "Yelp", "foursquare": "Foursquare", "yellow_pages": "Yellow Pages"}


@dataclass(frozen=True)
class CategoryWeights:
    """Share of each category in the overall score; defaults sum to 1.0."""
    gbp_optimization: float = 0.30
    citation_presence: float = 0.25
    onpage_seo: float = 0.30
    nap_consistency: float = 0.15

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "CategoryWeights":
        """Build from the ``scoring`` section of settings.yaml."""
        weights = (config or {}).get("weights", {}) or {}
        return cls(**{
            name: float(weights.get(name, getattr(cls, name)))
            for name in ("gbp_optimization", "citation_presence", "onpage_seo", "nap_consistency")
        })

    def as_dict(self) -> dict[str, float]:
        return {
            "gbp_optimization": self.gbp_optimization,
            "citation_presence": self.citation_presence,
            "onpage_seo": self.onpage_seo,
            "nap_consistency": self.nap_consistency,
        }


@dataclass
class ScoreBreakdown:
    overall: int
    categories: dict[str, dict[str, Any]]
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "categories": self.categories,
            "recommendations": self.recommendations,
        }


def _usable(section: Any) -> bool:
    return isinstance(section, dict) and bool(section) and not section.get("error")


def _review_points(review_count: float) -> float:
    """0-50 reviews -> 0-20, 50-100 -> 20-30, 100-200 -> 30-40, 200+ -> 40."""
    if review_count >= 200:
        return 40.0
    if review_count >= 100:
        return 30 + ((review_count - 100) / 100) * 10
    if review_count >= 50:
        return 20 + ((review_count - 50) / 50) * 10
    return (review_count / 50) * 20


def _score_gbp(gbp: Any, notes: list[str]) -> float:
    if not _usable(gbp):
        notes.append(
            "Could not fetch Google Business Profile data. "
            "Ensure your business is claimed on Google."
        )
        return 0.0

    score = 0.0
    rating = gbp.get("rating")
    if rating:
        score += (rating / 5.0) * 40
        if rating < 4.0:
            notes.append(
                f"Your rating ({rating}) is below 4.0. Focus on improving customer "
                "satisfaction and requesting reviews from happy customers."
            )
    review_count = gbp.get("review_count")
    if review_count:
        score += _review_points(review_count)
        if review_count < 50:
            notes.append(
                f"You only have {review_count} reviews. Aim for at least 50+ reviews "
                "to compete effectively."
            )
    if gbp.get("name"):
        score += 20
    return score


def _score_citations(citations: Any, notes: list[str]) -> float:
    if not _usable(citations):
        notes.append("Citation analysis failed. Unable to check directory listings.")
        return 0.0

    found = [p for p in KEY_PLATFORMS if (citations.get(p) or {}).get("found")]
    matched = [p for p in found if citations[p].get("nap_match")]

    score = (len(found) / len(KEY_PLATFORMS)) * 60
    if found:
        score += (len(matched) / len(found)) * 40

    missing = [PLATFORM_LABELS[p] for p in KEY_PLATFORMS if p not in found]
    if missing:
        notes.append(
            f"Your business is not listed on: {', '.join(missing)}. "
            "Add your business to these directories."
        )
    if len(matched) < len(found):
        notes.append(
            "NAP (Name, Address, Phone) inconsistencies detected across directories. "
            "Ensure all listings have identical information."
        )
    return score


def _score_onpage(onpage: Any, notes: list[str]) -> float:
    if not _usable(onpage):
        notes.append("On-page analysis failed. Unable to analyze website SEO elements.")
        return 0.0

    score = 0.0
    if onpage.get("title_tag"):
        score += 15
        if onpage.get("local_keywords_in_title"):
            score += 10
        else:
            notes.append("Add your city/location to your page title for better local SEO.")
    else:
        notes.append("Missing title tag - this is critical for SEO!")

    if len((onpage.get("meta_description") or "").strip()) > 50:
        score += 15
    else:
        notes.append(
            "Add or improve your meta description to increase click-through rates "
            "from search results."
        )

    if (onpage.get("h1_tag") or "").strip():
        score += 15
    else:
        notes.append("Add an H1 heading tag to your page for better SEO structure.")

    if onpage.get("has_local_business_schema"):
        score += 25
    else:
        notes.append(
            "Add LocalBusiness schema markup - this helps Google understand your "
            "business details."
        )

    if onpage.get("address_present"):
        score += 10
    else:
        notes.append("Display your business address prominently on your website.")
    if onpage.get("phone_number_present"):
        score += 10
    else:
        notes.append("Display your phone number prominently on your website.")
    return score


def _score_nap(citations: Any, notes: list[str]) -> float:
    if not _usable(citations):
        return 0.0
    found = [p for p in KEY_PLATFORMS if (citations.get(p) or {}).get("found")]
    matched = [p for p in found if citations[p].get("nap_match")]
    score = (len(matched) / len(found)) * 100 if found else 0.0
    if 0 < score < 100:
        notes.append(
            "Ensure your business Name, Address, and Phone are identical across "
            "all online directories."
        )
    return score


def calculate_local_seo_score(
    report: Mapping[str, Any],
    weights: CategoryWeights = CategoryWeights(),
) -> ScoreBreakdown:
    """Score a report dict.

    Args:
        report: Dict with ``gbp_analysis``, ``citation_analysis`` and
            ``onpage_analysis``.  Sections that are missing or carry an
            ``error`` key score 0.
        weights: Category weights.

    Returns:
        :class:`ScoreBreakdown` with the rounded overall score, per-category
        scores and the first five textual recommendations.
    """
    notes: list[str] = []
    raw = {
        "gbp_optimization": _score_gbp(report.get("gbp_analysis"), notes),
        "citation_presence": _score_citations(report.get("citation_analysis"), notes),
        "onpage_seo": _score_onpage(report.get("onpage_analysis"), notes),
        "nap_consistency": _score_nap(report.get("citation_analysis"), notes),
    }
    weight_map = weights.as_dict()
    overall = sum(score * weight_map[name] for name, score in raw.items())

    categories = {
        name: {"score": round(score), "max_score": 100, "weight": weight_map[name]}
        for name, score in raw.items()
    }
    logger.debug("Local SEO score %.1f from %s", overall, categories)
    return ScoreBreakdown(overall=round(overall), categories=categories, recommendations=notes[:5])
