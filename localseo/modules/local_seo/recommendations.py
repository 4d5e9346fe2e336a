"""Rule-based, prioritized recommendations and the optional AI summary."""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from localseo.modules.local_seo.scoring import KEY_PLATFORMS, PLATFORM_LABELS

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 8
SLOW_PERFORMANCE = 50


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    impact: str  # High, Medium, Low
    difficulty: str  # Easy, Medium, Hard
    category: str  # GBP, Citations, On-Page, Technical
    priority: int  # lower is more urgent

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _usable(section: Any) -> bool:
    return isinstance(section, dict) and bool(section) and not section.get("error")


def _gbp_recommendations(gbp: dict[str, Any]) -> list[Recommendation]:
    recs = []
    rating = gbp.get("rating")
    review_count = gbp.get("review_count")

    if rating and rating < 4.5:
        recs.append(Recommendation(
            "Improve Your Google Rating",
            f"Your current rating of {rating} is below the recommended 4.5+. Focus on "
            "delivering excellent service and politely ask satisfied customers to leave "
            "reviews. Consider a post-service email campaign to request reviews.",
            "High", "Medium", "GBP", 1,
        ))

    competitor_counts = [
        c.get("review_count") for c in gbp.get("competitors") or [] if c and c.get("review_count")
    ]
    if review_count and competitor_counts:
        average = sum(competitor_counts) / len(competitor_counts)
        if review_count < average * 0.7:
            recs.append(Recommendation(
                "Increase Your Review Count",
                f"You have {review_count} reviews, but competitors average {round(average)}. "
                "More reviews improve trust and rankings. Ask in person, follow up by "
                "email or SMS, and share a direct Google review link.",
                "High", "Easy", "GBP", 2,
            ))

    if review_count and review_count < 50:
        recs.append(Recommendation(
            "Build Your Review Foundation",
            f"With only {review_count} reviews, you need more social proof. Set a goal of "
            "50+ reviews in the next 3 months and train staff to ask for them.",
            "High", "Easy", "GBP", 3,
        ))
    return recs


def _onpage_recommendations(onpage: dict[str, Any]) -> list[Recommendation]:
    recs = []
    if not onpage.get("has_local_business_schema"):
        recs.append(Recommendation(
            "Add LocalBusiness Schema Markup",
            "Structured data telling Google you are a local business is missing. Add "
            "JSON-LD to your homepage with name, address, phone, hours and services, "
            "then validate it with Google's Rich Results Test.",
            "High", "Medium", "On-Page", 1,
        ))
    if len((onpage.get("meta_description") or "").strip()) < 50:
        recs.append(Recommendation(
            "Write a Compelling Meta Description",
            "Your meta description is missing or too short. Write 150-160 characters "
            "that mention your location, main service and a call to action.",
            "Medium", "Easy", "On-Page", 5,
        ))
    if not onpage.get("h1_tag"):
        recs.append(Recommendation(
            "Add an H1 Heading with Location",
            "Your page has no H1. Add one near the top that names your service and "
            'location, e.g. "Premium Barbershop in Austin, TX".',
            "Medium", "Easy", "On-Page", 6,
        ))
    if not onpage.get("local_keywords_in_title"):
        recs.append(Recommendation(
            "Add Location to Your Title Tag",
            "Your title tag does not include your city. Update it to something like "
            '"Best Barbershop in Austin | Business Name".',
            "High", "Easy", "On-Page", 2,
        ))
    if not onpage.get("address_present"):
        recs.append(Recommendation(
            "Display Your Address Prominently",
            "Your address is not visible on your website. Put it in the header or footer "
            "of every page, matching your Google Business Profile exactly.",
            "Medium", "Easy", "On-Page", 7,
        ))
    if not onpage.get("phone_number_present"):
        recs.append(Recommendation(
            "Display Your Phone Number",
            "Your phone number is not visible on your website. Add a click-to-call "
            "number in the header, especially for mobile visitors.",
            "Medium", "Easy", "On-Page", 8,
        ))
    return recs


def _citation_recommendations(citations: dict[str, Any]) -> list[Recommendation]:
    recs = []
    missing = [PLATFORM_LABELS[p] for p in KEY_PLATFORMS if not (citations.get(p) or {}).get("found")]
    mismatch = any(
        (citations.get(p) or {}).get("found") and not citations[p].get("nap_match")
        for p in KEY_PLATFORMS
    )
    if missing:
        noun = "Directory" if len(missing) == 1 else "Directories"
        recs.append(Recommendation(
            f"List Your Business on {len(missing)} More {noun}",
            f"You're not listed on: {', '.join(missing)}. Each citation improves local "
            "visibility. Create profiles with consistent Name, Address and Phone.",
            "Medium", "Easy", "Citations", 4,
        ))
    if mismatch:
        recs.append(Recommendation(
            "Fix NAP Inconsistencies",
            "Your business Name, Address or Phone differs across directories, which "
            "confuses search engines. Audit every listing so they match exactly.",
            "High", "Medium", "Citations", 2,
        ))
    return recs


def _speed_recommendations(speed: dict[str, Any]) -> list[Recommendation]:
    performance = speed.get("performance")
    if performance is None or performance >= SLOW_PERFORMANCE:
        return []
    return [Recommendation(
        "Speed Up Your Mobile Site",
        f"Your mobile performance score is {performance}/100. Compress images, defer "
        "non-critical scripts and enable caching; slow pages lose local visitors.",
        "Medium", "Hard", "Technical", 3,
    )]


def generate_smart_recommendations(report: Mapping[str, Any]) -> list[Recommendation]:
    """Turn report findings into at most eight recommendations, most urgent first.

    Sections that are missing or carry ``error`` contribute nothing.  The sort
    is stable, so equal priorities keep GBP, On-Page, Citations, Technical
    order.
    """
    recs: list[Recommendation] = []
    if _usable(report.get("gbp_analysis")):
        recs += _gbp_recommendations(report["gbp_analysis"])
    if _usable(report.get("onpage_analysis")):
        recs += _onpage_recommendations(report["onpage_analysis"])
    if _usable(report.get("citation_analysis")):
        recs += _citation_recommendations(report["citation_analysis"])
    if _usable(report.get("speed_insights")):
        recs += _speed_recommendations(report["speed_insights"])

    recs.sort(key=lambda r: r.priority)
    return recs[:MAX_RECOMMENDATIONS]


# ---------------------------------------------------------------------------
# Narrative summary
# ---------------------------------------------------------------------------

def _fallback_summary(report: Mapping[str, Any]) -> str:
    score = (report.get("score") or {}).get("overall")
    recs = report.get("recommendations") or []
    lines = [f"Overall Local SEO score: {score if score is not None else 'N/A'}/100."]
    summary = (report.get("citation_analysis") or {}).get("summary")
    if summary:
        lines.append(
            f"Listed on {summary['found_count']} of {summary['total_sources']} directories "
            f"with {summary['nap_consistency_percentage']}% NAP consistency."
        )
    if recs:
        titles = [r["title"] if isinstance(r, dict) else r.title for r in recs[:3]]
        lines.append("Top priorities: " + "; ".join(titles) + ".")
    return " ".join(lines)


async def generate_ai_summary(report: Mapping[str, Any], llm_client: Optional[Any] = None) -> str:
    """Short narrative of the report.

    Uses *llm_client* when one is configured and falls back to a deterministic
    summary when it is absent or the call fails.
    """
    if llm_client is None or not getattr(llm_client, "configured", False):
        return _fallback_summary(report)

    score = report.get("score") or {}
    recs = report.get("recommendations") or []
    rec_lines = "\n".join(
        f"- [{r['impact']}] {r['title']}" for r in recs if isinstance(r, dict)
    )
    prompt = (
        f"Business: {report.get('business_name', 'Unknown')}\n"
        f"Overall Local SEO score: {score.get('overall', 'N/A')}/100\n"
        f"Category scores: {score.get('categories', {})}\n"
        f"Recommendations:\n{rec_lines or '- none'}\n\n"
        "Write a 3-4 sentence plain-English summary for the business owner: where they "
        "stand, the biggest gap, and the first thing to fix. No markdown."
    )
    try:
        return await llm_client.generate_text(prompt)
    except Exception as exc:
        logger.error("AI summary generation failed: %s", exc, exc_info=True)
        return _fallback_summary(report)
