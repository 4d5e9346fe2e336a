"""Citation checker: directory presence plus NAP consistency per listing."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from localseo.integrations.directories import (
    BusinessQuery,
    FallbackChain,
    LookupResult,
    build_default_chains,
)
from localseo.modules.local_seo.nap_matcher import (
    DEFAULT_NAP_WEIGHTS,
    NAPRecord,
    NAPWeights,
    compare_nap,
)

logger = logging.getLogger(__name__)

CONSISTENT_CONFIDENCE = 70


@dataclass
class DirectoryInfo:
    """Display metadata for a directory chain."""
    key: str
    label: str
    authority_score: int  # 1-100
    category: str  # general, social, map


DIRECTORY_INFO: dict[str, DirectoryInfo] = {
    info.key: info
    for info in (
        DirectoryInfo("yelp", "Yelp", 92, "general"),
        DirectoryInfo("facebook", "Facebook", 91, "social"),
        DirectoryInfo("bing_places", "Bing Places", 93, "map"),
        DirectoryInfo("yellow_pages", "Yellow Pages", 88, "general"),
        DirectoryInfo("foursquare", "Foursquare", 86, "general"),
        DirectoryInfo("mapquest", "MapQuest", 78, "map"),
        DirectoryInfo("whitepages", "Whitepages", 72, "general"),
        DirectoryInfo("open_street_map", "OpenStreetMap", 70, "map"),
    )
}


def _directory_info(key: str) -> DirectoryInfo:
    return DIRECTORY_INFO.get(key) or DirectoryInfo(key, key.replace("_", " ").title(), 50, "general")


class CitationChecker:
    """Look a business up on every directory and grade each listing's NAP.

    Usage::

        checker = CitationChecker()
        query = BusinessQuery("The Gents Place", "10225 Research Blvd, Austin, TX 78759")
        analysis = await checker.analyze_citations(query)
        analysis["citation_score"], analysis["summary"]
    """

    def __init__(
        self,
        chains: Optional[list[FallbackChain]] = None,
        nap_weights: NAPWeights = DEFAULT_NAP_WEIGHTS,
    ):
        self._chains = chains if chains is not None else build_default_chains()
        self._nap_weights = nap_weights

    @property
    def directories(self) -> list[str]:
        return [chain.name for chain in self._chains]

    def _grade_listing(
        self, key: str, result: LookupResult, source: NAPRecord, query: BusinessQuery,
    ) -> dict[str, Any]:
        info = _directory_info(key)
        entry = result.to_dict()
        entry.update({
            "directory": key,
            "label": info.label,
            "authority_score": info.authority_score,
            "category": info.category,
        })
        if not result.found:
            return entry

        # Listings often omit fields; fall back to what the owner claimed.
        target = NAPRecord(
            name=result.name or query.business_name,
            address=result.full_address or result.extra.get("display_name") or query.full_address,
            phone=result.phone or "",
        )
        match = compare_nap(source, target, self._nap_weights)
        entry.update({
            "nap_match": match.overall_match,
            "nap_confidence": match.confidence,
            "nap_details": match.to_dict()["details"],
            "debug": {
                "found_name": target.name,
                "found_address": target.address,
                "found_phone": target.phone,
            },
        })
        return entry

    async def check_all_citations(self, query: BusinessQuery) -> list[dict[str, Any]]:
        """Run every directory chain concurrently and grade what was found.

        Returns:
            One dict per directory, in chain order.  Found listings carry
            ``nap_match``, ``nap_confidence``, ``nap_details`` and ``debug``.
        """
        logger.info(
            "Checking %d directories for '%s' at '%s'",
            len(self._chains), query.business_name, query.full_address,
        )
        source = NAPRecord(query.business_name, query.full_address, query.phone or None)
        results = await asyncio.gather(
            *(chain.lookup(query) for chain in self._chains),
            return_exceptions=True,
        )

        processed: list[dict[str, Any]] = []
        for chain, result in zip(self._chains, results):
            if isinstance(result, Exception):
                logger.error("Citation lookup %s failed: %s", chain.name, result, exc_info=result)
                result = LookupResult.error(chain.name, f"Task error: {result}")
            processed.append(self._grade_listing(chain.name, result, source, query))

        found = sum(1 for c in processed if c.get("found"))
        logger.info(
            "Citation check complete: %d/%d found for '%s'",
            found, len(processed), query.business_name,
        )
        return processed

    async def analyze_citations(self, query: BusinessQuery) -> dict[str, Any]:
        """Citation section of a report: per-directory entries plus the summary."""
        citations = await self.check_all_citations(query)
        analysis: dict[str, Any] = {c["directory"]: c for c in citations}
        analysis.update(self.generate_citation_summary(citations))
        return analysis

    @staticmethod
    def is_consistent(citation: dict[str, Any]) -> bool:
        return bool(citation.get("nap_match")) or (
            (citation.get("nap_confidence") or 0) >= CONSISTENT_CONFIDENCE
        )

    @staticmethod
    def generate_citation_summary(citations: list[dict[str, Any]]) -> dict[str, Any]:
        """Score presence, NAP consistency and listing completeness.

        ``citation_score`` is presence (50 pts) + consistency (30 pts) +
        completeness (up to 20 pts).  A listing counts as consistent when its
        NAP matched outright or its confidence reached 70.

        Returns:
            Dict with ``citation_score``, ``nap_consistency`` and ``summary``.
        """
        total = len(citations)
        found = [c for c in citations if c.get("found")]
        consistent = [c for c in found if CitationChecker.is_consistent(c)]

        nap_consistency = round(len(consistent) / len(found) * 100) if found else 0
        presence_score = (len(found) / total) * 50 if total else 0.0
        consistency_score = (nap_consistency / 100) * 30

        completeness_score = 0.0
        if found:
            bonus = 0.0
            for c in found:
                present = sum(
                    1 for key in ("phone", "hours", "categories", "photos", "rating") if c.get(key)
                )
                bonus += present / 5
            completeness_score = min(20.0, (bonus / len(found)) * 20)

        return {
            "citation_score": round(presence_score + consistency_score + completeness_score),
            "nap_consistency": nap_consistency,
            "summary": {
                "total_sources": total,
                "found_count": len(found),
                "consistent_count": len(consistent),
                "inconsistent_count": len(found) - len(consistent),
                "presence_percentage": round(len(found) / total * 100) if total else 0,
                "nap_consistency_percentage": nap_consistency,
            },
        }
