"""Analysis workflow: run the four analyses, score them, and save the report."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from localseo.modules.local_seo.nap_matcher import DEFAULT_NAP_WEIGHTS, NAPWeights
from localseo.modules.local_seo.recommendations import (
    generate_ai_summary,
    generate_smart_recommendations,
)
from localseo.modules.local_seo.scoring import CategoryWeights, calculate_local_seo_score
from localseo.utils.validators import validate_business_input

logger = logging.getLogger(__name__)

ANALYSIS_KINDS = ("gbp", "citations", "onPage", "speed")
REPORT_SECTIONS = {
    "gbp": "gbp_analysis",
    "citations": "citation_analysis",
    "onPage": "onpage_analysis",
    "speed": "speed_insights",
}


@dataclass
class BusinessInput:
    """What the user submits for an analysis."""
    business_name: str
    full_address: str
    website_url: str = ""
    phone: str = ""


class AnalysisWorkflow:
    """Fan the analyses out concurrently and combine them into one report.

    Each analysis runs independently; a failure becomes ``{"error": msg}`` in
    its section and the rest of the report is still produced.  Components
    are created lazily so tests can inject fakes.

    Usage::

        workflow = AnalysisWorkflow()
        report = await workflow.generate_report(
            "The Gents Place", "10225 Research Blvd, Austin, TX 78759",
            "https://thegentsplace.com", phone="(512) 555-1234",
        )
    """

    def __init__(
        self,
        nap_weights: NAPWeights = DEFAULT_NAP_WEIGHTS,
        category_weights: CategoryWeights = CategoryWeights(),
        timeouts: Optional[dict[str, Any]] = None,
        citations_config: Optional[dict[str, Any]] = None,
        llm_config: Optional[dict[str, Any]] = None,
        ai_summary: bool = True,
        citation_checker=None,
        gbp_analyzer=None,
        onpage_analyzer=None,
        pagespeed=None,
        llm_client=None,
    ) -> None:
        self.nap_weights = nap_weights
        self.category_weights = category_weights
        self._timeouts = timeouts or {}
        self._citations_config = citations_config or {}
        self._llm_config = llm_config or {}
        self._ai_summary = ai_summary
        self._citation_checker = citation_checker
        self._gbp_analyzer = gbp_analyzer
        self._onpage_analyzer = onpage_analyzer
        self._pagespeed = pagespeed
        self._llm_client = llm_client
        self._status: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Lazy-loaded components
    # ------------------------------------------------------------------

    def _get_citation_checker(self):
        if self._citation_checker is None:
            from localseo.integrations.directories import build_default_chains
            from localseo.modules.local_seo.citation_checker import CitationChecker
            chains = build_default_chains(
                directories=self._citations_config.get("directories"),
                timeouts=self._timeouts.get("directories"),
                suppress_errors=self._citations_config.get("suppress_errors", True),
            )
            self._citation_checker = CitationChecker(chains, nap_weights=self.nap_weights)
        return self._citation_checker

    def _get_gbp_analyzer(self):
        if self._gbp_analyzer is None:
            from localseo.integrations.google_places import GooglePlacesClient
            from localseo.modules.local_seo.gbp_analyzer import GBPAnalyzer
            places = GooglePlacesClient(timeout=self._timeouts.get("google_places", 8.0))
            self._gbp_analyzer = GBPAnalyzer(places)
        return self._gbp_analyzer

    def _get_onpage_analyzer(self):
        if self._onpage_analyzer is None:
            from localseo.modules.local_seo.onpage_analyzer import OnPageAnalyzer
            self._onpage_analyzer = OnPageAnalyzer(timeout=self._timeouts.get("website", 7.0))
        return self._onpage_analyzer

    def _get_pagespeed(self):
        if self._pagespeed is None:
            from localseo.integrations.google_pagespeed import PageSpeedInsights
            self._pagespeed = PageSpeedInsights(timeout=self._timeouts.get("pagespeed", 9.0))
        return self._pagespeed

    def _get_llm_client(self):
        if self._llm_client is None:
            from localseo.integrations.llm_client import LLMClient
            self._llm_client = LLMClient.from_config(self._llm_config)
        return self._llm_client

    # ------------------------------------------------------------------
    # Step tracking
    # ------------------------------------------------------------------

    def _log_step(self, business: str, kind: str, status: str = "running") -> None:
        msg = f"[{business}] {kind}: {status}"
        if status == "error":
            logger.error(msg)
        else:
            logger.info(msg)
        self._status[kind] = {
            "status": status,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

    def get_status(self) -> dict[str, Any]:
        """Per-analysis status of the most recent run."""
        return dict(self._status)

    # ------------------------------------------------------------------
    # Analyses
    # ------------------------------------------------------------------

    async def run_single_analysis(self, kind: str, business: BusinessInput) -> dict[str, Any]:
        """Run one analysis.

        Args:
            kind: One of ``gbp``, ``citations``, ``onPage`` or ``speed``.
            business: The submitted business details.

        Raises:
            ValueError: For an unknown *kind*.
        """
        if kind == "gbp":
            return await self._get_gbp_analyzer().analyze(
                business.business_name, business.full_address,
                phone=business.phone, website_url=business.website_url,
            )
        if kind == "citations":
            from localseo.integrations.directories import BusinessQuery
            query = BusinessQuery(business.business_name, business.full_address, business.phone)
            return await self._get_citation_checker().analyze_citations(query)
        if kind == "onPage":
            return await self._get_onpage_analyzer().analyze(
                business.website_url, business.business_name, business.full_address,
            )
        if kind == "speed":
            return await self._get_pagespeed().get_speed_insights(business.website_url)
        raise ValueError(f"Unknown analysis type: {kind!r}")

    async def _run_tracked(self, kind: str, business: BusinessInput) -> dict[str, Any]:
        self._log_step(business.business_name, kind)
        try:
            result = await self.run_single_analysis(kind, business)
        except Exception:
            self._log_step(business.business_name, kind, "error")
            raise
        self._log_step(business.business_name, kind, "done")
        return result

    async def generate_report(
        self,
        business_name: str,
        full_address: str,
        website_url: str,
        phone: str = "",
        save: bool = True,
    ) -> dict[str, Any]:
        """Build the full report.

        Returns:
            Dict with the business fields, the four analysis sections,
            ``score``, ``recommendations``, ``ai_summary`` and, when saved,
            ``analysis_id``.

        Raises:
            ValueError: When a required field is missing or the URL is invalid.
        """
        validate_business_input(business_name, full_address, website_url)
        business = BusinessInput(
            business_name.strip(), full_address.strip(), website_url.strip(), (phone or "").strip(),
        )
        logger.info("Generating report for '%s'", business.business_name)

        results = await asyncio.gather(
            *(self._run_tracked(kind, business) for kind in ANALYSIS_KINDS),
            return_exceptions=True,
        )

        report: dict[str, Any] = {
            "business_name": business.business_name,
            "full_address": business.full_address,
            "website_url": business.website_url,
            "phone": business.phone,
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }
        for kind, result in zip(ANALYSIS_KINDS, results):
            if isinstance(result, Exception):
                logger.error("%s analysis failed: %s", kind, result, exc_info=result)
                result = {"error": str(result) or type(result).__name__}
            report[REPORT_SECTIONS[kind]] = result

        report["score"] = calculate_local_seo_score(report, self.category_weights).to_dict()
        report["recommendations"] = [r.to_dict() for r in generate_smart_recommendations(report)]
        if self._ai_summary:
            llm_client = self._get_llm_client()
            try:
                report["ai_summary"] = await generate_ai_summary(report, llm_client)
            finally:
                # The dashboard runs each report in its own event loop.
                await llm_client.close()

        if save:
            from localseo.modules.local_seo.analysis_store import save_analysis
            try:
                report["analysis_id"] = save_analysis(
                    business.business_name, business.website_url, business.full_address,
                    report, phone=business.phone,
                )
            except SQLAlchemyError as exc:
                logger.error("Saving analysis failed: %s", exc, exc_info=True)

        logger.info(
            "Report for '%s' complete: score=%s", business.business_name, report["score"]["overall"],
        )
        return report
