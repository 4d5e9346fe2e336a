"""
Local SEO Report Generator
==========================
Renders a saved analysis as a self-contained HTML page or a structured JSON
document, and writes either to ``data/exports``.
"""

import json
import logging
import os
from datetime import datetime
from html import escape
from typing import Any, Optional, Union

from localseo.utils.helpers import slugify

logger = logging.getLogger(__name__)

CATEGORY_LABELS = {
    "gbp_optimization": "Google Business",
    "citation_presence": "Citations",
    "onpage_seo": "On-Page",
    "nap_consistency": "NAP Consistency",
}


class LocalSEOReportGenerator:
    """Builds HTML and JSON reports from an analysis dict.

    Accepts either a stored analysis (with a nested ``report``) or a bare
    report as returned by ``AnalysisWorkflow.generate_report``.
    """

    def __init__(self, output_dir: str = "data/exports") -> None:
        self.output_dir = os.path.abspath(output_dir)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _esc(value: Any) -> str:
        return escape(str(value)) if value is not None else ""

    @staticmethod
    def _score_hex(score: float) -> str:
        if score > 70:
            return "#22c55e"
        if score > 40:
            return "#eab308"
        return "#ef4444"

    @staticmethod
    def _impact_color(impact: str) -> str:
        return {"high": "#ef4444", "medium": "#eab308"}.get((impact or "").lower(), "#3b82f6")

    @staticmethod
    def _bool_icon(val: Optional[bool]) -> str:
        if val is True:
            return "&#x2705;"
        if val is False:
            return "&#x274C;"
        return "&#x2796;"

    @staticmethod
    def _unwrap(analysis: dict) -> tuple[dict, dict]:
        """Split into (metadata, report)."""
        report = analysis.get("report") or analysis
        meta = {
            "business_name": analysis.get("business_name") or report.get("business_name", ""),
            "website_url": analysis.get("website_url") or report.get("website_url", ""),
            "full_address": analysis.get("full_address") or report.get("full_address", ""),
            "created_at": str(analysis.get("created_at") or report.get("generated_at") or ""),
        }
        return meta, report

    def _build_css(self) -> str:
        return """
        <style>
            *, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
            body { font-family: -apple-system, "Segoe UI", Roboto, sans-serif; background: #f1f5f9; color: #334155; line-height: 1.6; }
            .container { max-width: 1000px; margin: 0 auto; padding: 0 24px 48px; }
            .report-header { background: #0f172a; color: #fff; padding: 40px 0; text-align: center; }
            .report-header h1 { font-size: 1.8rem; }
            .report-header .subtitle { opacity: .75; font-size: .9rem; }
            .overall { font-size: 3rem; font-weight: 800; margin-top: 12px; }
            .section { margin-top: 32px; }
            .section-title { font-size: 1.2rem; font-weight: 700; color: #0f172a; border-bottom: 3px solid #3b82f6; display: inline-block; margin-bottom: 16px; }
            .score-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(180px, 1fr)); gap: 16px; }
            .score-card { background: #fff; border-radius: 12px; padding: 18px; text-align: center; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
            .card-label { font-size: .75rem; text-transform: uppercase; color: #64748b; }
            .card-value { font-size: 1.6rem; font-weight: 800; }
            .data-table { width: 100%; border-collapse: collapse; background: #fff; border-radius: 12px; overflow: hidden; }
            .data-table th { background: #f8fafc; text-align: left; padding: 10px 14px; font-size: .75rem; text-transform: uppercase; color: #64748b; }
            .data-table td { padding: 9px 14px; border-top: 1px solid #f1f5f9; font-size: .9rem; }
            .badge { display: inline-block; padding: 2px 10px; border-radius: 999px; font-size: .7rem; font-weight: 600; color: #fff; text-transform: uppercase; }
            .rec-card { background: #fff; border-radius: 10px; padding: 14px 18px; margin-bottom: 10px; }
            .rec-title { font-weight: 700; }
            .rec-desc { font-size: .85rem; color: #64748b; }
            .summary { background: #fff; border-radius: 10px; padding: 16px 20px; }
            .report-footer { margin-top: 40px; text-align: center; font-size: .78rem; color: #94a3b8; }
            @media print { body { background: #fff; } .score-card, .data-table, .rec-card { break-inside: avoid; } }
        </style>
"""

    # ------------------------------------------------------------------
    # HTML section builders
    # ------------------------------------------------------------------

    def _build_header(self, meta: dict, report: dict) -> str:
        overall = (report.get("score") or {}).get("overall", 0)
        return f"""
        <div class="report-header">
            <div class="container">
                <h1>{self._esc(meta["business_name"] or "Business")} &mdash; Local SEO Report</h1>
                <div class="subtitle">{self._esc(meta["full_address"])} &bull; {self._esc(meta["website_url"])}</div>
                <div class="overall" style="color:{self._score_hex(overall)}">{overall}</div>
                <div class="subtitle">Overall Local SEO Score</div>
            </div>
        </div>
"""

    def _build_score_overview(self, report: dict) -> str:
        categories = (report.get("score") or {}).get("categories") or {}
        if not categories:
            return ""
        cards = ""
        for key, label in CATEGORY_LABELS.items():
            cat = categories.get(key) or {}
            val = cat.get("score", 0)
            cards += f"""
            <div class="score-card">
                <div class="card-label">{label} ({cat.get("weight", 0) * 100:.0f}%)</div>
                <div class="card-value" style="color:{self._score_hex(val)}">{val}</div>
            </div>"""
        return f"""
        <div class="section">
            <div class="section-title">Score Overview</div>
            <div class="score-grid">{cards}
            </div>
        </div>
"""

    def _build_summary(self, report: dict) -> str:
        summary = report.get("ai_summary")
        if not summary:
            return ""
        return f"""
        <div class="section">
            <div class="section-title">Summary</div>
            <div class="summary">{self._esc(summary)}</div>
        </div>
"""

    def _build_gbp(self, report: dict) -> str:
        gbp = report.get("gbp_analysis") or {}
        if gbp.get("error"):
            body = f"<p>{self._esc(gbp['error'])}</p>"
        else:
            rows = "".join(
                f"<tr><td>{self._esc(c.get('name'))}</td><td>{self._esc(c.get('rating'))}</td>"
                f"<td>{self._esc(c.get('review_count'))}</td></tr>"
                for c in gbp.get("competitors") or []
            )
            body = (
                f"<p><strong>{self._esc(gbp.get('name'))}</strong> &bull; "
                f"{self._esc(gbp.get('rating'))} &#x2B50; &bull; "
                f"{self._esc(gbp.get('review_count'))} reviews</p>"
            )
            if rows:
                body += (
                    '<table class="data-table"><thead><tr><th>Competitor</th><th>Rating</th>'
                    f"<th>Reviews</th></tr></thead><tbody>{rows}</tbody></table>"
                )
        return f"""
        <div class="section">
            <div class="section-title">Google Business Profile</div>
            {body}
        </div>
"""

    def _build_citations(self, report: dict) -> str:
        citations = report.get("citation_analysis") or {}
        if citations.get("error"):
            return ""
        summary = citations.get("summary") or {}
        rows = ""
        for key, entry in citations.items():
            if not isinstance(entry, dict) or "found" not in entry:
                continue
            rows += f"""
            <tr>
                <td>{self._esc(entry.get("label") or key)}</td>
                <td>{self._bool_icon(entry.get("found"))} {self._esc(entry.get("status"))}</td>
                <td>{self._bool_icon(entry.get("nap_match")) if entry.get("found") else ""}</td>
                <td>{self._esc(entry.get("nap_confidence", ""))}</td>
            </tr>"""
        return f"""
        <div class="section">
            <div class="section-title">Citations</div>
            <p>Found on {summary.get("found_count", 0)} of {summary.get("total_sources", 0)} directories
               &bull; NAP consistency {summary.get("nap_consistency_percentage", 0)}%
               &bull; Citation score {self._esc(citations.get("citation_score", 0))}</p>
            <table class="data-table">
                <thead><tr><th>Directory</th><th>Status</th><th>NAP Match</th><th>Confidence</th></tr></thead>
                <tbody>{rows}</tbody>
            </table>
        </div>
"""

    def _build_recommendations(self, report: dict) -> str:
        recs = report.get("recommendations") or []
        if not recs:
            return ""
        cards = ""
        for rec in recs:
            impact = rec.get("impact", "")
            cards += f"""
            <div class="rec-card">
                <div class="rec-title">
                    <span class="badge" style="background:{self._impact_color(impact)}">{self._esc(impact)}</span>
                    {self._esc(rec.get("title"))}
                </div>
                <div class="rec-desc">{self._esc(rec.get("description"))}</div>
                <div class="rec-desc">{self._esc(rec.get("category"))} &bull; Difficulty: {self._esc(rec.get("difficulty"))}</div>
            </div>"""
        return f"""
        <div class="section">
            <div class="section-title">Prioritized Recommendations</div>
            {cards}
        </div>
"""

    def _build_footer(self, meta: dict) -> str:
        gen_date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        return f"""
        <div class="report-footer">
            <p>Report generated on {gen_date} for <strong>{self._esc(meta["business_name"])}</strong>.
            Scores are indicative and based on automated checks.</p>
        </div>
"""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_html_report(self, analysis: dict) -> str:
        """Return a complete, self-contained HTML document."""
        meta, report = self._unwrap(analysis)
        logger.info("Generating HTML report for: %s", meta["business_name"] or "unknown")
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="UTF-8">',
            f"<title>Local SEO Report &mdash; {self._esc(meta['business_name'] or 'Report')}</title>",
            self._build_css(),
            "</head>",
            "<body>",
            self._build_header(meta, report),
            '<div class="container">',
            self._build_score_overview(report),
            self._build_summary(report),
            self._build_gbp(report),
            self._build_citations(report),
            self._build_recommendations(report),
            self._build_footer(meta),
            "</div>",
            "</body>",
            "</html>",
        ]
        return "\n".join(parts)

    def generate_json_report(self, analysis: dict) -> dict:
        """Return a JSON-serializable report with metadata and every section."""
        meta, report = self._unwrap(analysis)
        return {
            "metadata": {
                **meta,
                "generated_at": datetime.now().isoformat(),
                "report_version": "1.0.0",
            },
            "score": report.get("score") or {},
            "gbp_analysis": report.get("gbp_analysis") or {},
            "citation_analysis": report.get("citation_analysis") or {},
            "onpage_analysis": report.get("onpage_analysis") or {},
            "speed_insights": report.get("speed_insights") or {},
            "recommendations": report.get("recommendations") or [],
            "ai_summary": report.get("ai_summary", ""),
        }

    def save_report(
        self,
        report: Union[str, dict],
        filename: Optional[str] = None,
        fmt: str = "html",
    ) -> str:
        """Write *report* to ``output_dir`` and return the absolute path.

        Raises:
            ValueError: For formats other than ``html`` and ``json``.
        """
        fmt = fmt.lower()
        if fmt not in ("html", "json"):
            raise ValueError(f"Unsupported format: {fmt!r}. Use 'html' or 'json'.")

        if filename is None:
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            name = report.get("metadata", {}).get("business_name", "") if isinstance(report, dict) else ""
            filename = f"{slugify(name) or 'local_seo_report'}_{ts}"
        if not filename.endswith(f".{fmt}"):
            filename = f"{filename}.{fmt}"

        os.makedirs(self.output_dir, exist_ok=True)
        filepath = os.path.join(self.output_dir, filename)
        with open(filepath, "w", encoding="utf-8") as fh:
            if fmt == "html":
                fh.write(report if isinstance(report, str) else json.dumps(report, indent=2, default=str))
            else:
                json.dump(report if isinstance(report, dict) else {"raw": report}, fh, indent=2, default=str)

        logger.info("Report saved to: %s", filepath)
        return filepath
