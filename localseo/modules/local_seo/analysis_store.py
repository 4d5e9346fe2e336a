"""Persistence of finished reports in the local SQLite database."""

import json
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from localseo.database import get_session
from localseo.models.analysis import BusinessAnalysis, CitationRecord

logger = logging.getLogger(__name__)


def _json_safe(report: dict[str, Any]) -> dict[str, Any]:
    return json.loads(json.dumps(report, default=str))


def _to_dict(row: BusinessAnalysis, include_report: bool = True) -> dict[str, Any]:
    data = {
        "id": row.id,
        "business_name": row.business_name,
        "website_url": row.website_url,
        "full_address": row.full_address,
        "phone": row.phone,
        "overall_score": row.overall_score,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
    if include_report:
        data["report"] = row.report_json or {}
        data["citations"] = [
            {
                "directory": c.directory_name,
                "status": c.status,
                "url": c.url,
                "nap_match": c.nap_match,
                "nap_confidence": c.nap_confidence,
            }
            for c in row.citations
        ]
    return data


def save_analysis(
    business_name: str,
    website_url: str,
    full_address: str,
    report: dict[str, Any],
    phone: str = "",
) -> int:
    """Insert one analysis (plus a row per directory) and return its id.

    Raises:
        SQLAlchemyError: When the write fails; callers decide whether that
            is fatal.
    """
    citations = report.get("citation_analysis") or {}
    with get_session() as session:
        row = BusinessAnalysis(
            business_name=business_name,
            website_url=website_url,
            full_address=full_address,
            phone=phone or None,
            overall_score=(report.get("score") or {}).get("overall"),
            report_json=_json_safe(report),
        )
        for key, entry in citations.items():
            if not isinstance(entry, dict) or "status" not in entry:
                continue
            row.citations.append(CitationRecord(
                directory_name=key,
                status=entry.get("status", "not_found"),
                url=entry.get("url"),
                nap_match=entry.get("nap_match"),
                nap_confidence=entry.get("nap_confidence"),
            ))
        session.add(row)
        session.flush()
        analysis_id = row.id
    logger.info("Saved analysis id=%s for '%s'", analysis_id, business_name)
    return analysis_id


def get_all_analyses(limit: Optional[int] = None) -> list[dict[str, Any]]:
    """Saved analyses, newest first, without the report body.

    Returns an empty list when the database cannot be read.
    """
    stmt = select(BusinessAnalysis).order_by(
        BusinessAnalysis.created_at.desc(), BusinessAnalysis.id.desc()
    )
    if limit:
        stmt = stmt.limit(limit)
    try:
        with get_session() as session:
            rows = session.execute(stmt).scalars().all()
            return [_to_dict(r, include_report=False) for r in rows]
    except SQLAlchemyError as exc:
        logger.error("Failed to load analyses: %s", exc, exc_info=True)
        return []


def get_analysis_by_id(analysis_id: int) -> Optional[dict[str, Any]]:
    """One analysis including its report, or None if it does not exist."""
    with get_session() as session:
        row = session.get(BusinessAnalysis, analysis_id)
        if row is None:
            logger.warning("Analysis id=%s not found", analysis_id)
            return None
        return _to_dict(row)
