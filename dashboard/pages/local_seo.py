"""Local SEO Analyzer - Streamlit Dashboard Page.

Business input form, analysis execution, tabbed results and report
downloads.
"""

import asyncio
import json
import traceback
from datetime import datetime
from typing import Any, Dict

import pandas as pd
import streamlit as st

from localseo.modules.local_seo.report_generator import LocalSEOReportGenerator


# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------

def _score_color(score: float) -> str:
    if score > 70:
        return "green"
    if score > 40:
        return "orange"
    return "red"


def _impact_badge(impact: str) -> str:
    """Return an HTML badge for impact level."""
    colors = {"high": "#16a34a", "medium": "#eab308", "low": "#6b7280"}
    bg = colors.get(impact.lower(), "#6b7280")
    return (
        f'<span style="background:{bg};color:#fff;padding:2px 8px;'
        f'border-radius:4px;font-size:0.8em;">'
        f'Impact: {impact.title()}</span>'
    )


def _status_icon(status: Any) -> str:
    if status is None:
        return "➖"
    return "✅" if status else "❌"


def _section_error(results: Dict, section: str) -> bool:
    """Show the section's error, if any, and report whether one was shown."""
    error = (results.get(section) or {}).get("error")
    if error:
        st.warning(f"⚠️ This analysis could not complete: {error}")
        return True
    return False


# ---------------------------------------------------------------------------
# Tab renderers
# ---------------------------------------------------------------------------

def _render_overview_tab(results: Dict) -> None:
    score = results.get("score") or {}
    overall = score.get("overall", 0)
    color = _score_color(overall)
    st.markdown(
        f"<h1 style='text-align:center;color:{color};font-size:4em;margin:0;'>"
        f"{overall}</h1><p style='text-align:center;'>Local SEO Score</p>",
        unsafe_allow_html=True,
    )

    categories = score.get("categories") or {}
    if categories:
        cols = st.columns(len(categories))
        for col, (name, cat) in zip(cols, categories.items()):
            with col:
                st.metric(name.replace("_", " ").title(), f"{cat.get('score', 0)}/100",
                          help=f"Weight {cat.get('weight', 0):.0%}")

    notes = score.get("recommendations") or []
    if notes:
        st.markdown("#### Top Issues")
        for note in notes:
            st.markdown(f"- {note}")

    if results.get("ai_summary"):
        st.markdown("#### Summary")
        st.info(results["ai_summary"])


def _render_gbp_tab(results: Dict) -> None:
    if _section_error(results, "gbp_analysis"):
        return
    gbp = results.get("gbp_analysis") or {}
    c1, c2, c3 = st.columns(3)
    c1.metric("Rating", gbp.get("rating") or "N/A")
    c2.metric("Reviews", gbp.get("review_count") or 0)
    c3.metric("Optimization", f"{gbp.get('optimization_score', 0)}%")

    checks = gbp.get("checks") or {}
    if checks:
        st.dataframe(
            pd.DataFrame([
                {"Check": c["label"], "Passed": _status_icon(c["passed"]), "Details": c.get("details", "")}
                for c in checks.values()
            ]),
            use_container_width=True,
            hide_index=True,
        )

    competitors = gbp.get("competitors") or []
    if competitors:
        st.markdown("#### Nearby Competitors")
        st.dataframe(pd.DataFrame(competitors), use_container_width=True, hide_index=True)


def _render_citations_tab(results: Dict) -> None:
    if _section_error(results, "citation_analysis"):
        return
    citations = results.get("citation_analysis") or {}
    summary = citations.get("summary") or {}
    c1, c2, c3 = st.columns(3)
    c1.metric("Citation Score", citations.get("citation_score", 0))
    c2.metric("Found", f"{summary.get('found_count', 0)}/{summary.get('total_sources', 0)}")
    c3.metric("NAP Consistency", f"{citations.get('nap_consistency', 0)}%")

    rows = []
    for key, entry in citations.items():
        if not isinstance(entry, dict) or "found" not in entry:
            continue
        rows.append({
            "Directory": entry.get("label") or key,
            "Found": _status_icon(entry.get("found")),
            "NAP Match": _status_icon(entry.get("nap_match")) if entry.get("found") else "➖",
            "Confidence": entry.get("nap_confidence", ""),
            "Authority": entry.get("authority_score", ""),
            "URL / Note": entry.get("url") or entry.get("reason") or "",
        })
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


def _render_onpage_tab(results: Dict) -> None:
    if _section_error(results, "onpage_analysis"):
        return
    onpage = results.get("onpage_analysis") or {}
    st.markdown(f"**Title:** {onpage.get('title_tag') or '(missing)'}")
    st.markdown(f"**Meta description:** {onpage.get('meta_description') or '(missing)'}")
    st.markdown(f"**H1:** {onpage.get('h1_tag') or '(missing)'}")
    labels = {
        "has_local_business_schema": "LocalBusiness schema",
        "local_keywords_in_title": "City in title",
        "location_in_h1": "City in H1",
        "location_in_meta_description": "City in meta description",
        "address_present": "Street address on page",
        "phone_number_present": "Phone number on page",
    }
    st.dataframe(
        pd.DataFrame([
            {"Signal": label, "Status": _status_icon(onpage.get(key))}
            for key, label in labels.items()
        ]),
        use_container_width=True,
        hide_index=True,
    )


def _render_speed_tab(results: Dict) -> None:
    if _section_error(results, "speed_insights"):
        return
    speed = results.get("speed_insights") or {}
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Performance", speed.get("performance", "N/A"))
    c2.metric("Accessibility", speed.get("accessibility", "N/A"))
    c3.metric("Best Practices", speed.get("best_practices", "N/A"))
    c4.metric("SEO", speed.get("seo", "N/A"))
    st.caption(
        f"Speed index: {speed.get('load_time', 'N/A')} · "
        f"First contentful paint: {speed.get('first_contentful_paint', 'N/A')}"
    )


def _render_recommendations_tab(results: Dict) -> None:
    recs = results.get("recommendations") or []
    if not recs:
        st.success("No recommendations. Nice work!")
        return
    for i, rec in enumerate(recs, 1):
        st.markdown(
            f"**{i}. {rec['title']}** &nbsp; {_impact_badge(rec['impact'])}",
            unsafe_allow_html=True,
        )
        st.markdown(rec["description"])
        st.caption(f"{rec['category']} · difficulty: {rec['difficulty']}")


def render_report_downloads(results: Dict, key_prefix: str = "ls") -> None:
    """Render HTML and JSON report download buttons."""
    st.divider()
    st.subheader("\U0001f4e5 Download Reports")
    generator = LocalSEOReportGenerator()
    name = (results.get("business_name") or "local_seo").replace(" ", "_").lower()
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")

    c1, c2 = st.columns(2)
    with c1:
        st.download_button(
            label="\U0001f4c4 Download HTML Report",
            data=generator.generate_html_report(results),
            file_name=f"local_seo_report_{name}_{ts}.html",
            mime="text/html",
            use_container_width=True,
            key=f"{key_prefix}_html",
        )
    with c2:
        st.download_button(
            label="\U0001f4ca Download JSON Report",
            data=json.dumps(generator.generate_json_report(results), indent=2, default=str),
            file_name=f"local_seo_report_{name}_{ts}.json",
            mime="application/json",
            use_container_width=True,
            key=f"{key_prefix}_json",
        )


def render_results(results: Dict, key_prefix: str = "ls") -> None:
    """Tabbed view of one finished report."""
    tabs = st.tabs([
        "\U0001f4ca Overview",
        "\U0001f4cd Google Business Profile",
        "\U0001f4cb Citations",
        "\U0001f310 On-Page",
        "⚡ Speed",
        "\U0001f3af Recommendations",
    ])
    with tabs[0]:
        _render_overview_tab(results)
    with tabs[1]:
        _render_gbp_tab(results)
    with tabs[2]:
        _render_citations_tab(results)
    with tabs[3]:
        _render_onpage_tab(results)
    with tabs[4]:
        _render_speed_tab(results)
    with tabs[5]:
        _render_recommendations_tab(results)
    render_report_downloads(results, key_prefix)


# ---------------------------------------------------------------------------
# Main page entry point
# ---------------------------------------------------------------------------

def render_local_seo_page(seo_app) -> None:
    """Render the New Analysis page."""
    st.title("\U0001f4cd Local SEO Analyzer")
    st.markdown("NAP consistency, citations, Google Business Profile, on-page and speed checks.")

    with st.form("local_seo_form", clear_on_submit=False):
        left, right = st.columns(2)
        with left:
            business_name = st.text_input("Business Name *", key="lseo_name")
            full_address = st.text_input(
                "Address *", placeholder="123 Main St, Austin, TX 78701", key="lseo_address",
            )
        with right:
            website_url = st.text_input(
                "Website *", placeholder="https://example.com", key="lseo_website",
            )
            phone = st.text_input("Phone", key="lseo_phone")
        submitted = st.form_submit_button(
            "\U0001f50d Analyze Local SEO", use_container_width=True
        )

    if submitted:
        try:
            with st.spinner("\U0001f50d Analyzing local SEO..."):
                loop = asyncio.new_event_loop()
                try:
                    results = loop.run_until_complete(
                        seo_app.workflow.generate_report(
                            business_name, full_address, website_url, phone=phone,
                        )
                    )
                finally:
                    loop.close()
            st.session_state.local_seo_results = results
            st.success("✅ Local SEO analysis complete!")
        except ValueError as e:
            st.error(f"❌ {e}")
        except Exception as e:
            st.error(f"❌ Analysis failed: {e}")
            with st.expander("Error Details"):
                st.code(traceback.format_exc())

    results = st.session_state.get("local_seo_results")
    if results:
        st.divider()
        render_results(results)
