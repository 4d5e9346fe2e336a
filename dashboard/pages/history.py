"""Saved analyses: table of past runs with drill-down."""

import pandas as pd
import streamlit as st

from localseo.modules.local_seo.analysis_store import get_all_analyses, get_analysis_by_id


def render_history_page(seo_app) -> None:
    st.title("\U0001f4dc Analysis History")

    analyses = get_all_analyses(limit=50)
    if not analyses:
        st.info("No saved analyses yet. Run one from **New Analysis**.")
        return

    st.dataframe(
        pd.DataFrame([
            {
                "ID": a["id"],
                "Date": (a.get("created_at") or "")[:16].replace("T", " "),
                "Business": a["business_name"],
                "Address": a["full_address"],
                "Website": a["website_url"],
                "Score": a.get("overall_score"),
            }
            for a in analyses
        ]),
        use_container_width=True,
        hide_index=True,
    )

    options = {f"#{a['id']} {a['business_name']}": a["id"] for a in analyses}
    selected = st.selectbox("Open an analysis", ["Select..."] + list(options), key="history_select")
    if selected == "Select...":
        return

    analysis = get_analysis_by_id(options[selected])
    if analysis is None:
        st.warning("That analysis no longer exists.")
        return

    from pages.local_seo import render_results
    report = dict(analysis["report"])
    report.setdefault("business_name", analysis["business_name"])
    render_results(report, key_prefix=f"hist_{analysis['id']}")
