"""Side-by-side NAP comparison of two listings."""

import pandas as pd
import streamlit as st

from localseo.modules.local_seo.nap_matcher import NAPRecord, compare_nap, normalize_nap


def render_nap_checker_page(seo_app) -> None:
    st.title("\U0001f50e NAP Checker")
    st.markdown("Compare your business details against a directory listing.")

    with st.form("nap_form"):
        left, right = st.columns(2)
        with left:
            st.markdown("**Your business**")
            src_name = st.text_input("Name", key="nap_src_name")
            src_address = st.text_input("Address", key="nap_src_address")
            src_phone = st.text_input("Phone", key="nap_src_phone")
        with right:
            st.markdown("**Listing**")
            tgt_name = st.text_input("Name", key="nap_tgt_name")
            tgt_address = st.text_input("Address", key="nap_tgt_address")
            tgt_phone = st.text_input("Phone", key="nap_tgt_phone")
        submitted = st.form_submit_button("Compare", use_container_width=True)

    if not submitted:
        return

    source = NAPRecord(src_name, src_address, src_phone or None)
    target = NAPRecord(tgt_name, tgt_address, tgt_phone or None)
    result = compare_nap(source, target, seo_app.nap_weights)

    if result.overall_match:
        st.success(f"✅ Match · confidence {result.confidence}%")
    else:
        st.error(f"❌ No match · confidence {result.confidence}%")

    st.dataframe(
        pd.DataFrame([
            {"Field": "Name", "Match": result.name_match, "Score": round(result.details.name_score)},
            {"Field": "Address", "Match": result.address_match, "Score": round(result.details.address_score)},
            {"Field": "Phone", "Match": result.phone_match, "Score": round(result.details.phone_score)},
        ]),
        use_container_width=True,
        hide_index=True,
    )

    with st.expander("Normalized values"):
        st.dataframe(
            pd.DataFrame({
                "Your business": normalize_nap(source).to_dict(),
                "Listing": normalize_nap(target).to_dict(),
            }),
            use_container_width=True,
        )
