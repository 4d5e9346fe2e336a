"""Local SEO Analyzer: Streamlit dashboard.

Main Streamlit application with sidebar navigation.
Run with: streamlit run dashboard/app.py
"""

import logging
import sys
from pathlib import Path

import streamlit as st

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Local SEO Analyzer",
    page_icon="📍",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #0f172a 0%, #1e293b 100%);
    }
    [data-testid="stSidebar"] * {
        color: #e2e8f0 !important;
    }
    [data-testid="stSidebar"] .stButton > button {
        width: 100%;
        text-align: left;
        border-radius: 10px;
        border: none;
        background: transparent;
        margin-bottom: 4px;
    }
    [data-testid="stSidebar"] .stButton > button[kind="primary"] {
        background: rgba(59, 130, 246, 0.3) !important;
        border-left: 3px solid #3b82f6 !important;
    }
    .main .block-container { padding-top: 2rem; }
</style>
""", unsafe_allow_html=True)


def get_app():
    """Initialised :class:`LocalSEOApp`, shared across reruns."""
    if "seo_app" not in st.session_state:
        from localseo.app import LocalSEOApp
        seo_app = LocalSEOApp(
            config_path=str(project_root / "config" / "settings.yaml"),
            env_path=str(project_root / ".env"),
        )
        seo_app.initialize()
        st.session_state.seo_app = seo_app
    return st.session_state.seo_app


def main():
    if "current_page" not in st.session_state:
        st.session_state.current_page = "analyze"

    pages = {
        "analyze": ("📍", "New Analysis"),
        "history": ("📜", "History"),
        "nap": ("🔎", "NAP Checker"),
    }

    with st.sidebar:
        st.markdown("### 📍 Local SEO Analyzer")
        st.markdown("---")
        for page_id, (icon, label) in pages.items():
            is_active = st.session_state.current_page == page_id
            if st.button(
                f"{icon}  {label}",
                key=f"nav_{page_id}",
                type="primary" if is_active else "secondary",
                use_container_width=True,
            ):
                st.session_state.current_page = page_id
                st.rerun()

        st.markdown("---")
        if st.button(
            "⚙️  API Keys",
            key="nav_settings",
            type="primary" if st.session_state.current_page == "settings" else "secondary",
            use_container_width=True,
        ):
            st.session_state.current_page = "settings"
            st.rerun()

    page = st.session_state.current_page
    try:
        seo_app = get_app()
    except Exception as exc:
        logger.error("Initialisation failed: %s", exc, exc_info=True)
        st.error(f"Could not initialise the analyzer: {exc}")
        return

    if page == "settings":
        from pages.settings import render_settings_page
        render_settings_page()
    elif page == "history":
        from pages.history import render_history_page
        render_history_page(seo_app)
    elif page == "nap":
        from pages.nap_checker import render_nap_checker_page
        render_nap_checker_page(seo_app)
    else:
        from pages.local_seo import render_local_seo_page
        render_local_seo_page(seo_app)


if __name__ == "__main__":
    main()
