"""API key status page. Keys are edited in ``.env``, never here."""

from pathlib import Path

import streamlit as st

from localseo.utils.env_manager import EnvManager


def get_manager() -> EnvManager:
    env_path = Path(__file__).parent.parent.parent / ".env"
    return EnvManager(str(env_path))


def render_settings_page():
    st.title("⚙️ API Keys")
    manager = get_manager()
    status = manager.get_status()

    configured = sum(1 for s in status.values() if s["configured"])
    required = [k for k, s in status.items() if s["required"]]
    required_ok = sum(1 for k in required if status[k]["configured"])

    c1, c2 = st.columns(2)
    c1.metric("\U0001f511 Configured", f"{configured}/{len(status)}")
    c2.metric("\U0001f534 Required", f"{required_ok}/{len(required)}")

    if not manager.env_path.exists():
        st.warning("No .env file found.")
        if st.button("Create .env template"):
            manager.ensure_env_exists()
            st.rerun()

    for category in manager.get_categories():
        with st.expander(category, expanded=True):
            for key, meta in status.items():
                if meta["category"] != category:
                    continue
                col_label, col_value, col_docs = st.columns([2, 2, 0.8])
                with col_label:
                    icon = "✅" if meta["configured"] else ("❌" if meta["required"] else "⚪")
                    st.markdown(f"{icon} **{meta['label']}**  \n`{key}`")
                    st.caption(meta["description"])
                with col_value:
                    st.code(meta["masked_value"] or "not set")
                with col_docs:
                    if meta.get("docs_url"):
                        st.link_button("\U0001f4d6 Docs", meta["docs_url"], use_container_width=True)

    st.caption(f"Edit `{manager.env_path}` and restart the dashboard to apply changes.")
