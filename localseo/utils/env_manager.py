"""API key registry and ``.env`` access.

Keys are read from the ``.env`` file (via python-dotenv) with the process
environment as fallback.  Values are only ever shown masked.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values


class EnvManager:
    """Knows which API keys the analyzer uses and which are configured."""

    API_KEY_REGISTRY = {
        "GOOGLE_PLACES_API_KEY": {
            "category": "Google APIs",
            "label": "Google Places API Key",
            "description": "Places text search for the Google Business Profile analysis",
            "required": True,
            "docs_url": "https://developers.google.com/maps/documentation/places/web-service",
        },
        "GOOGLE_CUSTOM_SEARCH_KEY": {
            "category": "Google APIs",
            "label": "Custom Search API Key",
            "description": "site: searches for Yellow Pages, Facebook and Whitepages citations",
            "required": False,
            "docs_url": "https://developers.google.com/custom-search/v1/overview",
        },
        "GOOGLE_CSE_ID": {
            "category": "Google APIs",
            "label": "Custom Search Engine ID",
            "description": "Programmable Search Engine id paired with the Custom Search key",
            "required": False,
            "docs_url": "https://programmablesearchengine.google.com/",
        },
        "PSI_API_KEY": {
            "category": "Google APIs",
            "label": "PageSpeed Insights API Key",
            "description": "Optional key for higher PageSpeed rate limits",
            "required": False,
            "docs_url": "https://developers.google.com/speed/docs/insights/v5/get-started",
        },
        "YELP_API_KEY": {
            "category": "Directories",
            "label": "Yelp Fusion API Key",
            "description": "Yelp business search",
            "required": False,
            "docs_url": "https://docs.developer.yelp.com/",
        },
        "FOURSQUARE_API_KEY": {
            "category": "Directories",
            "label": "Foursquare Places API Key",
            "description": "Foursquare place search",
            "required": False,
            "docs_url": "https://location.foursquare.com/developer/",
        },
        "MAPQUEST_KEY": {
            "category": "Directories",
            "label": "MapQuest Key",
            "description": "MapQuest radius search",
            "required": False,
            "docs_url": "https://developer.mapquest.com/",
        },
        "SEO_TOOL_DOMAIN": {
            "category": "Directories",
            "label": "Contact Domain",
            "description": "Domain sent in the OpenStreetMap User-Agent",
            "required": False,
            "docs_url": "https://operations.osmfoundation.org/policies/nominatim/",
        },
        "OPENAI_API_KEY": {
            "category": "AI / LLM",
            "label": "OpenAI API Key",
            "description": "Narrative summaries of analysis reports",
            "required": False,
            "docs_url": "https://platform.openai.com/api-keys",
        },
        "GEMINI_API_KEY": {
            "category": "AI / LLM",
            "label": "Google Gemini API Key",
            "description": "Fallback provider for report summaries",
            "required": False,
            "docs_url": "https://aistudio.google.com/app/apikey",
        },
        "DATABASE_URL": {
            "category": "App",
            "label": "Database URL",
            "description": "SQLAlchemy URL for saved analyses",
            "required": False,
            "docs_url": "",
        },
    }

    def __init__(self, env_path: Optional[str] = None):
        if env_path:
            self.env_path = Path(env_path)
        else:
            self.env_path = Path(__file__).parent.parent.parent / ".env"

    def load_env(self) -> dict[str, str]:
        """Return the variables defined in the ``.env`` file."""
        if not self.env_path.exists():
            return {}
        return {k: v or "" for k, v in dotenv_values(self.env_path).items()}

    def get_key(self, key_name: str) -> Optional[str]:
        """Return a key from ``.env`` or the environment, or None when unset."""
        value = self.load_env().get(key_name, "") or os.environ.get(key_name, "")
        return value or None

    def get_status(self) -> dict[str, dict]:
        """Configuration status for every registered key (values masked)."""
        env_vars = self.load_env()
        status = {}
        for key, meta in self.API_KEY_REGISTRY.items():
            value = env_vars.get(key, "") or os.environ.get(key, "")
            status[key] = {
                **meta,
                "configured": bool(value),
                "masked_value": self.mask_value(value),
            }
        return status

    def get_categories(self) -> list[str]:
        cats: list[str] = []
        for meta in self.API_KEY_REGISTRY.values():
            if meta["category"] not in cats:
                cats.append(meta["category"])
        return cats

    @staticmethod
    def mask_value(value: str) -> str:
        """Show only the first and last 4 characters of long values."""
        if not value:
            return ""
        if len(value) <= 10:
            return "*" * len(value)
        return value[:4] + "*" * (len(value) - 8) + value[-4:]

    def ensure_env_exists(self) -> bool:
        """Write an empty ``.env`` template if none exists.  Returns True if created."""
        if self.env_path.exists():
            return False
        lines = ["# Local SEO Analyzer environment. Keep this file private.", ""]
        for category in self.get_categories():
            lines.append(f"# {category}")
            for key, meta in self.API_KEY_REGISTRY.items():
                if meta["category"] == category:
                    lines.append(f"# {meta['description']}")
                    lines.append(f"{key}=")
            lines.append("")
        self.env_path.parent.mkdir(parents=True, exist_ok=True)
        self.env_path.write_text("\n".join(lines), encoding="utf-8")
        return True


_manager: Optional[EnvManager] = None


def get_env_manager(env_path: Optional[str] = None) -> EnvManager:
    """Get or create the shared EnvManager."""
    global _manager
    if _manager is None:
        _manager = EnvManager(env_path)
    return _manager
