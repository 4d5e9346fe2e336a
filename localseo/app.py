"""Application bootstrap: config, environment, database and workflow wiring."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from localseo.modules.local_seo.nap_matcher import NAPWeights
from localseo.modules.local_seo.scoring import CategoryWeights

logger = logging.getLogger(__name__)


class LocalSEOApp:
    """Loads settings once and hands out configured components.

    Usage::

        app = LocalSEOApp()
        app.initialize()
        report = asyncio.run(app.workflow.generate_report(...))
    """

    def __init__(
        self,
        config_path: str = "config/settings.yaml",
        env_path: str = ".env",
    ):
        self._config_path = config_path
        self._env_path = env_path
        self.config: dict[str, Any] = {}
        self._workflow = None
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, init_database: bool = True) -> None:
        """Load ``.env`` and settings.yaml, create data dirs and the database."""
        if self._initialized:
            return

        env_file = Path(self._env_path)
        if env_file.exists():
            load_dotenv(env_file)
            logger.info("Loaded environment from %s", self._env_path)

        self.config = self.load_config(self._config_path)

        for dir_key in ("data_dir", "export_dir"):
            dir_path = self.config.get("app", {}).get(dir_key, "")
            if dir_path:
                Path(dir_path).mkdir(parents=True, exist_ok=True)

        if init_database:
            from localseo.database import init_db
            db_cfg = self.config.get("database", {})
            init_db(
                database_url=os.getenv("DATABASE_URL") or db_cfg.get("url"),
                echo=db_cfg.get("echo", False),
            )

        self._initialized = True
        logger.info("LocalSEOApp initialised.")

    @staticmethod
    def load_config(config_path: str) -> dict[str, Any]:
        """Read a YAML settings file; a missing file yields an empty config."""
        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s, using defaults.", config_path)
            return {}
        with open(config_file, "r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        logger.info("Configuration loaded from %s", config_path)
        return config

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def nap_weights(self) -> NAPWeights:
        return NAPWeights.from_config(self.config.get("nap"))

    @property
    def category_weights(self) -> CategoryWeights:
        return CategoryWeights.from_config(self.config.get("scoring"))

    @property
    def workflow(self):
        """The configured :class:`AnalysisWorkflow` (created on first use)."""
        self._ensure_initialized()
        if self._workflow is None:
            from localseo.workflows import AnalysisWorkflow
            self._workflow = AnalysisWorkflow(
                nap_weights=self.nap_weights,
                category_weights=self.category_weights,
                timeouts=self.config.get("timeouts"),
                citations_config=self.config.get("citations"),
                llm_config=self.config.get("llm"),
                ai_summary=self.config.get("llm", {}).get("ai_summary", True),
            )
        return self._workflow

    @property
    def export_dir(self) -> str:
        return self.config.get("app", {}).get("export_dir", "data/exports")

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Call initialize() before using the application.")
