"""Tests for HTML/JSON report export."""

import json
from pathlib import Path

import pytest

from localseo.modules.local_seo.recommendations import generate_smart_recommendations
from localseo.modules.local_seo.report_generator import LocalSEOReportGenerator
from localseo.modules.local_seo.scoring import calculate_local_seo_score


@pytest.fixture()
def full_report(sample_report):
    sample_report["score"] = calculate_local_seo_score(sample_report).to_dict()
    sample_report["recommendations"] = [
        r.to_dict() for r in generate_smart_recommendations(sample_report)
    ]
    sample_report["ai_summary"] = "Solid foundation <with> room to grow."
    return sample_report


class TestLocalSEOReportGenerator:

    def test_html_report(self, tmp_path, full_report):
        html = LocalSEOReportGenerator(output_dir=str(tmp_path)).generate_html_report(full_report)
        assert html.startswith("<!DOCTYPE html>")
        assert "The Gents Place" in html
        assert "Fix NAP Inconsistencies" in html
        assert "&lt;with&gt;" in html

    def test_html_from_stored_analysis(self, tmp_path, full_report):
        stored = {"id": 1, "business_name": "Stored Name", "website_url": "https://x.com",
                  "full_address": "1 Main St", "created_at": "2024-01-01", "report": full_report}
        html = LocalSEOReportGenerator(output_dir=str(tmp_path)).generate_html_report(stored)
        assert "Stored Name" in html

    def test_html_with_failed_sections(self, tmp_path):
        report = {
            "business_name": "Acme",
            "gbp_analysis": {"error": "Not found on Google"},
            "citation_analysis": {"error": "boom"},
        }
        html = LocalSEOReportGenerator(output_dir=str(tmp_path)).generate_html_report(report)
        assert "Acme" in html

    def test_json_report(self, tmp_path, full_report):
        data = LocalSEOReportGenerator(output_dir=str(tmp_path)).generate_json_report(full_report)
        assert data["metadata"]["business_name"] == "The Gents Place"
        assert data["score"]["overall"] == full_report["score"]["overall"]
        assert data["recommendations"][0]["title"] == "Fix NAP Inconsistencies"
        json.dumps(data)

    def test_save_html(self, tmp_path, full_report):
        generator = LocalSEOReportGenerator(output_dir=str(tmp_path / "exports"))
        path = generator.save_report(generator.generate_html_report(full_report), filename="gents")
        assert Path(path).name == "gents.html"
        assert Path(path).read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    def test_save_json_default_name(self, tmp_path, full_report):
        generator = LocalSEOReportGenerator(output_dir=str(tmp_path))
        path = generator.save_report(generator.generate_json_report(full_report), fmt="json")
        assert Path(path).name.startswith("the-gents-place_")
        assert json.loads(Path(path).read_text(encoding="utf-8"))["metadata"]

    def test_unsupported_format(self, tmp_path, full_report):
        generator = LocalSEOReportGenerator(output_dir=str(tmp_path))
        with pytest.raises(ValueError, match="Unsupported format"):
            generator.save_report(full_report, fmt="pdf")
