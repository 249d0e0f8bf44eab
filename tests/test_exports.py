"""Tests for services.exports and utils.file_manager modules."""

from __future__ import annotations

import json
import os
import time

import pandas as pd
import pytest
from flask import current_app

from services.exports import ExportError, ExportService, normalize_format, slugify
from services.projects import ProjectService
from utils.collections import database
from utils.file_manager import FileManager
from utils.validation import ProjectForm

from tests.conftest import FakeScraper


@pytest.fixture()
def completed_project(user):
    form = ProjectForm.from_mapping({
        "name": "Acme Products!",
        "target_url": "https://acme.test",
        "data_types": ["text", "links", "emails"],
    })
    project, _ = ProjectService(scraper=FakeScraper()).create_and_scrape(user, form)
    return project


class TestFormats:
    @pytest.mark.parametrize("value, expected", [("CSV", "csv"), ("excel", "xlsx"), ("json", "json")])
    def test_normalize_format(self, value, expected):
        assert normalize_format(value) == expected

    def test_unknown_format(self):
        with pytest.raises(ExportError, match="Unsupported export format: pdf"):
            normalize_format("pdf")

    def test_slugify(self):
        assert slugify("Acme Products!") == "acme-products"
        assert slugify("!!!") == "export"


class TestExportProject:
    def test_csv(self, user, completed_project):
        path, name, mimetype = ExportService().export_project(user, completed_project.id, "csv")

        assert name == "acme-products.csv"
        assert mimetype == "text/csv"
        frame = pd.read_csv(path)
        assert list(frame.columns)[:4] == ["id", "url", "title", "description"]
        assert len(frame) == completed_project.scraped_items
        assert "sales@acme.test" in set(frame["email"].dropna())

    def test_json_decodes_nested_fields(self, user, completed_project):
        path, name, _ = ExportService().export_project(user, completed_project.id, "json")

        with open(path, encoding="utf-8") as f:
            document = json.load(f)
        assert name == "acme-products.json"
        assert document["project"]["id"] == completed_project.id
        assert len(document["items"]) == completed_project.scraped_items
        link_rows = [i for i in document["items"] if i["custom_data"].get("type") == "link"]
        assert link_rows[0]["links"] == [{"url": "https://acme.test/about", "text": "About"}]

    def test_xlsx(self, user, completed_project):
        path, name, _ = ExportService().export_project(user, completed_project.id, "excel")

        assert name == "acme-products.xlsx"
        frame = pd.read_excel(path, sheet_name="Scraped Data")
        assert len(frame) == completed_project.scraped_items

    def test_records_export(self, user, completed_project):
        ExportService().export_project(user, completed_project.id, "csv")
        records = database.export_records.list(where={"user_id": user.id})
        assert len(records) == 1
        assert records[0].format == "csv"
        assert records[0].project_name == "Acme Products!"
        assert records[0].item_count == completed_project.scraped_items

    def test_rows_keep_extraction_order(self, user, completed_project):
        path, _, _ = ExportService().export_project(user, completed_project.id, "csv")

        assert pd.read_csv(path)["title"].tolist() == [
            "Acme Store",
            "Welcome to the Acme store.",
            "Contact sales@acme.test or call +1 555-123-4567.",
            "Widgets from $19.99 each.",
            "About",
            "sales@acme.test",
            "Acme Store",
        ]

    def test_removes_expired_exports(self, user, completed_project):
        export_dir = current_app.config["EXPORT_DIR"]
        stale = FileManager(export_dir).save_content("stale.csv", "a")
        two_days_ago = time.time() - 48 * 3600
        os.utime(stale, (two_days_ago, two_days_ago))

        path, _, _ = ExportService().export_project(user, completed_project.id, "json")

        assert not os.path.exists(stale)
        assert os.path.exists(path)
        assert os.path.dirname(path) == os.path.abspath(export_dir)

    def test_only_completed_projects(self, user, completed_project):
        database.scraping_projects.update(completed_project.id, {"status": "failed"})
        with pytest.raises(ExportError, match="Only completed projects"):
            ExportService().export_project(user, completed_project.id, "csv")

    def test_other_users_project_not_found(self, other_user, completed_project):
        with pytest.raises(LookupError):
            ExportService().export_project(other_user, completed_project.id, "csv")


class TestFileManager:
    def test_save_and_resolve(self, tmp_path):
        manager = FileManager(str(tmp_path / "exports"))
        path = manager.save_content("a.json", "{}")
        assert path == os.path.join(manager.base_dir, "a.json")
        assert manager.save_content("b.bin", b"\x00\x01").endswith("b.bin")

    @pytest.mark.parametrize("name", ["../escape.csv", "sub/dir.csv", ""])
    def test_rejects_paths_outside_base(self, tmp_path, name):
        manager = FileManager(str(tmp_path))
        with pytest.raises(ValueError):
            manager.resolve(name)

    def test_cleanup_old_files(self, tmp_path):
        manager = FileManager(str(tmp_path))
        old = manager.save_content("old.csv", "a")
        fresh = manager.save_content("fresh.csv", "b")
        two_days_ago = time.time() - 48 * 3600
        os.utime(old, (two_days_ago, two_days_ago))

        assert manager.cleanup_old_files(max_age_hours=24) == 1
        assert not os.path.exists(old)
        assert os.path.exists(fresh)
