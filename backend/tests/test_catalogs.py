"""
Catalog Loading Tests

Verifies:
1. clauses-<library>.json files are read into a frozen library
2. Missing or malformed files degrade only their own article
3. The shared library is loaded once
"""

import pytest

from will_engine import catalogs
from will_engine.models import ArticleKey


@pytest.fixture(autouse=True)
def reset_library(monkeypatch):
    monkeypatch.setattr(catalogs, "_library", None)


class TestCatalogLoading:
    """Tests for the catalog loader"""

    def test_load_library_from_directory(self, catalog_dir):
        library = catalogs.load_library(str(catalog_dir))
        assert library.catalog(ArticleKey.DEBTS).primary_ids == (
            "debts.primary.standard", "debts.primary.apportioned",
        )
        assert library.find("sig.primary.attestation") is not None

    def test_malformed_file_degrades_one_article(self, catalog_dir):
        (catalog_dir / "clauses-debts_taxes.json").write_text("{not json", encoding="utf-8")
        library = catalogs.load_library(str(catalog_dir))

        assert library.catalog(ArticleKey.DEBTS).is_empty
        assert not library.catalog(ArticleKey.TRUSTS).is_empty

    def test_missing_directory_gives_empty_library(self, tmp_path):
        library = catalogs.load_library(str(tmp_path / "nowhere"))
        assert all(library.catalog(article).is_empty for article in ArticleKey)

    def test_read_catalog_file_missing(self, tmp_path):
        assert catalogs.read_catalog_file(tmp_path / "clauses-x.json") is None

    def test_get_library_uses_configured_directory(self, monkeypatch, catalog_dir):
        monkeypatch.setattr(catalogs, "CLAUSE_CATALOG_DIR", str(catalog_dir))
        library = catalogs.get_library()

        assert not library.catalog(ArticleKey.MISC).is_empty
        assert catalogs.get_library() is library

    def test_init_library_replaces_shared_library(self, catalog_dir, tmp_path_factory):
        first = catalogs.init_library(str(tmp_path_factory.mktemp("empty")))
        assert first.catalog(ArticleKey.DEBTS).is_empty

        second = catalogs.init_library(str(catalog_dir))
        assert catalogs.get_library() is second
        assert not second.catalog(ArticleKey.DEBTS).is_empty
