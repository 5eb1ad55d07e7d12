"""
Will Engine - Catalog Configuration
Clause catalogs loaded from JSON files on disk
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .models.clauses import ClauseLibrary
from .services.clauses.library import ARTICLE_CONFIGS, build_library, catalog_filename

logger = logging.getLogger(__name__)

# Directory holding clauses-<library>.json files
CLAUSE_CATALOG_DIR = os.getenv("CLAUSE_CATALOG_DIR", "catalogs")

# Loaded once, read-only afterwards
_library: Optional[ClauseLibrary] = None


def read_catalog_file(path: Path) -> Any:
    """Parsed JSON document, or None when the file is missing or malformed."""
    try:
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as e:
        logger.warning(f"Clause catalog unavailable: {path} ({e})")
    except json.JSONDecodeError as e:
        logger.warning(f"Clause catalog malformed: {path} ({e})")
    return None


def load_catalog_documents(directory: Optional[str] = None) -> Dict[str, Any]:
    """Raw catalog documents keyed by library name."""
    base = Path(directory or CLAUSE_CATALOG_DIR)
    documents = {}
    for config in ARTICLE_CONFIGS:
        documents[config.library] = read_catalog_file(base / catalog_filename(config))
    return documents


def load_library(directory: Optional[str] = None) -> ClauseLibrary:
    """Build a frozen clause library from a catalog directory."""
    base = directory or CLAUSE_CATALOG_DIR
    library = build_library(load_catalog_documents(base))
    logger.info(f"Loaded clause catalogs from {base}")
    return library


def init_library(directory: Optional[str] = None) -> ClauseLibrary:
    """Load the shared library; called once on startup."""
    global _library
    _library = load_library(directory)
    return _library


def get_library() -> ClauseLibrary:
    """Dependency for FastAPI - the shared clause library."""
    if _library is None:
        return init_library()
    return _library
