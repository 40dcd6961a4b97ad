"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from content_tree.core.importer.repository import ExportRepository
from content_tree.core.tree.builder import NodeBuilder
from tests.unit.fakes import FakeContentStore
from tests.unit.samples import EXPORT_DATA


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def builder(store: FakeContentStore) -> NodeBuilder:
    """Builder wired to the fake store for every collaborator."""
    return NodeBuilder(
        records=store,
        fetcher=store,
        schemas=store,
        parser=store,
        relations=store,
        localizations=store,
        mappings=store,
    )


@pytest.fixture
def repository() -> ExportRepository:
    return ExportRepository.from_data(json.loads(json.dumps(EXPORT_DATA)))


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    path = tmp_path / "export.json"
    path.write_text(json.dumps(EXPORT_DATA), encoding="utf-8")
    return path
