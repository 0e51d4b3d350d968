"""Shared fixtures for cardscan tests."""

from pathlib import Path

import pytest

from cardscan.adapters.formatter import DefaultFormatter
from cardscan.adapters.markdown_parser import MarkdownOutline
from cardscan.adapters.yaml_codec import CollectionSnapshot
from cardscan.config import CardscanConfig, OptionsConfig, VaultConfig, build_scan_data
from cardscan.core.scanner import DocumentScanner

NOTE_TYPES = {
    "Basic": ["Front", "Back"],
    "Cloze": ["Text", "Back Extra"],
}
EXISTING_IDS = {1000, 2000}


def make_data(custom_regexps=None, existing_ids=None, **options):
    config = CardscanConfig(
        vault=VaultConfig(root=Path("."), snapshot=Path("collection.yaml")),
        options=OptionsConfig(**options),
        custom_regexps=custom_regexps or {},
        context_fields={"Basic": "Back"},
    )
    snapshot = CollectionSnapshot(
        note_types={k: list(v) for k, v in NOTE_TYPES.items()},
        existing_ids=set(EXISTING_IDS if existing_ids is None else existing_ids),
    )
    return build_scan_data(config, snapshot)


def make_scanner(text, path="doc.md", data=None, with_headings=False):
    return DocumentScanner(
        text,
        path=path,
        url="",
        data=data or make_data(),
        formatter=DefaultFormatter(),
        headings=MarkdownOutline().headings(text) if with_headings else None,
    )


@pytest.fixture
def data():
    return make_data()
