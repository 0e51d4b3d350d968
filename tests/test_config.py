"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from cardscan.adapters.yaml_codec import CollectionSnapshot
from cardscan.config import build_scan_data, compile_syntax, load_config, SyntaxConfig


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=Path(tmpdir) / "missing.toml", vault_path=Path(tmpdir))

        assert config.vault.root == Path(tmpdir)
        assert config.vault.snapshot == Path(tmpdir) / ".cardscan" / "collection.yaml"
        assert config.syntax.begin_note == "START"
        assert config.defaults.deck == "Default"
        assert config.options.add_context is False
        assert config.custom_regexps == {}


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "cardscan.toml"
        config_path.write_text("""
[vault]
root = "notes"
snapshot = "anki.yaml"
name = "My Vault"

[syntax]
begin_note = "BEGIN CARD"
end_note = "END CARD"

[defaults]
deck = "Languages"
tag = ""

[options]
add_context = true
comment = true

[custom_regexps]
Basic = "^Q: (.*)\\\\nA: (.*)"

[context_fields]
Basic = "Back"
""")

        config = load_config(config_path=config_path)

        assert config.vault.root == Path("notes")
        assert config.vault.snapshot == Path("notes") / "anki.yaml"
        assert config.vault.name == "My Vault"
        assert config.syntax.begin_note == "BEGIN CARD"
        assert config.syntax.begin_inline_note == "STARTI"
        assert config.defaults.deck == "Languages"
        assert config.options.add_context is True
        assert config.options.comment is True
        assert config.custom_regexps == {"Basic": "^Q: (.*)\\nA: (.*)"}
        assert config.context_fields == {"Basic": "Back"}

        data = build_scan_data(config, CollectionSnapshot())
        assert data.template["deckName"] == "Languages"
        assert data.template["tags"] == []
        assert data.note_regexp.search("BEGIN CARD\nBasic\nq\nEND CARD").group(1) == "Basic\nq\n"


def test_absolute_snapshot_path_is_kept():
    with tempfile.TemporaryDirectory() as tmpdir:
        snapshot = Path(tmpdir) / "elsewhere" / "collection.yaml"
        config_path = Path(tmpdir) / "cardscan.toml"
        config_path.write_text(f'[vault]\nsnapshot = "{snapshot.as_posix()}"\n')

        config = load_config(config_path=config_path, vault_path=Path(tmpdir) / "vault")

        assert config.vault.root == Path(tmpdir) / "vault"
        assert config.vault.snapshot == snapshot


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            Path(tmpdir, "cardscan.toml").write_text("""
[defaults]
deck = "FromCwd"
""")

            config = load_config()
            assert config.defaults.deck == "FromCwd"
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_vault():
    """Test config search in vault directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        vault_path = Path(tmpdir) / "vault"
        vault_path.mkdir()
        (vault_path / "cardscan.toml").write_text("""
[options]
curly_cloze = true
""")

        config = load_config(vault_path=vault_path)
        assert config.options.curly_cloze is True


def test_load_config_rejects_non_bool_option():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "cardscan.toml"
        config_path.write_text('[options]\ncomment = "yes"\n')
        with pytest.raises(ValueError):
            load_config(config_path=config_path)


def test_build_scan_data_rejects_bad_regex():
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "cardscan.toml"
        config_path.write_text('[custom_regexps]\nBasic = "(unclosed"\n')
        config = load_config(config_path=config_path)
        with pytest.raises(ValueError):
            build_scan_data(config, CollectionSnapshot())


def test_compile_syntax_default_patterns():
    patterns = compile_syntax(SyntaxConfig())

    assert patterns["deck_regexp"].search("x\nTARGET DECK: Geo\n").group(1) == "Geo"
    assert patterns["deck_regexp"].search("TARGET DECK\nGeo\n").group(1) == "Geo"
    assert patterns["tag_regexp"].search("FILE TAGS: a b").group(1) == "a b"
    assert patterns["inline_regexp"].search("STARTI [Basic] q ENDI").group(1) == " [Basic] q "
    assert patterns["empty_regexp"].search("DELETE\nID: 42").group(1) == "42"
    assert patterns["empty_regexp"].search("DELETE\n<!--ID: 43-->").group(1) == "43"
    frozen = patterns["frozen_regexp"].search("FROZEN - Basic:\nBack: x\n\nrest")
    assert frozen.group(1) == "Basic"
    assert frozen.group(2) == "Back: x\n"


def test_compile_syntax_escapes_markers():
    patterns = compile_syntax(SyntaxConfig(begin_inline_note="{{", end_inline_note="}}"))
    assert patterns["inline_regexp"].search("a {{ [Basic] q }} b").group(1) == " [Basic] q "
