"""Configuration loader for cardscan.toml."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .adapters.yaml_codec import CollectionSnapshot
from .core.model import ScanData
from .core.notes import ID_REGEXP_STR


@dataclass
class VaultConfig:
    """Vault-specific configuration."""
    root: Path
    snapshot: Path
    name: str = ""


@dataclass
class SyntaxConfig:
    """Markers that delimit notes and file-level settings."""
    begin_note: str = "START"
    end_note: str = "END"
    begin_inline_note: str = "STARTI"
    end_inline_note: str = "ENDI"
    target_deck_line: str = "TARGET DECK"
    file_tags_line: str = "FILE TAGS"
    delete_note_line: str = "DELETE"
    frozen_fields_line: str = "FROZEN"


@dataclass
class DefaultsConfig:
    """Defaults for notes created from a document."""
    deck: str = "Default"
    tag: str = "Obsidian_to_Anki"
    model: str = "Basic"


@dataclass
class OptionsConfig:
    """Scan behaviour switches."""
    add_context: bool = False
    comment: bool = False
    curly_cloze: bool = False
    highlights_to_cloze: bool = False
    add_obs_tags: bool = False


@dataclass
class CardscanConfig:
    """Complete cardscan configuration."""
    vault: VaultConfig
    syntax: SyntaxConfig = field(default_factory=SyntaxConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    options: OptionsConfig = field(default_factory=OptionsConfig)
    custom_regexps: dict[str, str] = field(default_factory=dict)
    context_fields: dict[str, str] = field(default_factory=dict)
    file_link_fields: dict[str, str] = field(default_factory=dict)


def _str_table(data: dict[str, Any], name: str) -> dict[str, str]:
    table = data.get(name, {})
    if not isinstance(table, dict) or not all(
        isinstance(v, str) for v in table.values()
    ):
        raise ValueError(f"[{name}] must map note types to strings")
    return {str(k): v for k, v in table.items()}


def _bool(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"Option {key!r} must be true or false")
    return value


def load_config(config_path: Path | None = None, vault_path: Path | None = None) -> CardscanConfig:
    """
    Load configuration from cardscan.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/cardscan.toml
    3. vault_path/cardscan.toml

    Args:
        config_path: Explicit path to config file
        vault_path: Vault root path for fallback search

    Returns:
        CardscanConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "cardscan.toml")
    if vault_path:
        search_paths.append(vault_path / "cardscan.toml")

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    vault_data = toml_data.get("vault", {})
    vault_root = Path(vault_path or vault_data.get("root", "."))
    snapshot = Path(vault_data.get("snapshot", ".cardscan/collection.yaml"))
    vault_config = VaultConfig(
        root=vault_root,
        snapshot=snapshot if snapshot.is_absolute() else vault_root / snapshot,
        name=vault_data.get("name", ""),
    )

    syntax_data = toml_data.get("syntax", {})
    defaults = SyntaxConfig()
    syntax_config = SyntaxConfig(
        **{
            key: str(syntax_data.get(key, getattr(defaults, key)))
            for key in SyntaxConfig.__dataclass_fields__
        }
    )

    defaults_data = toml_data.get("defaults", {})
    defaults_config = DefaultsConfig(
        deck=defaults_data.get("deck", "Default"),
        tag=defaults_data.get("tag", "Obsidian_to_Anki"),
        model=defaults_data.get("model", "Basic"),
    )

    options_data = toml_data.get("options", {})
    options_config = OptionsConfig(
        add_context=_bool(options_data, "add_context", False),
        comment=_bool(options_data, "comment", False),
        curly_cloze=_bool(options_data, "curly_cloze", False),
        highlights_to_cloze=_bool(options_data, "highlights_to_cloze", False),
        add_obs_tags=_bool(options_data, "add_obs_tags", False),
    )

    return CardscanConfig(
        vault=vault_config,
        syntax=syntax_config,
        defaults=defaults_config,
        options=options_config,
        custom_regexps=_str_table(toml_data, "custom_regexps"),
        context_fields=_str_table(toml_data, "context_fields"),
        file_link_fields=_str_table(toml_data, "file_link_fields"),
    )


def compile_syntax(syntax: SyntaxConfig) -> dict[str, re.Pattern]:
    """Compile the document-level patterns from the configured markers."""
    e = re.escape
    return {
        "note_regexp": re.compile(
            r"^" + e(syntax.begin_note) + r"\n([\s\S]*?\n)" + e(syntax.end_note),
            re.MULTILINE,
        ),
        "inline_regexp": re.compile(
            e(syntax.begin_inline_note) + r"(.*?)" + e(syntax.end_inline_note)
        ),
        "deck_regexp": re.compile(
            r"^" + e(syntax.target_deck_line) + r"(?:\n|: )(.*)", re.MULTILINE
        ),
        "tag_regexp": re.compile(
            r"^" + e(syntax.file_tags_line) + r"(?:\n|: )(.*)", re.MULTILINE
        ),
        "empty_regexp": re.compile(e(syntax.delete_note_line) + ID_REGEXP_STR),
        "frozen_regexp": re.compile(
            e(syntax.frozen_fields_line) + r" - (.*?):\n((?:[^\n][\n]?)+)"
        ),
    }


def build_scan_data(config: CardscanConfig, snapshot: CollectionSnapshot) -> ScanData:
    """Combine configuration and the collection snapshot into scan input."""
    for note_type, pattern in config.custom_regexps.items():
        if not pattern:
            continue
        try:
            re.compile(pattern, re.MULTILINE)
        except re.error as e:
            raise ValueError(f"Invalid regex for note type {note_type!r}: {e}") from e

    template = {
        "deckName": config.defaults.deck,
        "modelName": config.defaults.model,
        "fields": {},
        "options": {"allowDuplicate": False, "duplicateScope": "deck"},
        "tags": [config.defaults.tag] if config.defaults.tag else [],
    }

    return ScanData(
        fields_dict={k: list(v) for k, v in snapshot.note_types.items()},
        existing_ids=set(snapshot.existing_ids),
        template=template,
        custom_regexps=dict(config.custom_regexps),
        context_fields=dict(config.context_fields),
        file_link_fields=dict(config.file_link_fields),
        add_context=config.options.add_context,
        comment=config.options.comment,
        curly_cloze=config.options.curly_cloze,
        highlights_to_cloze=config.options.highlights_to_cloze,
        add_obs_tags=config.options.add_obs_tags,
        **compile_syntax(config.syntax),
    )
