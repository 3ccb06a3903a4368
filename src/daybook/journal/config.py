"""Configuration dataclasses for the journal store and exports.

These are pure data containers with sensible defaults.
Override them from the YAML config or constructor args.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class StoreConfig:
    """Key layout of the local journal store.

    Attributes:
        key_prefix: Prefix in front of every ``YYYY/MM/DD`` entry key.
        tag_index_key: Key holding the derived tag -> count index (JSON).
        file_extension: Extension of exported/imported entry files.
    """

    key_prefix: str = "journal:"
    tag_index_key: str = "allTags"
    file_extension: str = ".txt"


@dataclass
class ExportConfig:
    """Settings for user-facing exports.

    Attributes:
        preview_length: Characters of entry text kept in CSV previews.
        tag_separator: Joins tags inside the CSV tags column.
        title: Heading written at the top of the text block export.
    """

    preview_length: int = 100
    tag_separator: str = ";"
    title: str = "Daybook Journal Export"
