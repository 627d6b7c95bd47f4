from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ..exceptions import CatalogError

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "phrases.json"

_REQUIRED_FIELDS = ("id", "callsign", "atc", "meaning", "expected_readback")


@dataclass(frozen=True)
class Phrase:
    """One controller transmission with its meaning and the ideal pilot readback."""
    id: str
    callsign: str
    atc: str
    meaning: str
    expected_readback: str
    sector: Optional[str] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "Phrase":
        data = dict(record)
        # Accept the camelCase field name used by browser-side catalogs
        if "expected_readback" not in data and "expectedReadback" in data:
            data["expected_readback"] = data["expectedReadback"]

        missing = [name for name in _REQUIRED_FIELDS if not data.get(name)]
        if missing:
            label = data.get("id") or "<no id>"
            raise CatalogError(f"Phrase {label} is missing field(s): {', '.join(missing)}")

        return cls(
            id=str(data["id"]),
            callsign=str(data["callsign"]),
            atc=str(data["atc"]),
            meaning=str(data["meaning"]),
            expected_readback=str(data["expected_readback"]),
            sector=data.get("sector") or None,
        )


class PhraseCatalog:
    """Read-only collection of phrases, keyed by id in catalog order."""

    def __init__(self, phrases: List[Phrase]):
        if not phrases:
            raise CatalogError("Phrase catalog is empty")
        self._phrases: Dict[str, Phrase] = {}
        for phrase in phrases:
            if phrase.id in self._phrases:
                raise CatalogError(f"Duplicate phrase id: {phrase.id}")
            self._phrases[phrase.id] = phrase

    def __len__(self) -> int:
        return len(self._phrases)

    def __iter__(self) -> Iterator[Phrase]:
        return iter(self._phrases.values())

    def __contains__(self, phrase_id: object) -> bool:
        return phrase_id in self._phrases

    @property
    def phrases(self) -> List[Phrase]:
        return list(self._phrases.values())

    def get(self, phrase_id: str) -> Phrase:
        try:
            return self._phrases[phrase_id]
        except KeyError:
            raise CatalogError(f"Unknown phrase id: {phrase_id}") from None

    def sectors(self) -> List[str]:
        seen: List[str] = []
        for phrase in self._phrases.values():
            if phrase.sector and phrase.sector not in seen:
                seen.append(phrase.sector)
        return seen

    def filter_sector(self, sector: str) -> "PhraseCatalog":
        """Sub-catalog for one sector (case-insensitive)."""
        wanted = sector.lower()
        matches = [p for p in self._phrases.values() if p.sector and p.sector.lower() == wanted]
        if not matches:
            raise CatalogError(f"No phrases in sector: {sector}")
        return PhraseCatalog(matches)


def load_catalog(path: Optional[Union[str, Path]] = None) -> PhraseCatalog:
    """
    Load a phrase catalog from JSON.

    Accepts either ``{"phrases": [...]}`` or a bare list of records.
    Without a path the catalog shipped with the package is used.
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog file not found: {catalog_path}") from None
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog {catalog_path} is not valid JSON: {e}") from e

    records = data.get("phrases") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise CatalogError(f"Catalog {catalog_path} must be a list or contain a 'phrases' list")
    if not all(isinstance(record, dict) for record in records):
        raise CatalogError(f"Catalog {catalog_path} entries must be objects")

    catalog = PhraseCatalog([Phrase.from_dict(record) for record in records])
    logger.info(f"Loaded {len(catalog)} phrases from {catalog_path.name}")
    return catalog
