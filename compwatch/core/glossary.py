"""
Competitor Watcher Glossary Store
Per-locale business vocabulary used for report tooltips
"""

import csv
import io
import json
import logging
import re
from dataclasses import dataclass, asdict
from functools import lru_cache
from html import escape
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from .config import GlossaryConfig

logger = logging.getLogger(__name__)

BUNDLED_GLOSSARY_DIR = Path(__file__).resolve().parent.parent / "glossaries"
GLOSSARY_SUFFIXES = (".yaml", ".yml", ".json")
FALLBACK_LOCALE = "en"

_LOCALE_SPLIT = re.compile(r"[-_]")


class GlossaryError(ValueError):
    """Raised when a glossary file cannot be loaded"""


@dataclass(frozen=True)
class GlossaryEntry:
    """One glossary term with its expanded form and plain-language definition"""
    term: str
    full: str
    definition: str


def _parse_entries(data, source: str) -> Dict[str, GlossaryEntry]:
    """Turn a {term: {full, definition}} mapping into entries keyed by lowercase term"""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GlossaryError(f"{source}: expected a mapping of term -> entry, got {type(data).__name__}")

    entries = {}
    for term, body in data.items():
        term = str(term).strip()
        if not term:
            raise GlossaryError(f"{source}: empty term")
        if not isinstance(body, dict):
            raise GlossaryError(f"{source}: entry for '{term}' must be a mapping")

        missing = [name for name in ("full", "definition") if not body.get(name)]
        if missing:
            raise GlossaryError(f"{source}: entry for '{term}' is missing {', '.join(missing)}")

        key = term.lower()
        if key in entries:
            raise GlossaryError(f"{source}: duplicate term '{term}' (already defined as '{entries[key].term}')")

        entries[key] = GlossaryEntry(term=term, full=str(body["full"]), definition=str(body["definition"]))

    return entries


def load_glossary_file(path: Union[str, Path]) -> Dict[str, GlossaryEntry]:
    """
    Load one locale glossary from a YAML or JSON file

    Args:
        path: File whose top level maps term -> {full, definition}

    Returns:
        Dictionary of lowercase term -> GlossaryEntry, in file order
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise GlossaryError(f"Failed to read glossary {path}: {e}")

    return _parse_entries(data, str(path))


class GlossaryStore:
    """
    Read-only collection of locale glossaries

    Built once at start-up and handed to the annotator, so tests can
    construct a store from synthetic glossaries.
    """

    def __init__(self, glossaries: Mapping[str, Mapping[str, Union[GlossaryEntry, dict]]],
                 default_locale: str = FALLBACK_LOCALE):
        """
        Initialize glossary store

        Args:
            glossaries: locale code -> {term: GlossaryEntry or {full, definition}}
            default_locale: Locale used when a requested locale has no glossary
        """
        self._glossaries = {}
        for locale, entries in glossaries.items():
            parsed = {}
            for term, entry in entries.items():
                if isinstance(entry, GlossaryEntry):
                    if entry.term.lower() in parsed:
                        raise GlossaryError(f"{locale}: duplicate term '{entry.term}'")
                    parsed[entry.term.lower()] = entry
                else:
                    for key, value in _parse_entries({term: entry}, locale).items():
                        if key in parsed:
                            raise GlossaryError(f"{locale}: duplicate term '{term}'")
                        parsed[key] = value
            self._glossaries[locale.lower()] = MappingProxyType(parsed)

        self.default_locale = default_locale.lower()
        if self.default_locale not in self._glossaries:
            # Always keep a valid fallback mapping
            self._glossaries[self.default_locale] = MappingProxyType({})

        logger.info(f"Loaded glossaries for {len(self._glossaries)} locales "
                    f"({sum(len(g) for g in self._glossaries.values())} terms)")

    @classmethod
    def from_directory(cls, directory: Union[str, Path], default_locale: str = FALLBACK_LOCALE,
                       locales: Optional[Iterable[str]] = None) -> "GlossaryStore":
        """
        Load every <locale>.yaml / .yml / .json file in a directory

        Args:
            directory: Directory containing glossary files
            default_locale: Fallback locale
            locales: Optional allowlist of locale codes to load

        Returns:
            GlossaryStore
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise GlossaryError(f"Glossary directory not found: {directory}")

        wanted = {code.lower() for code in locales} if locales else None
        glossaries = {}
        for path in sorted(directory.iterdir()):
            if path.suffix not in GLOSSARY_SUFFIXES:
                continue
            locale = path.stem.lower()
            if wanted is not None and locale not in wanted:
                continue
            if locale in glossaries:
                raise GlossaryError(f"More than one glossary file for locale '{locale}' in {directory}")
            glossaries[locale] = load_glossary_file(path)

        return cls(glossaries, default_locale=default_locale)

    @classmethod
    def default(cls, default_locale: str = FALLBACK_LOCALE,
                locales: Optional[Iterable[str]] = None) -> "GlossaryStore":
        """Glossaries shipped with the package, loaded once per settings combination"""
        wanted = tuple(sorted(code.lower() for code in locales)) if locales else None
        return _bundled_store(default_locale.lower(), wanted)

    @classmethod
    def from_config(cls, config: GlossaryConfig) -> "GlossaryStore":
        """
        Build the store described by a glossary configuration

        Args:
            config: Glossary directory (bundled files if None), default and supported locales

        Returns:
            GlossaryStore
        """
        if config.glossary_dir:
            return cls.from_directory(config.glossary_dir, default_locale=config.default_locale,
                                      locales=config.supported_locales)
        return cls.default(default_locale=config.default_locale, locales=config.supported_locales)

    @property
    def locales(self) -> List[str]:
        """Supported locale codes"""
        return sorted(self._glossaries)

    def normalize_locale(self, locale: Optional[str]) -> str:
        """
        Reduce a locale code to a supported base language

        "pt-PT" -> "pt", "en_US" -> "en", unknown -> default locale
        """
        if not locale:
            return self.default_locale
        base = _LOCALE_SPLIT.split(str(locale).strip().lower(), maxsplit=1)[0]
        return base if base in self._glossaries else self.default_locale

    def get_glossary(self, locale: Optional[str]) -> Mapping[str, GlossaryEntry]:
        """Return the locale's term mapping, or the fallback mapping"""
        return self._glossaries[self.normalize_locale(locale)]

    def get_entry(self, term: str, locale: Optional[str] = None) -> Optional[GlossaryEntry]:
        """Case-insensitive lookup of a single term"""
        return self.get_glossary(locale).get(term.strip().lower())

    def search_terms(self, query: str, locale: Optional[str] = None) -> List[GlossaryEntry]:
        """
        Search for terms whose name, full form or definition contains the query

        Args:
            query: Search query
            locale: Locale to search

        Returns:
            Matching entries, best matches first
        """
        query_lower = query.strip().lower()
        if not query_lower:
            return []

        results = []
        for key, entry in self.get_glossary(locale).items():
            haystack = f"{entry.full} {entry.definition}".lower()
            if query_lower in key or query_lower in haystack:
                results.append(entry)

        def sort_key(entry):
            key = entry.term.lower()
            # Exact match gets highest priority
            if key == query_lower:
                return (0, len(key))
            elif key.startswith(query_lower):
                return (1, len(key))
            elif query_lower in key:
                return (2, len(key))
            else:
                return (3, len(key))

        results.sort(key=sort_key)
        return results

    def export_glossary(self, locale: Optional[str] = None, format: str = "json") -> str:
        """
        Export a locale glossary in different formats

        Args:
            locale: Locale to export
            format: Export format ("json", "yaml", "csv", "html")

        Returns:
            Formatted glossary string
        """
        entries = list(self.get_glossary(locale).values())

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2, ensure_ascii=False)

        elif format == "yaml":
            data = {e.term: {"full": e.full, "definition": e.definition} for e in entries}
            return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

        elif format == "csv":
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            writer.writerow(["term", "full", "definition"])
            for e in entries:
                writer.writerow([e.term, e.full, e.definition])
            return buffer.getvalue()

        elif format == "html":
            html = "<dl>\n"
            for e in entries:
                html += f"  <dt><strong>{escape(e.term)}</strong> ({escape(e.full)})</dt>\n"
                html += f"  <dd>{escape(e.definition)}</dd>\n"
            html += "</dl>"
            return html

        else:
            raise ValueError(f"Unknown format: {format}")


@lru_cache(maxsize=8)
def _bundled_store(default_locale: str, locales: Optional[Tuple[str, ...]]) -> GlossaryStore:
    return GlossaryStore.from_directory(BUNDLED_GLOSSARY_DIR, default_locale=default_locale, locales=locales)
