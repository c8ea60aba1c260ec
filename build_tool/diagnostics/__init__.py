"""
Build Output Diagnostics
========================

Extractors turning raw build output into error/warning text for the
healing loop. Each extractor implements ``DiagnosticsExtractor.extract``.
"""

from .base import Diagnostics, DiagnosticsExtractor
from .cargo_json import CargoJsonExtractor
from .line_scraper import LineScrapingExtractor, collect_blocks
from .parse_utils import describe_exit_code, discard_ansi, parse_compilation_errors

EXTRACTORS = {
    "lines": LineScrapingExtractor,
    "cargo-json": CargoJsonExtractor,
}


def get_extractor(name: str, error_markers=None, warning_markers=None) -> DiagnosticsExtractor:
    """Build the extractor registered under ``name``"""
    extractor_class = EXTRACTORS.get(name)
    if not extractor_class:
        raise ValueError(f"Unknown diagnostics extractor '{name}' (known: {', '.join(EXTRACTORS)})")
    return extractor_class(error_markers, warning_markers)


__all__ = [
    "Diagnostics",
    "DiagnosticsExtractor",
    "LineScrapingExtractor",
    "CargoJsonExtractor",
    "EXTRACTORS",
    "get_extractor",
    "collect_blocks",
    "describe_exit_code",
    "discard_ansi",
    "parse_compilation_errors",
]
