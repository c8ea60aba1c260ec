import json
from typing import List, Optional

from ..models import CompilationError
from .base import Diagnostics, DiagnosticsExtractor
from .line_scraper import LineScrapingExtractor, collect_blocks
from .parse_utils import split_lines


class CargoJsonExtractor(DiagnosticsExtractor):
    """Structured diagnostics from ``cargo ... --message-format=json``

    Each ``compiler-message`` line carries a rendered diagnostic plus its
    spans. Plain-text lines mixed into the output (cargo's own ``error:``
    summary lines on stderr) are scraped as usual. Output without any JSON
    message falls back entirely to line scraping.
    """

    def __init__(self, error_markers=None, warning_markers=None):
        super().__init__("cargo-json")
        self.fallback = LineScrapingExtractor(error_markers, warning_markers)

    def extract(self, output: str) -> Diagnostics:
        errors: List[str] = []
        warnings: List[str] = []
        items: List[CompilationError] = []
        text_lines: List[str] = []
        saw_json = False

        for line in split_lines(output):
            stripped = line.strip()
            if not stripped.startswith("{"):
                text_lines.append(line)
                continue
            try:
                record = json.loads(stripped)
            except json.JSONDecodeError:
                text_lines.append(line)
                continue
            if not isinstance(record, dict):
                continue
            saw_json = True
            if record.get("reason") != "compiler-message":
                continue

            message = record.get("message")
            if not isinstance(message, dict):
                continue
            level = message.get("level", "")
            rendered = message.get("rendered") or message.get("message") or ""
            rendered = rendered.rstrip() if isinstance(rendered, str) else str(rendered)
            if level in ("error", "error: internal compiler error"):
                errors.append(rendered)
                item = self._to_item(message)
                if item:
                    items.append(item)
            elif level == "warning":
                warnings.append(rendered)

        if not saw_json:
            return self.fallback.extract(output)

        text_errors = collect_blocks(text_lines, self.fallback.error_markers)
        if text_errors:
            errors.append(text_errors)

        return Diagnostics(
            errors="\n\n".join(e for e in errors if e) or None,
            warnings="\n\n".join(w for w in warnings if w) or None,
            items=items,
        )

    @staticmethod
    def _to_item(message: dict) -> Optional[CompilationError]:
        spans = message.get("spans")
        spans = [s for s in spans if isinstance(s, dict)] if isinstance(spans, list) else []
        primary = next((s for s in spans if s.get("is_primary")), spans[0] if spans else None)
        if not primary:
            return None
        try:
            line = int(primary.get("line_start") or 0)
            column = int(primary.get("column_start") or 0)
        except (TypeError, ValueError):
            return None
        code = message.get("code") or {}
        rendered = message.get("rendered")
        return CompilationError(
            message=str(message.get("message", "")),
            file=str(primary.get("file_name", "")),
            line=line,
            column=column,
            code=code.get("code") if isinstance(code, dict) else None,
            snippet=rendered.rstrip() if isinstance(rendered, str) else "",
        )
