from typing import List, Optional, Sequence

from .base import Diagnostics, DiagnosticsExtractor
from .parse_utils import parse_compilation_errors, split_lines

DEFAULT_ERROR_MARKERS = ("error[E", "error:")
DEFAULT_WARNING_MARKERS = ("warning:",)


def collect_blocks(lines: Sequence[str], markers: Sequence[str]) -> Optional[str]:
    """
    Collect runs of lines that start at a marker line and end at the next
    blank line (inclusive), in original order.

    Returns:
        The joined blocks, or None when no marker line was found
    """
    collected: List[str] = []
    in_block = False

    for line in lines:
        if not in_block and any(marker in line for marker in markers):
            in_block = True
        if in_block:
            collected.append(line)
            if line.strip() == "":
                in_block = False

    text = "\n".join(collected).rstrip()
    return text or None


class LineScrapingExtractor(DiagnosticsExtractor):
    """Marker-based text scraping of cargo/rustc output"""

    def __init__(
        self,
        error_markers: Optional[Sequence[str]] = None,
        warning_markers: Optional[Sequence[str]] = None,
    ):
        super().__init__("lines")
        self.error_markers = tuple(error_markers or DEFAULT_ERROR_MARKERS)
        self.warning_markers = tuple(warning_markers or DEFAULT_WARNING_MARKERS)

    def extract(self, output: str) -> Diagnostics:
        lines = split_lines(output)
        return Diagnostics(
            errors=collect_blocks(lines, self.error_markers),
            warnings=collect_blocks(lines, self.warning_markers),
            items=parse_compilation_errors(output),
        )
