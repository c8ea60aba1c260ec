from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import CompilationError


@dataclass
class Diagnostics:
    """Error and warning text extracted from build output"""
    errors: Optional[str] = None
    warnings: Optional[str] = None
    items: List[CompilationError] = field(default_factory=list)


class DiagnosticsExtractor(ABC):
    """Base class for build output extractors"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def extract(self, output: str) -> Diagnostics:
        """
        Extract diagnostics from raw build output

        Args:
            output: Interleaved stdout + stderr of the build

        Returns:
            Diagnostics; empty when nothing is recognized. Must not raise on
            malformed output.
        """
        pass
