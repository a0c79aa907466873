"""Heuristic check that a header row matches a broker's column layout."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from statement_ingest.infrastructure.parsing.fields import fold

_TOKEN_SEPARATORS = re.compile(r"[.:]")


@dataclass(frozen=True)
class ExpectedHeader:
    label: str
    position: int

    @property
    def token(self) -> str:
        """Leading token of the label, e.g. ``"Nro"`` for ``"Nro. de Mov."``."""
        return _TOKEN_SEPARATORS.split(self.label, maxsplit=1)[0].strip()


def count_header_matches(
    row: Sequence[str],
    expected: Sequence[ExpectedHeader],
    window: int = 1,
) -> int:
    """Count expected headers found at (or within ``window`` cells of) their position."""
    folded = [fold(cell or "") for cell in row]
    matches = 0
    for header in expected:
        token = fold(header.token)
        if not token:
            continue
        start = max(0, header.position - window)
        stop = min(len(folded), header.position + window + 1)
        if any(token in folded[i] for i in range(start, stop)):
            matches += 1
    return matches


def validate_header(
    row: Sequence[str],
    expected: Sequence[ExpectedHeader],
    window: int = 1,
) -> bool:
    """Accept the row when at least half of the expected headers are present."""
    if not expected:
        return True
    return count_header_matches(row, expected, window) >= len(expected) // 2
