"""Candidate extraction and strict IPv4 validation.

Extraction is purely lexical: anything shaped like four dot-separated 1-3
digit groups is a candidate, even "999.1.1.1". Validation decides later
whether a candidate is worth a remote lookup.
"""

from __future__ import annotations

import re

_CANDIDATE_RE = re.compile(r"\b(?:[0-9]{1,3}\.){3}[0-9]{1,3}\b", re.ASCII)


def extract_candidates(text: str) -> list[str]:
    """Return every IPv4-looking token in first-seen order, duplicates kept."""

    candidates: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        candidates.extend(_CANDIDATE_RE.findall(line))
    return candidates


def is_valid_ipv4(token: str) -> bool:
    """Strict dotted-quad check: four base-10 parts, each in 0..255.

    Leading zeros are accepted ("010.0.0.1" is 10.0.0.1).
    """

    parts = token.split(".")
    if len(parts) != 4:
        return False
    for part in parts:
        # ASCII digits only
        if not part or not (part.isascii() and part.isdigit()):
            return False
        if not 0 <= int(part, 10) <= 255:
            return False
    return True
