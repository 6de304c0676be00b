"""JSON export of a finished run.

Why JSON:
- Interoperability with other tooling (SIEM imports, scripts).
- Keeps the result of a run after the terminal table is gone.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import RunSnapshot


def export_run_json(*, snapshot: RunSnapshot, output_path: Path) -> Path:
    """Export a `RunSnapshot` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = snapshot.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
