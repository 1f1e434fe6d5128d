"""JSON export of fetched entities.

Why JSON:
- Interoperability with spreadsheets/scripts that post-process field data.
- Keeps a snapshot of a list fetch (entities + pagination) on disk.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from fieldops.core.domain.models import Entity, PageInfo


def export_entities_json(
    *,
    entities: Sequence[Entity],
    output_path: Path,
    page_info: PageInfo | None = None,
) -> Path:
    """Write entities to UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "data": [entity.model_dump(mode="json") for entity in entities],
        "page_info": page_info.model_dump(mode="json") if page_info else None,
    }
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
