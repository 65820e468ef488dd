from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from chat_viz.engine.resolution import resolve_visualization


def _format_value(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    return value


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve a visualization descriptor JSON file.")
    parser.add_argument("path", help="JSON file holding one descriptor (or a message with 'visualization')")
    parser.add_argument("--figure", action="store_true", help="include plotly figure JSON")
    parser.add_argument("--summary", action="store_true", help="print keys and first rows only")
    return parser.parse_args()


def _summarize(result: dict) -> dict:
    resolved = result.get("resolved") or {}
    records = resolved.get("normalized_records") or []
    preview = [{key: _format_value(value) for key, value in row.items()} for row in records[:5]]
    return {
        "status": result.get("status"),
        "notice": result.get("notice"),
        "kind": resolved.get("kind"),
        "category_key": resolved.get("category_key"),
        "value_key": resolved.get("value_key"),
        "secondary_value_key": resolved.get("secondary_value_key"),
        "series_keys": resolved.get("series_keys"),
        "record_count": len(records),
        "preview": preview,
        "warnings": result.get("warnings"),
    }


def main() -> None:
    args = _parse_args()
    payload = json.loads(Path(args.path).read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "visualization" in payload:
        payload = payload["visualization"]

    result = resolve_visualization(payload, include_figure=args.figure).model_dump()
    output = _summarize(result) if args.summary else result
    print(json.dumps(output, ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
