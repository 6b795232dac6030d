"""
Report rendering for diff results.

Produces a self-contained HTML page or a JSON document from a DiffResult.
Rendering only reads the result.
"""

import json
import logging
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .engine import AttributeChange, DiffResult, ModifiedObject

logger = logging.getLogger(__name__)

REPORT_TITLE = "Directory Snapshot Diff"

_STYLE = """
<style>
 body { font-family: Segoe UI, Roboto, Arial, sans-serif; margin: 24px; }
 h1 { margin-top: 0; }
 .summary { display: grid; grid-template-columns: repeat(5, minmax(120px,1fr)); gap: 12px; margin-bottom: 20px; }
 .card { border: 1px solid #ddd; border-radius: 10px; padding: 12px; box-shadow: 0 1px 2px rgba(0,0,0,0.05); }
 .count { font-size: 22px; font-weight: 700; }
 details { margin: 8px 0 14px 0; }
 summary { cursor: pointer; font-weight: 600; }
 code { background: #f6f8fa; padding: 1px 4px; border-radius: 4px; }
 table { border-collapse: collapse; width: 100%; margin-top: 8px; }
 th, td { border: 1px solid #eee; padding: 6px 8px; vertical-align: top; }
 th { background: #fafafa; text-align: left; }
 .added { color: #0a7f2e; }
 .removed { color: #b00020; }
 .mono { font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, 'Liberation Mono', monospace; }
 .section { margin-top: 24px; }
 .small { color: #555; font-size: 12px; }
</style>"""

_SEPARATOR_NAMES = {"\n": "newline", "\t": "tab", " ": "space"}


def _code(value: str) -> str:
    return f"<code>{escape(value)}</code>"


def _value_list(values: Iterable[str]) -> str:
    values = list(values)
    if not values:
        return "<em>none</em>"
    items = "".join(f"<li>{_code(v)}</li>" for v in values)
    return f"<ul>{items}</ul>"


def _key_list(keys: Iterable[str], empty_text: str) -> str:
    keys = list(keys)
    if not keys:
        return f"<p><em>{escape(empty_text)}</em></p>"
    items = "".join(f"<li class='mono'>{_code(k)}</li>" for k in keys)
    return f"<ul>{items}</ul>"


def _change_row(change: AttributeChange) -> str:
    delta = []
    if change.added:
        delta.append(
            "<div class='added small'>+ Added: "
            + ", ".join(_code(v) for v in change.added)
            + "</div>"
        )
    if change.removed:
        delta.append(
            "<div class='removed small'>&minus; Removed: "
            + ", ".join(_code(v) for v in change.removed)
            + "</div>"
        )
    return (
        "<tr>"
        f"<td class='mono'>{_code(change.attribute)}</td>"
        f"<td>{_value_list(change.old_values)}</td>"
        f"<td>{_value_list(change.new_values)} {' '.join(delta)}</td>"
        "</tr>"
    )


def _modified_block(obj: ModifiedObject) -> str:
    rows = "\n".join(_change_row(change) for change in obj.changes)
    return f"""
<details>
  <summary><span class='mono'>{_code(obj.key)}</span> &nbsp; <span class='small'>({len(obj.changes)} changed attribute(s))</span></summary>
  <table>
    <thead><tr><th>Attribute</th><th>Old</th><th>New / Delta</th></tr></thead>
    <tbody>
{rows}
    </tbody>
  </table>
</details>"""


def _notes(separators: Iterable[str], ignored: Iterable[str]) -> str:
    sep_text = ", ".join(_code(_SEPARATOR_NAMES.get(s, s)) for s in separators)
    ignored = list(ignored)
    ignored_text = ", ".join(_code(name) for name in ignored) if ignored else "<em>none</em>"
    return (
        "<ul>"
        "<li>Compared objects extracted from JSON payloads in the snapshot archives.</li>"
        f"<li>Multi-valued attributes are split on {sep_text} and compared case-insensitively.</li>"
        f"<li>Ignored attributes: {ignored_text}.</li>"
        "</ul>"
    )


def render_html(
    result: DiffResult,
    old_name: str = "",
    new_name: str = "",
    separators: Iterable[str] = (),
    ignored_attributes: Iterable[str] = (),
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render a DiffResult as a standalone HTML page.

    Args:
        result: The diff to render
        old_name: Display name/path of the old snapshot
        new_name: Display name/path of the new snapshot
        separators: Separators used for multi-valued attributes (for the notes)
        ignored_attributes: Ignore list in effect (for the notes)
        generated_at: Timestamp shown in the header (default: now)

    Returns:
        HTML document as a string
    """
    timestamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    if result.modified:
        modified_html = "".join(_modified_block(m) for m in result.modified)
    else:
        modified_html = "<p><em>No modified objects.</em></p>"

    cards = [
        ("Old objects", result.old_count),
        ("New objects", result.new_count),
        ("Added", len(result.added)),
        ("Deleted", len(result.deleted)),
        ("Modified", len(result.modified)),
    ]
    cards_html = "\n".join(
        f'    <div class="card"><div>{label}</div><div class="count">{count}</div></div>'
        for label, count in cards
    )

    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{REPORT_TITLE}</title>
{_STYLE}
</head>
<body>
  <h1>{REPORT_TITLE}</h1>
  <div class="small">Generated: {escape(timestamp)}</div>
  <div class="small">Old snapshot: <span class="mono">{_code(old_name)}</span></div>
  <div class="small">New snapshot: <span class="mono">{_code(new_name)}</span></div>

  <div class="summary">
{cards_html}
  </div>

  <div class="section">
    <h2>Added Objects</h2>
    {_key_list(result.added, "No new objects.")}
  </div>

  <div class="section">
    <h2>Deleted Objects</h2>
    {_key_list(result.deleted, "No deleted objects.")}
  </div>

  <div class="section">
    <h2>Modified Objects</h2>
    {modified_html}
  </div>

  <hr />
  <div class="small">
    <strong>Notes:</strong>
    {_notes(separators, ignored_attributes)}
  </div>
</body>
</html>
"""


def render_json(
    result: DiffResult,
    old_name: str = "",
    new_name: str = "",
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Render a DiffResult as pretty-printed JSON.

    Args:
        result: The diff to render
        old_name: Display name/path of the old snapshot
        new_name: Display name/path of the new snapshot
        extra: Additional top-level fields (e.g. per-snapshot statistics)
    """
    document: Dict[str, Any] = {
        "old_snapshot": old_name,
        "new_snapshot": new_name,
        **result.to_dict(),
    }
    if extra:
        document.update(extra)
    return json.dumps(document, indent=2, ensure_ascii=False)


def write_report(content: str, output_path: Path) -> Path:
    """Write a rendered report as UTF-8 (no BOM), creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote report: {output_path} ({output_path.stat().st_size} bytes)")
    return output_path


REPORT_FORMATS: List[str] = ["html", "json"]
