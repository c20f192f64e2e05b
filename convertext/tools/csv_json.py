"""CSV and JSON conversions.

CSV handling is deliberately simple: lines are split on commas without quote
handling, matching what users paste from spreadsheets in the common case.
"""

import csv
import io
import json
from typing import Any, Dict, List

from ..models import RenderMode
from .decorator import text_tool
from .models import ToolCategory


def _non_blank_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


def _split_row(line: str) -> List[str]:
    return [cell.strip() for cell in line.split(",")]


@text_tool(
    name="csvToJson",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.CSV_JSON,
)
def csv_to_json(text: str) -> str:
    """Convert CSV to JSON"""
    lines = _non_blank_lines(text)
    if not lines:
        return "[]"

    headers = _split_row(lines[0])
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        values = _split_row(line)
        # Rows that do not line up with the header are dropped
        if len(values) == len(headers):
            rows.append(dict(zip(headers, values)))

    return json.dumps(rows, indent=2, ensure_ascii=False)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@text_tool(
    name="jsonToCsv",
    render_mode=RenderMode.OUTPUT,
    category=ToolCategory.CSV_JSON,
)
def json_to_csv(text: str) -> str:
    """Convert a JSON array of objects to CSV"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return "Error: Invalid JSON input."
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        return "Error: JSON input must be an array of objects."
    if not data:
        return ""

    headers: List[str] = []
    for item in data:
        for key in item:
            if key not in headers:
                headers.append(key)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for item in data:
        writer.writerow([_cell(item.get(key)) for key in headers])
    return buffer.getvalue().rstrip("\n")


@text_tool(name="removeCsvColumns", category=ToolCategory.CSV_JSON)
def remove_csv_columns(text: str, columns_to_remove: str = "") -> str:
    """Remove specified columns from CSV data (comma-separated column names)"""
    lines = _non_blank_lines(text)
    if not lines:
        return text

    headers = _split_row(lines[0])
    to_remove = {col.strip().lower() for col in columns_to_remove.split(",")}
    keep = [i for i, header in enumerate(headers) if header.lower() not in to_remove]
    if not keep:
        return "Error: All columns would be removed."

    result = [",".join(headers[i] for i in keep)]
    for line in lines[1:]:
        values = _split_row(line)
        result.append(",".join(values[i] if i < len(values) else "" for i in keep))
    return "\n".join(result)
