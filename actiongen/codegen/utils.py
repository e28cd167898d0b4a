"""Helpers shared by the source generators."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

GENERATED_NOTICE = "generated by actiongen, do not edit"


def py_str(value: str) -> str:
    """Render ``value`` as a double-quoted Python string literal."""
    return json.dumps(value, ensure_ascii=False)


def render(template: str) -> str:
    """Dedent ``template`` and terminate it with exactly one newline."""
    return textwrap.dedent(template).strip() + "\n"


def join_blocks(*blocks: str) -> str:
    """Join rendered blocks with the two blank lines PEP 8 puts between definitions."""
    return "\n\n\n".join(block.rstrip("\n") for block in blocks if block) + "\n"


def write_file(path: Path, content: str) -> None:
    """Write content to a file, creating parent directories if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
