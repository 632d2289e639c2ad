from __future__ import annotations

import json
import re
from pathlib import Path

from gobru.domain.models import RequestDescriptor

_UNSAFE = re.compile(r"[/:{}]")


def bru_file_name(method: str, path: str) -> str:
    # POST /users/:id -> post__users__id.bru
    return f"{method.lower()}_{_UNSAFE.sub('_', path)}.bru"


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line if line else line for line in text.splitlines())


def render_body_json(values: dict) -> str:
    return json.dumps(values, indent=2, ensure_ascii=False)


def render_bru(descriptor: RequestDescriptor, seq: int = 1) -> str:
    """Bruno request file text for one descriptor."""
    blocks = [
        "\n".join(
            [
                "meta {",
                f"  name: {descriptor.name}",
                "  type: http",
                f"  seq: {seq}",
                "}",
            ]
        ),
        "\n".join(
            [
                f"{descriptor.method.lower()} {{",
                f"  url: {descriptor.url}",
                f"  body: {'json' if descriptor.has_body else 'none'}",
                "  auth: none",
                "}",
            ]
        ),
    ]

    if descriptor.has_body:
        body = render_body_json(descriptor.body_default_values or {})
        blocks.append("body:json {\n" + _indent(body) + "\n}")

    if descriptor.description:
        blocks.append("docs {\n" + _indent(descriptor.description) + "\n}")

    return "\n\n".join(blocks) + "\n"


class BrunoWriter:
    """Writes .bru files for one run into output_dir; repeated file names get a numeric suffix."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self._used: dict[str, int] = {}

    def _unique_name(self, base: str) -> str:
        count = self._used.get(base, 0) + 1
        self._used[base] = count
        if count == 1:
            return base
        return f"{base[:-len('.bru')]}_{count}.bru"

    def ensure_collection(self, name: str) -> Path:
        """Write a minimal bruno.json so the folder opens as a collection (kept if present)."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        manifest = self.output_dir / "bruno.json"
        if not manifest.exists():
            payload = {"version": "1", "name": name, "type": "collection", "ignore": ["node_modules", ".git"]}
            manifest.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return manifest

    def write(self, descriptor: RequestDescriptor, file_name: str, seq: int = 1) -> Path:
        text = render_bru(descriptor, seq=seq)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / self._unique_name(file_name)
        out_path.write_text(text, encoding="utf-8")
        return out_path
