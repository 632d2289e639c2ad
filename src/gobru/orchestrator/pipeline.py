from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gobru.config import GenerateConfig
from gobru.diagnostics import Diagnostics
from gobru.domain.models import RequestDescriptor, Route
from gobru.render.bruno import BrunoWriter, bru_file_name
from gobru.render.descriptor import build_descriptor
from gobru.repo.source_tree import GoSourceTree
from gobru.resolve.assemble import assemble_routes
from gobru.resolve.discover import discover_routes
from gobru.resolve.schema import SchemaResolver, TypeSchemaResolver


@dataclass(frozen=True)
class CollectResult:
    files_scanned: int
    routes: list[Route]


@dataclass(frozen=True)
class GenerateResult:
    files_scanned: int
    routes: list[Route]
    descriptors: list[RequestDescriptor]
    written: list[str]
    failed: list[str]  # "METHOD path" of routes whose file could not be written
    output_dir: str
    dry_run: bool
    diagnostics: Diagnostics = field(repr=False, compare=False, default_factory=Diagnostics)


def collect_routes(
    input_dir: Path,
    diagnostics: Diagnostics,
    max_files: int | None = None,
    include_tests: bool = True,
    resolver: Optional[SchemaResolver] = None,
) -> CollectResult:
    """Discover and assemble routes. GoParseError from any file aborts the run."""
    tree = GoSourceTree.scan(input_dir, max_files=max_files, include_tests=include_tests)
    diagnostics.info("scan", f"{len(tree)} Go files under {tree.root}")

    routes = discover_routes(tree, diagnostics)
    diagnostics.info("discover", f"found {len(routes)} handlers with route annotations")

    if resolver is None:
        resolver = TypeSchemaResolver(tree, diagnostics)
    routes = assemble_routes(routes, resolver, diagnostics)

    return CollectResult(files_scanned=len(tree), routes=routes)


def run_generate(config: GenerateConfig, diagnostics: Diagnostics | None = None) -> GenerateResult:
    diagnostics = diagnostics or Diagnostics()

    collected = collect_routes(
        config.input_dir,
        diagnostics,
        max_files=config.max_files,
        include_tests=config.include_tests,
    )

    descriptors = [build_descriptor(r, config.base_url, diagnostics) for r in collected.routes]

    written: list[str] = []
    failed: list[str] = []

    if not config.dry_run:
        writer = BrunoWriter(config.output_dir)
        writer.ensure_collection(config.resolved_collection_name)

        for seq, (route, desc) in enumerate(zip(collected.routes, descriptors), start=1):
            diagnostics.debug("render", f"processing handler: {route.method} {route.path}")
            try:
                out_path = writer.write(desc, bru_file_name(route.method, route.path), seq=seq)
            except (OSError, ValueError, TypeError) as e:
                diagnostics.error("render-failed", f"{route.method} {route.path}: {e}")
                failed.append(f"{route.method} {route.path}")
                continue
            written.append(str(out_path))

    return GenerateResult(
        files_scanned=collected.files_scanned,
        routes=collected.routes,
        descriptors=descriptors,
        written=written,
        failed=failed,
        output_dir=str(config.output_dir),
        dry_run=config.dry_run,
        diagnostics=diagnostics,
    )
