from __future__ import annotations

from typing import Optional, Protocol

from gobru.diagnostics import Diagnostics
from gobru.domain.models import BodySchema, FieldSchema, SemanticType
from gobru.extractors.go.decls import StructDecl, StructField
from gobru.extractors.go.structtag import parse_struct_tag
from gobru.repo.source_tree import GoSourceTree

_INTEGER_IDENTS = {
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "byte", "rune",
}
_FLOAT_IDENTS = {"float32", "float64"}

# struct-tag keys kept on FieldSchema.tags
_RECOGNISED_TAG_KEYS = ("json", "binding")


class SchemaResolver(Protocol):
    def resolve(self, type_name: str) -> Optional[BodySchema]: ...


def semantic_type_of(field: StructField) -> SemanticType:
    if field.type_kind == "array":
        return "array"
    if field.type_kind == "map":
        return "map"
    if field.type_kind != "ident":
        return "unknown"

    name = field.type_text
    if name == "string":
        return "string"
    if name in _INTEGER_IDENTS:
        return "integer"
    if name in _FLOAT_IDENTS:
        return "float"
    if name == "bool":
        return "boolean"
    return "unknown"


def build_body_schema(decl: StructDecl, file_path: str = "") -> BodySchema:
    """Normalize a struct declaration into a BodySchema (embedded fields dropped)."""
    fields: list[FieldSchema] = []

    for f in decl.fields:
        if not f.names:
            continue

        raw_tags = parse_struct_tag(f.tag) if f.tag else {}
        tags = {k: raw_tags[k] for k in _RECOGNISED_TAG_KEYS if k in raw_tags}

        json_name = tags.get("json", "").split(",")[0]
        required = "required" in tags.get("binding", "")
        description = " ".join(line for line in f.doc if line)
        semantic = semantic_type_of(f)

        for name in f.names:
            fields.append(
                FieldSchema(
                    declared_name=name,
                    semantic_type=semantic,
                    wire_name=json_name or name,
                    required=required,
                    description=description,
                    tags=dict(tags),
                )
            )

    return BodySchema(type_name=decl.name, fields=fields, file_path=file_path)


class TypeSchemaResolver:
    """
    Finds struct types by name across a GoSourceTree.

    First match in traversal order wins. Any later struct with the same name is
    reported as a duplicate-type warning but never replaces the first one.
    """

    def __init__(self, tree: GoSourceTree, diagnostics: Diagnostics):
        self.tree = tree
        self.diagnostics = diagnostics

    def resolve(self, type_name: str) -> Optional[BodySchema]:
        # package-qualified references (dto.CreateUser) match on the type name
        wanted = type_name.rsplit(".", 1)[-1]

        found: Optional[tuple[StructDecl, str]] = None
        for go_file in self.tree.iter_parsed():
            for decl in go_file.structs:
                if decl.name != wanted:
                    continue
                if found is None:
                    found = (decl, go_file.path)
                    continue
                first_decl, first_path = found
                self.diagnostics.warning(
                    "duplicate-type",
                    f"type {wanted} declared at {go_file.path}:{decl.line}; "
                    f"using {first_path}:{first_decl.line}",
                )

        if found is None:
            self.diagnostics.warning("type-not-found", f"body type {type_name} not found in tree")
            return None

        decl, path = found
        schema = build_body_schema(decl, file_path=path)
        self.diagnostics.debug(
            "type-resolved", f"{type_name} -> {path}:{decl.line} ({len(schema.fields)} fields)"
        )
        return schema
