"""
Renders a module tree into Python source text.
"""

import json
from typing import List, Sequence, Tuple

from .constants import GENERATED_HEADER, INTEGER_ALIASES, REFLECTION_KIND_NAMES
from .declarations import (
    EntityDeclaration,
    EntityTypesFunction,
    FieldDeclaration,
    FieldDefault,
    ReExport,
    ReflectionDeclaration,
    WildcardExport,
)
from .models import EdmType
from .module_tree import ROOT, ModuleRef, ModuleTree
from .options import GeneratorOptions
from .reflection import FieldDescriptor

INDENT = "    "

FIELDS_RETURN = "_typing.Tuple[_typing.Tuple[str, OpenDataType], ...]"
RELATIONS_RETURN = "_typing.Tuple[_typing.Tuple[str, str], ...]"
ENTITY_TYPES_RETURN = f"_typing.Tuple[_typing.Tuple[str, {FIELDS_RETURN}], ...]"


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _indent(lines: List[str], level: int = 1) -> List[str]:
    return [f"{INDENT * level}{line}" if line else "" for line in lines]


def _join_blocks(blocks: List[List[str]], separator: int) -> List[str]:
    lines = []
    for block in blocks:
        if lines:
            lines.extend([""] * separator)
        lines.extend(block)
    return lines


class PythonEmitter:
    """Turns the declaration tree into the text of a single Python module."""

    def __init__(self, options: GeneratorOptions):
        self.options = options

    def emit(self, tree: ModuleTree) -> str:
        blocks = [self._imports(), self._integer_aliases()]
        if self.options.serde and self.options.empty_string_is_null:
            blocks.append(self._empty_string_helper())
        if self.options.reflection:
            blocks.extend(self._reflection_contract())

        blocks.extend(self._render_items(tree, ROOT))
        blocks.extend(self._trailer(tree))

        return GENERATED_HEADER + "\n".join(_join_blocks(blocks, 2)) + "\n"

    # --- Preamble ---

    def _imports(self) -> List[str]:
        # annotations only use private module names so entity names cannot shadow them
        lines = ["from __future__ import annotations", "", "import datetime as _datetime"]
        if not self.options.serde:
            lines.append("import dataclasses")
        if self.options.reflection:
            lines.append("import enum")
        lines.append("import typing as _typing")
        if self.options.serde:
            lines.extend(["", "from pydantic import BaseModel, BeforeValidator, ConfigDict, Field"])
        return lines

    def _integer_aliases(self) -> List[str]:
        lines = []
        for alias, (low, high) in INTEGER_ALIASES.items():
            if self.options.serde:
                lines.append(f"{alias} = _typing.Annotated[int, Field(ge={low}, le={high})]")
            else:
                lines.append(f"{alias} = int")
        return lines

    def _empty_string_helper(self) -> List[str]:
        return [
            "def _empty_string_as_none(value: _typing.Any) -> _typing.Any:",
            f'{INDENT}"""Treat empty strings in payloads as missing values."""',
            f'{INDENT}if value == "":',
            f"{INDENT * 2}return None",
            f"{INDENT}return value",
        ]

    def _reflection_contract(self) -> List[List[str]]:
        kind = ["class OpenDataKind(enum.Enum):"]
        kind.extend(f"{INDENT}{REFLECTION_KIND_NAMES[edm_type]} = {_quote(edm_type.tag)}" for edm_type in EdmType)

        datatype = [
            "class OpenDataType(_typing.NamedTuple):",
            f"{INDENT}kind: OpenDataKind",
            f"{INDENT}nullable: bool",
            f"{INDENT}key: bool",
        ]

        model = [
            "class OpenDataModel:",
            f'{INDENT}"""Run-time reflection contract implemented by every generated entity."""',
            "",
            *_indent(self._static_method("name", "str", ["raise NotImplementedError"])),
            "",
            *_indent(self._static_method("fields", FIELDS_RETURN, ["raise NotImplementedError"])),
            "",
            *_indent(self._static_method("relations", RELATIONS_RETURN, ["return ()"])),
        ]
        return [kind, datatype, model]

    # --- Tree ---

    def _render_items(self, tree: ModuleTree, index: int) -> List[List[str]]:
        blocks = []
        for item in tree.node(index).items:
            if isinstance(item, ModuleRef):
                blocks.append(self._namespace(tree, item.index))
            elif isinstance(item, EntityDeclaration):
                blocks.append(self._entity(item))
            elif isinstance(item, EntityTypesFunction):
                blocks.append(self._entity_types(item))
            # re-exports are emitted after the tree, see _trailer
        return blocks

    def _namespace(self, tree: ModuleTree, index: int) -> List[str]:
        body = _join_blocks(self._render_items(tree, index), 1)
        return [f"class {tree.node(index).segment}:", *_indent(body or ["pass"])]

    def _entity(self, declaration: EntityDeclaration) -> List[str]:
        lines = []
        if declaration.serde:
            header = f"class {declaration.name}(BaseModel):"
            lines.append("model_config = ConfigDict(populate_by_name=True, protected_namespaces=())")
            if declaration.fields:
                lines.append("")
        else:
            header = f"class {declaration.name}:"

        lines.extend(self._field(f, declaration.serde) for f in declaration.fields)

        if declaration.reflection is not None:
            if lines:
                lines.append("")
            lines.extend(self._reflection(declaration.reflection))

        decorator = [] if declaration.serde else ["@dataclasses.dataclass(kw_only=True)"]
        return [*decorator, header, *_indent(lines or ["pass"])]

    def _field(self, declaration: FieldDeclaration, serde: bool) -> str:
        annotation = declaration.annotation
        if declaration.empty_string_as_none:
            annotation = f"_typing.Annotated[{annotation}, BeforeValidator(_empty_string_as_none)]"

        if not serde:
            default = {
                FieldDefault.REQUIRED: "",
                FieldDefault.NONE: " = None",
                FieldDefault.EMPTY_LIST: " = dataclasses.field(default_factory=list)",
            }[declaration.default]
            return f"{declaration.name}: {annotation}{default}"

        arguments = []
        if declaration.default is FieldDefault.NONE:
            arguments.append("default=None")
        elif declaration.default is FieldDefault.EMPTY_LIST:
            arguments.append("default_factory=list")
        if declaration.serialized_name is not None:
            arguments.append(f"alias={_quote(declaration.serialized_name)}")

        if arguments == ["default=None"]:
            return f"{declaration.name}: {annotation} = None"
        if arguments:
            return f"{declaration.name}: {annotation} = Field({', '.join(arguments)})"
        return f"{declaration.name}: {annotation}"

    def _reflection(self, reflection: ReflectionDeclaration) -> List[str]:
        methods = [
            self._static_method("name", "str", [f"return {_quote(reflection.entity_name)}"]),
            self._static_method("fields", FIELDS_RETURN, self._return_tuple(
                [[self._field_descriptor(descriptor)] for descriptor in reflection.fields]
            )),
        ]
        if reflection.relations is not None:
            methods.append(self._static_method("relations", RELATIONS_RETURN, self._return_tuple(
                [[f"({_quote(relation.name)}, {_quote(relation.target)})"] for relation in reflection.relations]
            )))
        return ["class Reflection(OpenDataModel):", *_indent(_join_blocks(methods, 1))]

    def _entity_types(self, function: EntityTypesFunction) -> List[str]:
        entries = []
        for name, descriptors in function.entities:
            if not descriptors:
                entries.append([f"({_quote(name)}, ())"])
                continue
            entries.append([
                f"({_quote(name)}, (",
                *(f"{INDENT}{self._field_descriptor(d)}," for d in descriptors),
                "))",
            ])
        return self._static_method("entity_types", ENTITY_TYPES_RETURN, self._return_tuple(entries))

    def _field_descriptor(self, descriptor: FieldDescriptor) -> str:
        kind = REFLECTION_KIND_NAMES[descriptor.kind]
        return (f"({_quote(descriptor.name)}, OpenDataType(OpenDataKind.{kind}, "
                f"nullable={descriptor.nullable}, key={descriptor.key}))")

    def _static_method(self, name: str, returns: str, body: List[str]) -> List[str]:
        return ["@staticmethod", f"def {name}() -> {returns}:", *_indent(body)]

    def _return_tuple(self, entries: Sequence[List[str]]) -> List[str]:
        if not entries:
            return ["return ()"]
        body = []
        for entry in entries:
            body.extend(entry[:-1])
            body.append(f"{entry[-1]},")
        return ["return (", *_indent(body), ")"]

    # --- Trailer ---

    def _trailer(self, tree: ModuleTree) -> List[List[str]]:
        exports: List[Tuple[str, ReExport]] = []
        wildcards: List[WildcardExport] = []
        rebuilds: List[str] = []

        for index in tree.walk():
            path = tree.dotted_path(index)
            for item in tree.node(index).items:
                if isinstance(item, ReExport):
                    exports.append((path, item))
                elif isinstance(item, WildcardExport):
                    wildcards.append(item)
                elif isinstance(item, EntityDeclaration) and item.serde and item.has_navigations:
                    rebuilds.append(f"{path}.{item.name}.model_rebuild()")

        blocks = []
        if exports:
            blocks.append([f"{path + '.' if path else ''}{export.alias} = {export.target}" for path, export in exports])
        if rebuilds:
            blocks.append(rebuilds)
        for wildcard in wildcards:
            blocks.append([
                "globals().update({",
                f"{INDENT}_name: getattr({wildcard.path}, _name) for _name in vars({wildcard.path})",
                f'{INDENT}if not _name.startswith("_") and _name not in globals()',
                "})",
            ])
        return blocks
