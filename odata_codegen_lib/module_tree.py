"""
Namespace module tree mirroring the dotted schema namespaces.

Nodes live in a flat arena and refer to each other by index, so the builder
never holds a node and one of its ancestors at the same time.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Union

from .declarations import (
    EntityDeclaration,
    EntityTypesFunction,
    ReExport,
    WildcardExport,
    escape_identifier,
    escape_keyword,
)
from .models import EntitySet

ROOT = 0


@dataclass
class ModuleRef:
    index: int


Item = Union[ModuleRef, EntityDeclaration, EntityTypesFunction, ReExport, WildcardExport]


@dataclass
class ModuleNode:
    segment: str
    parent: Optional[int] = None
    children: Dict[str, int] = field(default_factory=dict)
    items: List[Item] = field(default_factory=list)


def namespace_segments(namespace: str) -> List[str]:
    return [escape_identifier(segment) for segment in namespace.split('.')]


class ModuleTree:
    """Arena of namespace nodes rooted at index 0."""

    def __init__(self):
        self.nodes: List[ModuleNode] = [ModuleNode(segment="")]

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, index: int) -> ModuleNode:
        return self.nodes[index]

    def locate(self, segments: List[str]) -> int:
        """Return the node at the given path, creating missing nodes along the way."""
        index = ROOT
        for segment in segments:
            child = self.nodes[index].children.get(segment)
            if child is None:
                child = len(self.nodes)
                self.nodes.append(ModuleNode(segment=segment, parent=index))
                self.nodes[index].children[segment] = child
                self.nodes[index].items.append(ModuleRef(child))
            index = child
        return index

    def locate_namespace(self, namespace: str) -> int:
        return self.locate(namespace_segments(namespace))

    def path(self, index: int) -> List[str]:
        segments = []
        while index != ROOT:
            node = self.nodes[index]
            segments.append(node.segment)
            index = node.parent
        return list(reversed(segments))

    def dotted_path(self, index: int) -> str:
        return ".".join(self.path(index))

    def push(self, index: int, item: Item):
        self.nodes[index].items.append(item)

    def walk(self, index: int = ROOT) -> Iterator[int]:
        """Indices of the node and its descendants, depth first in insertion order."""
        yield index
        for item in self.nodes[index].items:
            if isinstance(item, ModuleRef):
                yield from self.walk(item.index)

    def add_entity_set(self, index: int, entity_set: EntitySet, qualifiers: Sequence[str] = ()) -> ReExport:
        """Alias an entity set's name to the entity type it is typed over."""
        for prefix in qualifiers:
            if entity_set.entity_type.startswith(prefix):
                target = f"{self.dotted_path(index)}.{escape_keyword(entity_set.entity_type[len(prefix):])}"
                break
        else:
            *namespace, type_name = entity_set.entity_type.split('.')
            target = ".".join([escape_identifier(segment) for segment in namespace] + [escape_keyword(type_name)])
        export = ReExport(alias=escape_keyword(entity_set.name), target=target)
        self.push(index, export)
        return export

    def add_default_export(self, namespace: str) -> WildcardExport:
        export = WildcardExport(path=".".join(namespace_segments(namespace)))
        self.push(ROOT, export)
        return export
