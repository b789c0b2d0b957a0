"""
Single-pass transformation of a parsed metadata document into a module tree.
"""

import sys
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .declarations import EntityTypesFunction, synthesize_entity
from .emitter import PythonEmitter
from .errors import NavigationResolutionError, UnresolvedNavigationError
from .models import MetadataDocument
from .module_tree import ModuleTree
from .options import GeneratorOptions
from .reflection import field_descriptors


@dataclass
class GenerationResult:
    tree: ModuleTree
    contains_non_ascii: bool = False
    entity_count: int = 0


class CodeGenerator:
    """Generates Python declarations for every entity type of a metadata document."""

    def __init__(self, options: Optional[GeneratorOptions] = None, verbose: bool = False):
        self.options = options or GeneratorOptions()
        self.verbose = verbose

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} Generator VERBOSE] {message}", file=sys.stderr)

    def build(self, document: MetadataDocument) -> GenerationResult:
        """
        Build the module tree for a document.

        Raises:
            UnresolvedNavigationError: one or more navigation properties could
                not be resolved; carries every failure of the run.
        """
        tree = ModuleTree()
        errors: List[NavigationResolutionError] = []
        contains_non_ascii = False
        entity_count = 0

        for schema in document.schemas:
            head = tree.locate_namespace(schema.namespace)
            module_path = tree.dotted_path(head)
            contains_non_ascii = contains_non_ascii or not module_path.isascii()
            self._log_verbose(f"Schema '{schema.namespace}' -> namespace '{module_path}'")

            if self.options.reflection and schema.entities:
                tree.push(head, EntityTypesFunction(
                    entities=[(entity.name, field_descriptors(entity)) for entity in schema.entities]
                ))

            for entity in schema.entities:
                declaration, nav_errors = synthesize_entity(schema, entity, self.options, module_path)
                errors.extend(nav_errors)
                contains_non_ascii = contains_non_ascii or not entity.name.isascii() or \
                    any(not f.name.isascii() for f in declaration.fields)
                tree.push(head, declaration)
                entity_count += 1
                self._log_verbose(f"  {entity.name}: {len(declaration.fields)} fields")

            entity_sets = schema.entity_sets()
            if entity_sets:
                for entity_set in entity_sets:
                    export = tree.add_entity_set(head, entity_set, schema.qualifiers())
                    contains_non_ascii = contains_non_ascii or not export.alias.isascii()
                    self._log_verbose(f"  entity set {export.alias} -> {export.target}")

        default_schema = document.default_schema()
        if default_schema is not None:
            tree.add_default_export(default_schema.namespace)
            self._log_verbose(f"Default namespace: {default_schema.namespace}")

        if errors:
            raise UnresolvedNavigationError(errors)

        return GenerationResult(tree=tree, contains_non_ascii=contains_non_ascii, entity_count=entity_count)

    def generate(self, document: MetadataDocument) -> str:
        """Build the module tree and render it to Python source."""
        return PythonEmitter(self.options).emit(self.build(document).tree)
