"""
OData metadata parser turning a CSDL document into the schema graph models.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple
import requests
from lxml import etree

from .constants import EDM_NAMESPACES, METADATA_NAMESPACE, MULTIPLICITIES
from .errors import InputError, ParseError
from .models import (
    Association,
    AssociationEnd,
    EdmType,
    EntityContainer,
    EntitySet,
    EntityType,
    MetadataDocument,
    NavigationProperty,
    Property,
    Schema,
)


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class MetadataParser:
    """Loads and parses an OData v2/v3 metadata document from a file or a service URL."""

    def __init__(self, source: str, auth: Optional[Tuple[str, str]] = None, verbose: bool = False):
        self.source = str(source)
        self.auth = auth
        self.verbose = verbose
        self.session = None
        if is_url(self.source):
            self.session = requests.Session()
            if auth:
                self.session.auth = auth
            self.session.headers.update({
                'Accept': 'application/xml',
                'User-Agent': 'OData-Codegen/0.1'
            })

    def _log_verbose(self, message: str):
        """Prints message to stderr only if verbose mode is enabled."""
        if self.verbose:
            timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
            print(f"[{timestamp} Parser VERBOSE] {message}", file=sys.stderr)

    @property
    def metadata_url(self) -> str:
        url = self.source.rstrip('/')
        if url.endswith('$metadata'):
            return url
        return f"{url}/$metadata"

    def read(self) -> bytes:
        """Read the raw document, raising InputError when it is unreachable."""
        if self.session is not None:
            self._log_verbose(f"Fetching metadata from {self.metadata_url}...")
            try:
                response = self.session.get(self.metadata_url)
                response.raise_for_status()
            except requests.exceptions.RequestException as req_err:
                raise InputError(self.metadata_url, str(req_err)) from req_err
            self._log_verbose("Metadata fetched successfully.")
            return response.content

        self._log_verbose(f"Reading metadata from {self.source}...")
        try:
            return Path(self.source).read_bytes()
        except OSError as os_err:
            raise InputError(self.source, os_err.strerror or str(os_err)) from os_err

    def parse(self) -> MetadataDocument:
        """Read and parse the metadata document."""
        document = self.parse_bytes(self.read())
        document.source = self.source
        return document

    def parse_bytes(self, content: bytes) -> MetadataDocument:
        """Parse an in-memory CSDL document."""
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)
        try:
            root = etree.fromstring(content, parser=parser)
        except etree.XMLSyntaxError as xml_err:
            raise ParseError(f"failed to parse metadata document: {xml_err}") from xml_err

        if etree.QName(root).localname != 'Edmx':
            raise ParseError(f"expected an Edmx root element, found '{etree.QName(root).localname}'")

        data_services = self._children(root, 'DataServices')
        if not data_services:
            raise ParseError("Edmx document has no DataServices element")

        schemas = [self._parse_schema(elem) for elem in self._children(data_services[0], 'Schema')]
        self._log_verbose(f"Parsing complete. Found {len(schemas)} schemas, "
                          f"{sum(len(s.entities) for s in schemas)} entity types.")
        return MetadataDocument(version=root.get('Version'), schemas=schemas)

    def _children(self, element, local_name: str) -> List:
        return element.xpath(f"./*[local-name()='{local_name}']")

    def _required(self, element, attribute: str) -> str:
        value = element.get(attribute)
        if not value:
            line = f" (line {element.sourceline})" if element.sourceline else ""
            raise ParseError(f"{etree.QName(element).localname} element is missing the '{attribute}' attribute{line}")
        return value

    def _parse_schema(self, schema_elem) -> Schema:
        namespace = self._required(schema_elem, 'Namespace')
        if etree.QName(schema_elem).namespace not in EDM_NAMESPACES:
            self._log_verbose(f"Warning: Schema '{namespace}' uses unrecognized namespace "
                              f"'{etree.QName(schema_elem).namespace}'.")

        entities = [self._parse_entity_type(elem) for elem in self._children(schema_elem, 'EntityType')]
        associations = [self._parse_association(elem) for elem in self._children(schema_elem, 'Association')]

        containers = self._children(schema_elem, 'EntityContainer')
        container = self._parse_entity_container(containers[0]) if containers else None
        if len(containers) > 1:
            self._log_verbose(f"Warning: Schema '{namespace}' declares {len(containers)} entity containers; "
                              f"only '{container.name}' is used.")

        self._log_verbose(f"Parsed schema '{namespace}': {len(entities)} entity types, "
                          f"{len(associations)} associations.")
        return Schema(
            namespace=namespace,
            alias=schema_elem.get('Alias'),
            entities=entities,
            associations=associations,
            entity_container=container
        )

    def _parse_entity_type(self, et_elem) -> EntityType:
        name = self._required(et_elem, 'Name')

        # --- Key ---
        key_elems = self._children(et_elem, 'Key')
        if not key_elems:
            raise ParseError(f"EntityType '{name}' has no Key element")
        prop_refs = [self._required(ref, 'Name') for ref in self._children(key_elems[0], 'PropertyRef')]
        if len(prop_refs) != 1:
            raise ParseError(f"EntityType '{name}' must reference exactly one key property, found {len(prop_refs)}")

        # --- Properties ---
        properties = []
        for prop_elem in self._children(et_elem, 'Property'):
            prop_name = self._required(prop_elem, 'Name')
            prop_type = self._required(prop_elem, 'Type')
            try:
                edm_type = EdmType(prop_type)
            except ValueError:
                raise ParseError(f"unsupported type '{prop_type}' for property '{name}.{prop_name}'") from None
            nullable = prop_elem.get('Nullable', 'true').lower() == 'true'
            properties.append(Property(name=prop_name, type=edm_type, nullable=nullable))

        if prop_refs[0] not in {prop.name for prop in properties}:
            raise ParseError(f"EntityType '{name}' key references unknown property '{prop_refs[0]}'")

        # --- Navigation Properties ---
        navigations = []
        for nav_elem in self._children(et_elem, 'NavigationProperty'):
            navigations.append(NavigationProperty(
                name=self._required(nav_elem, 'Name'),
                relationship=nav_elem.get('Relationship'),
                from_role=nav_elem.get('FromRole'),
                to_role=self._required(nav_elem, 'ToRole')
            ))

        return EntityType(name=name, key=prop_refs[0], properties=properties, navigations=navigations)

    def _parse_association(self, assoc_elem) -> Association:
        name = self._required(assoc_elem, 'Name')
        ends = []
        for end_elem in self._children(assoc_elem, 'End'):
            multiplicity = end_elem.get('Multiplicity')
            if multiplicity is not None and multiplicity not in MULTIPLICITIES:
                raise ParseError(f"Association '{name}' has an end with invalid multiplicity '{multiplicity}'")
            ends.append(AssociationEnd(
                role=end_elem.get('Role'),
                entity_type=end_elem.get('Type'),
                multiplicity=multiplicity
            ))
        return Association(name=name, ends=ends)

    def _parse_entity_container(self, container_elem) -> EntityContainer:
        name = self._required(container_elem, 'Name')
        is_default = container_elem.get(f'{{{METADATA_NAMESPACE}}}IsDefaultEntityContainer', 'false').lower() == 'true'

        entity_sets = []
        for es_elem in self._children(container_elem, 'EntitySet'):
            entity_sets.append(EntitySet(
                name=self._required(es_elem, 'Name'),
                entity_type=self._required(es_elem, 'EntityType')
            ))
        return EntityContainer(name=name, is_default=is_default, entity_sets=entity_sets)
