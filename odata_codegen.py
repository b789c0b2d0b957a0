#!/usr/bin/env python3
"""
OData metadata to Python code generator.

Reads an OData v2/v3 metadata document (CSDL) from a file or a service URL and
writes a Python module declaring one model per entity type.
"""

import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from odata_codegen_lib import (
    CodeGenerator,
    GeneratorOptions,
    InputError,
    MetadataDocument,
    MetadataParser,
    NavigationResolutionError,
    OutputError,
    ParseError,
    PythonEmitter,
    UnresolvedNavigationError
)
from odata_codegen_lib.metadata_parser import is_url
from odata_codegen_lib.navigation import resolve_navigation

# Load environment variables from .env file
load_dotenv()


def write_output(output: str, output_file: Optional[str]):
    """Write the generated module to a file, or to stdout when no file is given."""
    if output_file is None:
        sys.stdout.write(output)
        return
    try:
        Path(output_file).write_text(output, encoding='utf-8')
    except OSError as os_err:
        raise OutputError(output_file, os_err.strerror or str(os_err)) from os_err


def print_trace_info(document: MetadataDocument, options: GeneratorOptions):
    """Print a summary of the parsed metadata and the generation options."""
    print("=" * 80)
    print("OData Codegen Trace Information")
    print("=" * 80)

    print(f"\nSource: {document.source}")
    print(f"EDMX Version: {document.version or 'unknown'}")
    default_schema = document.default_schema()
    print(f"Default Namespace: {default_schema.namespace if default_schema else 'None'}")

    print("\nGeneration Options:")
    print(f"   - Serde (pydantic models): {options.serde}")
    print(f"   - Empty String Is Null: {options.empty_string_is_null}")
    print(f"   - Reflection: {options.reflection}")
    print(f"   - Expand Navigations: {options.expand}")

    for schema in document.schemas:
        print(f"\nSchema {schema.namespace}" + (f" (alias {schema.alias})" if schema.alias else ""))
        print(f"   Entity Types: {len(schema.entities)}  Associations: {len(schema.associations)}")
        for entity in schema.entities:
            print(f"      {entity.name} (key: {entity.key}, {len(entity.properties)} properties)")
            for navigation in entity.navigations:
                try:
                    resolved = resolve_navigation(schema, entity, navigation)
                    target = f"{resolved.target} [{resolved.multiplicity}]"
                except NavigationResolutionError as nav_err:
                    target = f"UNRESOLVED ({nav_err.reason})"
                print(f"         -> {navigation.name}: {target}")
        entity_sets = schema.entity_sets() or []
        if entity_sets:
            print(f"   Entity Sets: {len(entity_sets)}")
            for entity_set in entity_sets:
                print(f"      {entity_set.name}: {entity_set.entity_type}")

    print("\n" + "=" * 80)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Command-line utility for generating Python code from OData metadata.xml documents",
        prog="odata-codegen"
    )
    parser.add_argument("input_file", nargs='?', help="Path or service URL of the metadata document (falls back to ODATA_METADATA env var)")
    parser.add_argument("-o", "--output-file", help="Write output to file. If not specified, output will be printed to stdout")
    parser.add_argument("--no-serde", action="store_true", help="Emit plain dataclasses instead of pydantic models with aliases and validators")
    parser.add_argument("--no-empty-string-is-null", action="store_true", help="Don't coerce empty strings into None when validating Optional[str] fields")
    parser.add_argument("--no-reflection", action="store_true", help="Don't produce OpenDataModel descriptors for run-time reflection")
    parser.add_argument("--no-expand", action="store_true", help="Don't include navigation properties in the output models. This makes validating $expand-ed payloads impossible.")
    parser.add_argument("-u", "--user", help="Username for basic authentication when fetching from a URL (overrides ODATA_USER env var)")
    parser.add_argument("-p", "--password", help="Password for basic authentication when fetching from a URL (overrides ODATA_PASS env var)")
    parser.add_argument("-v", "--verbose", "--debug", dest="verbose", action="store_true", help="Enable verbose output to stderr")
    parser.add_argument("--trace", action="store_true", help="Print a summary of the parsed metadata and exit without generating code")

    args = parser.parse_args(argv)

    # Priority: positional argument > Environment Variable > .env file
    source = args.input_file or os.getenv("ODATA_METADATA")
    if not source:
        print("ERROR: No metadata document provided.", file=sys.stderr)
        print("Provide it as a positional argument or via the ODATA_METADATA environment variable.", file=sys.stderr)
        parser.print_help(file=sys.stderr)
        return 1

    auth = None
    if is_url(source):
        user = args.user if args.user is not None else (os.getenv("ODATA_USER") or os.getenv("ODATA_USERNAME"))
        password = args.password if args.password is not None else (os.getenv("ODATA_PASS") or os.getenv("ODATA_PASSWORD"))
        if user and password:
            auth = (user, password)
            if args.verbose: print(f"[VERBOSE] Using basic authentication for user: {user}", file=sys.stderr)

    options = GeneratorOptions.from_flags(
        no_serde=args.no_serde,
        no_empty_string_is_null=args.no_empty_string_is_null,
        no_reflection=args.no_reflection,
        no_expand=args.no_expand
    )

    try:
        document = MetadataParser(source, auth, verbose=args.verbose).parse()

        if args.trace:
            print_trace_info(document, options)
            return 0

        result = CodeGenerator(options, verbose=args.verbose).build(document)
        if result.contains_non_ascii:
            print("WARNING: Generated module contains non-ASCII identifiers.", file=sys.stderr)

        output = PythonEmitter(options).emit(result.tree)
        write_output(output, args.output_file)
        if args.verbose and args.output_file:
            print(f"[VERBOSE] Wrote {result.entity_count} entity declarations to {args.output_file}", file=sys.stderr)
        return 0

    except (InputError, ParseError, OutputError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except UnresolvedNavigationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print("Fix the associations in the metadata document or run with --no-expand.", file=sys.stderr)
        return 1
    except Exception as e:
        print("\n--- FATAL ERROR ---", file=sys.stderr)
        print(f"An unexpected error occurred during code generation: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        print("-------------------", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
