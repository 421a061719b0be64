"""surql-gen - SurrealQL schema parsing and query result-shape inference."""

from surql_gen.config import Config, ConnectionConfig, SchemaConventions
from surql_gen.errors import ConfigError, EmptySchemaError, MissingConfigError, SurqlGenError
from surql_gen.export import ExportOptions, export_schema_ddl
from surql_gen.inference import ShapeInferrer, infer_query_shape, infer_shape
from surql_gen.parsing import DDLParser, QueryParser, parse_ddl, parse_query, resolve_type
from surql_gen.registry import SchemaRegistry
from surql_gen.schema import Schema
from surql_gen.shapes import render_shape
from surql_gen.types import FieldDefinition, Reference, TableDefinition, TypeDescriptor
from surql_gen.validation import validate_references

__all__ = [
    # Main API
    "Schema",
    "parse_ddl",
    "parse_query",
    "infer_query_shape",
    "infer_shape",
    "render_shape",
    # Parsing and validation
    "DDLParser",
    "QueryParser",
    "resolve_type",
    "validate_references",
    # Model
    "FieldDefinition",
    "Reference",
    "TableDefinition",
    "TypeDescriptor",
    # Inference
    "SchemaRegistry",
    "ShapeInferrer",
    # Export
    "ExportOptions",
    "export_schema_ddl",
    # Configuration and errors
    "Config",
    "ConnectionConfig",
    "SchemaConventions",
    "ConfigError",
    "EmptySchemaError",
    "MissingConfigError",
    "SurqlGenError",
]

__version__ = "0.1.0"
