"""
Duktape Bindings Generator - Generate Duktape JavaScript bindings from Doxygen XML
"""

from .generator import DukBindingsGenerator
from .doxygen_parser import DoxygenParseError, SymbolGraph
from .type_mapper import TypeCategory, TypeMapper, UnsupportedTypeError, normalize_type
from .code_generators import CodeGenerator, OutputBuilder
from .config import GeneratorConfig, parse_config_file

__version__ = "0.1.0"

__all__ = [
    "DukBindingsGenerator",
    "SymbolGraph",
    "DoxygenParseError",
    "TypeCategory",
    "TypeMapper",
    "UnsupportedTypeError",
    "normalize_type",
    "CodeGenerator",
    "OutputBuilder",
    "GeneratorConfig",
    "parse_config_file",
]
