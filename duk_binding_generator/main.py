#!/usr/bin/env python3
"""
CLI entry point for Duktape bindings generator
Generates C++ glue exposing documented classes to JavaScript
"""

import argparse
import logging
import os
import sys

# Add parent directory to sys.path for direct execution
if __name__ == '__main__' and __package__ is None:
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from duk_binding_generator.config import GeneratorConfig, parse_config_file
from duk_binding_generator.generator import DukBindingsGenerator
from duk_binding_generator.logger import setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="duk-binding-generator",
        description="Generate Duktape JavaScript bindings from Doxygen XML documentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s doc/xml generated src Scene Entity _IComponent
  %(prog)s -C bindings.xml doc/xml generated src float3 Quat

A class name starting with _ is registered as a dependency only and gets no
bindings file of its own.
        """
    )
    parser.add_argument(
        "input_dir",
        nargs="?",
        metavar="INPUT_XML_DIR",
        help="Directory containing the Doxygen XML output"
    )
    parser.add_argument(
        "output_dir",
        nargs="?",
        metavar="OUTPUT_DIR",
        help="Directory for the generated <Class>Bindings.cpp files"
    )
    parser.add_argument(
        "source_root",
        nargs="?",
        metavar="SOURCE_ROOT",
        help="Source tree searched for class headers"
    )
    parser.add_argument(
        "classes",
        nargs="*",
        metavar="CLASS",
        help="Classes to bind (default: every class in the documentation)"
    )
    parser.add_argument(
        "-C", "--config",
        metavar="CONFIG_FILE",
        help="XML configuration file extending the built-in type tables"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug diagnostics"
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only show warnings and errors"
    )

    args = parser.parse_args(argv)

    if not args.input_dir or not args.output_dir:
        parser.print_usage()
        return

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    setup_logging(level)

    config = GeneratorConfig()
    if args.config:
        try:
            config = parse_config_file(args.config)
        except (ValueError, FileNotFoundError) as e:
            print(f"Error reading config file: {e}", file=sys.stderr)
            sys.exit(1)

    try:
        generator = DukBindingsGenerator(config)
        generator.generate(
            args.input_dir,
            args.output_dir,
            source_root=args.source_root,
            classes=args.classes,
        )
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc(file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
