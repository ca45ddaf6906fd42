#!/usr/bin/env python3
"""
CLI entry point for the script bindings generator
Generates native interop wrappers and C# surfaces from a declaration model
"""

import argparse
import os
import sys

# Add parent directory to sys.path for direct execution
if __name__ == '__main__' and __package__ is None:
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from script_binding_generator.config import parse_config_file
from script_binding_generator.errors import FatalGenerationError
from script_binding_generator.generator import ScriptBindingsGenerator
from script_binding_generator.model_loader import load_model


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Generate C++ interop wrappers and C# script bindings from a declaration model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --config bindings.xml
  %(prog)s -C bindings.xml --model model.xml --cpp-output out/cpp
        """
    )

    parser.add_argument(
        "-C", "--config",
        metavar="CONFIG_FILE",
        required=True,
        help="XML configuration file specifying the model and output folders"
    )

    parser.add_argument(
        "--model",
        metavar="MODEL_FILE",
        help="Declaration model file (overrides the one named in the config file)"
    )

    parser.add_argument(
        "--cpp-output",
        metavar="DIRECTORY",
        help="Output folder for generated C++ files"
    )

    parser.add_argument(
        "--cs-engine-output",
        metavar="DIRECTORY",
        help="Output folder for generated engine C# files"
    )

    parser.add_argument(
        "--cs-editor-output",
        metavar="DIRECTORY",
        help="Output folder for generated editor C# files"
    )

    args = parser.parse_args(argv)

    try:
        config = parse_config_file(args.config)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error reading config file: {e}", file=sys.stderr)
        sys.exit(1)

    # Command line overrides
    model_file = args.model or config.model_file
    cpp_output = args.cpp_output or config.cpp_output
    cs_engine_output = args.cs_engine_output or config.cs_engine_output
    cs_editor_output = args.cs_editor_output or config.cs_editor_output

    if not model_file:
        print("Error: No model file specified", file=sys.stderr)
        sys.exit(1)

    if not (cpp_output and cs_engine_output and cs_editor_output):
        print("Error: Output folders for C++, engine C# and editor C# files are required", file=sys.stderr)
        sys.exit(1)

    try:
        context = load_model(model_file)
        generator = ScriptBindingsGenerator(context, config.engine_namespace, config.editor_namespace)
        files = generator.generate()
        generator.write_files(files, cpp_output, cs_engine_output, cs_editor_output)
    except (FatalGenerationError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
