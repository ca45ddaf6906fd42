"""
Script Bindings Generator - Generate C++ interop wrappers and C# script bindings
"""

from .generator import GeneratedFile, ScriptBindingsGenerator
from .context import GeneratorContext
from .type_mapper import TypeMapper
from .code_generators import CodeGenerator, OutputBuilder
from .cpp_emitter import NativeEmitter
from .postprocessor import PostProcessor
from .errors import Diagnostics, FatalGenerationError
from .model_loader import load_model, parse_model
from .config import BindingConfig, parse_config_file

__version__ = "0.1.0"

__all__ = [
    "ScriptBindingsGenerator",
    "GeneratedFile",
    "GeneratorContext",
    "TypeMapper",
    "CodeGenerator",
    "OutputBuilder",
    "NativeEmitter",
    "PostProcessor",
    "Diagnostics",
    "FatalGenerationError",
    "load_model",
    "parse_model",
    "BindingConfig",
    "parse_config_file",
]
