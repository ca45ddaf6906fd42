"""
Constants and mappings for script binding generation
"""

from clang.cindex import TypeKind


# Mapping from libclang builtin kinds to native fixed width type names,
# used when an enum has to be converted through its underlying integer type
CPP_INTEGER_TYPE_MAP = {
    TypeKind.BOOL: "bool",
    TypeKind.CHAR_S: "INT8",
    TypeKind.SCHAR: "INT8",
    TypeKind.CHAR_U: "UINT8",
    TypeKind.UCHAR: "UINT8",
    TypeKind.SHORT: "INT16",
    TypeKind.USHORT: "UINT16",
    TypeKind.INT: "INT32",
    TypeKind.UINT: "UINT32",
    TypeKind.LONG: "INT32",
    TypeKind.ULONG: "UINT32",
    TypeKind.LONGLONG: "INT64",
    TypeKind.ULONGLONG: "UINT64",
    TypeKind.WCHAR: "wchar_t",
    TypeKind.CHAR16: "char16_t",
    TypeKind.CHAR32: "char32_t",
}

# Mapping from libclang builtin kinds to C# types (explicit enum types)
CSHARP_TYPE_MAP = {
    TypeKind.BOOL: "bool",
    TypeKind.CHAR_S: "sbyte",
    TypeKind.SCHAR: "sbyte",
    TypeKind.CHAR_U: "byte",
    TypeKind.UCHAR: "byte",
    TypeKind.SHORT: "short",
    TypeKind.USHORT: "ushort",
    TypeKind.INT: "int",
    TypeKind.UINT: "uint",
    TypeKind.LONG: "int",
    TypeKind.ULONG: "uint",
    TypeKind.LONGLONG: "long",
    TypeKind.ULONGLONG: "ulong",
    TypeKind.WCHAR: "char",
    TypeKind.CHAR16: "char",
}

DEFAULT_ENUM_CPP_TYPE = "INT32"

# Naming scheme, stable across regenerations
SCRIPT_TYPE_PREFIX = "Script"
INTEROP_FUNCTION_PREFIX = "Internal_"
STRUCT_INTEROP_FORMAT = "__{name}Interop"

# C# usings required for generated code
REQUIRED_USINGS = [
    "using System;",
    "using System.Runtime.CompilerServices;",
    "using System.Runtime.InteropServices;",
]

DEFAULT_ENGINE_NAMESPACE = "BansheeEngine"
DEFAULT_EDITOR_NAMESPACE = "BansheeEditor"
NATIVE_NAMESPACE = "bs"

ENGINE_EXPORT = "BS_SCR_BE_EXPORT"
EDITOR_EXPORT = "BS_SCR_BED_EXPORT"
ENGINE_ASSEMBLY = "ENGINE_ASSEMBLY"
EDITOR_ASSEMBLY = "EDITOR_ASSEMBLY"

ENGINE_PREREQUISITES = "BsScriptEnginePrerequisites.h"
EDITOR_PREREQUISITES = "BsScriptEditorPrerequisites.h"
SOURCE_INCLUDES = ["BsMonoClass.h", "BsMonoUtil.h"]
RESOURCE_MANAGER_INCLUDE = "BsScriptResourceManager.h"

COMPONENT_LOOKUP_FILE = "BsBuiltinComponentLookup.generated.h"
TIMESTAMP_FILE = "scriptBindings.timestamp"

# Output buckets for native files, relative to the native output folder
FILE_TYPE_FOLDERS = {
    "engine_h": "Engine/Include",
    "engine_cpp": "Engine/Source",
    "editor_h": "Editor/Include",
    "editor_cpp": "Editor/Source",
}

# Column at which XML documentation comments get wrapped
DOC_COLUMN_LENGTH = 124
