"""
Type classification: boundary representation and argument forwarding rules
"""

from clang.cindex import TypeKind

from .constants import (
    CPP_INTEGER_TYPE_MAP,
    CSHARP_TYPE_MAP,
    DEFAULT_ENUM_CPP_TYPE,
    SCRIPT_TYPE_PREFIX,
    STRUCT_INTEROP_FORMAT,
)
from .model import TypeCategory, TypeFlags, UserTypeInfo, ownership


# Categories a script interop wrapper can never be generated for
NON_WRAPPABLE_CATEGORIES = frozenset({
    TypeCategory.BUILTIN,
    TypeCategory.ENUM,
    TypeCategory.STRING,
    TypeCategory.WSTRING,
    TypeCategory.MANAGED_OBJECT,
})

HANDLE_OWNERSHIP = TypeFlags.OWNED_BY_RESOURCE_HANDLE | TypeFlags.OWNED_BY_GAME_OBJECT_HANDLE


class TypeMapper:
    """Maps declared types and flags to their boundary representation"""

    def __init__(self, context):
        self.context = context
        self.diagnostics = context.diagnostics

    def type_info(self, type_name: str) -> UserTypeInfo:
        return self.context.get_type_info(type_name)

    @staticmethod
    def struct_interop_type(name: str) -> str:
        return STRUCT_INTEROP_FORMAT.format(name=name)

    def _unreachable(self, category, type_name: str):
        self.diagnostics.fatal(
            f'Type "{type_name}" has category "{category}" which cannot cross the interop boundary.', type_name)

    def interop_cpp_type(self, type_name: str, category: TypeCategory, flags: TypeFlags,
                         for_struct: bool = False) -> str:
        """Native type used for a value while it crosses the boundary

        Args:
            type_name: Declared native type name
            category: Category the type name resolves to
            flags: Variable flags
            for_struct: True when the value is a field of a flattened struct
        """
        output = bool(flags & TypeFlags.IS_OUTPUT) and not for_struct

        if flags & TypeFlags.IS_ARRAY:
            return "MonoArray**" if output else "MonoArray*"

        if category.is_plain:
            return type_name + "*" if output else type_name

        if category == TypeCategory.STRUCT:
            if flags & TypeFlags.COMPLEX_STRUCT:
                struct_type = self.struct_interop_type(type_name)
            else:
                struct_type = type_name
            return struct_type if for_struct else struct_type + "*"

        if category.is_string:
            return "MonoString**" if output else "MonoString*"

        if category.is_object or category == TypeCategory.MANAGED_OBJECT:
            return "MonoObject**" if output else "MonoObject*"

        self._unreachable(category, type_name)

    @staticmethod
    def cpp_var_type(type_name: str, category: TypeCategory) -> str:
        """Native type of a temporary holding a value of the given category"""
        if category == TypeCategory.RESOURCE:
            return f"ResourceHandle<{type_name}>"
        if category in (TypeCategory.SCENE_OBJECT, TypeCategory.COMPONENT):
            return f"GameObjectHandle<{type_name}>"
        if category == TypeCategory.CLASS:
            return f"SPtr<{type_name}>"
        return type_name

    @staticmethod
    def is_plain_struct(category: TypeCategory, flags: TypeFlags) -> bool:
        return category == TypeCategory.STRUCT and not flags & TypeFlags.IS_ARRAY

    def cs_var_type(self, script_name: str, category: TypeCategory, flags: TypeFlags,
                    param_prefixes: bool = False, array_suffixes: bool = False,
                    force_struct_as_ref: bool = False) -> str:
        """C# spelling of a type, optionally with out/ref prefix and [] suffix"""
        prefix = ""
        if param_prefixes and flags & TypeFlags.IS_OUTPUT:
            prefix = "out "
        elif force_struct_as_ref and self.is_plain_struct(category, flags):
            prefix = "ref "

        suffix = "[]" if array_suffixes and flags & TypeFlags.IS_ARRAY else ""
        return f"{prefix}{script_name}{suffix}"

    def managed_to_cpp_argument(self, name: str, category: TypeCategory, flags: TypeFlags,
                                method_name: str, is_pointer: bool = None) -> str:
        """Expression forwarding a value to the native call

        Args:
            name: Name of the value handed to the native call
            category: Category of the value
            flags: Variable flags, including the native ownership kind
            method_name: Method being called, for diagnostics
            is_pointer: Whether the value is itself a pointer. Defaults to the
                boundary shape of the category (output builtins and all structs
                are pointers); temporaries are passed as values.
        """
        kind = ownership(flags)

        def plain_argument(is_ptr: bool) -> str:
            if kind & (TypeFlags.OWNED_BY_SHARED_POINTER | HANDLE_OWNERSHIP):
                self.diagnostics.fatal(
                    f'Parameter "{name}" of method "{method_name}" has a {category.value} type with '
                    f'ownership "{kind.name}", which is not valid for it.', f"{method_name}.{name}")
            if kind == TypeFlags.OWNED_BY_RAW_POINTER:
                return name if is_ptr else "&" + name
            if kind == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE:
                return "*" + name if is_ptr else name
            return self._unsure(name, method_name)

        if category.is_plain:
            return plain_argument(bool(flags & TypeFlags.IS_OUTPUT) if is_pointer is None else is_pointer)

        if category == TypeCategory.STRUCT:
            return plain_argument(True if is_pointer is None else is_pointer)

        if category.is_string:
            return plain_argument(False if is_pointer is None else is_pointer)

        if category == TypeCategory.MANAGED_OBJECT:
            return "&" + name if flags & TypeFlags.IS_OUTPUT else name

        if category.is_handle:
            if kind & HANDLE_OWNERSHIP:
                return name
            if kind == TypeFlags.OWNED_BY_SHARED_POINTER:
                return name + ".getInternalPtr()"
            if kind == TypeFlags.OWNED_BY_RAW_POINTER:
                return name + ".get()"
            if kind == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE:
                return "*" + name
            return self._unsure(name, method_name)

        if category == TypeCategory.CLASS:
            if kind & HANDLE_OWNERSHIP:
                self.diagnostics.fatal(
                    f'Parameter "{name}" of method "{method_name}" is a class type owned through a handle.',
                    f"{method_name}.{name}")
            if kind == TypeFlags.OWNED_BY_RAW_POINTER:
                return name + ".get()"
            if kind == TypeFlags.OWNED_BY_SHARED_POINTER:
                return name
            if kind == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE:
                return "*" + name
            return self._unsure(name, method_name)

        self._unreachable(category, name)

    def cpp_to_managed_argument(self, name: str, category: TypeCategory, flags: TypeFlags,
                                method_name: str) -> str:
        """Expression passing a native value toward the managed side"""
        kind = ownership(flags)

        if category.is_plain:
            if kind == TypeFlags.OWNED_BY_RAW_POINTER:
                return "*" + name
            if kind == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE:
                return name
            return self._unsure(name, method_name)

        if category == TypeCategory.STRUCT:
            if kind == TypeFlags.OWNED_BY_RAW_POINTER:
                return name
            if kind == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE:
                return "&" + name
            return self._unsure(name, method_name)

        if category.is_string or category.is_object or category == TypeCategory.MANAGED_OBJECT:
            return name

        self._unreachable(category, name)

    def _unsure(self, name: str, method_name: str) -> str:
        self.diagnostics.error(
            f'Unsure how to pass parameter "{name}" to method "{method_name}".', f"{method_name}.{name}")
        return name

    @staticmethod
    def can_be_returned(category: TypeCategory, flags: TypeFlags) -> bool:
        """Whether a value can be the direct return value of an interop function"""
        if flags & TypeFlags.IS_OUTPUT:
            return False
        if flags & TypeFlags.IS_ARRAY:
            return True
        return category != TypeCategory.STRUCT

    def script_interop_type(self, name: str) -> str:
        """Name of the native wrapper class for a type"""
        info = self.context.type_map.get(name)
        if info is None:
            self.diagnostics.warning(
                f'Type "{name}" referenced as a script interop type, but no script interop mapping found. '
                f'Assuming default type name.', name)
        elif info.category in NON_WRAPPABLE_CATEGORIES:
            self.diagnostics.error(
                f'Type "{name}" referenced as a script interop type, but script interop object cannot be '
                f'generated for this object type.', name)
        return SCRIPT_TYPE_PREFIX + name

    def default_value(self, type_name: str, info: UserTypeInfo) -> str:
        """C# literal used to initialize a struct field without an explicit default"""
        if info.category == TypeCategory.BUILTIN:
            return "0"
        if info.category == TypeCategory.ENUM:
            return f"({info.script_name})0"
        if info.category == TypeCategory.STRUCT:
            return f"new {info.script_name}()"
        if info.category.is_string or info.category.is_object:
            return "null"
        self.diagnostics.fatal(f'Cannot determine a default value for type "{type_name}".', type_name)

    @staticmethod
    def is_valid_struct_field(info: UserTypeInfo, flags: TypeFlags) -> bool:
        if flags & TypeFlags.IS_OUTPUT:
            return False
        return info.category != TypeCategory.MANAGED_OBJECT

    def underlying_cpp_type(self, type_name: str) -> str:
        """Native integer type an enum is converted through inside script arrays"""
        kind = self.type_info(type_name).underlying_type
        if kind is None:
            return DEFAULT_ENUM_CPP_TYPE
        return CPP_INTEGER_TYPE_MAP.get(kind, DEFAULT_ENUM_CPP_TYPE)

    @staticmethod
    def map_enum_underlying_type(kind) -> str | None:
        """C# base type of an enum, or None when it is the default int"""
        if kind is None or kind == TypeKind.INT:
            return None
        return CSHARP_TYPE_MAP.get(kind)
