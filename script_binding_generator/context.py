"""
Shared generation context passed through every pipeline stage
"""

from .errors import Diagnostics
from .model import (
    ClassInfo,
    CommentEntry,
    CommentInfo,
    CommentOverload,
    EnumInfo,
    ExternalClassInfo,
    ModuleInfo,
    StructInfo,
    TypeCategory,
    UserTypeInfo,
)


class GeneratorContext:
    """Symbol table of modules, type categories and documentation

    Populated once by the front end (or the model loader), mutated in place
    by the postprocessor and read only afterwards.
    """

    def __init__(self, diagnostics: Diagnostics = None):
        self.modules: dict[str, ModuleInfo] = {}
        self.type_map: dict[str, UserTypeInfo] = {}
        self.external_classes: dict[str, ExternalClassInfo] = {}
        self.comment_infos: list[CommentInfo] = []
        self.comment_lookup: dict[str, list[int]] = {}
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def add_module(self, name: str, in_editor: bool = False) -> ModuleInfo:
        if name not in self.modules:
            self.modules[name] = ModuleInfo(name, in_editor)
        return self.modules[name]

    def register_type(self, name: str, category: TypeCategory, script_name: str = None,
                      decl_file: str = "", dest_file: str = "", underlying_type=None) -> UserTypeInfo:
        info = UserTypeInfo(script_name or name, category, decl_file, dest_file, underlying_type)
        self.type_map[name] = info
        return info

    def add_external_method(self, class_name: str, method):
        if class_name not in self.external_classes:
            self.external_classes[class_name] = ExternalClassInfo(class_name)
        self.external_classes[class_name].methods.append(method)

    def register_comment(self, name: str, namespaces: list[str], comment: CommentEntry,
                         parent: str = "", params: list[str] = None) -> CommentInfo:
        """Add a declaration's documentation to the global index

        Members are keyed as "Parent::name". Passing params registers a
        function overload; overloads sharing key and namespace merge.
        """
        key = f"{parent}::{name}" if parent else name
        is_function = params is not None

        indices = self.comment_lookup.setdefault(key, [])
        if is_function:
            for idx in indices:
                existing = self.comment_infos[idx]
                if existing.is_function and existing.namespaces == list(namespaces):
                    existing.overloads.append(CommentOverload(list(params), comment))
                    return existing

        info = CommentInfo(key, list(namespaces), is_function, comment)
        if is_function:
            info.overloads.append(CommentOverload(list(params), comment))

        indices.append(len(self.comment_infos))
        self.comment_infos.append(info)
        return info

    def get_type_info(self, type_name: str) -> UserTypeInfo:
        info = self.type_map.get(type_name)
        if info is None:
            self.diagnostics.warning(
                f'Type "{type_name}" has no category mapping. Assuming a builtin type.', type_name)
            info = UserTypeInfo(type_name, TypeCategory.BUILTIN)
            self.type_map[type_name] = info
        return info

    def iter_classes(self):
        for module in self.modules.values():
            for class_info in module.classes:
                yield module, class_info

    def iter_structs(self):
        for module in self.modules.values():
            for struct_info in module.structs:
                yield module, struct_info

    def iter_enums(self):
        for module in self.modules.values():
            for enum_info in module.enums:
                yield module, enum_info

    def find_class(self, name: str) -> ClassInfo | None:
        for _, class_info in self.iter_classes():
            if class_info.name == name:
                return class_info
        return None

    def find_struct(self, name: str) -> StructInfo | None:
        for _, struct_info in self.iter_structs():
            if struct_info.name == name:
                return struct_info
        return None

    def find_enum(self, name: str) -> EnumInfo | None:
        for _, enum_info in self.iter_enums():
            if enum_info.name == name:
                return enum_info
        return None
