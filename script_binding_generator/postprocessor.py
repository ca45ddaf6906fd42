"""
Cross-reference passes run over the whole model before any output is generated
"""

import copy

from .constants import (
    EDITOR_PREREQUISITES,
    ENGINE_PREREQUISITES,
    RESOURCE_MANAGER_INCLUDE,
    SOURCE_INCLUDES,
)
from .docs import DocumentationResolver
from .model import (
    ClassFlags,
    ForwardDeclInfo,
    IncludeInfo,
    MethodInfo,
    ModuleInfo,
    PropertyInfo,
    TypeCategory,
    TypeFlags,
    VarInfo,
)
from .struct_planner import StructPlanner
from .type_mapper import TypeMapper

INCLUDED_CATEGORIES = frozenset({
    TypeCategory.CLASS,
    TypeCategory.STRUCT,
    TypeCategory.COMPONENT,
    TypeCategory.SCENE_OBJECT,
    TypeCategory.RESOURCE,
    TypeCategory.ENUM,
})

CLASS_HEADER_INCLUDES = {
    TypeCategory.RESOURCE: "BsScriptResource.h",
    TypeCategory.COMPONENT: "BsScriptComponent.h",
}


def generated_header_name(module_name: str) -> str:
    return f"BsScript{module_name}.generated.h"


def _append_unique(items: list[str], value: str):
    if value and value not in items:
        items.append(value)


class PostProcessor:
    """Runs the ordered cross-reference passes over a GeneratorContext

    Each pass assumes the previous ones finished for every module. Running
    the whole sequence again on a processed context changes nothing.
    """

    def __init__(self, context, type_mapper: TypeMapper = None):
        self.context = context
        self.diagnostics = context.diagnostics
        self.type_mapper = type_mapper or TypeMapper(context)
        self.doc_resolver = DocumentationResolver(context)
        self.struct_planner = StructPlanner(context, self.type_mapper)

    def run(self):
        self.rebind_external_methods()
        self.resolve_copydocs()
        self.assign_interop_names()
        self.build_properties()
        self.flag_base_classes()
        self.resolve_enum_defaults()
        self.gather_includes()
        self.plan_structs()

    # 1
    def rebind_external_methods(self):
        """Move free functions declared for another class onto that class"""
        for class_name, external in self.context.external_classes.items():
            if external.rebound:
                continue

            class_info = self.context.find_class(class_name)
            if class_info is None:
                continue

            for method in external.methods:
                method = copy.deepcopy(method)
                if method.is_constructor:
                    if method.return_info is None:
                        self.diagnostics.error(
                            f'Found an external constructor "{method.source_name}" with no return value, skipping.',
                            method.source_name)
                        continue
                    if method.return_info.type != class_name:
                        self.diagnostics.error(
                            f'Found an external constructor "{method.source_name}" whose return value doesn\'t '
                            f'match the external class, skipping.', method.source_name)
                        continue
                    class_info.ctors.append(method)
                else:
                    if not method.params:
                        self.diagnostics.error(
                            f'Found an external method "{method.source_name}" with no parameters. This isn\'t '
                            f'supported, skipping.', method.source_name)
                        continue
                    if method.params[0].type != class_name:
                        self.diagnostics.error(
                            f'Found an external method "{method.source_name}" whose first parameter doesn\'t '
                            f'accept the class its operating on. This is not supported, skipping.',
                            method.source_name)
                        continue
                    del method.params[0]
                    class_info.methods.append(method)

            external.rebound = True

    # 2
    def resolve_copydocs(self):
        resolve = self.doc_resolver.resolve
        for _, class_info in self.context.iter_classes():
            class_info.documentation = resolve(class_info.documentation, class_info.ns)
            for method in class_info.methods + class_info.ctors + class_info.events:
                method.documentation = resolve(method.documentation, class_info.ns)

        for _, struct_info in self.context.iter_structs():
            struct_info.documentation = resolve(struct_info.documentation, struct_info.ns)

        for _, enum_info in self.context.iter_enums():
            enum_info.documentation = resolve(enum_info.documentation, enum_info.ns)
            for entry in enum_info.entries.values():
                entry.documentation = resolve(entry.documentation, enum_info.ns)

    # 3
    def assign_interop_names(self):
        """Give every method, constructor and event of a class a distinct interop name"""
        for _, class_info in self.context.iter_classes():
            used_names = set()
            for method in class_info.methods + class_info.ctors + class_info.events:
                interop_name = method.source_name
                counter = 0
                while interop_name in used_names:
                    interop_name = f"{method.source_name}{counter}"
                    counter += 1

                used_names.add(interop_name)
                method.interop_name = interop_name

    # 4
    def build_properties(self):
        """Pair getter and setter methods into properties"""
        for _, class_info in self.context.iter_classes():
            class_info.properties = []
            for method in class_info.methods:
                if method.is_property:
                    self._add_property(class_info, method)

    def _add_property(self, class_info, method: MethodInfo):
        if method.is_getter:
            if method.return_info is None:
                self.diagnostics.error(
                    f'Property getter "{method.source_name}" of "{class_info.name}" has no return value. Skipping.',
                    f"{class_info.name}.{method.source_name}")
                return
            var = method.return_info
        else:
            if not method.params:
                self.diagnostics.error(
                    f'Property setter "{method.source_name}" of "{class_info.name}" has no parameter. Skipping.',
                    f"{class_info.name}.{method.source_name}")
                return
            var = method.params[0]

        prop = PropertyInfo(
            name=method.script_name,
            type=var.type,
            type_flags=var.flags,
            getter=method.interop_name if method.is_getter else "",
            setter=method.interop_name if method.is_setter else "",
            is_static=method.is_static,
            visibility=method.visibility,
            documentation=method.documentation,
        )

        existing = next((p for p in class_info.properties if p.name == prop.name), None)
        if existing is None:
            class_info.properties.append(prop)
            return

        if existing.type != prop.type or existing.is_static != prop.is_static:
            self.diagnostics.error(
                f'Getter and setter types for the property "{prop.name}" of "{class_info.name}" don\'t match. '
                f'Skipping property.', f"{class_info.name}.{prop.name}")
            return

        if prop.getter:
            existing.getter = prop.getter
            if prop.documentation.brief:
                existing.documentation = prop.documentation
        else:
            existing.setter = prop.setter
            if not existing.documentation.brief:
                existing.documentation = prop.documentation

    # 5
    def flag_base_classes(self):
        for _, class_info in self.context.iter_classes():
            if not class_info.base_class:
                continue

            base_info = self.context.find_class(class_info.base_class)
            if base_info is None:
                self.diagnostics.error(
                    f'Base class "{class_info.base_class}" of "{class_info.name}" was not found. Skipping.',
                    class_info.name)
                continue

            base_info.flags |= ClassFlags.IS_BASE

    # 6
    def resolve_enum_defaults(self):
        """Rewrite integer defaults of enum-typed variables into entry references"""
        for _, class_info in self.context.iter_classes():
            for method in class_info.methods + class_info.ctors:
                for param in method.params:
                    self._resolve_enum_default(param)

        for _, struct_info in self.context.iter_structs():
            for field_info in struct_info.fields:
                self._resolve_enum_default(field_info)
            for ctor in struct_info.ctors:
                for param in ctor.params:
                    self._resolve_enum_default(param)

    def _resolve_enum_default(self, var: VarInfo):
        if not var.default_value:
            return
        if self.type_mapper.type_info(var.type).category != TypeCategory.ENUM:
            return

        try:
            value = int(var.default_value, 0)
        except ValueError:
            # Already an entry reference
            return

        enum_info = self.context.find_enum(var.type)
        entry = enum_info.entries.get(value) if enum_info is not None else None
        if entry is None:
            self.diagnostics.error(
                f'Cannot map default value to enum entry for enum type "{var.type}" ("{var.name}"). Ignoring.',
                var.name)
            var.default_value = ""
            return

        var.default_value = f"{enum_info.script_name}.{entry.script_name}"

    # 7
    def gather_includes(self):
        """Rebuild each module's include lists and forward declarations"""
        for module in self.context.modules.values():
            self._gather_module_includes(module)

    def _collect_type(self, type_name: str, flags: TypeFlags, includes: dict, state: dict):
        info = self.type_mapper.type_info(type_name)
        if info.category in INCLUDED_CATEGORIES and type_name not in includes:
            by_value = bool(flags & TypeFlags.OWNED_BY_REFERENCE_OR_VALUE)
            includes[type_name] = IncludeInfo(type_name, info, info.category == TypeCategory.ENUM or by_value)
        if info.category == TypeCategory.RESOURCE:
            state["resource_manager"] = True

    def _collect_method(self, method: MethodInfo, includes: dict, state: dict):
        if method.return_info is not None:
            self._collect_type(method.return_info.type, method.return_info.flags, includes, state)
        for param in method.params:
            self._collect_type(param.type, param.flags, includes, state)
        if method.is_external and method.external_class not in includes:
            info = self.context.type_map.get(method.external_class)
            if info is not None:
                includes[method.external_class] = IncludeInfo(method.external_class, info, True, True)

    def _gather_module_includes(self, module: ModuleInfo):
        includes: dict[str, IncludeInfo] = {}
        state = {"resource_manager": False}
        for class_info in module.classes:
            for method in class_info.ctors + class_info.methods + class_info.events:
                self._collect_method(method, includes, state)

        headers: list[str] = []
        sources: list[str] = []
        forward = set()

        _append_unique(headers, EDITOR_PREREQUISITES if module.in_editor else ENGINE_PREREQUISITES)
        _append_unique(sources, generated_header_name(module.name))
        for include in SOURCE_INCLUDES:
            _append_unique(sources, include)

        for class_info in module.classes:
            info = self.type_mapper.type_info(class_info.name)
            forward.add(ForwardDeclInfo(class_info.name, False))
            _append_unique(headers, CLASS_HEADER_INCLUDES.get(info.category, "BsScriptObject.h"))
            if class_info.base_class:
                base_info = self.type_mapper.type_info(class_info.base_class)
                if base_info.dest_file and base_info.dest_file != module.name:
                    _append_unique(headers, generated_header_name(base_info.dest_file))
            _append_unique(sources, info.decl_file)

        for struct_info in module.structs:
            info = self.type_mapper.type_info(struct_info.name)
            forward.add(ForwardDeclInfo(struct_info.name, True))
            _append_unique(headers, "BsScriptObject.h")
            _append_unique(headers, info.decl_file)

        if state["resource_manager"]:
            _append_unique(sources, RESOURCE_MANAGER_INCLUDE)

        for include in includes.values():
            if include.source_include:
                if include.decl_only:
                    _append_unique(sources, include.type_info.decl_file)
                    forward.add(ForwardDeclInfo(include.type_name, False))
                else:
                    _append_unique(headers, include.type_info.decl_file)

            if include.decl_only or include.type_info.category == TypeCategory.ENUM:
                continue
            dest_file = include.type_info.dest_file
            if dest_file:
                _append_unique(sources, dest_file if dest_file.endswith(".h") else generated_header_name(dest_file))

        module.header_includes = headers
        module.source_includes = sources
        module.forward_declarations = forward

    # 8
    def plan_structs(self):
        self.struct_planner.plan_all()
