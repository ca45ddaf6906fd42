"""
Native header and source generation for interop wrappers
"""

from .code_generators import find_unused_ctor_signature
from .code_writer import CodeBlock
from .constants import (
    DEFAULT_EDITOR_NAMESPACE,
    DEFAULT_ENGINE_NAMESPACE,
    EDITOR_ASSEMBLY,
    EDITOR_EXPORT,
    ENGINE_ASSEMBLY,
    ENGINE_EXPORT,
    NATIVE_NAMESPACE,
)
from .model import ClassInfo, ModuleInfo, StructInfo, TypeCategory
from .postprocessor import generated_header_name
from .signatures import InteropBuilder
from .struct_planner import StructPlanner
from .type_mapper import TypeMapper

ROOT_BASE_TYPES = {
    TypeCategory.CLASS: "ScriptObjectBase",
    TypeCategory.COMPONENT: "ScriptComponentBase",
    TypeCategory.RESOURCE: "ScriptResourceBase",
}


class NativeEmitter:
    """Generates the native half of every module"""

    def __init__(self, context, engine_namespace: str = DEFAULT_ENGINE_NAMESPACE,
                 editor_namespace: str = DEFAULT_EDITOR_NAMESPACE):
        self.context = context
        self.diagnostics = context.diagnostics
        self.engine_namespace = engine_namespace
        self.editor_namespace = editor_namespace
        self.type_mapper = TypeMapper(context)
        self.interop = InteropBuilder(context, self.type_mapper)
        self.struct_planner = StructPlanner(context, self.type_mapper, self.interop.marshaling)

    def _script_obj(self, script_name: str, in_editor: bool) -> str:
        if in_editor:
            return f'SCRIPT_OBJ({EDITOR_ASSEMBLY}, "{self.editor_namespace}", "{script_name}")'
        return f'SCRIPT_OBJ({ENGINE_ASSEMBLY}, "{self.engine_namespace}", "{script_name}")'

    @staticmethod
    def _export(in_editor: bool) -> str:
        return EDITOR_EXPORT if in_editor else ENGINE_EXPORT

    @staticmethod
    def _has_static_events(class_info: ClassInfo) -> bool:
        if class_info.is_module and class_info.events:
            return True
        return any(event.is_static for event in class_info.events)

    def _interop_base_name(self, class_info: ClassInfo) -> str:
        if class_info.is_base:
            return self.type_mapper.script_interop_type(class_info.name) + "Base"
        if class_info.base_class:
            return self.type_mapper.script_interop_type(class_info.base_class) + "Base"
        return ""

    def _this_ptr_type(self, class_info: ClassInfo) -> str:
        if class_info.is_base:
            return self._interop_base_name(class_info)
        return self.type_mapper.script_interop_type(class_info.name)

    def _base_parent(self, class_info: ClassInfo, category: TypeCategory) -> str:
        """Parent of the generated ScriptXBase class"""
        if class_info.base_class:
            return self.type_mapper.script_interop_type(class_info.base_class) + "Base"
        if category not in ROOT_BASE_TYPES:
            self.diagnostics.error(
                f'Class "{class_info.name}" of category "{category.value}" cannot be used as a base class.',
                class_info.name)
            return ROOT_BASE_TYPES[TypeCategory.CLASS]
        return ROOT_BASE_TYPES[category]

    # Classes

    def class_header(self, class_info: ClassInfo) -> CodeBlock:
        info = self.type_mapper.type_info(class_info.name)
        category = info.category
        is_module = class_info.is_module
        export = self._export(class_info.in_editor)
        wrapped_type = self.type_mapper.cpp_var_type(class_info.name, category)
        interop_class = self.type_mapper.script_interop_type(class_info.name)
        interop_base = self._interop_base_name(class_info)
        wraps_pointer = category == TypeCategory.CLASS and not is_module

        block = CodeBlock()
        if class_info.is_base:
            with block.braces(f"class {export} {interop_base} : public {self._base_parent(class_info, category)}",
                              closing="};"):
                with block.indented(-1):
                    block.line("public:")
                block.line(f"{interop_base}(MonoObject* instance);")
                block.line(f"virtual ~{interop_base}() {{}}")
                if wraps_pointer:
                    block.blank()
                    block.line(f"{wrapped_type} getInternal() const {{ return mInternal; }}")
                    if not class_info.base_class:
                        with block.indented(-1):
                            block.line("protected:")
                        block.line(f"{wrapped_type} mInternal;")
            block.blank()

        if category == TypeCategory.RESOURCE:
            template_args = f"TScriptResource<{interop_class}, {class_info.name}"
        elif category == TypeCategory.COMPONENT:
            template_args = f"TScriptComponent<{interop_class}, {class_info.name}"
        else:
            template_args = f"ScriptObject<{interop_class}"
        if interop_base:
            template_args += ", " + interop_base
        template_args += ">"

        with block.braces(f"class {export} {interop_class} : public {template_args}", closing="};"):
            with block.indented(-1):
                block.line("public:")
            block.line(self._script_obj(info.script_name, class_info.in_editor))
            block.blank()

            if is_module:
                block.line(f"{interop_class}(MonoObject* managedInstance);")
            else:
                block.line(f"{interop_class}(MonoObject* managedInstance, const {wrapped_type}& value);")
            block.blank()

            if wraps_pointer:
                block.line(f"{wrapped_type} getInternal() const {{ return mInternal; }}")
                block.line(f"static MonoObject* create(const {wrapped_type}& value);")
                block.blank()
            elif category == TypeCategory.RESOURCE:
                block.line("static MonoObject* createInstance();")
                block.blank()

            if self._has_static_events(class_info):
                block.line("static void startUp();")
                block.line("static void shutDown();")
                block.blank()

            with block.indented(-1):
                block.line("private:")

            for event in class_info.events:
                block.line(self.interop.cpp_event_callback_signature(event, "", is_module) + ";")
            if class_info.events:
                block.blank()

            if wraps_pointer:
                block.line(f"{wrapped_type} mInternal;")
                block.blank()

            for event in class_info.events:
                block.extend(self.interop.cpp_event_thunk(event, is_module))
            if class_info.events:
                block.blank()

            for event in class_info.events:
                if event.is_static or is_module:
                    block.line(f"static HEvent {event.source_name}Conn;")
            if self._has_static_events(class_info):
                block.blank()

            this_ptr_type = self._this_ptr_type(class_info)
            for method in class_info.ctors + class_info.methods:
                block.line("static " + self.interop.cpp_method_signature(method, this_ptr_type, "", is_module) + ";")

        return block

    def class_source(self, class_info: ClassInfo) -> CodeBlock:
        info = self.type_mapper.type_info(class_info.name)
        category = info.category
        is_module = class_info.is_module
        wrapped_type = self.type_mapper.cpp_var_type(class_info.name, category)
        interop_class = self.type_mapper.script_interop_type(class_info.name)
        wraps_pointer = category == TypeCategory.CLASS and not is_module

        block = CodeBlock()
        if class_info.is_base:
            interop_base = self._interop_base_name(class_info)
            block.line(f"{interop_base}::{interop_base}(MonoObject* managedInstance)")
            with block.indented():
                block.line(f":{self._base_parent(class_info, category)}(managedInstance)")
            block.line("{ }")
            block.blank()

        # Static members
        for event in class_info.events:
            block.line(f"{interop_class}::{event.source_name}ThunkDef {interop_class}::{event.source_name}Thunk;")
        for event in class_info.events:
            if event.is_static or is_module:
                block.line(f"HEvent {interop_class}::{event.source_name}Conn;")
        if class_info.events:
            block.blank()

        if is_module:
            block.line(f"{interop_class}::{interop_class}(MonoObject* managedInstance)")
        else:
            block.line(f"{interop_class}::{interop_class}(MonoObject* managedInstance, const {wrapped_type}& value)")
        with block.indented():
            if category == TypeCategory.RESOURCE:
                block.line(":TScriptResource(managedInstance, value)")
            elif category == TypeCategory.COMPONENT:
                block.line(":TScriptComponent(managedInstance, value)")
            elif is_module:
                block.line(":ScriptObject(managedInstance)")
            else:
                block.line(":ScriptObject(managedInstance), mInternal(value)")
        with block.braces():
            if not is_module:
                for event in class_info.events:
                    if event.is_static:
                        continue
                    placeholders = "".join(f", _{idx + 1}" for idx in range(len(event.params)))
                    block.line(f"value->{event.source_name}.connect(std::bind(&{interop_class}::"
                               f"{event.interop_name}, this{placeholders}));")
        block.blank()

        with block.braces(f"void {interop_class}::initRuntimeData()"):
            for method in class_info.ctors + class_info.methods:
                block.line(f'metaData.scriptClass->addInternalCall("Internal_{method.interop_name}", '
                           f'&{interop_class}::Internal_{method.interop_name});')
            if class_info.events:
                block.blank()
            for event in class_info.events:
                block.line(f'{event.source_name}Thunk = ({event.source_name}ThunkDef)metaData.scriptClass->'
                           f'getMethodExact("Internal_{event.interop_name}", '
                           f'"{self.interop.thunk_signature_types(event)}")->getThunk();')
        block.blank()

        if wraps_pointer or category == TypeCategory.RESOURCE:
            dummy = find_unused_ctor_signature(class_info)
            ctor_signature = ",".join(param.type for param in dummy.params)
            ctor_params = ", ".join("&dummy" for _ in dummy.params)

            if wraps_pointer:
                header = f"MonoObject* {interop_class}::create(const {wrapped_type}& value)"
            else:
                header = f"MonoObject* {interop_class}::createInstance()"

            with block.braces(header):
                block.line("bool dummy = false;")
                block.line(f"void* ctorParams[{len(dummy.params)}] = {{ {ctor_params} }};")
                block.blank()
                if wraps_pointer:
                    block.line(f'MonoObject* managedInstance = metaData.scriptClass->createInstance("'
                               f'{ctor_signature}", ctorParams);')
                    block.line(f"{interop_class}* scriptInstance = new (bs_alloc<{interop_class}>()) "
                               f"{interop_class}(managedInstance, value);")
                    block.line("return managedInstance;")
                else:
                    block.line(f'return metaData.scriptClass->createInstance("{ctor_signature}", ctorParams);')
            block.blank()

        if self._has_static_events(class_info):
            with block.braces(f"void {interop_class}::startUp()"):
                for event in class_info.events:
                    if event.is_static:
                        source = f"{class_info.name}::{event.source_name}"
                    elif is_module:
                        source = f"{class_info.name}::instance().{event.source_name}"
                    else:
                        continue
                    block.line(f"{event.source_name}Conn = {source}.connect(&{interop_class}::{event.interop_name});")

            with block.braces(f"void {interop_class}::shutDown()"):
                for event in class_info.events:
                    if event.is_static or is_module:
                        block.line(f"{event.source_name}Conn.disconnect();")
            block.blank()

        for event in class_info.events:
            block.line(self.interop.cpp_event_callback_signature(event, interop_class, is_module))
            with block.braces():
                block.extend(self.interop.cpp_event_callback_body(event, is_module))
            block.blank()

        this_ptr_type = self._this_ptr_type(class_info)
        for method in class_info.ctors + class_info.methods:
            block.line(self.interop.cpp_method_signature(method, this_ptr_type, interop_class, is_module))
            with block.braces():
                block.extend(self.interop.cpp_method_body(
                    method, class_info.name, interop_class, category, is_module))
            block.blank()

        _strip_trailing_blank(block)
        return block

    # Structs

    def struct_header(self, struct_info: StructInfo) -> CodeBlock:
        info = self.type_mapper.type_info(struct_info.name)
        interop_class = self.type_mapper.script_interop_type(struct_info.name)
        interop_name = struct_info.interop_name or struct_info.name

        block = CodeBlock()
        if struct_info.requires_interop:
            with block.braces(f"struct {interop_name}", closing="};"):
                for field_type, field_name in self.struct_planner.flattened_fields(struct_info):
                    block.line(f"{field_type} {field_name};")
            block.blank()

        header = f"class {self._export(struct_info.in_editor)} {interop_class} : public ScriptObject<{interop_class}>"
        with block.braces(header, closing="};"):
            with block.indented(-1):
                block.line("public:")
            block.line(self._script_obj(info.script_name, struct_info.in_editor))
            block.blank()
            block.line(f"static MonoObject* box(const {interop_name}& value);")
            block.line(f"static {interop_name} unbox(MonoObject* value);")
            if struct_info.requires_interop:
                block.line(f"static {struct_info.name} fromInterop(const {interop_name}& value);")
                block.line(f"static {interop_name} toInterop(const {struct_info.name}& value);")
            block.blank()
            with block.indented(-1):
                block.line("private:")
            block.line(f"{interop_class}(MonoObject* managedInstance);")

        return block

    def struct_source(self, struct_info: StructInfo) -> CodeBlock:
        interop_class = self.type_mapper.script_interop_type(struct_info.name)
        interop_name = struct_info.interop_name or struct_info.name

        block = CodeBlock()
        block.line(f"{interop_class}::{interop_class}(MonoObject* managedInstance)")
        with block.indented():
            block.line(":ScriptObject(managedInstance)")
        block.line("{ }")
        block.blank()

        block.line(f"void {interop_class}::initRuntimeData()")
        block.line("{ }")
        block.blank()

        with block.braces(f"MonoObject* {interop_class}::box(const {interop_name}& value)"):
            block.line("return MonoUtil::box(metaData.scriptClass->_getInternalClass(), (void*)&value);")
        block.blank()

        with block.braces(f"{interop_name} {interop_class}::unbox(MonoObject* value)"):
            block.line(f"return *({interop_name}*)MonoUtil::unbox(value);")

        if struct_info.requires_interop:
            block.blank()
            with block.braces(f"{struct_info.name} {interop_class}::fromInterop(const {interop_name}& value)"):
                block.extend(self.struct_planner.conversion_body(struct_info, to_interop=False))
            block.blank()
            with block.braces(f"{interop_name} {interop_class}::toInterop(const {struct_info.name}& value)"):
                block.extend(self.struct_planner.conversion_body(struct_info, to_interop=True))

        return block

    # Files

    def module_header(self, module: ModuleInfo) -> str:
        block = CodeBlock()
        block.line("#pragma once")
        block.blank()
        for include in module.header_includes:
            block.line(f'#include "{include}"')
        block.blank()

        with block.braces(f"namespace {NATIVE_NAMESPACE}"):
            declarations = sorted(module.forward_declarations, key=lambda decl: decl.name)
            for decl in declarations:
                block.line(f"{'struct' if decl.is_struct else 'class'} {decl.name};")
            if declarations:
                block.blank()

            parts = [self.class_header(c) for c in module.classes] + [self.struct_header(s) for s in module.structs]
            _join(block, parts)

        return block.render()

    def module_source(self, module: ModuleInfo) -> str:
        block = CodeBlock()
        for include in module.source_includes:
            block.line(f'#include "{include}"')
        block.blank()

        with block.braces(f"namespace {NATIVE_NAMESPACE}"):
            parts = [self.class_source(c) for c in module.classes] + [self.struct_source(s) for s in module.structs]
            _join(block, parts)

        return block.render()

    def component_lookup(self) -> str:
        """Global header listing every Component class for the runtime lookup table"""
        includes = CodeBlock()
        entries = CodeBlock()
        for module in self.context.modules.values():
            has_component = False
            for class_info in module.classes:
                info = self.type_mapper.type_info(class_info.name)
                if info.category != TypeCategory.COMPONENT:
                    continue

                if info.decl_file:
                    includes.line(f'#include "{info.decl_file}"')
                entries.line(f"ADD_ENTRY({class_info.name}, {self.type_mapper.script_interop_type(class_info.name)})")
                has_component = True

            if has_component:
                includes.line(f'#include "{generated_header_name(module.name)}"')

        block = CodeBlock()
        block.line("#pragma once")
        block.blank()
        block.line('#include "BsBuiltinComponentLookup.h"')
        block.line('#include "BsRTTIType.h"')
        block.extend(includes)
        block.blank()
        with block.braces(f"namespace {NATIVE_NAMESPACE}"):
            block.line("LOOKUP_BEGIN")
            with block.indented():
                block.extend(entries)
            block.line("LOOKUP_END")
        block.line("#undef LOOKUP_BEGIN")
        block.line("#undef ADD_ENTRY")
        block.line("#undef LOOKUP_END")
        return block.render()


def _join(block: CodeBlock, parts: list[CodeBlock]):
    for idx, part in enumerate(parts):
        if idx > 0:
            block.blank()
        block.extend(part)


def _strip_trailing_blank(block: CodeBlock):
    while block.lines and not block.lines[-1][1]:
        block.lines.pop()
