"""
Code generation functions for the managed (C#) half of the bindings
"""

from .code_writer import CodeBlock
from .constants import INTEROP_FUNCTION_PREFIX, REQUIRED_USINGS
from .docs import xml_comments
from .model import (
    ClassInfo,
    EnumInfo,
    MethodFlags,
    MethodInfo,
    StructInfo,
    TypeCategory,
    VarInfo,
    Visibility,
)
from .type_mapper import TypeMapper

CLASS_BASE_TYPES = {
    TypeCategory.RESOURCE: "Resource",
    TypeCategory.COMPONENT: "Component",
}


def find_unused_ctor_signature(class_info: ClassInfo) -> MethodInfo:
    """Private constructor whose all-bool signature no declared constructor uses

    The runtime calls it to allocate a managed object before native state
    exists. Arity starts at one and grows until it is free.
    """
    num_bools = 1
    while True:
        taken = any(
            len(ctor.params) == num_bools and all(param.type == "bool" for param in ctor.params)
            for ctor in class_info.ctors
        )
        if not taken:
            break
        num_bools += 1

    params = [VarInfo(f"__dummy{idx}", "bool") for idx in range(num_bools)]
    return MethodInfo(class_info.name, class_info.name, flags=MethodFlags.CONSTRUCTOR,
                      visibility=Visibility.PRIVATE, params=params)


class CodeGenerator:
    """Generates C# classes, structs and enums from the processed model"""

    def __init__(self, type_mapper: TypeMapper):
        self.type_mapper = type_mapper
        self.diagnostics = type_mapper.diagnostics

    @staticmethod
    def _escape_keyword(name: str) -> str:
        """Escape C# keywords by prefixing with @"""
        # C# keywords that might appear as identifiers
        csharp_keywords = {
            'abstract', 'as', 'base', 'bool', 'break', 'byte', 'case', 'catch',
            'char', 'checked', 'class', 'const', 'continue', 'decimal', 'default',
            'delegate', 'do', 'double', 'else', 'enum', 'event', 'explicit', 'extern',
            'false', 'finally', 'fixed', 'float', 'for', 'foreach', 'goto', 'if',
            'implicit', 'in', 'int', 'interface', 'internal', 'is', 'lock', 'long',
            'namespace', 'new', 'null', 'object', 'operator', 'out', 'override',
            'params', 'private', 'protected', 'public', 'readonly', 'ref', 'return',
            'sbyte', 'sealed', 'short', 'sizeof', 'stackalloc', 'static', 'string',
            'struct', 'switch', 'this', 'throw', 'true', 'try', 'typeof', 'uint',
            'ulong', 'unchecked', 'unsafe', 'ushort', 'using', 'virtual', 'void',
            'volatile', 'while'
        }
        if name in csharp_keywords:
            return f"@{name}"
        return name

    def _cs_type(self, var: VarInfo, param_prefixes: bool = False, force_struct_as_ref: bool = False) -> str:
        info = self.type_mapper.type_info(var.type)
        return self.type_mapper.cs_var_type(info.script_name, info.category, var.flags, param_prefixes,
                                            array_suffixes=True, force_struct_as_ref=force_struct_as_ref)

    def _can_be_returned(self, var: VarInfo) -> bool:
        return self.type_mapper.can_be_returned(self.type_mapper.type_info(var.type).category, var.flags)

    def _is_plain_struct(self, var: VarInfo) -> bool:
        return self.type_mapper.is_plain_struct(self.type_mapper.type_info(var.type).category, var.flags)

    def generate_method_params(self, method: MethodInfo, for_interop: bool) -> str:
        params = []
        for param in method.params:
            text = f"{self._cs_type(param, True, for_interop)} {self._escape_keyword(param.name)}"
            if not for_interop and param.default_value:
                text += f" = {param.default_value}"
            params.append(text)
        return ", ".join(params)

    def generate_method_args(self, method: MethodInfo, for_interop: bool) -> str:
        args = []
        for param in method.params:
            if param.is_output:
                prefix = "out "
            elif for_interop and self._is_plain_struct(param):
                prefix = "ref "
            else:
                prefix = ""
            args.append(prefix + self._escape_keyword(param.name))
        return ", ".join(args)

    def generate_event_signature(self, event: MethodInfo) -> str:
        return ", ".join(self._cs_type(param) for param in event.params)

    @classmethod
    def generate_event_args(cls, event: MethodInfo) -> str:
        """Arguments the relay method forwards to the event, named like its parameters"""
        return ", ".join(cls._escape_keyword(param.name) for param in event.params)

    def generate_interop_signature(self, method: MethodInfo, cs_class_name: str, is_module: bool) -> str:
        """Signature of a method's InternalCall extern"""
        return_as_param = False
        return_type = "void"
        if method.return_info is not None and not method.is_constructor:
            if self._can_be_returned(method.return_info):
                return_type = self._cs_type(method.return_info)
            else:
                return_as_param = True

        params = []
        if method.is_constructor:
            params.append(f"{cs_class_name} managedInstance")
        elif not method.is_static and not is_module:
            params.append("IntPtr thisPtr")

        declared = self.generate_method_params(method, True)
        if declared:
            params.append(declared)
        if return_as_param:
            params.append(f"out {self._cs_type(method.return_info)} __output")

        return f"{return_type} {INTEROP_FUNCTION_PREFIX}{method.interop_name}({', '.join(params)})"

    def _member(self, block: CodeBlock, documentation, indent_level: int = 2):
        block.extend(xml_comments(documentation, indent_level))

    def _constructor(self, block: CodeBlock, ctor: MethodInfo, script_name: str):
        self._member(block, ctor.documentation)
        block.line(f"{ctor.visibility.value} {script_name}({self.generate_method_params(ctor, False)})")
        with block.braces():
            args = ["this"]
            declared = self.generate_method_args(ctor, True)
            if declared:
                args.append(declared)
            block.line(f"{INTEROP_FUNCTION_PREFIX}{ctor.interop_name}({', '.join(args)});")
        block.blank()

    def _method(self, block: CodeBlock, method: MethodInfo, is_module: bool):
        return_type = "void" if method.return_info is None else self._cs_type(method.return_info)
        static = "static " if method.is_static or is_module else ""

        self._member(block, method.documentation)
        block.line(f"{method.visibility.value} {static}{return_type} {method.script_name}"
                   f"({self.generate_method_params(method, False)})")
        with block.braces():
            args = []
            if not method.is_static and not is_module:
                args.append("mCachedPtr")
            declared = self.generate_method_args(method, True)
            if declared:
                args.append(declared)

            call = f"{INTEROP_FUNCTION_PREFIX}{method.interop_name}"
            if method.return_info is None:
                block.line(f"{call}({', '.join(args)});")
            elif self._can_be_returned(method.return_info):
                block.line(f"return {call}({', '.join(args)});")
            else:
                args.append("out temp")
                block.line(f"{return_type} temp;")
                block.line(f"{call}({', '.join(args)});")
                block.line("return temp;")
        block.blank()

    def _property(self, block: CodeBlock, prop, class_category: TypeCategory, is_module: bool):
        var = VarInfo(prop.name, prop.type, prop.type_flags)
        type_name = self._cs_type(var)
        is_static = prop.is_static or is_module
        receiver = [] if is_static else ["mCachedPtr"]

        self._member(block, prop.documentation)
        if class_category == TypeCategory.COMPONENT and prop.visibility == Visibility.PUBLIC:
            block.line("[ShowInInspector]")

        static = "static " if is_static else ""
        block.line(f"{prop.visibility.value} {static}{type_name} {prop.name}")
        with block.braces():
            if prop.getter:
                getter = f"{INTEROP_FUNCTION_PREFIX}{prop.getter}"
                if self._can_be_returned(var):
                    block.line(f"get {{ return {getter}({', '.join(receiver)}); }}")
                else:
                    block.line("get")
                    with block.braces():
                        block.line(f"{type_name} temp;")
                        block.line(f"{getter}({', '.join(receiver + ['out temp'])});")
                        block.line("return temp;")

            if prop.setter:
                value = "ref value" if self._is_plain_struct(var) else "value"
                block.line(f"set {{ {INTEROP_FUNCTION_PREFIX}{prop.setter}({', '.join(receiver + [value])}); }}")
        block.blank()

    def generate_class(self, class_info: ClassInfo) -> CodeBlock:
        """Generate the managed partial class for a wrapped native class"""
        info = self.type_mapper.type_info(class_info.name)
        script_name = info.script_name
        is_module = class_info.is_module

        ctors = CodeBlock()
        properties = CodeBlock()
        events = CodeBlock()
        methods = CodeBlock()
        interops = CodeBlock()

        dummy = find_unused_ctor_signature(class_info)
        dummy_params = ", ".join(f"bool {param.name}" for param in dummy.params)
        ctors.line(f"private {script_name}({dummy_params}) {{ }}")
        ctors.blank()

        for ctor in class_info.ctors:
            interops.line("[MethodImpl(MethodImplOptions.InternalCall)]")
            interops.line(f"private static extern {self.generate_interop_signature(ctor, script_name, is_module)};")
            if not ctor.is_interop_only:
                self._constructor(ctors, ctor, script_name)

        for method in class_info.methods:
            interops.line("[MethodImpl(MethodImplOptions.InternalCall)]")
            interops.line(f"private static extern {self.generate_interop_signature(method, script_name, is_module)};")
            if method.is_interop_only or method.is_property:
                continue
            self._method(methods, method, is_module)

        for prop in class_info.properties:
            self._property(properties, prop, info.category, is_module)

        for event in class_info.events:
            static = "static " if event.is_static or is_module else ""
            signature = self.generate_event_signature(event)
            action = f"Action<{signature}>" if signature else "Action"
            self._member(events, event.documentation)
            events.line(f"{event.visibility.value} {static}event {action} {event.script_name};")
            events.blank()

            interops.line(f"private {static}void {INTEROP_FUNCTION_PREFIX}{event.interop_name}"
                          f"({self.generate_method_params(event, True)})")
            with interops.braces():
                interops.line(f"{event.script_name}?.Invoke({self.generate_event_args(event)});")

        if class_info.base_class:
            base_type = self.type_mapper.type_info(class_info.base_class).script_name
        else:
            base_type = CLASS_BASE_TYPES.get(info.category, "ScriptObject")

        block = CodeBlock()
        block.extend(xml_comments(class_info.documentation, 1))
        block.line(f"{class_info.visibility.value} partial class {script_name} : {base_type}")
        with block.braces():
            for part in (ctors, properties, events, methods, interops):
                block.extend(part)
        _strip_trailing_blank_in_braces(block)
        return block

    def generate_struct(self, struct_info: StructInfo) -> CodeBlock:
        """Generate the managed sequential-layout struct"""
        script_name = self.type_mapper.type_info(struct_info.name).script_name

        valid_fields = []
        for field_info in struct_info.fields:
            info = self.type_mapper.type_info(field_info.type)
            if self.type_mapper.is_valid_struct_field(info, field_info.flags):
                valid_fields.append((field_info, info))
            else:
                self.diagnostics.error(
                    f'Invalid field type found in struct "{script_name}" for field "{field_info.name}". Skipping.',
                    f"{struct_info.name}.{field_info.name}")

        block = CodeBlock()
        block.extend(xml_comments(struct_info.documentation, 1))
        block.line("[StructLayout(LayoutKind.Sequential), SerializeObject]")
        block.line(f"{struct_info.visibility.value} partial struct {script_name}")
        with block.braces():
            for ctor in struct_info.ctors:
                parameterless = not ctor.params
                params = []
                for param in ctor.params:
                    info = self.type_mapper.type_info(param.type)
                    # Reported during field generation, which checks the same condition
                    if not self.type_mapper.is_valid_struct_field(info, param.flags):
                        continue
                    text = f"{self._cs_type(param)} {self._escape_keyword(param.name)}"
                    if param.default_value:
                        text += f" = {param.default_value}"
                    params.append(text)

                if parameterless:
                    # C# structs cannot declare parameterless constructors
                    block.line("/// <summary>Initializes the struct with default values.</summary>")
                    block.line(f"public static {script_name} Default()")
                    target = "value"
                else:
                    block.line(f"public {script_name}({', '.join(params)})")
                    target = "this"

                with block.braces():
                    if parameterless:
                        block.line(f"{script_name} value = new {script_name}();")
                    for field_info, info in valid_fields:
                        param_name = ctor.field_assignments.get(field_info.name)
                        if param_name is not None:
                            value = self._escape_keyword(param_name)
                        elif field_info.default_value:
                            value = field_info.default_value
                        elif field_info.is_array:
                            value = "null"
                        else:
                            value = self.type_mapper.default_value(field_info.type, info)
                        block.line(f"{target}.{field_info.name} = {value};")
                    if parameterless:
                        block.blank()
                        block.line("return value;")
                block.blank()

            for field_info, _ in valid_fields:
                block.line(f"public {self._cs_type(field_info)} {field_info.name};")

        _strip_trailing_blank_in_braces(block)
        return block

    def generate_enum(self, enum_info: EnumInfo) -> CodeBlock:
        """Generate the managed enum, entries ordered by value"""
        block = CodeBlock()
        block.extend(xml_comments(enum_info.documentation, 1))

        header = f"{enum_info.visibility.value} enum {enum_info.script_name}"
        explicit_type = self.type_mapper.map_enum_underlying_type(enum_info.underlying_type)
        if explicit_type:
            header += f" : {explicit_type}"

        block.line(header)
        with block.braces():
            entries = [enum_info.entries[value] for value in sorted(enum_info.entries)]
            for idx, entry in enumerate(entries):
                block.extend(xml_comments(entry.documentation, 2))
                separator = "," if idx < len(entries) - 1 else ""
                block.line(f"{entry.script_name} = {entry.value}{separator}")
        return block


def _strip_trailing_blank_in_braces(block: CodeBlock):
    """Drop a blank line directly before the closing brace"""
    if len(block.lines) >= 2 and not block.lines[-2][1]:
        del block.lines[-2]


class OutputBuilder:
    """Builds the final C# output file"""

    @staticmethod
    def build(namespace: str, parts: list[CodeBlock], in_editor: bool = False,
              engine_namespace: str = None) -> str:
        """Build the final C# output

        Args:
            namespace: Namespace the generated types live in
            parts: Generated classes, structs and enums in output order
            in_editor: Whether the file belongs to the editor assembly
            engine_namespace: Namespace editor files import engine types from
        """
        block = CodeBlock()

        # Usings
        for using in REQUIRED_USINGS:
            block.line(using)
        if in_editor and engine_namespace:
            block.line(f"using {engine_namespace};")
        block.blank()

        # Namespace
        with block.braces(f"namespace {namespace}"):
            for idx, part in enumerate(parts):
                if idx > 0:
                    block.blank()
                block.extend(part)

        return block.render()


