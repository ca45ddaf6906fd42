"""
Marshaling code for parameters, return values, struct fields and event arguments

Every conversion produces pre-call statements, the name of the value handed
over and post-call statements. Statements are written into CodeBlocks at
relative indentation; callers nest them into function bodies.
"""

from dataclasses import dataclass, field

from . import handles
from .code_writer import CodeBlock
from .model import OWNERSHIP_MASK, TypeCategory, TypeFlags, VarInfo, ownership

RETURN_VALUE_NAME = "__output"


@dataclass
class MarshaledValue:
    """Fragments produced for one parameter, return value or field"""
    arg: str
    forward: str = ""
    pre: CodeBlock = field(default_factory=CodeBlock)
    post: CodeBlock = field(default_factory=CodeBlock)


class MarshalingEngine:
    """Generates conversions between boundary values and native values"""

    def __init__(self, type_mapper):
        self.type_mapper = type_mapper
        self.diagnostics = type_mapper.diagnostics

    def entry_type(self, type_name: str, category: TypeCategory) -> str:
        """Element type used when reading or writing a ScriptArray"""
        if category.is_plain or category.is_string:
            return type_name
        if category == TypeCategory.MANAGED_OBJECT:
            return "MonoObject*"
        return self.type_mapper.script_interop_type(type_name)

    # Method parameters and return values

    def marshal_parameter(self, var: VarInfo, method_name: str, is_last: bool = True,
                          return_value: bool = False) -> MarshaledValue:
        """Marshal a managed-to-native call argument, or a native return value

        Args:
            var: Declared parameter, or the method's return info
            method_name: Owning method, for diagnostics
            is_last: Whether this is the last declared parameter
            return_value: True when marshaling the method's return value, which
                is always named "__output" on the boundary
        """
        name = RETURN_VALUE_NAME if return_value else var.name
        type_name, flags = var.type, var.flags
        category = self.type_mapper.type_info(type_name).category

        if flags & TypeFlags.IS_ARRAY:
            value = self._marshal_array_parameter(name, type_name, category, flags, is_last, return_value)
            # Element ownership does not apply to the Vector holding the elements
            vector_flags = flags
            if ownership(flags) != TypeFlags.OWNED_BY_RAW_POINTER:
                vector_flags = TypeFlags(flags & ~OWNERSHIP_MASK) | TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
            value.forward = self.type_mapper.managed_to_cpp_argument(
                value.arg, TypeCategory.BUILTIN, vector_flags, method_name, is_pointer=False)
            return value

        output = bool(flags & TypeFlags.IS_OUTPUT) or return_value
        # Writes through the boundary pointer for outputs, plain assignment for returns
        target = name if return_value else "*" + name
        value = MarshaledValue(name)

        if category.is_plain:
            if output:
                value.arg = "tmp" + name
                value.pre.line(f"{type_name} {value.arg};")
                value.post.line(f"{target} = {value.arg};")
        elif category == TypeCategory.STRUCT:
            complex_struct = bool(flags & TypeFlags.COMPLEX_STRUCT)
            script_type = self.type_mapper.script_interop_type(type_name) if complex_struct else ""
            if output:
                value.arg = "tmp" + name
                value.pre.line(f"{type_name} {value.arg};")
                if complex_struct:
                    value.post.line(f"*{name} = {script_type}::toInterop({value.arg});")
                else:
                    value.post.line(f"*{name} = {value.arg};")
            elif complex_struct:
                value.arg = "tmp" + name
                value.pre.line(f"{type_name} {value.arg};")
                value.pre.line(f"{value.arg} = {script_type}::fromInterop(*{name});")
        elif category.is_string:
            native_type, to_mono, to_native = self._string_functions(category)
            value.arg = "tmp" + name
            value.pre.line(f"{native_type} {value.arg};")
            if output:
                value.post.line(f"{target} = MonoUtil::{to_mono}({value.arg});")
            else:
                value.pre.line(f"{value.arg} = MonoUtil::{to_native}({name});")
        elif category == TypeCategory.MANAGED_OBJECT:
            if output:
                value.arg = "tmp" + name
                value.pre.line(f"ScriptObjectBase* {value.arg};")
                value.post.line(f"{target} = {value.arg}->getManagedInstance();")
            else:
                self.diagnostics.error(
                    f'ScriptObjectBase type not supported as input for parameter "{name}" of method '
                    f'"{method_name}". Ignoring.', f"{method_name}.{name}")
        elif category.is_object:
            value.arg = "tmp" + name
            script_type = self.type_mapper.script_interop_type(type_name)
            script_name = "script" + name
            value.pre.line(f"{self.type_mapper.cpp_var_type(type_name, category)} {value.arg};")
            if output:
                managed = handles.native_to_managed(
                    category, script_type, script_name, value.arg, value.post, self.diagnostics)
                value.post.line(f"{target} = {managed};")
            else:
                accessor = handles.managed_to_native(category, script_type, script_name, name, value.pre)
                value.pre.line(f"{value.arg} = {accessor};")
        else:
            self.type_mapper._unreachable(category, type_name)

        if not return_value:
            is_temporary = value.arg != name
            value.forward = self.type_mapper.managed_to_cpp_argument(
                value.arg, category, flags, method_name, is_pointer=False if is_temporary else None)
        return value

    def _marshal_array_parameter(self, name: str, type_name: str, category: TypeCategory,
                                 flags: TypeFlags, is_last: bool, return_value: bool) -> MarshaledValue:
        vec_name = "vec" + name
        value = MarshaledValue(vec_name)

        if not flags & TypeFlags.IS_OUTPUT and not return_value:
            self._array_to_native(name, type_name, category, flags, name, vec_name, value.pre)
            if not is_last:
                value.pre.blank()
        else:
            value.pre.line(f"Vector<{type_name}> {vec_name};")
            array_expr = self._array_to_managed(name, type_name, category, flags, vec_name, value.post)
            target = name if return_value else "*" + name
            value.post.line(f"{target} = {array_expr};")

        return value

    @staticmethod
    def _string_functions(category: TypeCategory) -> tuple[str, str, str]:
        if category == TypeCategory.WSTRING:
            return "WString", "wstringToMono", "monoToWString"
        return "String", "stringToMono", "monoToString"

    # Arrays

    def _array_to_native(self, name: str, type_name: str, category: TypeCategory, flags: TypeFlags,
                         source: str, vec_name: str, block: CodeBlock):
        """Build a native Vector from the elements of a managed array"""
        array_name = "array" + name
        entry_type = self.entry_type(type_name, category)

        block.line(f"ScriptArray {array_name}({source});")
        block.line(f"Vector<{type_name}> {vec_name}({array_name}.size());")
        with block.braces(f"for(int i = 0; i < (int){array_name}.size(); i++)"):
            element = f"{vec_name}[i]"
            if category.is_string or category == TypeCategory.BUILTIN:
                block.line(f"{element} = {array_name}.get<{entry_type}>(i);")
            elif category == TypeCategory.ENUM:
                int_type = self.type_mapper.underlying_cpp_type(type_name)
                block.line(f"{element} = ({entry_type}){array_name}.get<{int_type}>(i);")
            elif category == TypeCategory.STRUCT:
                unboxed = f"{entry_type}::unbox({array_name}.get<MonoObject*>(i))"
                if flags & TypeFlags.COMPLEX_STRUCT:
                    unboxed = f"{entry_type}::fromInterop({unboxed})"
                block.line(f"{element} = {unboxed};")
            elif category == TypeCategory.MANAGED_OBJECT:
                self.diagnostics.error(
                    f'ScriptObjectBase type not supported as input for array "{name}". Ignoring.', name)
            elif category.is_object:
                script_name = "script" + name
                accessor = handles.managed_to_native(
                    category, entry_type, script_name, f"{array_name}.get<MonoObject*>(i)", block)
                # Elements without a wrapper keep their default value
                block.line(f"if({script_name} != nullptr)")
                with block.indented():
                    block.line(f"{element} = {accessor};")
            else:
                self.type_mapper._unreachable(category, type_name)

    def _array_to_managed(self, name: str, type_name: str, category: TypeCategory, flags: TypeFlags,
                          source: str, block: CodeBlock) -> str:
        """Fill a new managed array from a native sequence, returning the MonoArray* expression"""
        array_name = "array" + name
        entry_type = self.entry_type(type_name, category)

        block.line(f"ScriptArray {array_name} = ScriptArray::create<{entry_type}>((int){source}.size());")
        with block.braces(f"for(int i = 0; i < (int){source}.size(); i++)"):
            element = f"{source}[i]"
            if category.is_string or category == TypeCategory.BUILTIN:
                block.line(f"{array_name}.set(i, {element});")
            elif category == TypeCategory.ENUM:
                int_type = self.type_mapper.underlying_cpp_type(type_name)
                block.line(f"{array_name}.set(i, ({int_type}){element});")
            elif category == TypeCategory.STRUCT:
                if flags & TypeFlags.COMPLEX_STRUCT:
                    element = f"{entry_type}::toInterop({element})"
                block.line(f"{array_name}.set(i, {entry_type}::box({element}));")
            elif category == TypeCategory.MANAGED_OBJECT or category.is_object:
                managed = handles.native_to_managed(
                    category, entry_type, "script" + name, element, block, self.diagnostics)
                block.line(f"{array_name}.set(i, {managed});")
            else:
                self.type_mapper._unreachable(category, type_name)

        return f"{array_name}.getInternal()"

    # Struct fields

    def field_conversion(self, var: VarInfo, to_interop: bool) -> MarshaledValue:
        """Convert one struct field between the native and the flattened layout

        The source struct is named "value"; the returned arg is the expression
        assigned to the destination field.
        """
        name, type_name, flags = var.name, var.type, var.flags
        category = self.type_mapper.type_info(type_name).category
        source = "value." + name
        value = MarshaledValue(source)

        if flags & TypeFlags.IS_ARRAY:
            vec_name = "vec" + name
            value.arg = vec_name
            if to_interop:
                value.pre.line(f"MonoArray* {vec_name};")
                array_expr = self._array_to_managed(name, type_name, category, flags, source, value.pre)
                value.pre.line(f"{vec_name} = {array_expr};")
            else:
                self._array_to_native(name, type_name, category, flags, source, vec_name, value.pre)
            return value

        if category.is_plain:
            return value

        tmp_name = "tmp" + name
        if category == TypeCategory.STRUCT:
            if flags & TypeFlags.COMPLEX_STRUCT:
                script_type = self.type_mapper.script_interop_type(type_name)
                value.arg = tmp_name
                if to_interop:
                    value.pre.line(f"{self.type_mapper.struct_interop_type(type_name)} {tmp_name};")
                    value.pre.line(f"{tmp_name} = {script_type}::toInterop({source});")
                else:
                    value.pre.line(f"{type_name} {tmp_name};")
                    value.pre.line(f"{tmp_name} = {script_type}::fromInterop({source});")
        elif category.is_string:
            native_type, to_mono, to_native = self._string_functions(category)
            value.arg = tmp_name
            if to_interop:
                value.pre.line(f"MonoString* {tmp_name};")
                value.pre.line(f"{tmp_name} = MonoUtil::{to_mono}({source});")
            else:
                value.pre.line(f"{native_type} {tmp_name};")
                value.pre.line(f"{tmp_name} = MonoUtil::{to_native}({source});")
        elif category == TypeCategory.MANAGED_OBJECT:
            self.diagnostics.error(f'ScriptObject cannot be used as a struct field ("{name}").', name)
        elif category.is_object:
            script_type = self.type_mapper.script_interop_type(type_name)
            script_name = "script" + name
            value.arg = tmp_name
            if to_interop:
                managed = handles.native_to_managed(
                    category, script_type, script_name, source, value.pre, self.diagnostics)
                value.pre.line(f"MonoObject* {tmp_name};")
                value.pre.line(f"{tmp_name} = {managed};")
            else:
                value.pre.line(f"{self.type_mapper.cpp_var_type(type_name, category)} {tmp_name};")
                accessor = handles.managed_to_native(category, script_type, script_name, source, value.pre)
                value.pre.line(f"{tmp_name} = {accessor};")
        else:
            self.type_mapper._unreachable(category, type_name)

        return value

    # Event callback arguments

    def callback_argument(self, name: str, var: VarInfo, event_name: str) -> MarshaledValue:
        """Convert a native event argument into the value passed to the managed thunk

        Args:
            name: Name of the callback parameter (p0, p1, ...)
            var: Declared event parameter
            event_name: Owning event, for diagnostics
        """
        type_name, flags = var.type, var.flags
        category = self.type_mapper.type_info(type_name).category
        value = MarshaledValue(name)
        tmp_name = "tmp" + name

        if flags & TypeFlags.IS_ARRAY:
            vec_name = "vec" + name
            value.arg = vec_name
            value.pre.line(f"MonoArray* {vec_name};")
            array_expr = self._array_to_managed(name, type_name, category, flags, name, value.pre)
            value.pre.line(f"{vec_name} = {array_expr};")
            value.forward = vec_name
            return value

        if category.is_plain:
            pass
        elif category == TypeCategory.STRUCT:
            if flags & TypeFlags.COMPLEX_STRUCT:
                script_type = self.type_mapper.script_interop_type(type_name)
                source = "*" + name if flags & TypeFlags.OWNED_BY_RAW_POINTER else name
                value.arg = tmp_name
                value.pre.line(f"{self.type_mapper.struct_interop_type(type_name)} {tmp_name};")
                value.pre.line(f"{tmp_name} = {script_type}::toInterop({source});")
                value.forward = "&" + tmp_name
                return value
        elif category.is_string:
            _, to_mono, _ = self._string_functions(category)
            value.arg = tmp_name
            value.pre.line(f"MonoString* {tmp_name};")
            value.pre.line(f"{tmp_name} = MonoUtil::{to_mono}({name});")
        elif category == TypeCategory.MANAGED_OBJECT or category.is_object:
            script_type = "" if category == TypeCategory.MANAGED_OBJECT else \
                self.type_mapper.script_interop_type(type_name)
            managed = handles.native_to_managed(
                category, script_type, "script" + name, name, value.pre, self.diagnostics)
            value.arg = tmp_name
            value.pre.line(f"MonoObject* {tmp_name};")
            value.pre.line(f"{tmp_name} = {managed};")
        else:
            self.type_mapper._unreachable(category, type_name)

        value.forward = self.type_mapper.cpp_to_managed_argument(value.arg, category, flags, event_name)
        return value
