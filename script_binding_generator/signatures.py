"""
Native interop function signatures, bodies and event thunks
"""

from .code_writer import CodeBlock
from .constants import INTEROP_FUNCTION_PREFIX
from .marshaling import RETURN_VALUE_NAME, MarshalingEngine
from .model import MethodInfo, TypeCategory, TypeFlags, VarInfo, ownership
from .type_mapper import TypeMapper


class InteropBuilder:
    """Builds the native side of interop functions and event callbacks"""

    def __init__(self, context, type_mapper: TypeMapper = None, marshaling: MarshalingEngine = None):
        self.context = context
        self.diagnostics = context.diagnostics
        self.type_mapper = type_mapper or TypeMapper(context)
        self.marshaling = marshaling or MarshalingEngine(self.type_mapper)

    def _category(self, var: VarInfo) -> TypeCategory:
        return self.type_mapper.type_info(var.type).category

    def returns_as_parameter(self, method: MethodInfo) -> bool:
        """Whether the return value is written through an appended __output parameter"""
        if method.return_info is None or method.is_constructor:
            return False
        return not self.type_mapper.can_be_returned(self._category(method.return_info), method.return_info.flags)

    def returns_directly(self, method: MethodInfo) -> bool:
        if method.return_info is None or method.is_constructor:
            return False
        return not self.returns_as_parameter(method)

    def _boundary_type(self, var: VarInfo) -> str:
        return self.type_mapper.interop_cpp_type(var.type, self._category(var), var.flags)

    def cpp_method_signature(self, method: MethodInfo, this_ptr_type: str, nested_name: str = "",
                             is_module: bool = False) -> str:
        """Signature of an interop function

        Args:
            method: Method to generate the function for
            this_ptr_type: Wrapper type the receiver pointer refers to
            nested_name: Qualifying class name, used in source files
            is_module: Whether the owning class is a singleton module
        """
        if self.returns_directly(method):
            return_type = self._boundary_type(method.return_info)
        else:
            return_type = "void"

        params = []
        if method.is_constructor:
            params.append("MonoObject* managedInstance")
        elif not method.is_static and not is_module:
            params.append(f"{this_ptr_type}* thisPtr")

        for param in method.params:
            params.append(f"{self._boundary_type(param)} {param.name}")

        if self.returns_as_parameter(method):
            params.append(f"{self._boundary_type(method.return_info)} {RETURN_VALUE_NAME}")

        qualifier = nested_name + "::" if nested_name else ""
        return f"{return_type} {qualifier}{INTEROP_FUNCTION_PREFIX}{method.interop_name}({', '.join(params)})"

    def cpp_method_body(self, method: MethodInfo, source_class: str, interop_class: str,
                        class_category: TypeCategory, is_module: bool = False) -> CodeBlock:
        """Statements of an interop function body, without the enclosing braces"""
        pre = CodeBlock()
        post = CodeBlock()
        args = []
        return_assignment = ""

        if method.return_info is not None and not method.is_constructor:
            if self.returns_directly(method):
                post.line(f"{self._boundary_type(method.return_info)} {RETURN_VALUE_NAME};")
            value = self.marshaling.marshal_parameter(method.return_info, method.source_name, return_value=True)
            pre.extend(value.pre)
            post.extend(value.post)
            return_assignment = value.arg + " = "

        outputs = CodeBlock()
        for idx, param in enumerate(method.params):
            is_last = idx == len(method.params) - 1
            value = self.marshaling.marshal_parameter(param, method.source_name, is_last)
            pre.extend(value.pre)
            outputs.extend(value.post)
            args.append(value.forward)
        post.extend(outputs)

        block = CodeBlock()
        block.extend(pre)
        self._invocation(method, source_class, interop_class, class_category, is_module,
                         ", ".join(args), return_assignment, block)

        if post:
            block.blank()
            block.extend(post)

        if self.returns_directly(method):
            block.blank()
            block.line(f"return {RETURN_VALUE_NAME};")
        return block

    def _invocation(self, method: MethodInfo, source_class: str, interop_class: str,
                    class_category: TypeCategory, is_module: bool, args: str, return_assignment: str,
                    block: CodeBlock):
        full_name = f"{method.external_class}::{method.source_name}"

        if method.is_constructor:
            if class_category == TypeCategory.CLASS:
                if method.is_external:
                    block.line(f"SPtr<{source_class}> instance = {full_name}({args});")
                else:
                    block.line(f"SPtr<{source_class}> instance = bs_shared_ptr_new<{source_class}>({args});")
                block.line(f"{interop_class}* scriptInstance = new (bs_alloc<{interop_class}>())"
                           f"{interop_class}(managedInstance, instance);")
            elif class_category == TypeCategory.RESOURCE and method.is_external:
                block.line(f"ResourceHandle<{source_class}> instance = {full_name}({args});")
                block.line("ScriptResourceBase* scriptInstance = "
                           "ScriptResourceManager::instance().createBuiltinScriptResource(instance, managedInstance);")
            else:
                self.diagnostics.error(
                    f'Cannot generate a constructor for "{source_class}". Unsupported class type.', source_class)
            return

        if method.is_external:
            if method.is_static:
                block.line(f"{return_assignment}{full_name}({args});")
                return
            receiver = self._receiver(class_category)
            all_args = receiver + ", " + args if args else receiver
            block.line(f"{return_assignment}{full_name}({all_args});")
            return

        if method.is_static:
            block.line(f"{return_assignment}{source_class}::{method.source_name}({args});")
        elif is_module:
            block.line(f"{return_assignment}{source_class}::instance().{method.source_name}({args});")
        else:
            block.line(f"{return_assignment}{self._receiver(class_category)}->{method.source_name}({args});")

    def _receiver(self, class_category: TypeCategory) -> str:
        if class_category == TypeCategory.CLASS:
            return "thisPtr->getInternal()"
        if class_category.is_handle:
            return "thisPtr->getHandle()"
        self.diagnostics.fatal(
            f'Instance methods cannot be generated for classes of category "{class_category.value}".',
            class_category.value)

    # Events

    def native_param_type(self, var: VarInfo) -> str:
        """Native parameter type an event delivers to its callback"""
        if var.is_array:
            return f"const Vector<{var.type}>&"

        kind = ownership(var.flags)
        if kind == TypeFlags.OWNED_BY_RAW_POINTER:
            return var.type + "*"
        if kind == TypeFlags.OWNED_BY_SHARED_POINTER:
            return f"const SPtr<{var.type}>&"
        if kind == TypeFlags.OWNED_BY_RESOURCE_HANDLE:
            return f"const ResourceHandle<{var.type}>&"
        if kind == TypeFlags.OWNED_BY_GAME_OBJECT_HANDLE:
            return f"const GameObjectHandle<{var.type}>&"
        if self._category(var).is_plain:
            return var.type
        return f"const {var.type}&"

    def cpp_event_callback_signature(self, event: MethodInfo, nested_name: str = "", is_module: bool = False) -> str:
        prefix = "static " if (event.is_static or is_module) and not nested_name else ""
        qualifier = nested_name + "::" if nested_name else ""
        params = ", ".join(f"{self.native_param_type(param)} p{idx}" for idx, param in enumerate(event.params))
        return f"{prefix}void {qualifier}{event.interop_name}({params})"

    def cpp_event_thunk(self, event: MethodInfo, is_module: bool = False) -> CodeBlock:
        """Thunk typedef and the static thunk pointer of an event"""
        params = []
        if not event.is_static and not is_module:
            params.append("MonoObject*")
        for param in event.params:
            params.append(f"{self._boundary_type(param)} {param.name}")
        params.append("MonoException**")

        block = CodeBlock()
        block.line(f"typedef void(__stdcall *{event.source_name}ThunkDef) ({', '.join(params)});")
        block.line(f"static {event.source_name}ThunkDef {event.source_name}Thunk;")
        return block

    def cpp_event_callback_body(self, event: MethodInfo, is_module: bool = False) -> CodeBlock:
        block = CodeBlock()
        args = [f"{event.source_name}Thunk"]
        if not event.is_static and not is_module:
            args.append("getManagedInstance()")

        for idx, param in enumerate(event.params):
            value = self.marshaling.callback_argument(f"p{idx}", param, event.source_name)
            block.extend(value.pre)
            args.append(value.forward)

        block.line(f"MonoUtil::invokeThunk({', '.join(args)});")
        return block

    def thunk_signature_types(self, event: MethodInfo) -> str:
        """Managed parameter type list used to look up an event's relay method"""
        types = []
        for param in event.params:
            info = self.type_mapper.type_info(param.type)
            types.append(self.type_mapper.cs_var_type(info.script_name, info.category, param.flags,
                                                      array_suffixes=True))
        return ", ".join(types)
