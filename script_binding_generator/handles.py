"""
Lookup and creation rules between native handles and managed wrappers
"""

from enum import Enum

from .code_writer import CodeBlock
from .model import TypeCategory


class Resolution(Enum):
    LOOKUP = "lookup"
    LOOKUP_OR_CREATE = "lookup-or-create"
    ALWAYS_CREATE = "always-create"
    EXISTING_INSTANCE = "existing-instance"


RESOLUTION_RULES = {
    TypeCategory.RESOURCE: Resolution.LOOKUP_OR_CREATE,
    TypeCategory.COMPONENT: Resolution.LOOKUP,
    TypeCategory.SCENE_OBJECT: Resolution.LOOKUP_OR_CREATE,
    TypeCategory.CLASS: Resolution.ALWAYS_CREATE,
    TypeCategory.MANAGED_OBJECT: Resolution.EXISTING_INSTANCE,
}


def native_to_managed(category: TypeCategory, script_type: str, script_name: str,
                      native_expr: str, block: CodeBlock, diagnostics) -> str:
    """Resolve a native value into its managed instance

    Writes any lookup statements into block and returns the expression
    evaluating to the MonoObject*.
    """
    rule = RESOLUTION_RULES.get(category)
    if rule is None:
        diagnostics.fatal(f'Category "{category.value}" of "{native_expr}" has no managed wrapper.', native_expr)

    if rule == Resolution.ALWAYS_CREATE:
        return f"{script_type}::create({native_expr})"
    if rule == Resolution.EXISTING_INSTANCE:
        return f"{native_expr}->getManagedInstance()"

    if category == TypeCategory.RESOURCE:
        block.line(f"ScriptResourceBase* {script_name};")
        block.line(f"{script_name} = ScriptResourceManager::instance().getScriptResource({native_expr}, true);")
    elif category == TypeCategory.COMPONENT:
        block.line(f"{script_type}* {script_name};")
        block.line(f"{script_name} = ScriptGameObjectManager::instance().getBuiltinScriptComponent({native_expr});")
    else:
        block.line(f"{script_type}* {script_name};")
        block.line(
            f"{script_name} = ScriptGameObjectManager::instance().getOrCreateScriptSceneObject({native_expr});")
    return f"{script_name}->getManagedInstance()"


def managed_to_native(category: TypeCategory, script_type: str, script_name: str,
                      managed_expr: str, block: CodeBlock) -> str:
    """Look up the wrapper of a managed instance, returning the native accessor expression"""
    block.line(f"{script_type}* {script_name};")
    block.line(f"{script_name} = {script_type}::toNative({managed_expr});")
    return native_accessor(category, script_name)


def native_accessor(category: TypeCategory, script_name: str) -> str:
    if category.is_handle:
        return f"{script_name}->getHandle()"
    return f"{script_name}->getInternal()"
