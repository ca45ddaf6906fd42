"""
XML serialization of the generator input model

The parsing front end (or a hand-written file) describes types, modules and
external methods; load_model() turns the document into a GeneratorContext and
registers every declaration's documentation in the comment index.

    <model>
        <type name="Texture" category="resource" decl="BsTexture.h" dest="Texture"/>
        <module name="Texture">
            <class name="Texture" ns="bs">
                <method name="getWidth" script="Width" flags="PROPERTY_GETTER">
                    <return type="UINT32"/>
                </method>
            </class>
        </module>
        <external class="Texture" source="TextureEx">
            <method name="create" flags="CONSTRUCTOR"><return type="Texture"/></method>
        </external>
    </model>
"""

import xml.etree.ElementTree as ET
from functools import reduce

from clang.cindex import TypeKind

from .context import GeneratorContext
from .errors import Diagnostics
from .model import (
    OWNERSHIP_MASK,
    ClassFlags,
    ClassInfo,
    CommentEntry,
    CommentParam,
    EnumInfo,
    MethodFlags,
    MethodInfo,
    StructCtorInfo,
    StructInfo,
    TypeCategory,
    TypeFlags,
    VarInfo,
    Visibility,
)


def _flags(element, flag_type, default):
    text = element.get("flags")
    if text is None:
        return default

    names = text.split()
    try:
        return reduce(lambda acc, name: acc | flag_type[name.upper()], names, flag_type.NONE)
    except KeyError as e:
        raise ValueError(f"Unknown {flag_type.__name__} value {e} on <{element.tag}>")


def _required(element, attribute: str) -> str:
    value = element.get(attribute)
    if not value:
        raise ValueError(f"<{element.tag}> element missing '{attribute}' attribute")
    return value.strip()


def _visibility(element) -> Visibility:
    value = element.get("visibility", "public").strip().lower()
    try:
        return Visibility(value)
    except ValueError:
        raise ValueError(f"Invalid visibility value '{value}' on <{element.tag}>")


def _namespaces(element) -> list[str]:
    value = element.get("ns", "")
    return [part for part in value.split("::") if part]


def _category(value: str) -> TypeCategory:
    try:
        return TypeCategory(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown type category '{value}'")


def _type_kind(value):
    if not value:
        return None
    kind = getattr(TypeKind, value.strip().upper(), None)
    if not isinstance(kind, TypeKind):
        raise ValueError(f"Unknown underlying type kind '{value}'")
    return kind


def _documentation(element) -> CommentEntry:
    doc = element.find("doc")
    if doc is None:
        return CommentEntry()

    entry = CommentEntry()
    entry.brief = [node.text.strip() for node in doc.findall("brief") if node.text and node.text.strip()]
    for param in doc.findall("param"):
        comments = [param.text.strip()] if param.text and param.text.strip() else []
        entry.params.append(CommentParam(_required(param, "name"), comments))
    entry.returns = [node.text.strip() for node in doc.findall("returns") if node.text and node.text.strip()]
    return entry


def _var(element, name: str = None) -> VarInfo:
    flags = _flags(element, TypeFlags, TypeFlags.OWNED_BY_REFERENCE_OR_VALUE)
    if not flags & OWNERSHIP_MASK:
        flags |= TypeFlags.OWNED_BY_REFERENCE_OR_VALUE

    return VarInfo(
        name=name if name is not None else _required(element, "name"),
        type=_required(element, "type"),
        flags=flags,
        default_value=element.get("default", "").strip(),
    )


def _method(element, flags: MethodFlags = MethodFlags.NONE, default_name: str = "") -> MethodInfo:
    name = element.get("name", "").strip() or default_name
    if not name:
        raise ValueError(f"<{element.tag}> element missing 'name' attribute")

    method = MethodInfo(
        source_name=name,
        script_name=element.get("script", "").strip(),
        flags=_flags(element, MethodFlags, MethodFlags.NONE) | flags,
        visibility=_visibility(element),
        params=[_var(param) for param in element.findall("param")],
        external_class=element.get("external", "").strip(),
        documentation=_documentation(element),
    )

    return_element = element.find("return")
    if return_element is not None:
        method.return_info = _var(return_element, name="")
    return method


class ModelLoader:
    """Builds a GeneratorContext from a model document"""

    def __init__(self, diagnostics: Diagnostics = None):
        self.context = GeneratorContext(diagnostics)

    def _register_default_type(self, name: str, category: TypeCategory, element, module_name: str,
                               underlying_type=None):
        if name in self.context.type_map:
            return
        self.context.register_type(
            name, category,
            script_name=element.get("script", "").strip() or None,
            decl_file=element.get("decl", "").strip(),
            dest_file=module_name,
            underlying_type=underlying_type,
        )

    def _register_method_doc(self, method: MethodInfo, ns: list[str], parent: str):
        self.context.register_comment(method.source_name, ns, method.documentation, parent=parent,
                                      params=[param.type for param in method.params])

    def load_type(self, element):
        self.context.register_type(
            _required(element, "name"),
            _category(_required(element, "category")),
            script_name=element.get("script", "").strip() or None,
            decl_file=element.get("decl", "").strip(),
            dest_file=element.get("dest", "").strip(),
            underlying_type=_type_kind(element.get("underlying")),
        )

    def load_class(self, element, module_name: str, in_editor: bool) -> ClassInfo:
        class_info = ClassInfo(
            name=_required(element, "name"),
            ns=_namespaces(element),
            base_class=element.get("base", "").strip(),
            flags=_flags(element, ClassFlags, ClassFlags.NONE),
            visibility=_visibility(element),
            documentation=_documentation(element),
        )
        if in_editor:
            class_info.flags |= ClassFlags.EDITOR

        for ctor in element.findall("ctor"):
            method = _method(ctor, MethodFlags.CONSTRUCTOR, default_name=class_info.name)
            class_info.ctors.append(method)
            self._register_method_doc(method, class_info.ns, class_info.name)
        for child in element.findall("method"):
            method = _method(child)
            class_info.methods.append(method)
            self._register_method_doc(method, class_info.ns, class_info.name)
        for child in element.findall("event"):
            event = _method(child)
            class_info.events.append(event)
            self.context.register_comment(event.source_name, class_info.ns, event.documentation,
                                          parent=class_info.name)

        self._register_default_type(class_info.name, _category(element.get("category", "class")),
                                    element, module_name)
        self.context.register_comment(class_info.name, class_info.ns, class_info.documentation)
        return class_info

    def load_struct(self, element, module_name: str, in_editor: bool) -> StructInfo:
        struct_info = StructInfo(
            name=_required(element, "name"),
            ns=_namespaces(element),
            fields=[_var(field) for field in element.findall("field")],
            in_editor=in_editor,
            visibility=_visibility(element),
            documentation=_documentation(element),
        )

        for ctor in element.findall("ctor"):
            assignments = {_required(a, "field"): _required(a, "param") for a in ctor.findall("assign")}
            struct_info.ctors.append(StructCtorInfo([_var(param) for param in ctor.findall("param")], assignments))

        self._register_default_type(struct_info.name, TypeCategory.STRUCT, element, module_name)
        self.context.register_comment(struct_info.name, struct_info.ns, struct_info.documentation)
        return struct_info

    def load_enum(self, element, module_name: str) -> EnumInfo:
        enum_info = EnumInfo(
            name=_required(element, "name"),
            script_name=element.get("script", "").strip(),
            ns=_namespaces(element),
            underlying_type=_type_kind(element.get("underlying")),
            visibility=_visibility(element),
            documentation=_documentation(element),
        )

        for entry in element.findall("entry"):
            try:
                value = int(_required(entry, "value"), 0)
            except ValueError:
                raise ValueError(f"Enum entry value of '{enum_info.name}' must be an integer")
            entry_name = _required(entry, "name")
            enum_info.add_entry(value, entry_name, entry.get("script", "").strip(), _documentation(entry))
            self.context.register_comment(entry_name, enum_info.ns, enum_info.entries[value].documentation,
                                          parent=enum_info.name)

        self._register_default_type(enum_info.name, TypeCategory.ENUM, element, module_name,
                                    enum_info.underlying_type)
        self.context.register_comment(enum_info.name, enum_info.ns, enum_info.documentation)
        return enum_info

    def load_module(self, element):
        name = _required(element, "name")
        in_editor = element.get("editor", "false").strip().lower() == "true"
        module = self.context.add_module(name, in_editor)

        for child in element.findall("class"):
            module.classes.append(self.load_class(child, name, in_editor))
        for child in element.findall("struct"):
            module.structs.append(self.load_struct(child, name, in_editor))
        for child in element.findall("enum"):
            module.enums.append(self.load_enum(child, name))

    def load_external(self, element):
        class_name = _required(element, "class")
        source = element.get("source", "").strip()
        for child in element.findall("method"):
            method = _method(child, MethodFlags.EXTERNAL)
            if not method.external_class:
                method.external_class = source
            if not method.external_class:
                raise ValueError(f"External method '{method.source_name}' of '{class_name}' has no source class")
            self.context.add_external_method(class_name, method)

    def load(self, root) -> GeneratorContext:
        if root.tag != "model":
            raise ValueError(f"Expected root element 'model', got '{root.tag}'")

        for element in root.findall("type"):
            self.load_type(element)
        for element in root.findall("module"):
            self.load_module(element)
        for element in root.findall("external"):
            self.load_external(element)
        return self.context


def parse_model(text: str, diagnostics: Diagnostics = None) -> GeneratorContext:
    """Parse a model document held in a string"""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    return ModelLoader(diagnostics).load(root)


def load_model(model_path, diagnostics: Diagnostics = None) -> GeneratorContext:
    """Parse a model file into a GeneratorContext"""
    try:
        tree = ET.parse(model_path)
    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Model file not found: {model_path}")
    return ModelLoader(diagnostics).load(tree.getroot())
