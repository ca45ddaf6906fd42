"""
Normalized declaration model shared by every generation stage
"""

from dataclasses import dataclass, field
from enum import Enum, IntFlag


class TypeCategory(Enum):
    """Category a declared type name resolves to"""
    BUILTIN = "builtin"
    ENUM = "enum"
    STRUCT = "struct"
    STRING = "string"
    WSTRING = "wstring"
    CLASS = "class"
    RESOURCE = "resource"
    COMPONENT = "component"
    SCENE_OBJECT = "sceneobject"
    MANAGED_OBJECT = "managedobject"

    @property
    def is_plain(self) -> bool:
        return self in (TypeCategory.BUILTIN, TypeCategory.ENUM)

    @property
    def is_string(self) -> bool:
        return self in (TypeCategory.STRING, TypeCategory.WSTRING)

    @property
    def is_handle(self) -> bool:
        """Categories referenced natively through a resource or game object handle"""
        return self in HANDLE_CATEGORIES

    @property
    def is_object(self) -> bool:
        """Categories wrapped by a script interop object on the managed side"""
        return self in OBJECT_CATEGORIES


HANDLE_CATEGORIES = frozenset({
    TypeCategory.RESOURCE,
    TypeCategory.COMPONENT,
    TypeCategory.SCENE_OBJECT,
})

OBJECT_CATEGORIES = HANDLE_CATEGORIES | {TypeCategory.CLASS}


class TypeFlags(IntFlag):
    """Per-variable flags; at most one OWNED_BY_* kind is set"""
    NONE = 0
    IS_ARRAY = 1 << 0
    IS_OUTPUT = 1 << 1
    OWNED_BY_RAW_POINTER = 1 << 2
    OWNED_BY_REFERENCE_OR_VALUE = 1 << 3
    OWNED_BY_SHARED_POINTER = 1 << 4
    OWNED_BY_RESOURCE_HANDLE = 1 << 5
    OWNED_BY_GAME_OBJECT_HANDLE = 1 << 6
    COMPLEX_STRUCT = 1 << 7


OWNERSHIP_MASK = (
    TypeFlags.OWNED_BY_RAW_POINTER
    | TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
    | TypeFlags.OWNED_BY_SHARED_POINTER
    | TypeFlags.OWNED_BY_RESOURCE_HANDLE
    | TypeFlags.OWNED_BY_GAME_OBJECT_HANDLE
)


def ownership(flags: TypeFlags) -> TypeFlags:
    """Return the native ownership kind contained in flags (NONE if absent)"""
    return TypeFlags(flags & OWNERSHIP_MASK)


class MethodFlags(IntFlag):
    NONE = 0
    STATIC = 1 << 0
    CONSTRUCTOR = 1 << 1
    PROPERTY_GETTER = 1 << 2
    PROPERTY_SETTER = 1 << 3
    EXTERNAL = 1 << 4
    INTEROP_ONLY = 1 << 5


class ClassFlags(IntFlag):
    NONE = 0
    IS_BASE = 1 << 0
    IS_MODULE = 1 << 1
    EDITOR = 1 << 2


class Visibility(Enum):
    PUBLIC = "public"
    INTERNAL = "internal"
    PRIVATE = "private"


@dataclass
class CommentParam:
    name: str
    comments: list[str] = field(default_factory=list)


@dataclass
class CommentEntry:
    """Documentation of a single declaration, split into paragraphs"""
    brief: list[str] = field(default_factory=list)
    params: list[CommentParam] = field(default_factory=list)
    returns: list[str] = field(default_factory=list)

    def copydoc_target(self) -> str | None:
        """Return the argument of a @copydoc command in the brief, if any"""
        for paragraph in self.brief:
            if paragraph.startswith("@copydoc"):
                parts = paragraph.split(" ", 1)
                return parts[1].strip() if len(parts) > 1 else ""
        return None


@dataclass
class CommentOverload:
    params: list[str]
    comment: CommentEntry


@dataclass
class CommentInfo:
    """Entry of the global documentation index"""
    name: str
    namespaces: list[str]
    is_function: bool = False
    comment: CommentEntry = field(default_factory=CommentEntry)
    overloads: list[CommentOverload] = field(default_factory=list)


@dataclass
class VarInfo:
    """A parameter, return value or struct field"""
    name: str
    type: str
    flags: TypeFlags = TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
    default_value: str = ""

    @property
    def is_array(self) -> bool:
        return bool(self.flags & TypeFlags.IS_ARRAY)

    @property
    def is_output(self) -> bool:
        return bool(self.flags & TypeFlags.IS_OUTPUT)

    @property
    def is_complex(self) -> bool:
        return bool(self.flags & TypeFlags.COMPLEX_STRUCT)


@dataclass
class MethodInfo:
    source_name: str
    script_name: str = ""
    interop_name: str = ""
    flags: MethodFlags = MethodFlags.NONE
    visibility: Visibility = Visibility.PUBLIC
    params: list[VarInfo] = field(default_factory=list)
    return_info: VarInfo | None = None
    external_class: str = ""
    documentation: CommentEntry = field(default_factory=CommentEntry)

    def __post_init__(self):
        if not self.script_name:
            self.script_name = self.source_name

    @property
    def is_static(self) -> bool:
        return bool(self.flags & MethodFlags.STATIC)

    @property
    def is_constructor(self) -> bool:
        return bool(self.flags & MethodFlags.CONSTRUCTOR)

    @property
    def is_external(self) -> bool:
        return bool(self.flags & MethodFlags.EXTERNAL)

    @property
    def is_interop_only(self) -> bool:
        return bool(self.flags & MethodFlags.INTEROP_ONLY)

    @property
    def is_getter(self) -> bool:
        return bool(self.flags & MethodFlags.PROPERTY_GETTER)

    @property
    def is_setter(self) -> bool:
        return bool(self.flags & MethodFlags.PROPERTY_SETTER)

    @property
    def is_property(self) -> bool:
        return self.is_getter or self.is_setter


@dataclass
class PropertyInfo:
    name: str
    type: str
    type_flags: TypeFlags = TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
    getter: str = ""
    setter: str = ""
    is_static: bool = False
    visibility: Visibility = Visibility.PUBLIC
    documentation: CommentEntry = field(default_factory=CommentEntry)


@dataclass
class ClassInfo:
    name: str
    ns: list[str] = field(default_factory=list)
    base_class: str = ""
    flags: ClassFlags = ClassFlags.NONE
    visibility: Visibility = Visibility.PUBLIC
    ctors: list[MethodInfo] = field(default_factory=list)
    methods: list[MethodInfo] = field(default_factory=list)
    events: list[MethodInfo] = field(default_factory=list)
    properties: list[PropertyInfo] = field(default_factory=list)
    documentation: CommentEntry = field(default_factory=CommentEntry)

    @property
    def is_base(self) -> bool:
        return bool(self.flags & ClassFlags.IS_BASE)

    @property
    def is_module(self) -> bool:
        return bool(self.flags & ClassFlags.IS_MODULE)

    @property
    def in_editor(self) -> bool:
        return bool(self.flags & ClassFlags.EDITOR)


@dataclass
class StructCtorInfo:
    params: list[VarInfo] = field(default_factory=list)
    field_assignments: dict[str, str] = field(default_factory=dict)


@dataclass
class StructInfo:
    name: str
    ns: list[str] = field(default_factory=list)
    fields: list[VarInfo] = field(default_factory=list)
    ctors: list[StructCtorInfo] = field(default_factory=list)
    requires_interop: bool = False
    interop_name: str = ""
    in_editor: bool = False
    visibility: Visibility = Visibility.PUBLIC
    documentation: CommentEntry = field(default_factory=CommentEntry)


@dataclass
class EnumEntryInfo:
    name: str
    script_name: str
    value: int
    documentation: CommentEntry = field(default_factory=CommentEntry)


@dataclass
class EnumInfo:
    name: str
    script_name: str = ""
    ns: list[str] = field(default_factory=list)
    entries: dict[int, EnumEntryInfo] = field(default_factory=dict)
    underlying_type: object = None  # clang.cindex.TypeKind
    visibility: Visibility = Visibility.PUBLIC
    documentation: CommentEntry = field(default_factory=CommentEntry)

    def __post_init__(self):
        if not self.script_name:
            self.script_name = self.name

    def add_entry(self, value: int, name: str, script_name: str = "", documentation: CommentEntry = None):
        self.entries[value] = EnumEntryInfo(name, script_name or name, value, documentation or CommentEntry())


@dataclass
class UserTypeInfo:
    """What the front end knows about a type name"""
    script_name: str
    category: TypeCategory
    decl_file: str = ""
    dest_file: str = ""
    underlying_type: object = None  # clang.cindex.TypeKind, enums only


@dataclass
class ExternalClassInfo:
    """Free functions declared as belonging to another class"""
    name: str
    methods: list[MethodInfo] = field(default_factory=list)
    rebound: bool = False


@dataclass(frozen=True)
class ForwardDeclInfo:
    name: str
    is_struct: bool


@dataclass
class IncludeInfo:
    type_name: str
    type_info: UserTypeInfo
    source_include: bool = False
    decl_only: bool = False


@dataclass
class ModuleInfo:
    """One logical output module"""
    name: str
    in_editor: bool = False
    classes: list[ClassInfo] = field(default_factory=list)
    structs: list[StructInfo] = field(default_factory=list)
    enums: list[EnumInfo] = field(default_factory=list)
    header_includes: list[str] = field(default_factory=list)
    source_includes: list[str] = field(default_factory=list)
    forward_declarations: set[ForwardDeclInfo] = field(default_factory=set)
