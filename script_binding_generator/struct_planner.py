"""
Decides which structs need a flattened boundary layout and builds the conversions
"""

from .code_writer import CodeBlock
from .marshaling import MarshalingEngine
from .model import StructInfo, TypeCategory, TypeFlags, VarInfo
from .type_mapper import TypeMapper

FLATTENING_CATEGORIES = (TypeCategory.BUILTIN, TypeCategory.ENUM, TypeCategory.STRUCT)


class StructPlanner:
    """Plans struct interop layouts and flags variables referencing complex structs"""

    def __init__(self, context, type_mapper: TypeMapper = None, marshaling: MarshalingEngine = None):
        self.context = context
        self.type_mapper = type_mapper or TypeMapper(context)
        self.marshaling = marshaling or MarshalingEngine(self.type_mapper)

    def requires_flattening(self, struct_info: StructInfo) -> bool:
        for field_info in struct_info.fields:
            if field_info.is_array:
                return True
            if self.type_mapper.type_info(field_info.type).category in FLATTENING_CATEGORIES:
                return True
        return False

    def plan(self, struct_info: StructInfo):
        struct_info.requires_interop = self.requires_flattening(struct_info)
        if struct_info.requires_interop:
            struct_info.interop_name = self.type_mapper.struct_interop_type(struct_info.name)
        else:
            struct_info.interop_name = struct_info.name

    def mark_complex(self, var: VarInfo):
        """Flag a variable whose struct type is converted through a flattened layout"""
        if self.type_mapper.type_info(var.type).category != TypeCategory.STRUCT:
            return

        struct_info = self.context.find_struct(var.type)
        if struct_info is not None and struct_info.requires_interop:
            var.flags |= TypeFlags.COMPLEX_STRUCT

    def plan_all(self):
        """Plan every struct, then flag every variable that references one"""
        for _, struct_info in self.context.iter_structs():
            self.plan(struct_info)

        for _, class_info in self.context.iter_classes():
            for method in class_info.methods + class_info.ctors + class_info.events:
                for param in method.params:
                    self.mark_complex(param)
                if method.return_info is not None:
                    self.mark_complex(method.return_info)

            for prop in class_info.properties:
                if self.type_mapper.type_info(prop.type).category != TypeCategory.STRUCT:
                    continue
                struct_info = self.context.find_struct(prop.type)
                if struct_info is not None and struct_info.requires_interop:
                    prop.type_flags |= TypeFlags.COMPLEX_STRUCT

        for _, struct_info in self.context.iter_structs():
            for field_info in struct_info.fields:
                self.mark_complex(field_info)
            for ctor in struct_info.ctors:
                for param in ctor.params:
                    self.mark_complex(param)

    def flattened_fields(self, struct_info: StructInfo) -> list[tuple[str, str]]:
        """(boundary type, field name) pairs of the flattened layout"""
        fields = []
        for field_info in struct_info.fields:
            category = self.type_mapper.type_info(field_info.type).category
            field_type = self.type_mapper.interop_cpp_type(field_info.type, category, field_info.flags, for_struct=True)
            fields.append((field_type, field_info.name))
        return fields

    def conversion_body(self, struct_info: StructInfo, to_interop: bool) -> CodeBlock:
        """Body of toInterop (native to flattened) or fromInterop (flattened to native)"""
        output_type = struct_info.interop_name if to_interop else struct_info.name

        block = CodeBlock()
        block.line(f"{output_type} output;")
        for field_info in struct_info.fields:
            value = self.marshaling.field_conversion(field_info, to_interop)
            block.extend(value.pre)
            block.line(f"output.{field_info.name} = {value.arg};")

        block.blank()
        block.line("return output;")
        return block
