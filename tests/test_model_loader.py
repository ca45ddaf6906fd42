"""
Tests for loading the declaration model from XML
"""

import pytest
from clang.cindex import TypeKind

from script_binding_generator.errors import Diagnostics
from script_binding_generator.model import (
    ClassFlags,
    MethodFlags,
    TypeCategory,
    TypeFlags,
    Visibility,
)
from script_binding_generator.model_loader import load_model, parse_model


def _parse(text):
    return parse_model(text, Diagnostics(echo=False))


class TestParseModel:

    @pytest.fixture(autouse=True)
    def setup(self, model_xml):
        self.context = _parse(model_xml)

    def test_types(self):
        texture = self.context.type_map["Texture"]
        desc = self.context.type_map["TEXTURE_DESC"]

        assert texture.category == TypeCategory.RESOURCE
        assert texture.decl_file == "BsTexture.h"
        assert texture.dest_file == "Texture"
        assert desc.script_name == "TextureDesc"
        assert self.context.type_map["UINT32"].script_name == "uint"
        assert self.context.type_map["PixelFormat"].underlying_type == TypeKind.UINT

    def test_module_contents(self):
        module = self.context.modules["Texture"]

        assert not module.in_editor
        assert [c.name for c in module.classes] == ["Texture"]
        assert [s.name for s in module.structs] == ["TEXTURE_DESC"]
        assert [e.name for e in module.enums] == ["PixelFormat"]

    def test_methods(self):
        texture = self.context.modules["Texture"].classes[0]
        get_width, get_name, set_name, get_format = texture.methods

        assert texture.ns == ["bs"]
        assert texture.documentation.brief == ["Image that can be sampled by the GPU."]
        assert get_width.flags == MethodFlags.PROPERTY_GETTER
        assert get_width.script_name == "Width"
        assert get_width.return_info.type == "UINT32"
        assert get_width.return_info.flags == TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
        assert get_name.return_info.name == ""
        assert set_name.params[0].name == "name"
        assert set_name.params[0].type == "String"
        assert get_format.documentation.brief == ["@copydoc bs::TEXTURE_DESC"]
        assert get_width.visibility == Visibility.PUBLIC

    def test_struct(self):
        struct_info = self.context.modules["Texture"].structs[0]

        assert [f.name for f in struct_info.fields] == ["width", "format"]
        assert struct_info.fields[0].default_value == "1"
        assert len(struct_info.ctors) == 1
        assert struct_info.ctors[0].params == []

    def test_enum(self):
        enum_info = self.context.modules["Texture"].enums[0]

        assert enum_info.underlying_type == TypeKind.UINT
        assert sorted(enum_info.entries) == [1, 2]
        assert enum_info.entries[2].name == "PF_RG8"
        assert enum_info.entries[2].script_name == "RG8"

    def test_external_methods(self):
        external = self.context.external_classes["Texture"]
        create = external.methods[0]

        assert create.flags == MethodFlags.CONSTRUCTOR | MethodFlags.EXTERNAL
        assert create.external_class == "TextureEx"
        assert create.return_info.flags == TypeFlags.OWNED_BY_RESOURCE_HANDLE
        assert create.params[0].type == "TEXTURE_DESC"

    def test_comment_index(self):
        lookup = self.context.comment_lookup

        assert "Texture" in lookup
        assert "TEXTURE_DESC" in lookup
        assert "PixelFormat::PF_R8" in lookup

        info = self.context.comment_infos[lookup["Texture::getWidth"][0]]
        assert info.is_function
        assert info.namespaces == ["bs"]
        assert info.overloads[0].comment.brief == ["Width of the texture in pixels."]

        set_name = self.context.comment_infos[lookup["Texture::setName"][0]]
        assert set_name.overloads[0].params == ["String"]

        entry = self.context.comment_infos[lookup["PixelFormat::PF_R8"][0]]
        assert not entry.is_function


class TestModelDetails:

    def test_multiple_flags_and_attributes(self):
        context = _parse("""
<model>
    <module name="Physics">
        <class name="Physics" ns="bs::physics" flags="IS_MODULE" visibility="internal">
            <ctor><param name="gravity" type="float" flags="OWNED_BY_RAW_POINTER IS_OUTPUT"/></ctor>
            <method name="create" flags="static interop_only" external="PhysicsEx"/>
            <event name="onContact" script="OnContact"/>
        </class>
    </module>
</model>
""")
        physics = context.modules["Physics"].classes[0]

        assert physics.ns == ["bs", "physics"]
        assert physics.flags == ClassFlags.IS_MODULE
        assert physics.visibility == Visibility.INTERNAL
        assert physics.ctors[0].is_constructor
        assert physics.ctors[0].source_name == "Physics"
        assert physics.ctors[0].script_name == "Physics"
        assert physics.ctors[0].params[0].flags == TypeFlags.OWNED_BY_RAW_POINTER | TypeFlags.IS_OUTPUT
        assert physics.methods[0].flags == MethodFlags.STATIC | MethodFlags.INTEROP_ONLY
        assert physics.methods[0].external_class == "PhysicsEx"
        assert physics.events[0].script_name == "OnContact"
        assert "Physics::onContact" in context.comment_lookup

    def test_unnamed_constructor_takes_class_name(self):
        context = _parse("""
<model>
    <module name="Mesh">
        <class name="Mesh"><ctor/><ctor script="MeshFromCount"><param name="count" type="int"/></ctor></class>
    </module>
</model>
""")
        default_ctor, counted_ctor = context.modules["Mesh"].classes[0].ctors

        assert default_ctor.source_name == "Mesh"
        assert default_ctor.script_name == "Mesh"
        assert counted_ctor.source_name == "Mesh"
        assert counted_ctor.script_name == "MeshFromCount"
        assert "Mesh::Mesh" in context.comment_lookup

    def test_method_without_name_rejected(self):
        with pytest.raises(ValueError, match="<method> element missing 'name' attribute"):
            _parse('<model><module name="M"><class name="A"><method/></class></module></model>')

    def test_flags_without_ownership_default_to_value(self):
        context = _parse("""
<model>
    <module name="Mesh">
        <class name="Mesh">
            <method name="getBounds">
                <param name="min" type="float" flags="IS_OUTPUT"/>
                <param name="values" type="float" flags="IS_ARRAY"/>
                <param name="owner" type="float" flags="OWNED_BY_RAW_POINTER IS_OUTPUT"/>
            </method>
        </class>
    </module>
</model>
""")
        out_min, values, owner = context.modules["Mesh"].classes[0].methods[0].params

        assert out_min.flags == TypeFlags.IS_OUTPUT | TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
        assert values.flags == TypeFlags.IS_ARRAY | TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
        assert owner.flags == TypeFlags.OWNED_BY_RAW_POINTER | TypeFlags.IS_OUTPUT

    def test_editor_module_and_default_types(self):
        context = _parse("""
<model>
    <module name="Inspector" editor="true">
        <class name="Inspector" category="component" script="InspectorComponent" decl="BsInspector.h"/>
        <struct name="Margins"><field name="left" type="int"/></struct>
        <enum name="Side" underlying="UCHAR"><entry name="S_Left" value="0x1"/></enum>
    </module>
</model>
""")
        module = context.modules["Inspector"]

        assert module.in_editor
        assert module.classes[0].flags == ClassFlags.EDITOR
        assert module.structs[0].in_editor
        assert module.enums[0].entries[1].script_name == "S_Left"

        inspector = context.type_map["Inspector"]
        assert inspector.category == TypeCategory.COMPONENT
        assert inspector.script_name == "InspectorComponent"
        assert inspector.decl_file == "BsInspector.h"
        assert inspector.dest_file == "Inspector"
        assert context.type_map["Margins"].category == TypeCategory.STRUCT
        assert context.type_map["Side"].category == TypeCategory.ENUM
        assert context.type_map["Side"].underlying_type == TypeKind.UCHAR

    def test_declared_type_not_overridden(self, model_xml):
        context = _parse(model_xml)

        # Declared with dest="Texture" by its <type> element
        assert context.type_map["PixelFormat"].dest_file == "Texture"
        assert context.type_map["PixelFormat"].decl_file == "BsPixelUtil.h"

    def test_struct_constructor_assignments(self):
        context = _parse("""
<model>
    <module name="Color">
        <struct name="Color">
            <field name="r" type="float"/>
            <ctor><param name="red" type="float"/><assign field="r" param="red"/></ctor>
        </struct>
    </module>
</model>
""")
        ctor = context.modules["Color"].structs[0].ctors[0]

        assert ctor.params[0].name == "red"
        assert ctor.field_assignments == {"r": "red"}

    def test_documentation(self):
        context = _parse("""
<model>
    <module name="Math">
        <class name="Math">
            <method name="clamp">
                <doc>
                    <brief>Clamps a value.</brief>
                    <param name="value">Value to clamp.</param>
                    <returns>Clamped value.</returns>
                </doc>
                <param name="value" type="float"/>
                <return type="float"/>
            </method>
        </class>
    </module>
</model>
""")
        doc = context.modules["Math"].classes[0].methods[0].documentation

        assert doc.brief == ["Clamps a value."]
        assert doc.params[0].name == "value"
        assert doc.params[0].comments == ["Value to clamp."]
        assert doc.returns == ["Clamped value."]


class TestModelErrors:

    @pytest.mark.parametrize("text, message", [
        ("<types/>", "Expected root element 'model'"),
        ("<model><module/></model>", "missing 'name' attribute"),
        ('<model><type name="A" category="gadget"/></model>', "Unknown type category"),
        ('<model><type name="A" category="enum" underlying="QUAD"/></model>', "Unknown underlying type kind"),
        ('<model><module name="M"><class name="A" flags="IS_FANCY"/></module></model>', "Unknown ClassFlags"),
        ('<model><module name="M"><class name="A" visibility="protected"/></module></model>',
         "Invalid visibility"),
        ('<model><module name="M"><enum name="E"><entry name="A" value="one"/></enum></module></model>',
         "must be an integer"),
        ('<model><external class="A"><method name="f"/></external></model>', "has no source class"),
        ("<model><module>", "XML parsing error"),
    ])
    def test_invalid_models(self, text, message):
        with pytest.raises(ValueError) as exc_info:
            _parse(text)
        assert message in str(exc_info.value)

    def test_unknown_method_flag(self):
        with pytest.raises(ValueError, match="Unknown MethodFlags"):
            _parse('<model><module name="M"><class name="A"><method name="f" flags="VIRTUAL"/>'
                   '</class></module></model>')


class TestLoadModel:

    def test_load_from_file(self, temp_dir, model_xml):
        model_file = temp_dir / "model.xml"
        model_file.write_text(model_xml)

        context = load_model(str(model_file), Diagnostics(echo=False))

        assert "Texture" in context.modules

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError, match="Model file not found"):
            load_model(str(temp_dir / "missing.xml"))

    def test_malformed_file(self, temp_dir):
        model_file = temp_dir / "model.xml"
        model_file.write_text("<model><module name='A'></model>")

        with pytest.raises(ValueError, match="XML parsing error"):
            load_model(str(model_file))
