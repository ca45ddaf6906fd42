"""
Pytest configuration and fixtures
"""

import pytest
from clang.cindex import TypeKind

from script_binding_generator.context import GeneratorContext
from script_binding_generator.errors import Diagnostics
from script_binding_generator.model import TypeCategory


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for config, model and output files"""
    return tmp_path


@pytest.fixture
def context():
    """Context with the type map of a small engine, diagnostics kept quiet"""
    ctx = GeneratorContext(Diagnostics(echo=False))

    ctx.register_type("int", TypeCategory.BUILTIN)
    ctx.register_type("bool", TypeCategory.BUILTIN)
    ctx.register_type("float", TypeCategory.BUILTIN)
    ctx.register_type("UINT32", TypeCategory.BUILTIN, script_name="uint")
    ctx.register_type("String", TypeCategory.STRING, script_name="string")
    ctx.register_type("WString", TypeCategory.WSTRING, script_name="string")
    ctx.register_type("PixelFormat", TypeCategory.ENUM, decl_file="BsPixelUtil.h", dest_file="PixelUtil",
                      underlying_type=TypeKind.UINT)
    ctx.register_type("Color", TypeCategory.STRUCT, decl_file="BsColor.h", dest_file="Color")
    ctx.register_type("TEXTURE_DESC", TypeCategory.STRUCT, script_name="TextureDesc", decl_file="BsTexture.h",
                      dest_file="Texture")
    ctx.register_type("Texture", TypeCategory.RESOURCE, decl_file="BsTexture.h", dest_file="Texture")
    ctx.register_type("CCamera", TypeCategory.COMPONENT, script_name="Camera", decl_file="BsCCamera.h",
                      dest_file="CCamera")
    ctx.register_type("SceneObject", TypeCategory.SCENE_OBJECT, decl_file="BsSceneObject.h",
                      dest_file="SceneObject")
    ctx.register_type("RenderTarget", TypeCategory.CLASS, decl_file="BsRenderTarget.h", dest_file="RenderTarget")
    ctx.register_type("ScriptObjectBase", TypeCategory.MANAGED_OBJECT, script_name="object")

    return ctx


@pytest.fixture
def model_xml():
    """Model of a resource module with a property pair, a flattened struct and an enum"""
    return """
<model>
    <type name="UINT32" category="builtin" script="uint"/>
    <type name="String" category="string" script="string"/>
    <type name="Texture" category="resource" decl="BsTexture.h" dest="Texture"/>
    <type name="TEXTURE_DESC" category="struct" script="TextureDesc" decl="BsTexture.h" dest="Texture"/>
    <type name="PixelFormat" category="enum" decl="BsPixelUtil.h" dest="Texture" underlying="UINT"/>
    <module name="Texture">
        <class name="Texture" ns="bs">
            <doc><brief>Image that can be sampled by the GPU.</brief></doc>
            <method name="getWidth" script="Width" flags="PROPERTY_GETTER">
                <doc><brief>Width of the texture in pixels.</brief></doc>
                <return type="UINT32"/>
            </method>
            <method name="getName" script="Name" flags="PROPERTY_GETTER">
                <return type="String"/>
            </method>
            <method name="setName" script="Name" flags="PROPERTY_SETTER">
                <param name="name" type="String"/>
            </method>
            <method name="getFormat" script="GetFormat">
                <doc><brief>@copydoc bs::TEXTURE_DESC</brief></doc>
                <return type="PixelFormat"/>
            </method>
        </class>
        <struct name="TEXTURE_DESC" ns="bs">
            <doc><brief>Describes a texture to create.</brief></doc>
            <field name="width" type="UINT32" default="1"/>
            <field name="format" type="PixelFormat" default="2"/>
            <ctor/>
        </struct>
        <enum name="PixelFormat" ns="bs" underlying="UINT">
            <entry name="PF_R8" script="R8" value="1"/>
            <entry name="PF_RG8" script="RG8" value="2"/>
        </enum>
    </module>
    <external class="Texture" source="TextureEx">
        <method name="create" flags="CONSTRUCTOR">
            <return type="Texture" flags="OWNED_BY_RESOURCE_HANDLE"/>
            <param name="desc" type="TEXTURE_DESC"/>
        </method>
    </external>
</model>
"""
