"""
Unit tests for MarshalingEngine
"""

import pytest

from script_binding_generator.marshaling import MarshalingEngine
from script_binding_generator.model import TypeFlags, VarInfo
from script_binding_generator.type_mapper import TypeMapper

REF = TypeFlags.OWNED_BY_REFERENCE_OR_VALUE
OUT = REF | TypeFlags.IS_OUTPUT
COMPLEX = REF | TypeFlags.COMPLEX_STRUCT


class TestParameterMarshaling:
    """Managed-to-native parameters and native return values"""

    @pytest.fixture(autouse=True)
    def setup(self, context):
        self.context = context
        self.engine = MarshalingEngine(TypeMapper(context))

    def test_builtin_input_passes_through(self):
        value = self.engine.marshal_parameter(VarInfo("width", "int"), "resize")

        assert value.arg == "width"
        assert value.forward == "width"
        assert not value.pre
        assert not value.post

    def test_builtin_output_uses_temporary(self):
        value = self.engine.marshal_parameter(VarInfo("width", "int", OUT), "getSize")

        assert value.pre.texts() == ["int tmpwidth;"]
        assert value.post.texts() == ["*width = tmpwidth;"]
        assert value.forward == "tmpwidth"

    def test_builtin_return_value(self):
        value = self.engine.marshal_parameter(VarInfo("", "UINT32"), "getWidth", return_value=True)

        assert value.arg == "tmp__output"
        assert value.pre.texts() == ["UINT32 tmp__output;"]
        assert value.post.texts() == ["__output = tmp__output;"]

    def test_string_input(self):
        value = self.engine.marshal_parameter(VarInfo("name", "String"), "setName")

        assert value.pre.texts() == ["String tmpname;", "tmpname = MonoUtil::monoToString(name);"]
        assert value.forward == "tmpname"

    def test_wide_string_output(self):
        value = self.engine.marshal_parameter(VarInfo("path", "WString", OUT), "getPath")

        assert value.pre.texts() == ["WString tmppath;"]
        assert value.post.texts() == ["*path = MonoUtil::wstringToMono(tmppath);"]

    def test_plain_struct_input_dereferenced(self):
        value = self.engine.marshal_parameter(VarInfo("color", "Color"), "setColor")

        assert value.arg == "color"
        assert value.forward == "*color"
        assert not value.pre

    def test_complex_struct_input_converted(self):
        value = self.engine.marshal_parameter(VarInfo("desc", "TEXTURE_DESC", COMPLEX), "create")

        assert value.pre.texts() == [
            "TEXTURE_DESC tmpdesc;",
            "tmpdesc = ScriptTEXTURE_DESC::fromInterop(*desc);",
        ]
        assert value.forward == "tmpdesc"

    def test_complex_struct_return(self):
        value = self.engine.marshal_parameter(VarInfo("", "TEXTURE_DESC", COMPLEX), "getDesc", return_value=True)

        assert value.pre.texts() == ["TEXTURE_DESC tmp__output;"]
        assert value.post.texts() == ["*__output = ScriptTEXTURE_DESC::toInterop(tmp__output);"]

    def test_resource_input(self):
        flags = TypeFlags.OWNED_BY_RESOURCE_HANDLE
        value = self.engine.marshal_parameter(VarInfo("texture", "Texture", flags), "setTexture")

        assert value.pre.texts() == [
            "ResourceHandle<Texture> tmptexture;",
            "ScriptTexture* scripttexture;",
            "scripttexture = ScriptTexture::toNative(texture);",
            "tmptexture = scripttexture->getHandle();",
        ]
        assert value.forward == "tmptexture"

    def test_resource_return(self):
        flags = TypeFlags.OWNED_BY_RESOURCE_HANDLE
        value = self.engine.marshal_parameter(VarInfo("", "Texture", flags), "getTexture", return_value=True)

        assert value.pre.texts() == ["ResourceHandle<Texture> tmp__output;"]
        assert value.post.texts() == [
            "ScriptResourceBase* script__output;",
            "script__output = ScriptResourceManager::instance().getScriptResource(tmp__output, true);",
            "__output = script__output->getManagedInstance();",
        ]

    def test_class_return_creates_wrapper(self):
        flags = TypeFlags.OWNED_BY_SHARED_POINTER
        value = self.engine.marshal_parameter(VarInfo("", "RenderTarget", flags), "getTarget", return_value=True)

        assert value.pre.texts() == ["SPtr<RenderTarget> tmp__output;"]
        assert value.post.texts() == ["__output = ScriptRenderTarget::create(tmp__output);"]

    def test_class_raw_pointer_input(self):
        flags = TypeFlags.OWNED_BY_RAW_POINTER
        value = self.engine.marshal_parameter(VarInfo("target", "RenderTarget", flags), "setTarget")

        assert value.pre.texts()[-1] == "tmptarget = scripttarget->getInternal();"
        assert value.forward == "tmptarget.get()"

    def test_managed_object_output(self):
        value = self.engine.marshal_parameter(VarInfo("obj", "ScriptObjectBase", OUT), "getObject")

        assert value.pre.texts() == ["ScriptObjectBase* tmpobj;"]
        assert value.post.texts() == ["*obj = tmpobj->getManagedInstance();"]

    def test_managed_object_input_rejected(self):
        self.engine.marshal_parameter(VarInfo("obj", "ScriptObjectBase"), "setObject")

        assert len(self.context.diagnostics.errors) == 1
        assert '"obj"' in self.context.diagnostics.errors[0].message


class TestArrayMarshaling:

    @pytest.fixture(autouse=True)
    def setup(self, context):
        self.engine = MarshalingEngine(TypeMapper(context))

    def test_builtin_array_input(self):
        value = self.engine.marshal_parameter(VarInfo("values", "int", REF | TypeFlags.IS_ARRAY), "setValues")

        assert value.pre.texts() == [
            "ScriptArray arrayvalues(values);",
            "Vector<int> vecvalues(arrayvalues.size());",
            "for(int i = 0; i < (int)arrayvalues.size(); i++)",
            "{",
            "vecvalues[i] = arrayvalues.get<int>(i);",
            "}",
        ]
        assert value.forward == "vecvalues"

    def test_array_input_not_last_adds_blank_line(self):
        var = VarInfo("values", "int", REF | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "setValues", is_last=False)

        assert value.pre.texts()[-1] == ""

    def test_array_output(self):
        var = VarInfo("values", "int", OUT | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "getValues")

        assert value.pre.texts() == ["Vector<int> vecvalues;"]
        post = value.post.texts()
        assert post[0] == "ScriptArray arrayvalues = ScriptArray::create<int>((int)vecvalues.size());"
        assert "arrayvalues.set(i, vecvalues[i]);" in post
        assert post[-1] == "*values = arrayvalues.getInternal();"

    def test_array_return(self):
        var = VarInfo("", "String", REF | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "getNames", return_value=True)

        assert value.arg == "vec__output"
        assert value.post.texts()[-1] == "__output = array__output.getInternal();"

    def test_enum_array_converted_through_underlying_type(self):
        var = VarInfo("formats", "PixelFormat", REF | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "setFormats")

        assert "vecformats[i] = (PixelFormat)arrayformats.get<UINT32>(i);" in value.pre.texts()

    def test_complex_struct_array_unboxed_and_converted(self):
        var = VarInfo("descs", "TEXTURE_DESC", COMPLEX | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "setDescs")

        expected = ("vecdescs[i] = ScriptTEXTURE_DESC::fromInterop("
                    "ScriptTEXTURE_DESC::unbox(arraydescs.get<MonoObject*>(i)));")
        assert expected in value.pre.texts()

    def test_resource_array_input_skips_missing_wrappers(self):
        var = VarInfo("textures", "Texture", TypeFlags.OWNED_BY_RESOURCE_HANDLE | TypeFlags.IS_ARRAY)
        value = self.engine.marshal_parameter(var, "setTextures")

        texts = value.pre.texts()
        assert "scripttextures = ScriptTexture::toNative(arraytextures.get<MonoObject*>(i));" in texts
        assert "if(scripttextures != nullptr)" in texts
        assert "vectextures[i] = scripttextures->getHandle();" in texts
        assert value.forward == "vectextures"


class TestFieldAndCallbackConversion:

    @pytest.fixture(autouse=True)
    def setup(self, context):
        self.engine = MarshalingEngine(TypeMapper(context))

    def test_plain_field_copied(self):
        value = self.engine.field_conversion(VarInfo("width", "UINT32"), to_interop=True)

        assert value.arg == "value.width"
        assert not value.pre

    def test_string_field_to_interop(self):
        value = self.engine.field_conversion(VarInfo("name", "String"), to_interop=True)

        assert value.arg == "tmpname"
        assert value.pre.texts() == ["MonoString* tmpname;", "tmpname = MonoUtil::stringToMono(value.name);"]

    def test_string_field_from_interop(self):
        value = self.engine.field_conversion(VarInfo("name", "String"), to_interop=False)

        assert value.pre.texts() == ["String tmpname;", "tmpname = MonoUtil::monoToString(value.name);"]

    def test_complex_struct_field(self):
        value = self.engine.field_conversion(VarInfo("desc", "TEXTURE_DESC", COMPLEX), to_interop=True)

        assert value.pre.texts() == [
            "__TEXTURE_DESCInterop tmpdesc;",
            "tmpdesc = ScriptTEXTURE_DESC::toInterop(value.desc);",
        ]

    def test_array_field_to_interop(self):
        value = self.engine.field_conversion(VarInfo("values", "int", REF | TypeFlags.IS_ARRAY), to_interop=True)

        texts = value.pre.texts()
        assert texts[0] == "MonoArray* vecvalues;"
        assert texts[1] == "ScriptArray arrayvalues = ScriptArray::create<int>((int)value.values.size());"
        assert texts[-1] == "vecvalues = arrayvalues.getInternal();"
        assert value.arg == "vecvalues"

    def test_builtin_callback_argument(self):
        value = self.engine.callback_argument("p0", VarInfo("width", "UINT32"), "onResized")

        assert value.forward == "p0"
        assert not value.pre

    def test_raw_pointer_callback_argument_dereferenced(self):
        value = self.engine.callback_argument("p0", VarInfo("width", "UINT32", TypeFlags.OWNED_BY_RAW_POINTER),
                                              "onResized")

        assert value.forward == "*p0"

    def test_string_callback_argument(self):
        value = self.engine.callback_argument("p0", VarInfo("name", "String"), "onRenamed")

        assert value.pre.texts() == ["MonoString* tmpp0;", "tmpp0 = MonoUtil::stringToMono(p0);"]
        assert value.forward == "tmpp0"

    def test_complex_struct_callback_argument(self):
        value = self.engine.callback_argument("p0", VarInfo("desc", "TEXTURE_DESC", COMPLEX), "onChanged")

        assert value.pre.texts() == [
            "__TEXTURE_DESCInterop tmpp0;",
            "tmpp0 = ScriptTEXTURE_DESC::toInterop(p0);",
        ]
        assert value.forward == "&tmpp0"

    def test_plain_struct_callback_argument_by_address(self):
        value = self.engine.callback_argument("p0", VarInfo("color", "Color"), "onColorChanged")

        assert value.forward == "&p0"

    def test_resource_callback_argument(self):
        var = VarInfo("texture", "Texture", TypeFlags.OWNED_BY_RESOURCE_HANDLE)
        value = self.engine.callback_argument("p0", var, "onLoaded")

        assert value.pre.texts()[-1] == "tmpp0 = scriptp0->getManagedInstance();"
        assert value.forward == "tmpp0"

    def test_array_callback_argument(self):
        var = VarInfo("names", "String", REF | TypeFlags.IS_ARRAY)
        value = self.engine.callback_argument("p0", var, "onNames")

        assert value.pre.texts()[0] == "MonoArray* vecp0;"
        assert value.forward == "vecp0"
