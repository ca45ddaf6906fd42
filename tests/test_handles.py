"""
Tests for handle lookup and creation rules
"""

import pytest

from script_binding_generator import handles
from script_binding_generator.code_writer import CodeBlock
from script_binding_generator.errors import FatalGenerationError
from script_binding_generator.handles import RESOLUTION_RULES, Resolution
from script_binding_generator.model import TypeCategory


class TestNativeToManaged:

    @pytest.fixture(autouse=True)
    def setup(self, context):
        self.diagnostics = context.diagnostics
        self.block = CodeBlock()

    def test_resource_lookup_or_create(self):
        expr = handles.native_to_managed(TypeCategory.RESOURCE, "ScriptTexture", "scripttex", "tmptex",
                                         self.block, self.diagnostics)

        assert self.block.texts() == [
            "ScriptResourceBase* scripttex;",
            "scripttex = ScriptResourceManager::instance().getScriptResource(tmptex, true);",
        ]
        assert expr == "scripttex->getManagedInstance()"

    def test_component_lookup(self):
        expr = handles.native_to_managed(TypeCategory.COMPONENT, "ScriptCCamera", "scriptcam", "tmpcam",
                                         self.block, self.diagnostics)

        assert self.block.texts() == [
            "ScriptCCamera* scriptcam;",
            "scriptcam = ScriptGameObjectManager::instance().getBuiltinScriptComponent(tmpcam);",
        ]
        assert expr == "scriptcam->getManagedInstance()"

    def test_scene_object_lookup_or_create(self):
        handles.native_to_managed(TypeCategory.SCENE_OBJECT, "ScriptSceneObject", "scriptso", "tmpso",
                                  self.block, self.diagnostics)

        assert "getOrCreateScriptSceneObject(tmpso)" in self.block.texts()[1]

    def test_class_always_creates(self):
        expr = handles.native_to_managed(TypeCategory.CLASS, "ScriptRenderTarget", "scriptrt", "tmprt",
                                         self.block, self.diagnostics)

        assert expr == "ScriptRenderTarget::create(tmprt)"
        assert not self.block

    def test_managed_object_existing_instance(self):
        expr = handles.native_to_managed(TypeCategory.MANAGED_OBJECT, "", "scripto", "tmpo",
                                         self.block, self.diagnostics)

        assert expr == "tmpo->getManagedInstance()"

    def test_builtin_has_no_wrapper(self):
        with pytest.raises(FatalGenerationError):
            handles.native_to_managed(TypeCategory.BUILTIN, "", "scriptx", "x", self.block, self.diagnostics)


class TestManagedToNative:

    def test_resource_handle_accessor(self):
        block = CodeBlock()
        expr = handles.managed_to_native(TypeCategory.RESOURCE, "ScriptTexture", "scripttex", "tex", block)

        assert block.texts() == ["ScriptTexture* scripttex;", "scripttex = ScriptTexture::toNative(tex);"]
        assert expr == "scripttex->getHandle()"

    def test_class_internal_accessor(self):
        block = CodeBlock()
        expr = handles.managed_to_native(TypeCategory.CLASS, "ScriptRenderTarget", "scriptrt", "rt", block)

        assert expr == "scriptrt->getInternal()"

    def test_resolution_rules(self):
        assert RESOLUTION_RULES[TypeCategory.RESOURCE] == Resolution.LOOKUP_OR_CREATE
        assert RESOLUTION_RULES[TypeCategory.COMPONENT] == Resolution.LOOKUP
        assert RESOLUTION_RULES[TypeCategory.CLASS] == Resolution.ALWAYS_CREATE
        assert RESOLUTION_RULES[TypeCategory.MANAGED_OBJECT] == Resolution.EXISTING_INSTANCE
