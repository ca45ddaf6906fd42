"""
Main script bindings generator orchestration
"""

import time
from dataclasses import dataclass
from pathlib import Path

from .code_generators import CodeGenerator, OutputBuilder
from .constants import (
    COMPONENT_LOOKUP_FILE,
    DEFAULT_EDITOR_NAMESPACE,
    DEFAULT_ENGINE_NAMESPACE,
    FILE_TYPE_FOLDERS,
    TIMESTAMP_FILE,
)
from .context import GeneratorContext
from .cpp_emitter import NativeEmitter
from .postprocessor import PostProcessor, generated_header_name
from .type_mapper import TypeMapper

CS_ENGINE = "cs_engine"
CS_EDITOR = "cs_editor"


@dataclass
class GeneratedFile:
    """One output artifact; bucket selects the folder it is written to"""
    bucket: str
    name: str
    content: str


class ScriptBindingsGenerator:
    """Main orchestrator for generating script bindings from a populated context"""

    def __init__(self, context: GeneratorContext, engine_namespace: str = DEFAULT_ENGINE_NAMESPACE,
                 editor_namespace: str = DEFAULT_EDITOR_NAMESPACE):
        self.context = context
        self.engine_namespace = engine_namespace
        self.editor_namespace = editor_namespace
        self.type_mapper = TypeMapper(context)
        self.code_generator = CodeGenerator(self.type_mapper)
        self.native_emitter = NativeEmitter(context, engine_namespace, editor_namespace)

    def generate(self) -> list[GeneratedFile]:
        """Run every cross-reference pass, then build all output files

        Raises:
            FatalGenerationError: If the model reaches an unsupported
                category/flag combination
        """
        PostProcessor(self.context, self.type_mapper).run()

        files = []
        for module in self.context.modules.values():
            prefix = "editor" if module.in_editor else "engine"

            if module.classes or module.structs:
                files.append(GeneratedFile(f"{prefix}_h", generated_header_name(module.name),
                                           self.native_emitter.module_header(module)))
                files.append(GeneratedFile(f"{prefix}_cpp", f"BsScript{module.name}.generated.cpp",
                                           self.native_emitter.module_source(module)))

            if module.classes or module.structs or module.enums:
                parts = [self.code_generator.generate_class(c) for c in module.classes]
                parts += [self.code_generator.generate_struct(s) for s in module.structs]
                parts += [self.code_generator.generate_enum(e) for e in module.enums]

                namespace = self.editor_namespace if module.in_editor else self.engine_namespace
                content = OutputBuilder.build(namespace, parts, module.in_editor, self.engine_namespace)
                files.append(GeneratedFile(CS_EDITOR if module.in_editor else CS_ENGINE,
                                           f"{module.name}.generated.cs", content))

        files.append(GeneratedFile("engine_h", COMPONENT_LOOKUP_FILE, self.native_emitter.component_lookup()))
        return files

    def write_files(self, files: list[GeneratedFile], cpp_output: str, cs_engine_output: str,
                    cs_editor_output: str) -> list[Path]:
        """Write generated files into their bucket folders

        Args:
            files: Output of generate()
            cpp_output: Root folder of the native buckets
            cs_engine_output: Folder for engine C# files
            cs_editor_output: Folder for editor C# files

        Returns:
            Paths of all written files, timestamp file included
        """
        folders = {bucket: Path(cpp_output) / sub for bucket, sub in FILE_TYPE_FOLDERS.items()}
        folders[CS_ENGINE] = Path(cs_engine_output)
        folders[CS_EDITOR] = Path(cs_editor_output)

        for folder in folders.values():
            folder.mkdir(parents=True, exist_ok=True)

        written = []
        timestamp = Path(cpp_output) / TIMESTAMP_FILE
        timestamp.write_text(str(int(time.time() * 1000)))
        written.append(timestamp)

        for generated in files:
            path = folders[generated.bucket] / generated.name
            path.write_text(generated.content)
            written.append(path)
            print(f"Generated {generated.bucket} file: {path}")

        return written
