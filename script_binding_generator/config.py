"""
XML configuration file parsing for the script bindings generator
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_EDITOR_NAMESPACE, DEFAULT_ENGINE_NAMESPACE


@dataclass
class BindingConfig:
    """Configuration for script bindings generation"""
    model_file: str = ""
    cpp_output: str = ""
    cs_engine_output: str = ""
    cs_editor_output: str = ""
    engine_namespace: str = DEFAULT_ENGINE_NAMESPACE
    editor_namespace: str = DEFAULT_EDITOR_NAMESPACE


def _resolve(base_dir: Path, value: str) -> str:
    path = Path(value.strip())
    if not path.is_absolute():
        path = base_dir / path
    return str(path)


def parse_config_file(config_path):
    """Parse XML configuration file and return BindingConfig object

    Relative paths are resolved against the folder holding the config file.
    """
    try:
        tree = ET.parse(config_path)
        root = tree.getroot()

        if root.tag != "bindings":
            raise ValueError(f"Expected root element 'bindings', got '{root.tag}'")

        base_dir = Path(config_path).resolve().parent
        config = BindingConfig()
        config.engine_namespace = root.get("engine_namespace", DEFAULT_ENGINE_NAMESPACE).strip()
        config.editor_namespace = root.get("editor_namespace", DEFAULT_EDITOR_NAMESPACE).strip()

        model = root.find("model")
        if model is not None:
            model_file = model.get("file")
            if not model_file:
                raise ValueError("Model element missing 'file' attribute")
            config.model_file = _resolve(base_dir, model_file)

        output = root.find("output")
        if output is not None:
            for attribute in ("cpp", "cs_engine", "cs_editor"):
                value = output.get(attribute)
                if not value:
                    raise ValueError(f"Output element missing '{attribute}' attribute")

            config.cpp_output = _resolve(base_dir, output.get("cpp"))
            config.cs_engine_output = _resolve(base_dir, output.get("cs_engine"))
            config.cs_editor_output = _resolve(base_dir, output.get("cs_editor"))

        return config

    except ET.ParseError as e:
        raise ValueError(f"XML parsing error: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
