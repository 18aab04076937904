import importlib.util
import sys
from pathlib import Path


def load_module(script_path: Path, module_name: str = "module"):
    spec = importlib.util.spec_from_file_location(module_name, script_path)
    assert spec is not None, f"Can't import module at '{script_path}'"
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def get_version() -> str:
    return (Path(__file__).parent.parent / "VERSION").read_text().strip()
