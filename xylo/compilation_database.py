"""``compile_commands.json`` generation for clang tooling."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List
import json

from .config_loader import BuildConfig
from .makefile import source_path


def create_compilation_database(
    build: BuildConfig,
    compile_command: str,
    project_path: Path | str,
) -> List[Dict[str, str]]:
    """Return the compilation database entries for the project.

    Only the main translation unit is described; projects with several
    sources get a single entry as well.
    """

    path = Path(project_path)
    if not path.is_absolute():
        raise ValueError(f"Project path must be absolute: {path}")
    return [
        {
            "directory": str(path),
            "command": compile_command,
            "file": source_path(build),
        }
    ]


def render_compilation_database(
    build: BuildConfig,
    compile_command: str,
    project_path: Path | str,
) -> str:
    entries = create_compilation_database(build, compile_command, project_path)
    return json.dumps(entries, separators=(",", ":")).strip()
