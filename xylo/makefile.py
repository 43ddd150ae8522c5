"""Makefile rendering for the single-translation-unit project layout."""
from __future__ import annotations

from pathlib import PurePosixPath
from typing import List

from .config_loader import BuildCommands, BuildConfig


def source_stem(build: BuildConfig) -> str:
    """Return the bare name of the main source, e.g. ``main`` for ``src/main.c``."""

    return PurePosixPath(build.main_filename).stem


def object_path(build: BuildConfig) -> str:
    return f"target/{source_stem(build)}.o"


def source_path(build: BuildConfig) -> str:
    return f"src/{source_stem(build)}.c"


def _rule(target: str, dependency: str | None, recipe: List[str]) -> List[str]:
    header = f"{target}: {dependency}" if dependency else f"{target}:"
    return [header, *(f"\t{line}" for line in recipe)]


def generate_makefile(
    build: BuildConfig,
    compile_command: str,
    link_command: str | None = None,
    commands: BuildCommands | None = None,
) -> str:
    """Render the Makefile text.

    The object rule runs the link command (or the compile command when there
    is no separate link pass). The ``build`` recipe is the pre-build hook, the
    compile command and the post-build hook, in that order.
    """

    hooks = commands or BuildCommands()
    obj = object_path(build)

    object_rule = _rule(obj, source_path(build), [link_command or compile_command])

    build_recipe: List[str] = []
    if hooks.pre_build:
        build_recipe.append(hooks.pre_build)
    build_recipe.append(compile_command)
    if hooks.post_build:
        build_recipe.append(hooks.post_build)

    sections = [object_rule, _rule("build", obj, build_recipe)]
    if hooks.clean:
        sections.append(_rule("clean", None, [hooks.clean]))

    return "\n\n".join("\n".join(section) for section in sections) + "\n"
