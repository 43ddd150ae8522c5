"""Compiler and linker invocation strings derived from a build configuration."""
from __future__ import annotations

from dataclasses import dataclass, replace

from .config_loader import BuildCompiler, BuildConfig


@dataclass(frozen=True, slots=True)
class SynthesizedCommands:
    compile: str
    link: str | None = None


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def _tool_args(tool: BuildCompiler, target: str | None) -> str:
    if target is None:
        return tool.args
    return _join(f"-target {target}", tool.args)


def _invocation(tool: BuildCompiler, main_filename: str, target: str | None) -> str:
    return _join(tool.exec, main_filename, _tool_args(tool, target))


def synthesize(build: BuildConfig) -> SynthesizedCommands:
    """Build the compile command and, when a linker is configured, the link command.

    Argument strings are concatenated verbatim; nothing is quoted or split.
    """

    compile_command = _invocation(build.compiler, build.main_filename, build.target)
    link_command = None
    if build.linker is not None:
        link_command = _invocation(build.linker, build.main_filename, build.target)
    return SynthesizedCommands(compile=compile_command, link=link_command)


def with_target(build: BuildConfig, target: str | None) -> BuildConfig:
    """Return ``build`` with its target triple replaced when ``target`` is given."""

    if not target:
        return build
    return replace(build, target=target)
