"""Build configuration resolution and artifact generation for C project scaffolding."""

from .build import BuildEngine, BuildPlan, ProjectArtifacts
from .command_runner import (
    CommandError,
    CommandResult,
    CommandRunner,
    RecordingCommandRunner,
    SubprocessCommandRunner,
)
from .commands import SynthesizedCommands, synthesize, with_target
from .compilation_database import create_compilation_database, render_compilation_database
from .config_loader import (
    BuildCommands,
    BuildCompiler,
    BuildConfig,
    BuildLinker,
    Config,
    Profile,
    StructureSpec,
    default_config,
    default_config_path,
    load,
    load_file,
    load_or_create,
    save,
    save_file,
)
from .errors import GenerationFailure, InvalidConfig, ProfileNotFound, XyloError
from .makefile import generate_makefile
from .profiles import available_profiles, resolve

__all__ = [
    "BuildCommands",
    "BuildCompiler",
    "BuildConfig",
    "BuildEngine",
    "BuildLinker",
    "BuildPlan",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "Config",
    "GenerationFailure",
    "InvalidConfig",
    "Profile",
    "ProfileNotFound",
    "ProjectArtifacts",
    "RecordingCommandRunner",
    "StructureSpec",
    "SubprocessCommandRunner",
    "SynthesizedCommands",
    "XyloError",
    "available_profiles",
    "create_compilation_database",
    "default_config",
    "default_config_path",
    "generate_makefile",
    "load",
    "load_file",
    "load_or_create",
    "render_compilation_database",
    "resolve",
    "save",
    "save_file",
    "synthesize",
    "with_target",
]
