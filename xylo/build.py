"""Build planning, artifact generation and the ``make build`` step."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List
import logging

from .command_runner import CommandResult, CommandRunner
from .commands import SynthesizedCommands, synthesize, with_target
from .compilation_database import render_compilation_database
from .config_loader import BuildConfig, Config, Profile
from .makefile import generate_makefile
from .profiles import resolve


logger = logging.getLogger(__name__)

MAKEFILE_NAME = "Makefile"
COMPILE_COMMANDS_NAME = "compile_commands.json"
BUILD_TARGET = "build"


@dataclass(frozen=True, slots=True)
class BuildPlan:
    project_path: Path
    profile: Profile
    build: BuildConfig
    commands: SynthesizedCommands


@dataclass(frozen=True, slots=True)
class ProjectArtifacts:
    makefile: str
    compile_commands: str


class BuildEngine:
    def __init__(
        self,
        *,
        config: Config,
        command_runner: CommandRunner,
        make_program: str = "make",
    ) -> None:
        self._config = config
        self._command_runner = command_runner
        self._make_program = make_program

    def plan(
        self,
        project_path: Path | str,
        *,
        profile: str | None = None,
        target: str | None = None,
    ) -> BuildPlan:
        selected = resolve(self._config, profile)
        build = with_target(selected.build, target)
        return BuildPlan(
            project_path=Path(project_path).expanduser().resolve(),
            profile=selected,
            build=build,
            commands=synthesize(build),
        )

    def generate(self, plan: BuildPlan) -> ProjectArtifacts:
        makefile = generate_makefile(
            plan.build,
            plan.commands.compile,
            plan.commands.link,
            plan.profile.commands,
        )
        compile_commands = render_compilation_database(plan.build, plan.commands.compile, plan.project_path)
        return ProjectArtifacts(makefile=makefile, compile_commands=compile_commands)

    def write(self, plan: BuildPlan, artifacts: ProjectArtifacts) -> List[Path]:
        """Overwrite the generated files in the project root."""

        if not plan.project_path.is_dir():
            raise FileNotFoundError(f"Project directory not found: {plan.project_path}")
        written: List[Path] = []
        for name, content in ((MAKEFILE_NAME, artifacts.makefile), (COMPILE_COMMANDS_NAME, artifacts.compile_commands)):
            path = plan.project_path / name
            with path.open("w", encoding="utf-8") as handle:
                handle.write(content)
            logger.debug("Wrote %s", path)
            written.append(path)
        return written

    def build(self, plan: BuildPlan) -> CommandResult:
        """Regenerate the artifacts and run the ``build`` target.

        The exit status and captured output are returned unchanged; a failing
        build does not raise.
        """

        self.write(plan, self.generate(plan))
        command = [self._make_program, BUILD_TARGET]
        logger.info("Building profile '%s' in %s", plan.profile.name, plan.project_path)
        return self._command_runner.run(command, cwd=plan.project_path, check=False)
