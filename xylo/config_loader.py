"""Configuration model, loading and serialization."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple
import json
import logging
import os
import tomllib

import tomli_w

from .errors import GenerationFailure, InvalidConfig

try:  # Optional dependency for YAML support
    import yaml
except ModuleNotFoundError:  # pragma: no cover - exercised when PyYAML absent
    yaml = None


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "xylo.toml"
DEFAULT_PROFILE_NAME = "default"

ConfigParser = Callable[[str], Any]
ConfigDumper = Callable[[Mapping[str, Any]], str]


def _raise_yaml_missing() -> Any:
    raise RuntimeError("PyYAML is required to handle YAML configuration files. Install with `pip install PyYAML`.")


def _dump_json(data: Mapping[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"


def _dump_yaml(data: Mapping[str, Any]) -> str:
    if yaml is None:
        return _raise_yaml_missing()
    return yaml.safe_dump(dict(data), sort_keys=False)


_FILE_PARSERS: Dict[str, ConfigParser] = {
    ".toml": tomllib.loads,
    ".json": json.loads,
    ".yaml": lambda text: yaml.safe_load(text) if yaml else _raise_yaml_missing(),
    ".yml": lambda text: yaml.safe_load(text) if yaml else _raise_yaml_missing(),
}

_FILE_DUMPERS: Dict[str, ConfigDumper] = {
    ".toml": tomli_w.dumps,
    ".json": _dump_json,
    ".yaml": _dump_yaml,
    ".yml": _dump_yaml,
}

_DECODE_ERRORS: Tuple[type[BaseException], ...] = (tomllib.TOMLDecodeError, json.JSONDecodeError)
if yaml is not None:
    _DECODE_ERRORS = (*_DECODE_ERRORS, yaml.YAMLError)


def _require_mapping(value: Any, *, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidConfig(f"{field_name} must be a table")
    return value


def _check_keys(data: Mapping[str, Any], *, allowed: Iterable[str], field_name: str) -> None:
    unknown = {str(key) for key in data.keys()} - set(allowed)
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise InvalidConfig(f"{field_name} contains unknown keys: {joined}")


def _require_str(data: Mapping[str, Any], key: str, *, field_name: str) -> str:
    if key not in data:
        raise InvalidConfig(f"{field_name}.{key} is required")
    value = data[key]
    if not isinstance(value, str):
        raise InvalidConfig(f"{field_name}.{key} must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str, *, field_name: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidConfig(f"{field_name}.{key} must be a string")
    return value


def _require_paths(data: Mapping[str, Any], key: str, *, field_name: str) -> Tuple[Path, ...]:
    if key not in data:
        raise InvalidConfig(f"{field_name}.{key} is required")
    value = data[key]
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise InvalidConfig(f"{field_name}.{key} must be an array of paths")
    paths: List[Path] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise InvalidConfig(f"{field_name}.{key} entries must be non-empty strings")
        paths.append(Path(item))
    return tuple(paths)


@dataclass(frozen=True, slots=True)
class BuildCompiler:
    exec: str
    args: str = ""

    @classmethod
    def from_mapping(cls, data: Any, *, field_name: str) -> "BuildCompiler":
        data = _require_mapping(data, field_name=field_name)
        _check_keys(data, allowed={"exec", "args"}, field_name=field_name)
        executable = _require_str(data, "exec", field_name=field_name)
        if not executable.strip():
            raise InvalidConfig(f"{field_name}.exec cannot be empty")
        return cls(
            exec=executable,
            args=_require_str(data, "args", field_name=field_name),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {"exec": self.exec, "args": self.args}


@dataclass(frozen=True, slots=True)
class BuildLinker(BuildCompiler):
    """Executable and arguments of a separate link pass."""


@dataclass(frozen=True, slots=True)
class BuildCommands:
    """Shell hooks run around the compile step."""

    pre_build: str | None = None
    post_build: str | None = None
    clean: str | None = None

    @classmethod
    def from_mapping(cls, data: Any, *, field_name: str) -> "BuildCommands":
        data = _require_mapping(data, field_name=field_name)
        _check_keys(data, allowed={"pre_build", "post_build", "clean"}, field_name=field_name)
        return cls(
            pre_build=_optional_str(data, "pre_build", field_name=field_name),
            post_build=_optional_str(data, "post_build", field_name=field_name),
            clean=_optional_str(data, "clean", field_name=field_name),
        )

    def to_mapping(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {}
        if self.pre_build is not None:
            mapping["pre_build"] = self.pre_build
        if self.post_build is not None:
            mapping["post_build"] = self.post_build
        if self.clean is not None:
            mapping["clean"] = self.clean
        return mapping


@dataclass(frozen=True, slots=True)
class BuildConfig:
    compiler: BuildCompiler
    main_filename: str
    linker: BuildLinker | None = None
    target: str | None = None

    @classmethod
    def from_mapping(cls, data: Any, *, field_name: str) -> "BuildConfig":
        data = _require_mapping(data, field_name=field_name)
        _check_keys(data, allowed={"compiler", "linker", "main_filename", "target"}, field_name=field_name)
        if "compiler" not in data:
            raise InvalidConfig(f"{field_name}.compiler is required")
        compiler = BuildCompiler.from_mapping(data["compiler"], field_name=f"{field_name}.compiler")
        linker = None
        if data.get("linker") is not None:
            linker = BuildLinker.from_mapping(data["linker"], field_name=f"{field_name}.linker")
        main_filename = _require_str(data, "main_filename", field_name=field_name)
        if not main_filename.strip():
            raise InvalidConfig(f"{field_name}.main_filename cannot be empty")
        target = _optional_str(data, "target", field_name=field_name)
        if target is not None and not target.strip():
            raise InvalidConfig(f"{field_name}.target cannot be empty")
        return cls(
            compiler=compiler,
            main_filename=main_filename,
            linker=linker,
            target=target,
        )

    def to_mapping(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {"main_filename": self.main_filename}
        if self.target is not None:
            mapping["target"] = self.target
        mapping["compiler"] = self.compiler.to_mapping()
        if self.linker is not None:
            mapping["linker"] = self.linker.to_mapping()
        return mapping


@dataclass(frozen=True, slots=True)
class StructureSpec:
    """Directories and files the scaffolding layer creates, in order."""

    directories: Tuple[Path, ...] = ()
    files: Tuple[Path, ...] = ()

    @classmethod
    def from_mapping(cls, data: Any, *, field_name: str) -> "StructureSpec":
        data = _require_mapping(data, field_name=field_name)
        _check_keys(data, allowed={"directories", "files"}, field_name=field_name)
        return cls(
            directories=_require_paths(data, "directories", field_name=field_name),
            files=_require_paths(data, "files", field_name=field_name),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "directories": [path.as_posix() for path in self.directories],
            "files": [path.as_posix() for path in self.files],
        }


@dataclass(frozen=True, slots=True)
class Profile:
    name: str
    build: BuildConfig
    structure: StructureSpec
    commands: BuildCommands | None = None

    @classmethod
    def from_mapping(cls, data: Any, *, field_name: str) -> "Profile":
        data = _require_mapping(data, field_name=field_name)
        _check_keys(data, allowed={"name", "build", "structure", "commands"}, field_name=field_name)
        name = _require_str(data, "name", field_name=field_name)
        if not name.strip():
            raise InvalidConfig(f"{field_name}.name cannot be empty")
        return cls._from_sections(name, data, field_name=field_name)

    @classmethod
    def _from_sections(cls, name: str, data: Mapping[str, Any], *, field_name: str) -> "Profile":
        for section in ("build", "structure"):
            if section not in data:
                raise InvalidConfig(f"{field_name}.{section} is required")
        commands = None
        if data.get("commands") is not None:
            commands = BuildCommands.from_mapping(data["commands"], field_name=f"{field_name}.commands")
        return cls(
            name=name,
            build=BuildConfig.from_mapping(data["build"], field_name=f"{field_name}.build"),
            structure=StructureSpec.from_mapping(data["structure"], field_name=f"{field_name}.structure"),
            commands=commands,
        )

    def to_mapping(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {
            "name": self.name,
            "build": self.build.to_mapping(),
            "structure": self.structure.to_mapping(),
        }
        if self.commands is not None:
            mapping["commands"] = self.commands.to_mapping()
        return mapping


@dataclass(frozen=True, slots=True)
class Config:
    """A configuration document: named profiles plus the default profile name.

    ``default_profile`` is not checked against ``profiles`` here; a dangling
    reference is reported when the profile is resolved.
    """

    default_profile: str
    profiles: Tuple[Profile, ...] = ()

    @classmethod
    def from_mapping(cls, data: Any) -> "Config":
        data = _require_mapping(data, field_name="<root>")
        if "profile" in data or "default_profile" in data:
            return cls._from_profiles(data)
        if "build" in data:
            return cls._from_legacy(data)
        raise InvalidConfig("expected either a [[profile]] array or a [build] table")

    @classmethod
    def _from_profiles(cls, data: Mapping[str, Any]) -> "Config":
        _check_keys(data, allowed={"default_profile", "profile"}, field_name="<root>")
        default_profile = _require_str(data, "default_profile", field_name="<root>")
        raw_profiles = data.get("profile")
        if raw_profiles is None:
            raise InvalidConfig("profile is required")
        if isinstance(raw_profiles, (str, bytes, Mapping)) or not isinstance(raw_profiles, (list, tuple)):
            raise InvalidConfig("profile must be an array of tables")

        profiles: List[Profile] = []
        seen: set[str] = set()
        for index, entry in enumerate(raw_profiles):
            profile = Profile.from_mapping(entry, field_name=f"profile[{index}]")
            if profile.name in seen:
                raise InvalidConfig(f"duplicate profile name '{profile.name}'")
            seen.add(profile.name)
            profiles.append(profile)
        return cls(default_profile=default_profile, profiles=tuple(profiles))

    @classmethod
    def _from_legacy(cls, data: Mapping[str, Any]) -> "Config":
        _check_keys(data, allowed={"build", "structure", "commands"}, field_name="<root>")
        logger.debug("Migrating single-build configuration to profile '%s'", DEFAULT_PROFILE_NAME)
        profile = Profile._from_sections(DEFAULT_PROFILE_NAME, data, field_name="<root>")
        return cls(default_profile=DEFAULT_PROFILE_NAME, profiles=(profile,))

    def profile_names(self) -> List[str]:
        return [profile.name for profile in self.profiles]

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "default_profile": self.default_profile,
            "profile": [profile.to_mapping() for profile in self.profiles],
        }


def default_config() -> Config:
    """Return the built-in configuration written on first run."""

    profile = Profile(
        name=DEFAULT_PROFILE_NAME,
        build=BuildConfig(
            compiler=BuildCompiler(exec="clang", args="-Iinclude -o target/main"),
            main_filename="src/main.c",
        ),
        structure=StructureSpec(
            directories=(Path("src"), Path("target"), Path("include")),
            files=(Path("src/main.c"),),
        ),
    )
    return Config(default_profile=DEFAULT_PROFILE_NAME, profiles=(profile,))


def default_config_path() -> Path:
    override = os.environ.get("XYLO_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "xylo" / CONFIG_FILENAME


def _parse(text: str, *, suffix: str) -> Config:
    parser = _FILE_PARSERS.get(suffix)
    if parser is None:
        supported = ", ".join(sorted(_FILE_PARSERS))
        raise ValueError(f"Unsupported configuration file extension: {suffix}. Supported: {supported}")
    try:
        data = parser(text)
    except _DECODE_ERRORS as exc:
        raise InvalidConfig(str(exc)) from exc
    return Config.from_mapping(data)


def _render(config: Config, *, suffix: str) -> str:
    dumper = _FILE_DUMPERS.get(suffix)
    if dumper is None:
        supported = ", ".join(sorted(_FILE_DUMPERS))
        raise ValueError(f"Unsupported configuration file extension: {suffix}. Supported: {supported}")
    mapping = config.to_mapping()
    try:
        return dumper(mapping)
    except (TypeError, ValueError) as exc:
        raise GenerationFailure(f"unable to serialize configuration: {exc}") from exc


def load(source: str) -> Config:
    """Parse TOML ``source`` into a :class:`Config`."""

    return _parse(source, suffix=".toml")


def save(config: Config) -> str:
    """Render ``config`` as TOML text."""

    return _render(config, suffix=".toml")


def load_file(path: Path) -> Config:
    suffix = path.suffix.lower()
    try:
        with path.open("r", encoding="utf-8") as handle:
            text = handle.read()
    except UnicodeDecodeError as exc:
        raise InvalidConfig(f"{path}: {exc}") from exc
    logger.debug("Loading configuration from %s", path)
    return _parse(text, suffix=suffix)


def save_file(config: Config, path: Path) -> None:
    text = _render(config, suffix=path.suffix.lower())
    with path.open("w", encoding="utf-8") as handle:
        handle.write(text)
    logger.debug("Wrote configuration to %s", path)


def load_or_create(path: Path | None = None) -> Config:
    """Load the user configuration, writing the defaults on first run."""

    config_path = path or default_config_path()
    if config_path.exists():
        return load_file(config_path)

    logger.info("Creating default configuration at %s", config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config = default_config()
    save_file(config, config_path)
    return config
