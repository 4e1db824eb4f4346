"""Find, read and validate config files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping

import yaml

from prototool.settings import (
    DEFAULT_CONFIG_FILENAME,
    CompileConfig,
    Config,
    ConfigError,
    CreateConfig,
    ExternalConfig,
    GenConfig,
    GenGoPluginOptions,
    GenPlugin,
    LintConfig,
    OutputPath,
    parse_gen_plugin_type,
)
from prototool.strs import dedupe_sort, intersection


def _require_abs(path: str) -> str:
    if not os.path.isabs(path):
        raise ConfigError(f"{path} is not an absolute path")
    return os.path.normpath(path)


def _resolve(path: str, dir_path: str) -> str:
    if not os.path.isabs(path):
        path = os.path.join(dir_path, path)
    return os.path.normpath(path)


class ConfigProvider:
    """Provides Configs read from config files."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def get_for_dir(self, dir_path: str) -> Config:
        """Find the config file for dir_path, searching upwards, and read it.

        Returns an empty Config if no config file is found.
        """
        file_path = self.get_file_path_for_dir(dir_path)
        if not file_path:
            return Config()
        return self.get(file_path)

    def get_file_path_for_dir(self, dir_path: str) -> str:
        """Return the config file for dir_path, searching upwards, or ""."""
        dir_path = _require_abs(dir_path)
        file_path, _ = _find_file_path_for_dir(dir_path)
        return file_path

    def get(self, file_path: str) -> Config:
        """Read and validate the config file at the absolute file_path."""
        file_path = _require_abs(file_path)
        return _read_config(file_path)

    def get_exclude_prefixes_for_dir(self, dir_path: str) -> list[str]:
        """Return the exclude prefixes of the config file in dir_path only.

        There is no upward search; without a config file, returns [].
        """
        dir_path = _require_abs(dir_path)
        return _exclude_prefixes_for_dir(dir_path)


def _find_file_path_for_dir(dir_path: str) -> tuple[str, list[str]]:
    """Search for the config file from dir_path up to the root.

    Returns the file path, or "" if none, and the directories visited.
    """
    dir_paths: list[str] = []
    while True:
        dir_paths.append(dir_path)
        file_path = os.path.join(dir_path, DEFAULT_CONFIG_FILENAME)
        if os.path.exists(file_path):
            return file_path, dir_paths
        parent = os.path.dirname(dir_path)
        if parent == dir_path:
            return "", dir_paths
        dir_path = parent


def _load_yaml(file_path: str) -> object:
    with open(file_path, encoding="utf-8") as f:
        data = f.read()
    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as err:
        raise ConfigError(f"{file_path}: {err}") from err


def _read_config(file_path: str) -> Config:
    external = ExternalConfig.from_dict(_load_yaml(file_path))
    return external_config_to_config(external, os.path.dirname(file_path))


def external_config_to_config(external: ExternalConfig, dir_path: str) -> Config:
    """Convert and validate an ExternalConfig whose file lives in dir_path."""
    exclude_prefixes = get_exclude_prefixes(external.excludes, dir_path)

    include_paths = [
        _resolve(include, dir_path) for include in dedupe_sort(external.protoc.includes)
    ]

    ignore_id_to_file_paths: dict[str, list[str]] = {}
    for ignore in external.lint.ignores:
        ignore_id = ignore.id.upper()
        for proto_file_path in ignore.files:
            ignore_id_to_file_paths.setdefault(ignore_id, []).append(
                _resolve(proto_file_path, dir_path)
            )

    gen_plugins: list[GenPlugin] = []
    for plugin in external.gen.plugins:
        plugin_type = parse_gen_plugin_type(plugin.type)
        if not plugin.output:
            raise ConfigError(f"output path required for plugin {plugin.name}")
        if os.path.isabs(plugin.output):
            abs_path = os.path.normpath(plugin.output)
            try:
                rel_path = os.path.relpath(abs_path, dir_path)
            except ValueError as err:
                raise ConfigError(
                    f"failed to resolve plugin {plugin.name!r} output absolute path "
                    f"{abs_path!r} to a relative path with base {dir_path!r}: {err}"
                ) from err
        else:
            rel_path = plugin.output
            abs_path = os.path.normpath(os.path.join(dir_path, rel_path))
        gen_plugins.append(
            GenPlugin(
                name=plugin.name,
                path=plugin.path,
                type=plugin_type,
                flags=plugin.flags,
                output_path=OutputPath(rel_path=rel_path, abs_path=abs_path),
            )
        )
    gen_plugins.sort(key=lambda p: p.name)

    dir_path_to_base_package: dict[str, str] = {}
    for package in external.create.packages:
        if not package.directory:
            raise ConfigError("directory for create package is empty")
        if not package.name:
            raise ConfigError("name for create package is empty")
        if os.path.isabs(package.directory):
            raise ConfigError(
                f"directory for create package must be relative: {package.directory}"
            )
        key = os.path.normpath(os.path.join(dir_path, package.directory))
        dir_path_to_base_package[key] = package.name

    config = Config(
        dir_path=dir_path,
        exclude_prefixes=exclude_prefixes,
        compile=CompileConfig(
            protobuf_version=external.protoc.version,
            include_paths=include_paths,
            include_well_known_types=True,
            allow_unused_imports=external.protoc.allow_unused_imports,
        ),
        create=CreateConfig(dir_path_to_base_package=dir_path_to_base_package),
        lint=LintConfig(
            include_ids=dedupe_sort(external.lint.rules.add, str.upper),
            exclude_ids=dedupe_sort(external.lint.rules.remove, str.upper),
            no_default=external.lint.rules.no_default,
            ignore_id_to_file_paths=ignore_id_to_file_paths,
        ),
        gen=GenConfig(
            go_plugin_options=GenGoPluginOptions(
                import_path=external.gen.go_options.import_path,
                extra_modifiers=dict(external.gen.go_options.extra_modifiers),
            ),
            plugins=gen_plugins,
        ),
    )

    for gen_plugin in config.gen.plugins:
        if gen_plugin.name.startswith("protoc-gen-"):
            raise ConfigError(
                f"plugin name provided was {gen_plugin.name}, "
                "do not include the protoc-gen- prefix"
            )
        if (
            gen_plugin.type.is_go() or gen_plugin.type.is_gogo()
        ) and not config.gen.go_plugin_options.import_path:
            raise ConfigError(
                f"go plugin {gen_plugin.name} specified but no import path provided"
            )

    common = intersection(config.lint.include_ids, config.lint.exclude_ids)
    if common:
        raise ConfigError(
            f"config had intersection of {common} between lint_include and lint_exclude"
        )
    return config


def _exclude_prefixes_for_dir(dir_path: str) -> list[str]:
    file_path = os.path.join(dir_path, DEFAULT_CONFIG_FILENAME)
    if not os.path.exists(file_path):
        return []
    data = _load_yaml(file_path)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{file_path}: expected a mapping")
    excludes = data.get("excludes")
    if excludes is None:
        excludes = []
    if not isinstance(excludes, list):
        raise ConfigError(f"{file_path}: excludes must be a list")
    return get_exclude_prefixes([str(e) for e in excludes if e is not None], dir_path)


def get_exclude_prefixes(excludes: Iterable[str], dir_path: str) -> list[str]:
    """Resolve excludes against dir_path; each must lie strictly inside dir_path."""
    prefixes: list[str] = []
    for exclude in dedupe_sort(excludes):
        prefix = _resolve(exclude, dir_path)
        if prefix == dir_path:
            raise ConfigError(f"cannot exclude directory of config file: {dir_path}")
        if not prefix.startswith(dir_path):
            raise ConfigError(
                f"cannot exclude directory outside of config file directory "
                f"{dir_path}: {prefix}"
            )
        prefixes.append(prefix)
    return prefixes