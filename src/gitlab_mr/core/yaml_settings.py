"""YAML preference loading with include directive support."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

APP_NAME = "gitlab-mr"
CONFIG_FILENAME = "gitlab-mr.yaml"

# Created lazily to avoid a circular import with log.py
_bootstrap_logger = None


def _get_bootstrap_logger():
    """Logger used while preferences are still loading."""
    global _bootstrap_logger
    if _bootstrap_logger is None:
        from gitlab_mr.core.log import ConsoleSink, Logger
        _bootstrap_logger = Logger(console=ConsoleSink(level="warn"))
        _bootstrap_logger.setup(log_root=Path.home(), run_name="bootstrap")
    return _bootstrap_logger


def _cleanup_bootstrap_logger():
    """Close the bootstrap logger once Config has set up the real one."""
    global _bootstrap_logger
    if _bootstrap_logger:
        _bootstrap_logger.close()
        _bootstrap_logger = None


def user_config_file() -> Path:
    """Per-user preferences file in the platform config directory."""
    return Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source with include: directive and --include
    CLI support.

    Deep merges, lowest priority first: package defaults, user config,
    project config (./gitlab-mr.yaml), then --include files.
    """

    def __init__(
        self, settings_cls: type[BaseSettings], yaml_file=None
    ):
        """Initialize with CLI include processing.

        Args:
            settings_cls: The Settings class being initialized
            yaml_file: Optional override for the project config path
        """
        # --include is consumed here, before pydantic parses the CLI
        includes = []
        i = 1
        while i < len(sys.argv):
            if sys.argv[i] == "--include" and i + 1 < len(sys.argv):
                includes.append(sys.argv[i + 1])
                i += 1
            i += 1

        base = yaml_file or settings_cls.model_config.get("yaml_file")
        if base and includes:
            yaml_file = (
                [base] if isinstance(base, (str, os.PathLike))
                else list(base)
            ) + includes
        elif includes:
            yaml_file = includes
        else:
            yaml_file = base

        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files, deep_merge: bool = False):
        """Load defaults, user config, project config and includes.

        Args:
            files: Project config path plus any --include paths
            deep_merge: Passed by newer pydantic-settings; files are
                always deep-merged here

        Returns:
            Deep-merged dictionary of all loaded data
        """
        result = {}

        files_to_load = [
            Path(__file__).parent.parent / "defaults" / "default.yaml",
            user_config_file(),
        ]
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            files_to_load.extend(Path(f).expanduser() for f in files)

        for file_path in files_to_load:
            if file_path.is_file():
                with _get_bootstrap_logger().span(
                    "Loading preferences",
                    file=str(file_path),
                ):
                    data = self._load_file_recursive(file_path, set())
                    result = self._deep_merge(result, data)
            else:
                _get_bootstrap_logger().debug(
                    "Preferences file not found (skipping)",
                    file=str(file_path),
                )

        return result

    def _load_file_recursive(
        self, filepath: Path, visited: set[Path]
    ) -> dict:
        """Load a file, resolving include: directives depth first.

        Raises:
            ValueError: If an include cycle is detected
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if "include" in data:
            includes = data.pop("include")
            if isinstance(includes, str):
                includes = [includes]

            for inc in includes:
                inc_path = self._resolve_path(inc, filepath)
                inc_data = self._load_file_recursive(
                    inc_path, visited.copy()
                )
                # The including file wins over what it includes
                data = self._deep_merge(inc_data, data)

        return data

    def _resolve_path(
        self, include_path: str, relative_to: Path
    ) -> Path:
        path = Path(include_path).expanduser()
        if path.is_absolute():
            return path
        return (relative_to.parent / path).resolve()

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge override into base (override wins)."""
        return deep_merge(base, override)


def deep_merge(base: dict, override: dict) -> dict:
    """Return a new dict with override merged into base recursively."""
    result = base.copy()
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def update_user_config(
    dotted_key: str, value: Any, path: Path | None = None
) -> Path:
    """Write one preference into the user config file.

    Other keys already in the file are preserved.

    Args:
        dotted_key: Key path such as "config.target_branch"
        value: Value to store
        path: File to update (defaults to user_config_file())

    Returns:
        Path of the file written
    """
    path = path or user_config_file()
    data: dict = {}
    if path.is_file():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    update: Any = value
    for part in reversed(dotted_key.split(".")):
        update = {part: update}
    data = deep_merge(data, update)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    return path
