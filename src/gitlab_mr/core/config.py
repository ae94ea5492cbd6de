"""Preferences and per-invocation state."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitlab_mr.core.base import BaseConfig, BaseState
from gitlab_mr.core.log import Logger
from gitlab_mr.core.yaml_settings import (
    CONFIG_FILENAME,
    YamlWithIncludesSettingsSource,
)

# ============================================================
# TEMPLATE SUBSTITUTION NAMESPACE
# ============================================================

# Usage in YAML: {platformdirs.user_log_dir}, {os.getcwd}, {Path.cwd}
TEMPLATE_NAMESPACE = {
    'os': os,
    'platformdirs': platformdirs,
    'Path': Path,
}

# ============================================================
# PREFERENCES (loaded from YAML/env/CLI)
# ============================================================

class GitConfig(BaseConfig):
    """Local git invocation settings."""

    executable: str = Field(
        default="git",
        description="git executable used by the command templates",
    )
    timeout: int = Field(
        default=120,
        description="Timeout for a single git command in seconds",
    )


class ForgeConfig(BaseConfig):
    """GitLab API client settings."""

    timeout: float = Field(
        default=30.0,
        description="HTTP timeout for a forge request in seconds",
    )
    per_page: int = Field(
        default=100,
        description="Page size requested when listing merge requests",
    )


class Config(BaseConfig):
    """Resolved preferences for one invocation.

    Every workflow receives this object once, at start; nothing reads
    preferences from anywhere else.
    """
    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Local git settings"
    )
    forge: ForgeConfig = Field(
        default_factory=ForgeConfig,
        description="GitLab API settings"
    )

    target_branch: str = Field(
        default="master",
        description=(
            "Basis branch of the repository and default target of new "
            "merge requests"
        ),
    )
    target_remote: str = Field(
        default="origin",
        description="Remote that branches are pushed to and fetched from",
    )
    access_token: str | None = Field(
        default=None,
        description="Personal access token for gitlab.com",
    )
    access_tokens: dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Personal access tokens for self-hosted GitLab, keyed by "
            "base URL (e.g. https://gitlab.example.com)"
        ),
    )
    auto_commit_changes: bool = Field(
        default=False,
        description="Commit pending changes without asking",
    )
    auto_open_mr: bool = Field(
        default=False,
        description="Open a newly created merge request in the browser",
    )
    open_to_edit: bool = Field(
        default=False,
        description="Open merge requests on their edit page",
    )
    remove_source_branch: bool = Field(
        default=False,
        description="Default for removing the source branch on merge",
    )
    remember_target_branch: bool = Field(
        default=True,
        description=(
            "Store the last used merge request target branch in the "
            "user config file"
        ),
    )
    workdir: Path = Field(
        default_factory=Path.cwd,
        description="Working copy the workflows operate on",
    )

    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "gitlab-mr"
        ),
        description=(
            "Root directory for log files "
            "(supports {platformdirs.*} templates)"
        ),
    )
    commands: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Command templates organized by tool (git, ...)",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger once preferences are loaded."""
        from gitlab_mr.core.log import Logger, setup_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name="gitlab-mr",
            console=self.logger.console,
            otlp=self.logger.otlp,
            file=self.logger.file,
            logfire=self.logger.logfire,
            level=self.logger.level,
        )

        from gitlab_mr.core.yaml_settings import _cleanup_bootstrap_logger
        _cleanup_bootstrap_logger()

        return self

    def close(self):
        """Close preferences and the global logger singleton."""
        from gitlab_mr.core.log import logger
        logger.close()

        super().close()


# ============================================================
# RUNTIME STATE (mutated while a workflow graph runs)
# ============================================================

class SessionState(BaseState):
    """Collaborators shared by every workflow of one invocation."""

    vcs: Any = Field(
        default=None,
        description="VersionControl implementation for the working copy",
    )
    forge: Any = Field(
        default=None,
        description="ForgeClient talking to the repository's GitLab host",
    )
    prompter: Any = Field(
        default=None,
        description="Prompter for user interaction",
    )
    remote: Any = Field(
        default=None,
        description="RemoteDescriptor of the target remote",
    )
    lifecycle: Any = Field(
        default=None,
        description="MrLifecycleClient bound to the remote",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class OpenState(BaseState):
    """Open-MR workflow state."""

    request: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Form values given on the command line; missing ones are "
            "prompted for"
        ),
    )
    draft: Any = Field(
        default=None,
        description="MergeRequestDraft with the submitted form values",
    )
    repository: Any = Field(
        default=None,
        description="RepositoryState captured before planning",
    )
    commit_changes: bool = Field(
        default=True,
        description="Whether pending changes are committed",
    )
    plan: tuple = Field(
        default=(),
        description="BranchPlan about to be (or being) executed",
    )
    steps_completed: int = Field(
        default=0,
        description="Number of plan steps that finished",
    )
    merge_request: Any = Field(
        default=None,
        description="Merge request created by this run",
    )
    status: str = Field(
        default="pending",
        description=(
            "pending, planned, pushed, created, duplicate, failed, "
            "cancelled"
        ),
    )


class CheckoutState(BaseState):
    """Checkout-MR workflow state."""

    merge_request: Any = Field(default=None)
    step: Any = Field(
        default=None,
        description="CheckoutStep chosen for the selected MR",
    )
    status: str = Field(default="pending")


class EditState(BaseState):
    """Edit-MR workflow state."""

    merge_request: Any = Field(default=None)
    action: Any = Field(
        default=None,
        description="EditAction chosen by the user",
    )
    outcome: Any = Field(
        default=None,
        description="EditOutcome of the applied action",
    )
    status: str = Field(
        default="pending",
        description="pending, selected, chosen, applied, failed",
    )


class Runtime(BaseModel):
    """All runtime state, grouped by workflow."""

    session: SessionState = Field(default_factory=SessionState)
    open: OpenState = Field(default_factory=OpenState)
    checkout: CheckoutState = Field(default_factory=CheckoutState)
    edit: EditState = Field(default_factory=EditState)


# ============================================================
# STATE (preferences + runtime combined)
# ============================================================

class State(BaseSettings):
    """Everything one invocation knows.

    - config: resolved preferences (read-only after load)
    - runtime: state written by workflow nodes

    As a pydantic BaseSettings, State loads from YAML files, .env,
    environment variables (GITLAB_MR_CONFIG__TARGET_BRANCH=main) and
    the command line, and validates everything on load.
    """

    config: Config = Field(
        default_factory=Config,
        description="Preferences (from YAML/env/CLI)"
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
        exclude=True,
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file=CONFIG_FILENAME,
        env_file=".env",
        env_prefix="GITLAB_MR_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init arguments, YAML, .env,
        environment, file secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    @model_validator(mode="after")
    def substitute_templates(self) -> "State":
        """Replace {config.*} and {platformdirs.*} templates in
        preference strings."""
        self._substitute_recursive(self.config)
        return self

    def _substitute_recursive(self, obj: Any) -> None:
        if isinstance(obj, BaseModel):
            for field_name in obj.__class__.model_fields:
                value = getattr(obj, field_name)
                new_value = self._substitute_value(value)
                if new_value is not value:
                    setattr(obj, field_name, new_value)
        elif isinstance(obj, dict):
            for key in obj:
                obj[key] = self._substitute_value(obj[key])
        elif isinstance(obj, list):
            for i in range(len(obj)):
                obj[i] = self._substitute_value(obj[i])

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._substitute_string(value)
        elif isinstance(value, Path):
            return Path(self._substitute_string(str(value)))
        elif isinstance(value, (BaseModel, dict, list)):
            self._substitute_recursive(value)
            return value
        else:
            return value

    def _substitute_string(self, value: str) -> str:
        """Replace {field.path} templates with actual values.

        Unknown references are left untouched, which keeps command
        placeholders such as {branch} intact for later formatting.

        Examples:
            "{config.workdir}/.git" → "/home/user/repo/.git"
            "{platformdirs.user_log_dir}" → "~/.local/state/gitlab-mr/log"
        """
        def replace_template(match):
            parts = match.group(1).split(".")

            if parts[0] in TEMPLATE_NAMESPACE:
                obj = TEMPLATE_NAMESPACE[parts[0]]
                parts = parts[1:]
            else:
                obj = self

            try:
                for part in parts:
                    obj = getattr(obj, part)

                if callable(obj):
                    obj = obj('gitlab-mr', appauthor=False)

                return str(obj)
            except (AttributeError, TypeError):
                return match.group(0)

        return re.sub(r'\{([a-z._]+)\}', replace_template, value)


__all__ = [
    "State",
    "Config",
    "GitConfig",
    "ForgeConfig",
    "Runtime",
    "BaseConfig",
    "BaseState",
]
