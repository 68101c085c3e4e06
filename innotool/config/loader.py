# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Settings loader for innotool.

A settings file describes a tree of actions. The root action usually holds
shared settings (working path, certificate, compiler location) and a list
of child actions, each of which may hold its own children:

    working_path: C:/Source/MyApp
    cert_filename: "%USERPROFILE%/certs/signing.pfx"
    cert_password: secret
    actions:
      - name: Stamp version
        action_type: set_version
        csharp_project_filename: MyApp/MyApp.csproj
        inno_script_filename: Setup/MyApp.iss
      - name: Publish
        action_type: compile_and_publish
        project_build_level: NETInstallIncluded
        net_major_version: 8
        options: ["SetVersion:true"]

Resolution
----------
The tree is resolved once, right after loading, into a flat list of frozen
ActionSettings records in execution order. Nothing downstream walks the
tree again.

  - **Order**: children run before their parent, depth first, in file order.
  - **Scalars**: an unset value (empty string, 0, or build level "none")
    inherits the nearest ancestor's value.
  - **Options**: "Name:Value" strings, unioned with every ancestor's options
    (case-insensitive, own options first).
  - **Active**: false when the action or any ancestor is inactive.
  - **Not inherited**: name, remarks, action_type, actions.

Root defaults are applied before resolution: the working path (CLI value
when the file has none), the timestamp server, the Inno Setup compiler
path and the SignTool path.

Environment strings
-------------------
%USERPROFILE% (any case) and any %NAME% naming a defined environment
variable are expanded in the fields listed in PATH_FIELDS and
SECRET_FIELDS. Undefined variables are left as written. A .env file next
to the settings file is loaded first (python-dotenv), so certificate
passwords can stay out of the settings file:

    cert_password: "%CODE_SIGNING_PASSWORD%"

File formats
------------
YAML (.yaml, .yml) is parsed with PyYAML. JSON settings (.json) are parsed
with the json module. Keys are snake_case; the PascalCase keys of older
JSON settings files (CertFilename, ProjectBuildLevel, NETMajorVersion, ...)
are accepted through LEGACY_KEYS.

Error Handling
--------------
- ConfigError: missing file, parse error, empty file, non-mapping root,
  unknown action type or build level, non-integer .NET version.
- All errors are chained with "from err" for better debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
import json
import os
from pathlib import Path
import re
from typing import Any

from dotenv import load_dotenv
import yaml

from innotool.exceptions import ConfigError
from innotool.policy.build_level import BuildLevel

DEFAULT_CERT_TIMESTAMP_URL = "http://timestamp.digicert.com"
DEFAULT_INNO_SETUP_COMPILER = r"C:\Program Files (x86)\Inno Setup 6\ISCC.exe"
DEFAULT_SIGN_TOOL = r"%SIGNTOOLPATH%\signtool.exe"

# -------------------------------
# Data types
# -------------------------------


class ActionType(str, Enum):
    """Work an action performs."""

    NONE = "none"
    COMPILE_AND_PUBLISH = "compile_and_publish"
    SET_PACKAGE_FILES = "set_package_files"
    SET_VERSION = "set_version"

    @classmethod
    def parse(cls, value: Any) -> ActionType:
        if isinstance(value, ActionType):
            return value
        if value is None:
            return cls.NONE
        key = str(value).strip().replace("_", "").replace("-", "").lower()
        if not key:
            return cls.NONE
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        raise ConfigError(f"Unknown action type: {value!r}")


@dataclass(frozen=True)
class ActionSettings:
    """One resolved action, with every inherited value filled in.

    Paths are kept as written (after environment expansion); they are
    resolved against working_path when the action runs.
    """

    name: str = ""
    action_type: ActionType = ActionType.NONE
    active: bool = True
    remarks: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    working_path: str = ""
    cert_filename: str = ""
    cert_password: str = ""
    cert_timestamp_url: str = ""
    sha_thumbprint: str = ""
    sign_tool_filename: str = ""
    csharp_project_filename: str = ""
    csharp_publish_settings_filename: str = ""
    csharp_solution_filename: str = ""
    exe_filename: str = ""
    setup_filename: str = ""
    inno_script_filename: str = ""
    inno_setup_compiler_filename: str = ""
    inno_version_variable: str = ""
    input_foldername: str = ""
    output_filename: str = ""
    output_foldername: str = ""
    project_foldername: str = ""
    project_name: str = ""
    version_filename: str = ""
    wap_manifest_filename: str = ""
    runtime_download_url: str = ""
    runtime_resource_dir: str = ""
    net_major_version: int = 0
    project_build_level: BuildLevel = BuildLevel.NONE
    value: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.action_type.value

    def option(self, name: str) -> str:
        """Value of the first "name:value" option (case-insensitive name), else ""."""
        wanted = name.strip().lower()
        for option in self.options:
            key, _, value = option.partition(":")
            if key.strip().lower() == wanted:
                return value.strip()
        return ""

    def option_enabled(self, name: str) -> bool:
        return _to_bool(self.option(name))


_NOT_INHERITED = frozenset(
    {"name", "action_type", "active", "remarks", "options"}
)
INHERITED_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(ActionSettings) if f.name not in _NOT_INHERITED
)

PATH_FIELDS: tuple[str, ...] = (
    "working_path",
    "cert_filename",
    "sign_tool_filename",
    "csharp_project_filename",
    "csharp_publish_settings_filename",
    "csharp_solution_filename",
    "exe_filename",
    "setup_filename",
    "inno_script_filename",
    "inno_setup_compiler_filename",
    "input_foldername",
    "output_filename",
    "output_foldername",
    "project_foldername",
    "version_filename",
    "wap_manifest_filename",
    "runtime_resource_dir",
)

# Secrets may come from the environment (or a .env file) instead of the
# settings file.
SECRET_FIELDS: tuple[str, ...] = ("cert_password", "sha_thumbprint")

LEGACY_KEYS: dict[str, str] = {
    "ActionType": "action_type",
    "Actions": "actions",
    "Active": "active",
    "CertFilename": "cert_filename",
    "CertPassword": "cert_password",
    "CertTimestampUrl": "cert_timestamp_url",
    "CSharpProjectFilename": "csharp_project_filename",
    "CSharpPublishSettingsFilename": "csharp_publish_settings_filename",
    "CSharpSolutionFilename": "csharp_solution_filename",
    "ExeFilename": "exe_filename",
    "InnoScriptFilename": "inno_script_filename",
    "InnoSetupCompilerFilename": "inno_setup_compiler_filename",
    "InnoVersionVariable": "inno_version_variable",
    "InputFoldername": "input_foldername",
    "Name": "name",
    "NETMajorVersion": "net_major_version",
    "Options": "options",
    "OutputFilename": "output_filename",
    "OutputFoldername": "output_foldername",
    "ProjectBuildLevel": "project_build_level",
    "ProjectFoldername": "project_foldername",
    "ProjectName": "project_name",
    "Remarks": "remarks",
    "SetupFilename": "setup_filename",
    "ShaThumbprint": "sha_thumbprint",
    "SignToolFilename": "sign_tool_filename",
    "Value": "value",
    "WorkingPath": "working_path",
}

_KNOWN_KEYS = frozenset(f.name for f in fields(ActionSettings)) | {"actions"}
_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "y", "t"})
_ENV_TOKEN = re.compile(r"%([A-Za-z_][A-Za-z0-9_()]*)%")


@dataclass(frozen=True)
class _ActionNode:
    """Parsed, not yet inherited, action."""

    values: dict[str, Any]
    children: tuple[_ActionNode, ...]


# -------------------------------
# File helpers
# -------------------------------


def _load_settings_data(p: Path) -> Any:
    """
    Load a YAML or JSON settings file and return the parsed Python object.

    Raises:
      ConfigError - when the file does not exist, cannot be parsed, or is empty
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8-sig") as f:
            if p.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as err:
        raise ConfigError(f"Error parsing settings file: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"Settings file is empty: {p}")
    return data


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


# -------------------------------
# Environment strings
# -------------------------------


def expand_environment_strings(value: str) -> str:
    """Expand %USERPROFILE% and defined %NAME% tokens in value."""
    if not value or "%" not in value:
        return value

    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if name.upper() == "USERPROFILE":
            return str(Path.home())
        env = os.environ.get(name)
        return env if env is not None else match.group(0)

    return _ENV_TOKEN.sub(_sub, value)


def _resolve_environment_strings(action: ActionSettings) -> ActionSettings:
    changes = {
        name: expand_environment_strings(getattr(action, name))
        for name in PATH_FIELDS + SECRET_FIELDS
    }
    return replace(action, **changes)


# -------------------------------
# Parsing
# -------------------------------


def _normalize_keys(
    raw: dict[str, Any], where: str, warnings: list[str]
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in raw.items():
        name = LEGACY_KEYS.get(str(key), str(key))
        if name not in _KNOWN_KEYS:
            warnings.append(f"{where}: unknown key '{key}' ignored")
            continue
        result[name] = value
    return result


def _coerce_values(values: dict[str, Any], where: str) -> dict[str, Any]:
    """Convert raw settings values to ActionSettings field types."""
    result: dict[str, Any] = {}
    for name, value in values.items():
        if name == "actions":
            continue
        if name == "action_type":
            result[name] = ActionType.parse(value)
        elif name == "project_build_level":
            result[name] = BuildLevel.parse(value)
        elif name == "net_major_version":
            try:
                result[name] = int(value or 0)
            except (TypeError, ValueError) as err:
                raise ConfigError(
                    f"{where}: net_major_version must be an integer, got {value!r}"
                ) from err
        elif name == "active":
            result[name] = _to_bool(value)
        elif name in ("options", "remarks"):
            if value is None:
                items: list[Any] = []
            elif isinstance(value, (list, tuple)):
                items = list(value)
            else:
                items = [value]
            result[name] = tuple(str(item) for item in items)
        else:
            result[name] = "" if value is None else str(value)
    return result


def _parse_node(raw: Any, where: str, warnings: list[str]) -> _ActionNode:
    if not isinstance(raw, dict):
        raise ConfigError(
            f"{where}: action must be a mapping, got {type(raw).__name__}"
        )
    values = _normalize_keys(raw, where, warnings)
    children_raw = values.get("actions") or []
    if not isinstance(children_raw, list):
        raise ConfigError(f"{where}: 'actions' must be a list")
    children = tuple(
        _parse_node(child, f"{where}.actions[{i}]", warnings)
        for i, child in enumerate(children_raw)
    )
    return _ActionNode(values=_coerce_values(values, where), children=children)


# -------------------------------
# Resolution
# -------------------------------


def _is_unset(value: Any) -> bool:
    # BuildLevel.NONE compares equal to 0
    return value in ("", 0, None)


def _merge_options(own: tuple[str, ...], inherited: tuple[str, ...]) -> tuple[str, ...]:
    merged = list(own)
    seen = {option.lower() for option in own}
    for option in inherited:
        if option.lower() not in seen:
            merged.append(option)
            seen.add(option.lower())
    return tuple(merged)


def _resolve_node(
    node: _ActionNode, parent: ActionSettings | None, out: list[ActionSettings]
) -> None:
    own = ActionSettings(**node.values)
    if parent is not None:
        inherited = {
            name: getattr(parent, name)
            for name in INHERITED_FIELDS
            if _is_unset(getattr(own, name))
        }
        own = replace(
            own,
            active=own.active and parent.active,
            options=_merge_options(own.options, parent.options),
            **inherited,
        )

    for child in node.children:
        _resolve_node(child, own, out)
    if own.action_type is not ActionType.NONE:
        out.append(own)


def _apply_root_defaults(node: _ActionNode, working_path: Path | None) -> _ActionNode:
    values = dict(node.values)
    if not values.get("working_path") and working_path is not None:
        values["working_path"] = str(working_path)
    if not values.get("cert_timestamp_url"):
        values["cert_timestamp_url"] = DEFAULT_CERT_TIMESTAMP_URL
    if not values.get("inno_setup_compiler_filename"):
        values["inno_setup_compiler_filename"] = DEFAULT_INNO_SETUP_COMPILER
    if not values.get("sign_tool_filename"):
        values["sign_tool_filename"] = DEFAULT_SIGN_TOOL
    return _ActionNode(values=values, children=node.children)


# -------------------------------
# Public API
# -------------------------------


def _load_environment_file(settings_path: Path) -> None:
    """Load a .env file beside the settings file into the environment.

    Variables already set in the environment win.
    """
    env_file = settings_path.parent / ".env"
    if env_file.is_file():
        load_dotenv(env_file, override=False)


def load_settings_file(path: Path) -> dict[str, Any]:
    """Read a settings file and return its root mapping.

    Raises:
        ConfigError: If the file is missing, unparsable, empty, or its root
            is not a mapping.
    """
    path = Path(path)
    data = _load_settings_data(path)
    _load_environment_file(path)
    if not isinstance(data, dict):
        raise ConfigError(f"top-level settings must be a mapping (dict): {path}")
    return data


def resolve_actions(
    tree: dict[str, Any],
    *,
    working_path: Path | None = None,
    warnings: list[str] | None = None,
) -> list[ActionSettings]:
    """Resolve an action tree into ActionSettings records in execution order.

    Args:
        tree: Root action mapping (as returned by load_settings_file).
        working_path: Default working path when the root sets none.
        warnings: Optional list that receives non-fatal findings such as
            unknown keys.

    Returns:
        Resolved actions with an action type, children before parents.

    Raises:
        ConfigError: For malformed nodes or invalid values.
    """
    collected: list[str] = [] if warnings is None else warnings
    root = _parse_node(tree, "root", collected)
    root = _apply_root_defaults(root, working_path)

    resolved: list[ActionSettings] = []
    _resolve_node(root, None, resolved)
    return [_resolve_environment_strings(action) for action in resolved]


def load_effective_actions(
    settings_path: Path, *, working_path: Path | None = None
) -> list[ActionSettings]:
    """
    Load a settings file and resolve it into runnable actions.

    Unknown keys are reported through the global logger and otherwise
    ignored.

    Raises:
        ConfigError: On any settings problem (see module docstring).

    Example:
        ```python
        from pathlib import Path
        from innotool.config import load_effective_actions

        for action in load_effective_actions(Path("build.yaml")):
            print(action.display_name, action.project_build_level.name)
        ```
    """
    from innotool.logging import get_global_logger

    logger = get_global_logger()
    settings_path = Path(settings_path).resolve()
    logger.verbose("CONFIG", f"Loading settings: {settings_path}")

    tree = load_settings_file(settings_path)
    warnings: list[str] = []
    actions = resolve_actions(tree, working_path=working_path, warnings=warnings)
    for warning in warnings:
        logger.warning("CONFIG", warning)

    logger.verbose("CONFIG", f"Resolved {len(actions)} action(s)")
    for action in actions:
        logger.debug(
            "CONFIG",
            f"  {action.display_name}: {action.action_type.value} "
            f"(active={action.active}, level={action.project_build_level.name})",
        )
    return actions
