from __future__ import annotations

import json
from typing import Any

from result import Err, Ok, Result

from checkup.config.defaults import default_config
from checkup.config.schema import AppConfig
from checkup.models.enums import ActionKind, ProbeKind
from checkup.services.catalog import default_category_specs
from checkup.services.fs import DEFAULT_FS, FileSystem

CONFIG_PATH = "~/.config/mac-checkup/config.json"

_ACTIONS = frozenset(kind.value for kind in ActionKind)
_PROBES = frozenset(kind.value for kind in ProbeKind)


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    """Read the JSON config at *path* (default ``CONFIG_PATH``); a missing file means defaults.

    Every error message names the file and, for ``extraCategories``, the
    offending entry, since the CLI prints it as-is before exiting.
    """
    resolved = fs.expanduser(path or CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    payload = _read_payload(resolved, fs)
    if isinstance(payload, Err):
        return payload
    data = payload.ok_value

    checked = _check_extra_categories(data.get("extraCategories"))
    if isinstance(checked, Err):
        return Err(f"Config at {resolved}: {checked.err_value}")

    try:
        config = AppConfig.from_dict(data, default_config())
    except (TypeError, ValueError) as exc:
        return Err(f"Config at {resolved} has an invalid value: {exc}.")

    taken = {spec.key for spec in default_category_specs(default_config())}
    for spec in config.extra_categories:
        if spec.key in taken:
            return Err(f'Config at {resolved}: extra category key "{spec.key}" is already in use.')
        taken.add(spec.key)
    return Ok(config)


def _read_payload(resolved: str, fs: FileSystem) -> Result[dict[str, Any], str]:
    try:
        text = fs.read_text(resolved)
    except (OSError, UnicodeDecodeError) as exc:
        return Err(f"Failed reading config at {resolved}: {exc}.")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        return Err(f"Config at {resolved} is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno}).")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")
    return Ok(payload)


def _check_extra_categories(raw: Any) -> Result[None, str]:
    if raw is None:
        return Ok(None)
    if not isinstance(raw, list):
        return Err("extraCategories must be a list of objects.")
    for index, entry in enumerate(raw, start=1):
        where = f"extraCategories entry {index}"
        if not isinstance(entry, dict):
            return Err(f"{where} must be an object.")
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            return Err(f'{where} needs a non-empty "name".')
        where = f"{where} ({name})"
        paths = entry.get("paths", [])
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            return Err(f'{where}: "paths" must be a list of strings.')
        action = entry.get("action", ActionKind.CLEAR_CONTENTS.value)
        if not isinstance(action, str) or action not in _ACTIONS:
            return Err(f"{where}: unknown action {action!r}, expected one of {', '.join(sorted(_ACTIONS))}.")
        probe = entry.get("probe", ProbeKind.DIRECTORY.value)
        if not isinstance(probe, str) or probe not in _PROBES:
            return Err(f"{where}: unknown probe {probe!r}, expected one of {', '.join(sorted(_PROBES))}.")
    return Ok(None)


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
