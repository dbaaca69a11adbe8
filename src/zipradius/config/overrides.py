"""
Per-request settings overrides.

`SearchRequest.settings_overrides` / `LayoutRequest.settings_overrides` let one call probe
different layout or search knobs (say, a 10-mile cluster threshold) without touching
server config. Only whitelisted keys are accepted; the merged result is re-validated, so
range checks still apply.
"""

from __future__ import annotations

from typing import Any, Mapping

from zipradius.config.settings import Settings

# `True` opens a whole subtree; a dict lists the keys allowed under it.
# Paths (dataset, cache) and the geocoding token/URL are not overridable.
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "search": True,
    "layout": True,
    "bounds": True,
    "circle": True,
    "geocoding": {"country": True, "types": True},
}


def _check_allowed(overrides: Mapping[str, Any], allowed: Mapping[str, Any], path: tuple[str, ...] = ()) -> None:
    for key, value in overrides.items():
        dotted = ".".join((*path, key))
        rule = allowed.get(key)
        if rule is None:
            raise ValueError(f"settings_overrides contains a disallowed key: '{dotted}'")
        if rule is True:
            continue
        if not isinstance(value, Mapping):
            raise ValueError(f"settings_overrides key '{dotted}' must be a mapping")
        _check_allowed(value, rule, (*path, key))


def _merged(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overrides.items():
        current = out.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            out[key] = _merged(current, value)
        else:
            out[key] = value
    return out


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Return a new `Settings` with `overrides` applied; `settings` itself is never modified.

    Raises:
        ValueError: a key outside the whitelist, a scalar where a section is expected, or
            a merged value that fails validation (pydantic's `ValidationError`).
    """
    if not overrides:
        return settings
    _check_allowed(overrides, ALLOWED_SETTINGS_OVERRIDES_TREE)
    return Settings.model_validate(_merged(settings.model_dump(mode="python"), overrides))
