from __future__ import annotations

import pytest

from zipradius.config.overrides import apply_settings_overrides
from zipradius.config.settings import get_settings


def test_apply_settings_overrides_returns_same_object_when_none():
    settings = get_settings()

    out = apply_settings_overrides(settings, None)

    # No overrides is a fast path: the shared object comes back untouched.
    assert out is settings


def test_apply_settings_overrides_can_override_allowed_numeric_knobs():
    settings = get_settings()

    out = apply_settings_overrides(settings, {"layout": {"cluster_threshold_mi": 12.5}, "circle": {"point_count": 16}})

    assert out.layout.cluster_threshold_mi == 12.5
    assert out.circle.point_count == 16
    # Unrelated values survive the merge.
    assert out.layout.split_fraction == settings.layout.split_fraction
    # The cached settings must not leak the override into other requests.
    assert settings.layout.cluster_threshold_mi != 12.5


def test_apply_settings_overrides_allows_geocoding_filters_only():
    settings = get_settings()

    out = apply_settings_overrides(settings, {"geocoding": {"country": "CA"}})
    assert out.geocoding.country == "CA"

    with pytest.raises(ValueError, match=r"geocoding\.access_token"):
        apply_settings_overrides(settings, {"geocoding": {"access_token": "stolen"}})


def test_apply_settings_overrides_rejects_disallowed_keys_with_clear_path():
    settings = get_settings()

    with pytest.raises(ValueError, match=r"disallowed key: 'dataset'"):
        apply_settings_overrides(settings, {"dataset": {"path": "/etc/passwd"}})


def test_apply_settings_overrides_rejects_wrong_value_shapes_for_restricted_subtrees():
    settings = get_settings()

    with pytest.raises(ValueError, match=r"settings_overrides key 'geocoding' must be a mapping"):
        apply_settings_overrides(settings, {"geocoding": 1})


def test_apply_settings_overrides_revalidates_ranges():
    settings = get_settings()

    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"layout": {"cluster_threshold_mi": -5}})
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"search": {"min_radius_mi": 60, "max_radius_mi": 50}})
