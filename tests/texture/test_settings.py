"""Tests for render settings."""

import pytest

from chromaskin.texture.settings import (
    MIN_RESOLUTION,
    HeightSettings,
    MaskSettings,
    PatternSettings,
    TextureSettings,
    clamp_resolution,
    merge_partial,
)


class TestSanitize:
    def test_out_of_range_values_clamped(self):
        pattern = PatternSettings(density=-5, line_width=0, complexity=500, depth_layers=40).sanitized()
        assert pattern.density == 10
        assert pattern.line_width == 0.5
        assert pattern.complexity == 100
        assert pattern.depth_layers == 10

    def test_unknown_scheme_falls_back(self):
        assert PatternSettings(color_scheme="sepia").sanitized().color_scheme == "cyan"

    def test_unknown_stroke_and_corner_fall_back(self):
        pattern = PatternSettings(stroke_style="wavy", corner_style="chamfer").sanitized()
        assert pattern.stroke_style == "solid"
        assert pattern.corner_style == "round"

    def test_rotation_wrapped(self):
        assert PatternSettings(rotation=450).sanitized().rotation == 90.0
        assert PatternSettings(rotation=-90).sanitized().rotation == 270.0

    def test_lighting_hints_clamped(self):
        pattern = PatternSettings(depth_perspective=150, light_angle=-45, light_elevation=120).sanitized()
        assert pattern.depth_perspective == 100
        assert pattern.light_angle == 315.0
        assert pattern.light_elevation == 90

    def test_height_levels_clamped(self):
        assert HeightSettings(levels=1).sanitized().levels == 2

    def test_sanitize_does_not_mutate(self):
        settings = TextureSettings(pattern=PatternSettings(density=1000))
        clean = settings.sanitized()
        assert settings.pattern.density == 1000
        assert clean.pattern.density == 500

    def test_defaults_already_valid(self):
        settings = TextureSettings()
        assert settings.sanitized() == settings


class TestMergePartial:
    def test_applies_known_fields(self):
        mask = merge_partial(MaskSettings(), {"red_intensity": 10, "invert": True})
        assert mask.red_intensity == 10
        assert mask.invert is True
        assert mask.green_intensity == MaskSettings().green_intensity

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="glossiness"):
            merge_partial(MaskSettings(), {"glossiness": 3})

    def test_original_untouched(self):
        mask = MaskSettings()
        merge_partial(mask, {"base_coat": 90})
        assert mask.base_coat == 20


class TestResolution:
    def test_small_resolution_raised(self):
        assert clamp_resolution(0) == MIN_RESOLUTION
        assert clamp_resolution(-64) == MIN_RESOLUTION

    def test_valid_resolution_kept(self):
        assert clamp_resolution(512) == 512

    def test_garbage_resolution(self):
        assert clamp_resolution("big") == MIN_RESOLUTION


class TestToDict:
    def test_groups_present(self):
        data = TextureSettings().to_dict()
        assert set(data) == {"pattern", "mask", "normal", "roughness", "pearl", "ao", "height"}
        assert data["pattern"]["style"] == "circuit"

    def test_lighting_hints_exported(self):
        data = TextureSettings().to_dict()["pattern"]
        assert data["depth_perspective"] == 50
        assert data["light_angle"] == 45
        assert data["light_elevation"] == 45
