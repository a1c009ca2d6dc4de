# ABOUTME: Pytest tests for the preset registry: resolution, fallback, parameters and listing.
# ABOUTME: Registry is static, so no mocks are needed beyond caplog.

import logging

import pytest

from core.schemas import GenerationParams, Preset, PresetCategory, QualityCategory
from rewrite_engine import presets
from rewrite_engine.presets import (
    DEFAULT_PRESET_ID,
    PRESETS,
    all_preset_ids,
    is_valid,
    parameters,
    preset_info,
    resolve,
)


def test_registry_has_all_presets():
    """All 22 presets load, including the default and the three extraction presets."""
    ids = all_preset_ids()
    assert len(ids) == 22
    for key in ("magic", "outcomes", "unstuck", "smart_actions", "email_professional", "x_post", "shorten"):
        assert key in ids


def test_registry_is_read_only():
    """The loaded mapping cannot be mutated at runtime."""
    with pytest.raises(TypeError):
        PRESETS["new"] = PRESETS["magic"]


def test_resolve_known_preset():
    preset = resolve("email_professional")
    assert preset.key == "email_professional"
    assert preset.category is PresetCategory.EMAIL
    assert preset.quality is QualityCategory.EMAIL


def test_resolve_unknown_preset_falls_back_to_magic_with_warning(caplog):
    """Unknown id returns the default preset and logs the fallback; never raises."""
    with caplog.at_level(logging.WARNING):
        preset = resolve("does_not_exist")
    assert preset.key == DEFAULT_PRESET_ID
    assert "does_not_exist" in caplog.text


def test_resolve_non_string_falls_back():
    assert resolve(None).key == DEFAULT_PRESET_ID


def test_is_valid_is_pure_membership():
    assert is_valid("poem") is True
    assert is_valid("nope") is False
    assert is_valid(42) is False


def test_parameters_from_preset():
    params = parameters("outcomes")
    assert isinstance(params, GenerationParams)
    assert params.temperature == 0.4
    assert params.max_output_tokens == 800


def test_parameters_fall_back_to_defaults_when_absent(monkeypatch):
    """A preset without temperature or max tokens gets 0.7 / 600."""
    bare = Preset(
        key="bare",
        label="Bare",
        category=PresetCategory.NONE,
        quality=QualityCategory.DEFAULT,
        behavior="Rewrite it.",
    )
    monkeypatch.setattr(presets, "PRESETS", {**PRESETS, "bare": bare})
    params = parameters("bare")
    assert params.temperature == 0.7
    assert params.max_output_tokens == 600


def test_preset_info_shape():
    info = preset_info("unstuck")
    assert info == {
        "id": "unstuck",
        "label": "Unstuck",
        "category": "extraction",
        "quality": "unstuck",
        "temperature": 0.6,
        "max_output_tokens": 500,
        "example_count": len(PRESETS["unstuck"].examples),
    }


def test_every_preset_has_examples_and_behavior():
    for preset in PRESETS.values():
        assert preset.behavior.strip(), preset.key
        assert preset.examples, preset.key


def test_load_rejects_duplicate_keys():
    magic = PRESETS["magic"]
    with pytest.raises(RuntimeError, match="Duplicate"):
        presets._load([magic, magic])


def test_load_requires_default_preset():
    with pytest.raises(RuntimeError, match="Default preset"):
        presets._load([PRESETS["outcomes"], PRESETS["unstuck"]])
