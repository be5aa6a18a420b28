"""
Tests for the design prompt builder.
"""

import itertools

import pytest

from generation.prompt_builder import (
    DesignOptions,
    PromptBuilder,
    describe_features,
    build_design_prompt,
    build_site_plan_prompt,
    edible_guild_phrase,
    NATIVE_PLANTING_PHRASE,
    RAIN_GARDEN_PHRASE,
    HARDSCAPE_PHRASES,
    EDIBLE_GENERIC_PHRASE,
)
from generation.prompt_templates import (
    BREAKDOWN_SYSTEM_PROMPT,
    NO_FEATURES_PHRASE,
    PRESERVED_ELEMENTS,
)


ALL_HARDSCAPE_PHRASES = list(HARDSCAPE_PHRASES.values())


def all_toggle_combinations():
    for native, rain, hardscape, edible in itertools.product([False, True], repeat=4):
        yield DesignOptions(
            native_planting=native,
            rain_garden=rain,
            hardscape=hardscape,
            edible_guild=edible,
        )


def expected_phrases(options: DesignOptions):
    phrases = []
    if options.native_planting:
        phrases.append(NATIVE_PLANTING_PHRASE)
    if options.rain_garden:
        phrases.append(RAIN_GARDEN_PHRASE)
    if options.hardscape:
        phrases.append(HARDSCAPE_PHRASES[("walkway", "stone")])
    if options.edible_guild:
        phrases.append(EDIBLE_GENERIC_PHRASE)
    return phrases


class TestDescribeFeatures:
    @pytest.mark.parametrize("options", list(all_toggle_combinations()))
    def test_phrases_match_active_toggles(self, options):
        assert describe_features(options) == expected_phrases(options)

    @pytest.mark.parametrize("options", list(all_toggle_combinations()))
    def test_prompt_contains_exactly_active_phrases(self, options):
        prompt = build_design_prompt(options)
        active = expected_phrases(options)
        inactive = [
            phrase
            for phrase in [NATIVE_PLANTING_PHRASE, RAIN_GARDEN_PHRASE, EDIBLE_GENERIC_PHRASE]
            + ALL_HARDSCAPE_PHRASES
            if phrase not in active
        ]
        for phrase in active:
            assert phrase in prompt
        for phrase in inactive:
            assert phrase not in prompt

    def test_fixed_order(self):
        options = DesignOptions(
            native_planting=True, rain_garden=True, hardscape=True, edible_guild=True,
        )
        prompt = build_design_prompt(options)
        positions = [prompt.index(phrase) for phrase in describe_features(options)]
        assert positions == sorted(positions)
        assert ", ".join(describe_features(options)) in prompt

    def test_sub_flags_ignored_when_parent_off(self):
        options = DesignOptions(
            hardscape=False,
            hardscape_type="walkway_patio",
            hardscape_material="pavers",
            edible_guild=False,
            culinary=True,
            fruit=True,
        )
        assert describe_features(options) == []

    @pytest.mark.parametrize("hardscape_type,material", list(HARDSCAPE_PHRASES))
    def test_hardscape_variants(self, hardscape_type, material):
        options = DesignOptions(
            hardscape=True, hardscape_type=hardscape_type, hardscape_material=material,
        )
        assert describe_features(options) == [HARDSCAPE_PHRASES[(hardscape_type, material)]]

    def test_unknown_hardscape_type_rejected(self):
        with pytest.raises(ValueError):
            DesignOptions(hardscape_type="driveway")


class TestEdibleGuild:
    def test_no_sub_guilds_uses_generic_phrase(self):
        assert edible_guild_phrase(DesignOptions(edible_guild=True)) == EDIBLE_GENERIC_PHRASE

    def test_single_sub_guild(self):
        options = DesignOptions(edible_guild=True, medicinal=True)
        assert edible_guild_phrase(options) == "an edible guild of medicinal plants"

    def test_all_sub_guilds_in_order(self):
        options = DesignOptions(edible_guild=True, culinary=True, medicinal=True, fruit=True)
        assert edible_guild_phrase(options) == (
            "an edible guild of culinary herbs, medicinal plants and fruit trees and berry shrubs"
        )


class TestDesignPrompt:
    def test_native_and_rain_garden_scenario(self):
        options = DesignOptions(
            native_planting=True, rain_garden=True, hardscape=False, edible_guild=False,
        )
        prompt = build_design_prompt(options)

        assert NATIVE_PLANTING_PHRASE in prompt
        assert RAIN_GARDEN_PHRASE in prompt
        lowered = prompt.lower()
        for word in ("hardscape", "walkway", "patio", "paver", "flagstone", "edible", "guild"):
            assert word not in lowered

    def test_idempotent(self):
        options = DesignOptions(native_planting=True, hardscape=True, budget=8000)
        assert build_design_prompt(options) == build_design_prompt(options)

    def test_preserves_architecture(self):
        prompt = build_design_prompt(DesignOptions(native_planting=True))
        for element in PRESERVED_ELEMENTS:
            assert element in prompt
        assert "DO NOT change" in prompt

    def test_no_features_asks_for_refresh(self):
        assert NO_FEATURES_PHRASE in build_design_prompt(DesignOptions())

    def test_budget_and_style_lines(self):
        prompt = build_design_prompt(DesignOptions(style="xeriscape", budget=8000))
        assert "Budget-conscious design around $8,000." in prompt
        assert "decorative rock mulch" in prompt

    @pytest.mark.parametrize("style,description", [
        ("Xeriscape", "decorative rock mulch"),
        ("Permaculture Garden", "layered planting, companion planting"),
        ("Water-Wise Native Plants", "Colorado native grasses and flowers"),
    ])
    def test_form_style_names_use_descriptions(self, style, description):
        prompt = build_design_prompt(DesignOptions(style=style))
        assert description in prompt
        assert f"Style: {style}." not in prompt

    def test_unknown_style_used_verbatim(self):
        prompt = build_design_prompt(DesignOptions(style="Cottage meadow"))
        assert "Style: Cottage meadow." in prompt

    def test_site_plan_prompt(self):
        options = DesignOptions(rain_garden=True)
        prompt = build_site_plan_prompt(options)
        assert "orthographic" in prompt
        assert RAIN_GARDEN_PHRASE in prompt
        assert prompt != build_design_prompt(options)


class TestPromptBuilder:
    def test_chaining(self):
        prompt = (
            PromptBuilder()
            .with_options(DesignOptions(native_planting=True))
            .with_budget(5000)
            .with_instruction("Keep the existing maple tree")
            .build()
        )
        assert NATIVE_PLANTING_PHRASE in prompt
        assert "$5,000" in prompt
        assert prompt.endswith("ADDITIONAL REQUIREMENTS:\n- Keep the existing maple tree")

    def test_site_plan_mode(self):
        options = DesignOptions(edible_guild=True)
        assert PromptBuilder().with_options(options).as_site_plan().build() == (
            build_site_plan_prompt(options)
        )

    def test_reset(self):
        builder = PromptBuilder().with_style("permaculture").with_instruction("x")
        builder.reset()
        assert builder.build() == build_design_prompt(DesignOptions())


def test_breakdown_prompt_defines_required_sections():
    for heading in (
        "## Project Summary",
        "## Cost Estimate",
        "## Plant List",
        "## Installation Phases",
        "## XIP Rebate Eligibility",
    ):
        assert heading in BREAKDOWN_SYSTEM_PROMPT
    assert "| Common Name | Botanical Name | Size | Quantity | Water Need | Native |" in (
        BREAKDOWN_SYSTEM_PROMPT
    )
