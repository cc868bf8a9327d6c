"""Tests for SKILL.md parsing and action extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from skillcore.skills.errors import ManifestError
from skillcore.skills.loader import (
    SkillLoader,
    extract_actions,
    normalize_action,
    split_frontmatter,
)

WEATHER_MANIFEST = """---
name: weather
description: get forecasts
---
## Current
curl "https://wttr.in/$CITY?format=3"
"""


class TestSplitFrontmatter:
    def test_split_returns_metadata_and_body(self) -> None:
        frontmatter, body = split_frontmatter("---\nname: x\n---\nbody line\n")

        assert frontmatter == "name: x"
        assert body == "body line\n"

    def test_no_opening_delimiter_means_whole_document_is_body(self) -> None:
        content = "# Title\n---\nname: x\n---\n"

        frontmatter, body = split_frontmatter(content)

        assert frontmatter is None
        assert body == content

    def test_unclosed_delimiter_raises(self) -> None:
        with pytest.raises(ManifestError, match="frontmatter delimiter not properly closed"):
            split_frontmatter("---\nname: x\ndescription: y\n")

    def test_crlf_delimiters_are_recognised(self) -> None:
        frontmatter, body = split_frontmatter("---\r\nname: x\r\n---\r\nbody")

        assert frontmatter is not None
        assert "name: x" in frontmatter
        assert body == "body"


class TestSkillLoader:
    """Tests for SkillLoader."""

    def test_load_weather_manifest(self) -> None:
        """Test the minimal manifest parses name, description and actions."""
        skill = SkillLoader().load_content(WEATHER_MANIFEST)

        assert skill.name == "weather"
        assert skill.description == "get forecasts"
        assert skill.emoji == ""
        assert skill.actions == ("current",)
        assert skill.requirements.is_empty()
        assert skill.content.startswith("## Current")

    def test_nested_metadata_block(self) -> None:
        """Test emoji and requirements are read from a nested metadata block."""
        skill = SkillLoader().load_content(
            """---
name: mail
description: Manage mail
metadata:
  emoji: "📧"
  requires:
    anyBins: [gog, mutt]
    env: [MAIL_TOKEN]
---
body
"""
        )

        assert skill.emoji == "📧"
        assert skill.requirements.any_bins == ("gog", "mutt")
        assert skill.requirements.env == ("MAIL_TOKEN",)

    def test_top_level_requirements(self) -> None:
        skill = SkillLoader().load_content(
            """---
name: media
description: Convert media
emoji: "🎬"
requires:
  allBins: [ffmpeg]
  files: [.config/media.yml]
unknown_key: ignored
---
"""
        )

        assert skill.emoji == "🎬"
        assert skill.requirements.all_bins == ("ffmpeg",)
        assert skill.requirements.files == (".config/media.yml",)

    def test_missing_name_raises(self) -> None:
        with pytest.raises(ManifestError, match="name is required"):
            SkillLoader().load_content("---\ndescription: no name\n---\n")

    def test_missing_description_raises(self) -> None:
        with pytest.raises(ManifestError, match="description is required"):
            SkillLoader().load_content("---\nname: nodesc\n---\n")

    def test_body_only_manifest_fails_mandatory_fields(self) -> None:
        with pytest.raises(ManifestError):
            SkillLoader().load_content("# Just docs\n")

    def test_non_mapping_frontmatter_raises(self) -> None:
        with pytest.raises(ManifestError, match="mapping"):
            SkillLoader().load_content("---\n- a\n- b\n---\n")

    def test_invalid_yaml_raises(self) -> None:
        with pytest.raises(ManifestError, match="YAML"):
            SkillLoader().load_content("---\nname: [unclosed\n---\n")

    def test_load_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError, match="error reading skill file"):
            SkillLoader().load_file(tmp_path / "missing" / "SKILL.md")


class TestExtractActions:
    """Pinned fixtures for the action vocabulary heuristics."""

    def test_explicit_markers(self) -> None:
        body = "Use action: search to look things up.\nThen command: `Send` it.\n"

        assert extract_actions(body) == ("search", "send")

    def test_markers_require_colon(self) -> None:
        assert extract_actions("Please do the dishes and execute quickly.") == ()

    def test_declarations(self) -> None:
        body = "```python\ndef fetch_items():\n    pass\n```\nfunction cleanup_old\n"

        assert extract_actions(body) == ("fetch_items", "cleanup_old")

    def test_headings_with_verb_stems(self) -> None:
        body = "## Overview\n## Search Mail\n### Daily   Forecast\n## Notes\n"

        assert extract_actions(body) == ("search_mail", "daily_forecast")

    def test_rule_order_and_dedup(self) -> None:
        body = "## Status\naction: list\ndef status\n"

        assert extract_actions(body) == ("list", "status")

    def test_normalize_action(self) -> None:
        assert normalize_action("  Get   Current\tWeather ") == "get_current_weather"
