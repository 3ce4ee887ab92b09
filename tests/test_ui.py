"""
Tests for the preview UI handlers.
"""

import json

import gradio as gr

from arrestpub.ui import create_ui, preview_handler


def test_preview_handler_html(sample_config):
    """Test rendering a scenario to markup."""
    article_html, raw_json = preview_handler("singleArrest", "", "html", cfg=sample_config)

    assert "Smith, John Michael" in article_html
    assert "advertisement-section" in article_html
    raw = json.loads(raw_json)
    assert raw["recordCount"] == 1
    assert raw["date"] == "2023-12-19"
    assert raw["blocks"][-1] == "footer"


def test_preview_handler_lexical_without_ad(sample_config):
    """Test rendering a node tree without an advertisement."""
    article_html, raw_json = preview_handler("noArrests", "2023-12-24", "lexical", include_ad=False,
                                             cfg=sample_config)

    assert "advertisement-section" not in article_html
    assert "Sunday, Dec 24, 2023" in article_html
    assert json.loads(raw_json)["root"]["type"] == "root"


def test_preview_handler_unknown_scenario(sample_config):
    """Test that errors are shown instead of raised."""
    article_html, raw_json = preview_handler("nope", cfg=sample_config)

    assert article_html.startswith("Error:")
    assert raw_json == "{}"


def test_create_ui(sample_config):
    """Test building the interface."""
    assert isinstance(create_ui(sample_config), gr.Blocks)
