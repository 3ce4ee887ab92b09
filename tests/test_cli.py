"""
Tests for the CLI module.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from arrestpub.cli import build_parser, main
from arrestpub.config import Config
from arrestpub.model import PublishError


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("arrestpub.cli.configure_logging"):
        yield


@patch("arrestpub.cli.run_daily_post")
@patch("arrestpub.cli.load_config")
def test_publish(mock_load_config, mock_run_daily_post, configured_config, capsys):
    """Test the publish command."""
    mock_load_config.return_value = configured_config
    mock_run_daily_post.return_value = {
        "status": "draft",
        "target_date": "2023-12-19",
        "record_count": 3,
        "post_id": "post123",
        "url": "https://example.ghost.io/p/post123/",
        "title": "Angelina County Arrests - Tuesday",
        "advertisement": None,
    }

    assert main(["publish", "--date", "2023-12-19", "--draft", "--format", "html", "--json"]) == 0

    mock_run_daily_post.assert_called_once_with(configured_config, target_date="2023-12-19", draft=True,
                                                output_format="html")
    assert json.loads(capsys.readouterr().out)["post_id"] == "post123"


@patch("arrestpub.cli.load_config")
def test_publish_missing_credentials(mock_load_config):
    """Test that missing credentials exit non-zero."""
    mock_load_config.return_value = Config()

    assert main(["publish"]) == 1


@patch("arrestpub.cli.run_daily_post")
@patch("arrestpub.cli.load_config")
def test_publish_failure(mock_load_config, mock_run_daily_post, configured_config):
    """Test that publish failures exit non-zero."""
    mock_load_config.return_value = configured_config
    mock_run_daily_post.side_effect = PublishError("rejected", status_code=422)

    assert main(["publish"]) == 1


@patch("arrestpub.cli.load_config")
def test_render(mock_load_config, tmp_path):
    """Test rendering a scenario to a file."""
    mock_load_config.return_value = Config()
    output = tmp_path / "out.html"

    assert main(["render", "--scenario", "singleArrest", "--output", str(output), "--with-ad"]) == 0

    html = output.read_text()
    assert "Smith, John Michael" in html
    assert "advertisement-section" in html


@patch("arrestpub.cli.load_config")
def test_render_lexical_default_path(mock_load_config, tmp_path):
    """Test rendering a node tree into the output directory."""
    cfg = Config()
    cfg.server.output_dir = str(tmp_path / "output")
    mock_load_config.return_value = cfg

    assert main(["render", "--scenario", "noArrests", "--format", "lexical"]) == 0

    tree = json.loads((tmp_path / "output" / "preview-noArrests.json").read_text())
    assert tree["root"]["type"] == "root"


@patch("arrestpub.cli.AdvertisementService")
@patch("arrestpub.cli.load_config")
def test_ads_review(mock_load_config, mock_service_cls, capsys):
    """Test reviewing an advertisement."""
    mock_load_config.return_value = Config()
    service = MagicMock()
    service.review_advertisement.return_value = {"success": True, "status": "Approved", "recordId": "recAD1"}
    mock_service_cls.from_config.return_value = service

    assert main(["ads", "review", "recAD1", "approve", "--notes", "ok"]) == 0

    service.review_advertisement.assert_called_once_with("recAD1", "approve", "ok")
    assert json.loads(capsys.readouterr().out)["status"] == "Approved"


@patch("arrestpub.cli.load_config")
def test_ads_stats_unconfigured(mock_load_config):
    """Test that advertisement commands need credentials."""
    mock_load_config.return_value = Config()

    assert main(["ads", "stats"]) == 1


@patch("arrestpub.cli.AirtableClient")
@patch("arrestpub.cli.load_config")
def test_diagnose(mock_load_config, mock_client_cls, configured_config, capsys):
    """Test printing the store schema and sample rows."""
    mock_load_config.return_value = configured_config
    client = MagicMock()
    client.get_base_schema.return_value = {
        "tables": [{"id": "tbl1", "name": "Bookings", "fields": [{"name": "Booking Date", "type": "dateTime"}]}],
    }
    client.list_records.return_value = [{"id": "rec1", "fields": {"Name": "DOE, JANE"}}]
    mock_client_cls.for_records.return_value = client

    assert main(["diagnose", "--samples", "1"]) == 0

    out = capsys.readouterr().out
    assert "Table: Bookings (tbl1)" in out
    assert "Booking Date: dateTime" in out
    assert "Name: 'DOE, JANE'" in out


def test_parser_requires_command():
    """Test that a command is required."""
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
