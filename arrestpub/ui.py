"""
Gradio UI for previewing daily articles.

This module renders the sample scenarios in the browser so layout changes can
be checked without touching the records store or the CMS.
"""

import sys
import json
import argparse
from typing import Optional, Tuple

import gradio as gr

from arrestpub.config import load_config, Config
from arrestpub.fixtures import SAMPLE_DATE, get_scenario, mock_advertisement, scenario_names
from arrestpub.log import configure_logging, get_logger
from arrestpub.render import FORMAT_HTML, FORMAT_LEXICAL, OUTPUT_FORMATS, build_document, to_html, to_lexical

logger = get_logger(__name__)


def preview_handler(scenario: str, date: str = "", output_format: str = FORMAT_HTML,
                    include_ad: bool = True, cfg: Optional[Config] = None) -> Tuple[str, str]:
    """
    Handle preview requests.

    Args:
        scenario: Sample scenario name
        date: Target date (YYYY-MM-DD), defaults to the sample date
        output_format: "html" or "lexical"
        include_ad: Place the sample advertisement in the article
        cfg: Configuration, loaded from the default locations when omitted

    Returns:
        Tuple of (article_html, raw_json)
    """
    try:
        if cfg is None:
            cfg = load_config()

        records = get_scenario(scenario)
        target_date = date.strip() if date and date.strip() else SAMPLE_DATE
        ad = mock_advertisement() if include_ad else None
        document = build_document(records, target_date, cfg, ad)

        article_html = to_html(document, cfg)
        if output_format == FORMAT_LEXICAL:
            raw = to_lexical(document, cfg)
        else:
            raw = {
                "recordCount": len(records),
                "scenario": scenario,
                "date": document.target_date,
                "blocks": document.kinds(),
            }
        return article_html, json.dumps(raw, indent=2)
    except Exception as e:
        logger.exception(f"Error rendering preview for {scenario}: {e}")
        return f"Error: {str(e)}", "{}"


def create_ui(cfg: Optional[Config] = None) -> gr.Blocks:
    """
    Create the Gradio UI.

    Args:
        cfg: Configuration shared with the handlers

    Returns:
        Gradio Blocks interface
    """
    with gr.Blocks(title="Jail Activity Preview") as ui:
        gr.Markdown("# Jail Activity Preview")
        gr.Markdown("Render the daily article from sample booking data.")

        with gr.Row():
            with gr.Column(scale=3):
                scenario_input = gr.Dropdown(
                    label="Scenario",
                    choices=scenario_names(),
                    value="default",
                    info="Sample data set to render"
                )
                date_input = gr.Textbox(
                    label="Date",
                    placeholder=SAMPLE_DATE,
                    info="Date the article reports on (YYYY-MM-DD)"
                )

                with gr.Row():
                    format_input = gr.Radio(
                        label="Output Format",
                        choices=list(OUTPUT_FORMATS),
                        value=FORMAT_HTML
                    )
                    ad_input = gr.Checkbox(
                        label="Include Advertisement",
                        value=True
                    )

                preview_button = gr.Button("Render", variant="primary")

        with gr.Tabs():
            with gr.TabItem("Article"):
                article_output = gr.HTML()
            with gr.TabItem("Raw JSON"):
                json_output = gr.JSON()

        preview_button.click(
            fn=lambda scenario, date, fmt, include_ad: preview_handler(scenario, date, fmt, include_ad, cfg),
            inputs=[scenario_input, date_input, format_input, ad_input],
            outputs=[article_output, json_output]
        )

        gr.Markdown("""
        ## How to Use

        1. Pick a scenario and optionally a date
        2. Choose "lexical" to see the node tree sent to the CMS
        3. Click "Render"
        """)

    return ui


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(description="Jail Activity Preview UI")
    parser.add_argument("--port", type=int, default=7860, help="Port to run the UI on")
    parser.add_argument("--share", action="store_true", help="Create a public link")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level")

    args = parser.parse_args()

    configure_logging(level=args.log_level)

    try:
        cfg = load_config(args.config)
        ui = create_ui(cfg)
        ui.launch(server_port=args.port, share=args.share)
        return 0
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
