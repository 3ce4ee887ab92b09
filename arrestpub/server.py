"""
Local preview server.

Endpoints:
    GET  /                                    - Index of sample scenarios
    GET  /preview                             - Rendered article page
    GET  /api/booking-data                    - Sample records for a scenario
    GET  /api/advertisement-data              - Sample advertisement
    GET  /api/generate-preview                - Rendered article as JSON
    POST /api/submit-advertisement            - Advertisement submission (multipart)
    GET  /api/advertisement-stats             - Advertisement counts per status
    GET  /api/pending-advertisements          - Submissions awaiting review
    POST /api/review-advertisement/{record_id} - Approve or reject a submission
    GET  /output/...                          - Generated files
"""

import argparse
import html
import sys
from typing import Optional

import gradio as gr
import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from arrestpub import __version__
from arrestpub.ads import AdvertisementService, UploadedImage
from arrestpub.config import Config, load_config
from arrestpub.dates import format_long_date, local_today
from arrestpub.fixtures import SAMPLE_DATE, get_scenario, mock_advertisement, scenario_names
from arrestpub.log import configure_logging, get_logger
from arrestpub.model import AdValidationError, ConfigError, RecordsStoreError
from arrestpub.render import FORMAT_HTML, FORMAT_LEXICAL, OUTPUT_FORMATS, build_document, to_html, to_lexical
from arrestpub.ui import create_ui

logger = get_logger(__name__)


class ReviewRequest(BaseModel):
    action: str
    notes: Optional[str] = None


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def _page(title: str, body: str) -> str:
    return PAGE_TEMPLATE.format(title=html.escape(title), body=body)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def build_preview_router(cfg: Config) -> APIRouter:
    """Routes rendering sample data; they never call external services."""
    router = APIRouter()

    @router.get("/", response_class=HTMLResponse)
    def index():
        links = "".join(
            f'<li><a href="/preview?scenario={name}">{html.escape(name)}</a></li>'
            for name in scenario_names()
        )
        body = (f"<h1>{html.escape(cfg.publication.brand)} Jail Activity Preview</h1>"
                f"<p>Sample date: {SAMPLE_DATE}</p><ul>{links}</ul>")
        return _page("Jail Activity Preview", body)

    @router.get("/preview", response_class=HTMLResponse)
    def preview(scenario: str = "default", date: str = SAMPLE_DATE):
        try:
            records = get_scenario(scenario)
            document = build_document(records, date, cfg, mock_advertisement())
        except KeyError as e:
            return HTMLResponse(_page("Not found", html.escape(str(e))), status_code=404)
        except ValueError as e:
            return HTMLResponse(_page("Bad request", html.escape(str(e))), status_code=400)

        title = f"{cfg.publication.brand} {cfg.publication.subject} - {format_long_date(document.target_date)}"
        return _page(title, f"<h1>{html.escape(title)}</h1>{to_html(document, cfg)}")

    @router.get("/api/booking-data")
    def booking_data(scenario: str = "default"):
        try:
            return get_scenario(scenario)
        except KeyError as e:
            return _error(404, str(e.args[0]))

    @router.get("/api/advertisement-data")
    def advertisement_data():
        return mock_advertisement()

    @router.get("/api/generate-preview")
    def generate_preview(scenario: str = "default", date: str = SAMPLE_DATE, format: str = FORMAT_HTML):
        if format not in OUTPUT_FORMATS:
            return _error(400, f"Unsupported output format: {format}")
        try:
            records = get_scenario(scenario)
            document = build_document(records, date, cfg, mock_advertisement())
        except KeyError as e:
            return _error(404, str(e.args[0]))
        except ValueError as e:
            return _error(400, str(e))

        content = {
            "success": True,
            "html": to_html(document, cfg),
            "metadata": {
                "recordCount": len(records),
                "scenario": scenario,
                "date": document.target_date,
                "format": format,
            },
        }
        if format == FORMAT_LEXICAL:
            content["lexical"] = to_lexical(document, cfg)
        return content

    return router


def build_ads_router(cfg: Config, ad_service: AdvertisementService) -> APIRouter:
    """Advertisement submission and moderation routes."""
    router = APIRouter(prefix="/api")

    @router.post("/submit-advertisement")
    async def submit_advertisement(request: Request):
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}

        image = None
        upload = form.get("adImage")
        if upload is not None and not isinstance(upload, str):
            image = UploadedImage(upload.filename, upload.content_type, await upload.read())

        today = local_today(cfg.publication.timezone)
        return await run_in_threadpool(ad_service.submit_advertisement, fields, image, today)

    @router.get("/advertisement-stats")
    def advertisement_stats():
        return {"success": True, "stats": ad_service.get_advertisement_stats()}

    @router.get("/pending-advertisements")
    def pending_advertisements():
        pending = ad_service.list_pending_advertisements()
        return {"success": True, "count": len(pending), "advertisements": pending}

    @router.post("/review-advertisement/{record_id}")
    def review_advertisement(record_id: str, review: ReviewRequest):
        return ad_service.review_advertisement(record_id, review.action, review.notes)

    return router


def create_app(cfg: Optional[Config] = None, ad_service: Optional[AdvertisementService] = None,
               with_ui: bool = False) -> FastAPI:
    """
    Create the preview application.

    Args:
        cfg: Configuration, loaded from the default locations when omitted
        ad_service: Advertisement service, built from configuration when omitted
        with_ui: Mount the Gradio preview UI at /ui

    Returns:
        FastAPI application
    """
    if cfg is None:
        cfg = load_config()
    if ad_service is None:
        ad_service = AdvertisementService.from_config(cfg)

    app = FastAPI(title="Jail Activity Preview", version=__version__)
    app.state.config = cfg

    @app.exception_handler(AdValidationError)
    async def validation_error_handler(request: Request, exc: AdValidationError):
        logger.info(f"Rejected request to {request.url.path}: {exc.message}")
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        logger.error(f"Service not configured for {request.url.path}: {exc}")
        return _error(503, str(exc))

    @app.exception_handler(RecordsStoreError)
    async def store_error_handler(request: Request, exc: RecordsStoreError):
        logger.error(f"Records store failure on {request.url.path}: {exc}")
        return _error(500, "Records store request failed", details=str(exc))

    app.include_router(build_preview_router(cfg))
    app.include_router(build_ads_router(cfg, ad_service))
    app.mount("/output", StaticFiles(directory=cfg.server.output_dir, check_dir=False), name="output")

    if with_ui:
        app = gr.mount_gradio_app(app, create_ui(cfg), path="/ui")

    return app


def serve(cfg: Config, with_ui: bool = False) -> None:
    """Run the preview server until interrupted."""
    app = create_app(cfg, with_ui=with_ui)
    logger.info(f"Local development server running at http://{cfg.server.host}:{cfg.server.port}")
    uvicorn.run(app, host=cfg.server.host, port=cfg.server.port)


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(description="Jail Activity preview server")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--host", help="Host to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--with-ui", action="store_true", help="Mount the preview UI at /ui")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Logging level")

    args = parser.parse_args()

    try:
        cfg = load_config(args.config)
        configure_logging(cfg, args.log_level)
        if args.host:
            cfg.server.host = args.host
        if args.port:
            cfg.server.port = args.port
        serve(cfg, with_ui=args.with_ui)
        return 0
    except Exception as e:
        logger.exception(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
