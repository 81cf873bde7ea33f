from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from pathlib import Path

from scraper_console.services.api import create_app

root = Path(__file__).resolve().parent


def create_web_app(api_app: FastAPI | None = None) -> FastAPI:
    api_app = api_app or create_app()
    # the mounted sub-app's lifespan does not run, so the outer app owns it
    app = FastAPI(title="scraper-console web", lifespan=api_app.router.lifespan_context)

    # "/" must be registered BEFORE the catch-all mount("") or it gets intercepted
    @app.get("/", response_class=HTMLResponse)
    def index():
        return (root / "templates" / "index.html").read_text(encoding="utf-8")

    # mount API sub-app last, catch-all prefix "" would shadow routes above it
    app.mount("", api_app)
    return app


def main():
    import logging
    import os

    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.getenv("CONSOLE_HOST", "127.0.0.1")
    port = int(os.getenv("CONSOLE_PORT", "3000"))
    uvicorn.run(create_web_app(), host=host, port=port)


if __name__ == "__main__":
    main()
