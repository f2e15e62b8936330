"""HTTP surface serving the current feed snapshot."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from .scheduler import FeedScheduler
from .snapshot import SnapshotStore

FEED_MEDIA_TYPE = "application/xml; charset=utf-8"


def create_app(
    store: SnapshotStore,
    scheduler: FeedScheduler | None = None,
    static_dir: Path | None = None,
) -> FastAPI:
    """Build the FastAPI app around a snapshot store.

    Args:
        store: Source of the served document
        scheduler: Started with the app and stopped on shutdown, if given
        static_dir: Directory holding the cached feed file, mounted at /static
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        yield
        if scheduler is not None:
            scheduler.stop()

    app = FastAPI(title="Activity Journal Feed", lifespan=lifespan)

    def serve_feed() -> Response:
        snapshot = store.current()
        if snapshot is None:
            raise HTTPException(status_code=404, detail="Feed has not been built yet")
        return Response(content=snapshot.content, media_type=FEED_MEDIA_TYPE)

    app.add_api_route("/", serve_feed, methods=["GET"])
    app.add_api_route("/feed.xml", serve_feed, methods=["GET"])

    @app.get("/healthz")
    def healthz() -> dict:
        return {
            "status": "ok",
            "snapshot": store.current() is not None,
            "state": scheduler.state.value if scheduler is not None else "idle",
        }

    if static_dir is not None:
        app.mount(
            "/static", StaticFiles(directory=static_dir, check_dir=False), name="static"
        )

    return app
