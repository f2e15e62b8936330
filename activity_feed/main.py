"""Process entry point: load configuration, build the app, serve it."""

import os

import uvicorn
from dotenv import load_dotenv

from .config import Config
from .http import create_session
from .logging_config import create_execution_logger, setup_structured_logging
from .scheduler import FeedScheduler
from .server import create_app
from .snapshot import SnapshotStore
from .sources import build_fetchers


def create_application(config: Config):
    """Wire fetchers, store, scheduler and app from one configuration."""
    feed_config = config.get_feed_config()
    feed_config.output_dir.mkdir(parents=True, exist_ok=True)
    session = create_session()
    fetchers = build_fetchers(config, session)
    store = SnapshotStore(feed_config.output_path)
    scheduler = FeedScheduler(
        fetchers,
        store,
        feed_config=feed_config,
        schedule_config=config.get_schedule_config(),
    )
    return create_app(store, scheduler, static_dir=feed_config.output_dir)


def main() -> None:
    load_dotenv()
    setup_structured_logging(os.getenv("LOG_LEVEL", "INFO"))
    logger = create_execution_logger("main")

    config = Config()
    server_config = config.get_server_config()
    logger.info(
        "Configuration initialized",
        host=server_config.host,
        port=server_config.port,
        interval_hours=config.interval_hours,
        flickr_mode=config.flickr_mode,
    )

    app = create_application(config)
    uvicorn.run(app, host=server_config.host, port=server_config.port, log_config=None)


if __name__ == "__main__":
    main()
