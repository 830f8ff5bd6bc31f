import logging
import sys

import uvicorn

from src.object_gateway.app import create_app
from src.object_gateway.config import load_config
from src.object_gateway.readiness import initialize_storage
from src.shared.exceptions import StartupError


logger = logging.getLogger(__name__)

HOST = "0.0.0.0"
PORT = 8080

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    configure_logging("INFO")

    try:
        config = load_config()
        logging.getLogger().setLevel(config.log_level)
        storage = initialize_storage(config)
    except StartupError as e:
        logger.critical("%s", e)
        sys.exit(1)

    app = create_app(storage)

    logger.info("Server running on :%d", PORT)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
