import logging

from restaurant_orders.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging() -> None:
    logging.basicConfig(format=LOG_FORMAT, level=settings.log_level.upper())
    # SQL echo goes through its own logger when enabled in settings.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.sql_echo else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
