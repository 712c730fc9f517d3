import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    One place to set up logging for the whole service.

    Modules just do logging.getLogger(__name__) and log.
    Called once from the app factory.
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("carelane").setLevel(level.upper())
