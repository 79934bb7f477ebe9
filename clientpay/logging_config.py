import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_NAME = "clientpay"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach one stream handler to the package logger. Streamlit re-executes
    the script on every interaction, so this must be safe to call repeatedly.
    """
    logger = logging.getLogger("clientpay")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    # google-auth / urllib3 log every token refresh and request at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    return logger
