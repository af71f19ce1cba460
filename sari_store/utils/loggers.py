import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# PDF rendering libraries log every font/CSS hint at INFO
_NOISY = ("weasyprint", "fontTools")


def get_logger(name="sari_store", level=logging.INFO):
    """
    Console logger for the ledger. Configures `name` once (stream handler,
    LOG_FORMAT); repeated calls return the same logger untouched.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)
        for noisy in _NOISY:
            logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger
