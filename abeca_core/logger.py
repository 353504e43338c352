import logging, json, sys, time, os


def get_logger(name="abeca", level=None, to_file=None):
    """
    Structured logger shared by all ABECA components.

    The level falls back to ABECA_LOG_LEVEL (default INFO). Records are
    written to stdout as one JSON object per line, timestamps in UTC.
    """
    logger = logging.getLogger(name)
    if level is None:
        level = os.getenv("ABECA_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime

        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(formatter)
        logger.addHandler(stream)

        to_file = to_file or os.getenv("ABECA_LOG_FILE")
        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            fh = logging.FileHandler(to_file)
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    return logger
