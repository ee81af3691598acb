import logging

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'


def setup_logging(level='INFO'):
    """Attach a console handler to the ``foldershare`` logger.

    The werkzeug access log prints one line per request; it stays at WARNING
    unless we are debugging.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger('foldershare')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    logging.getLogger('werkzeug').setLevel(logging.INFO if level <= logging.DEBUG else logging.WARNING)
    return logger
