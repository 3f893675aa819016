"""
Logger lookup for archfiles.

Every module logs under 'archfiles.<component>'. Nothing here installs
handlers: applications configure output with logging.basicConfig() or
archfiles.setup_logging().
"""
import logging


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for an archfiles component.

    Records propagate to the root logger. While the application has not
    configured logging at all, the component stays at WARNING so that
    request tracing does not leak onto stderr through the last-resort
    handler.

    Args:
        name: Component logger name, e.g. 'archfiles.transport'

    Returns:
        The logger
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger
