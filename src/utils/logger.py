import logging

from rich.logging import RichHandler

from utils import config


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the widest one seen so far so messages line up."""

    longest_name_length = 12

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=12):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        width = max(CenteredFormatter.longest_name_length, len(record.name))
        CenteredFormatter.longest_name_length = width
        record.name = record.name.center(width)
        return super().format(record)


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger that renders through rich. Level is DEBUG when
    STOREFRONT_DEBUG is set, INFO otherwise.
    """
    logger = logging.getLogger(name or "storefront")
    level = logging.DEBUG if config.DEBUG else logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False

    return logger
