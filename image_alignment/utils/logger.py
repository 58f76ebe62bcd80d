import logging
import time
from contextlib import contextmanager


INDENT = '|   '

_handler = None


class BlockLogger(logging.Logger):
    """Logger that additionally supports indented blocks of log messages.

    Messages logged inside of a `block` are indented by one level and the duration of
    the block is logged when the block is left.
    """
    def __init__(self, name, level=logging.NOTSET):
        super().__init__(name, level)
        self.indent_level = 0

    def _log(self, level, msg, args, **kwargs):
        super()._log(level, INDENT * self.indent_level + str(msg), args, **kwargs)

    @contextmanager
    def block(self, msg, level=logging.INFO):
        """Context manager that logs `msg` and indents all messages logged inside.

        Parameters
        ----------
        msg
            Message to log when entering the block.
        level
            Level used for the message when entering and leaving the block.
        """
        self.log(level, msg)
        self.indent_level += 1
        start_time = time.perf_counter()
        try:
            yield self
        finally:
            self.indent_level -= 1
            self.log(level, f'... done ({time.perf_counter() - start_time:.3f}s)')


def _default_handler():
    global _handler
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter('%(levelname)s|%(name)s: %(message)s'))
    return _handler


def getLogger(name, level='INFO'):
    """Returns a `BlockLogger` for the given name.

    Parameters
    ----------
    name
        Name of the logger, prefixed by `image_alignment.`.
    level
        Level of the log messages to display, either as string or as integer.

    Returns
    -------
    The `BlockLogger`.
    """
    full_name = f'image_alignment.{name}'
    manager = logging.Logger.manager
    previous_class = manager.loggerClass
    manager.loggerClass = BlockLogger
    try:
        logger = logging.getLogger(full_name)
    finally:
        manager.loggerClass = previous_class
    if not isinstance(logger, BlockLogger):
        raise TypeError(f'Logger "{full_name}" was created elsewhere without block support')

    if level is not None:
        logger.setLevel(level.upper() if isinstance(level, str) else level)
    handler = _default_handler()
    if handler not in logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False
    return logger
