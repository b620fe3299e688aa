import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from junkan.util.dirs import DEFAULT_HOME, ensure_dirs

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_mode(*, is_debug: bool, name: str = "junkan") -> None:
    level = logging.DEBUG if is_debug else logging.INFO
    logging.basicConfig(level=level)
    logger = logging.getLogger(name)
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def setup_logger(
    name: str,
    *,
    is_stream: bool = True,
    is_file: bool = False,
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    # 同じloggerに何度呼ばれてもhandlerは種類ごとに1つ
    has_file = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    has_stream = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler) for h in logger.handlers
    )

    if (is_stream or not is_file) and not has_stream:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(stream_handler)

    if is_file and not has_file:
        ensure_dirs()
        time_rotate_file_handler = TimedRotatingFileHandler(
            (Path(DEFAULT_HOME) / f"{name.lower()}.log").as_posix(),
            when="MIDNIGHT",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        time_rotate_file_handler.setLevel(logging.DEBUG)
        time_rotate_file_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(time_rotate_file_handler)

    return logger
