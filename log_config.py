# log_config.py
import logging
import os
import sys

_HANDLER_INSTALLED = False

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(
    level: str | None = None,
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
) -> None:
    """
    設定 root logger。
    level 沒給的話就讀環境變數 LOG_LEVEL，再沒有就用 INFO。
    每次呼叫都會套用 level；handler 只會裝一次。
    """
    global _HANDLER_INSTALLED

    env_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    resolved = _LEVEL_MAP.get(level.upper() if level else env_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved)

    if _HANDLER_INSTALLED:
        return

    # uvicorn 可能已經裝好自己的 handler，避免重複輸出
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        root.addHandler(handler)

    _HANDLER_INSTALLED = True
