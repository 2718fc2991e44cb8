"""bitpup 日志配置

诊断信息统一走 logging 输出到 stderr，面向用户的结果由 CLI 通过 click.echo 输出，
两者互不混杂。支持人类可读文本与结构化 JSON 两种格式。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

LOG_LEVEL_ENV = "BITPUP_LOG_LEVEL"
LOG_JSON_ENV = "BITPUP_LOG_JSON"

_TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于 CI / 日志平台消费

    输出格式:
        {"timestamp": "...", "level": "INFO", "logger": "bitpup.core.pkg.installer",
         "message": "...", "line": 42, "exception": "..." (仅在有异常时)}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR）
        json_output: 为 True 时输出 JSON 行

    说明:
        - 输出到 stderr，不干扰 stdout 上的安装计划与结果
        - 自动清理已有 handlers，重复调用不会导致日志重复
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)


def setup_logging_from_env() -> None:
    """按环境变量 BITPUP_LOG_LEVEL / BITPUP_LOG_JSON 配置日志"""
    setup_logging(
        level=os.getenv(LOG_LEVEL_ENV, "WARNING"),
        json_output=os.getenv(LOG_JSON_ENV, "") == "1",
    )


def reset_logging() -> None:
    """清理根日志器上的所有 handlers（测试中重新配置时使用）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
