"""
Logging integration.

MaskingFilter masks structured log arguments of every record passing a logger
or handler; MaskingLoggerAdapter masks them before the record is created.
Only containers (dicts, lists, tuples) are masked, plain strings and numbers
pass through unchanged.

    engine = MaskingEngine(env="production")
    logging.getLogger("app").addFilter(MaskingFilter(engine))

    log = MaskingLoggerAdapter(logging.getLogger("app"), engine)
    log.info("user created: %s", {"email": "jane@example.com"})
"""

import logging
from collections.abc import Mapping
from typing import Any, MutableMapping, Optional

from .engine import MaskingEngine


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _mask_args(engine: MaskingEngine, args: Any) -> Any:
    if isinstance(args, Mapping):
        return engine.mask(args).masked
    if isinstance(args, tuple):
        return tuple(engine.mask(arg).masked if _is_container(arg) else arg for arg in args)
    return args


class MaskingFilter(logging.Filter):
    """Applies a MaskingEngine to log record msg and args before emission."""

    def __init__(self, engine: Optional[MaskingEngine] = None, name: str = ""):
        super().__init__(name)
        self.engine = engine or MaskingEngine()

    def filter(self, record: logging.LogRecord) -> bool:
        if _is_container(record.msg):
            record.msg = self.engine.mask(record.msg).masked
        if record.args:
            record.args = _mask_args(self.engine, record.args)
        return True


class MaskingLoggerAdapter(logging.LoggerAdapter):
    """
    LoggerAdapter masking container arguments and the `extra` mapping.

    Values given in `extra` at call time are masked together with the
    adapter's own extra mapping.
    """

    def __init__(self, logger: logging.Logger, engine: Optional[MaskingEngine] = None, extra: Optional[Mapping] = None):
        super().__init__(logger, dict(extra or {}))
        self.engine = engine or MaskingEngine()

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        if extra:
            kwargs["extra"] = self.engine.mask(extra).masked
        if _is_container(msg):
            msg = self.engine.mask(msg).masked
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(level):
            msg, kwargs = self.process(msg, kwargs)
            args = _mask_args(self.engine, args)
            # Skip this frame so records point at the caller
            kwargs["stacklevel"] = kwargs.get("stacklevel", 1) + 1
            self.logger.log(level, msg, *args, **kwargs)
