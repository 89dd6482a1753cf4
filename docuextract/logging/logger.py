import logging
import sys

_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _ContextFormatter(logging.Formatter):
    """Appends keyword context (``document_id=...``) to the formatted line."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{pairs}]"


class Log:
    """Centralized logging with structured format.

    Keyword arguments become context fields on the line, e.g.
    ``Log.info("Document completed", document_id=record.id)``.
    """

    _logger: logging.Logger = logging.getLogger("docuextract")

    @classmethod
    def configure(cls, log_level: str, debug: bool = False) -> None:
        """Set the level (DEBUG when debug mode is on) and attach a stdout handler once."""
        cls._logger.setLevel("DEBUG" if debug else log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                _ContextFormatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra=context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra=context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra=context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra=context)
