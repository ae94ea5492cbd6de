"""Logging for gitlab-mr, backed by logfire.

Four sinks can be switched on independently: the terminal, a plain
text file under ``config.log_root``, an OTLP collector and logfire.dev.
What gets logged where:

- git commands and forge requests: debug
- raw git output: spew
- workflow milestones (branch planned, pushed, MR created): info
- plan steps and MR creation: spans

Modules log through the ``logger`` proxy, which does nothing until
setup_logger() has run.
"""

from __future__ import annotations

import contextlib
from abc import abstractmethod
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult
from pydantic import Field, PrivateAttr, model_validator

from gitlab_mr.core.base import BaseConfig

# Level names to OpenTelemetry severity numbers, most verbose first
LEVELS = {
    'spew': logs_pb2.SEVERITY_NUMBER_TRACE,
    'trace': logs_pb2.SEVERITY_NUMBER_TRACE3,
    'debug': logs_pb2.SEVERITY_NUMBER_DEBUG,
    'info': logs_pb2.SEVERITY_NUMBER_INFO,
    'warn': logs_pb2.SEVERITY_NUMBER_WARN,
    'error': logs_pb2.SEVERITY_NUMBER_ERROR,
    'fatal': logs_pb2.SEVERITY_NUMBER_FATAL,
}

_current_logger: Logger | None = None


def level_number(name: str | None) -> int:
    return LEVELS.get((name or "info").lower(), LEVELS['info'])


def level_name(number: int) -> str:
    """Name of the highest level at or below number."""
    for name in reversed(LEVELS):
        if number >= LEVELS[name]:
            return name
    return 'spew'


def _span_level(span: ReadableSpan) -> int:
    return (span.attributes or {}).get('logfire.level_num', LEVELS['info'])


class _LoggerProxy:
    """Stands in for the Logger until setup_logger() creates it."""

    def __getattr__(self, name):
        if _current_logger is None:
            def _noop(*args, **kwargs):  # noqa: ARG001
                pass
            return _noop
        return getattr(_current_logger, name)

    def __enter__(self):
        if _current_logger is None:
            return self
        return _current_logger.__enter__()

    def __exit__(self, *args):
        if _current_logger is None:
            return False
        return _current_logger.__exit__(*args)


logger = _LoggerProxy()


class MinimumLevelExporter(SpanExporter):
    """Passes on only the spans at or above a level."""

    def __init__(self, exporter: SpanExporter, level: str | None):
        self._exporter = exporter
        self.threshold = level_number(level)

    def export(self, spans) -> SpanExportResult:
        kept = [span for span in spans if _span_level(span) >= self.threshold]
        if not kept:
            return SpanExportResult.SUCCESS
        return self._exporter.export(kept)

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


class LineExporter(SpanExporter):
    """Writes one line per span: time, level, message, then the keyword
    arguments given to the logger call.

    Newlines inside the message are escaped so that a multi-line commit
    message or forge error stays on its line.
    """

    # Attributes logfire and OpenTelemetry add on their own
    _internal = ('code.', 'logfire.', 'otel.', 'telemetry.', 'service.',
                 'process.')

    def __init__(self, out):
        self._out = out

    @classmethod
    def format(cls, span: ReadableSpan) -> str:
        attrs = span.attributes or {}
        stamp = datetime.fromtimestamp(span.start_time / 1e9, tz=UTC)
        message = str(attrs.get('logfire.msg', span.name))
        message = message.replace('\r', '\\r').replace('\n', '\\n')
        line = (
            f"{stamp:%Y-%m-%d %H:%M:%S} "
            f"{level_name(_span_level(span)):<5} {message}"
        )

        extra = ' '.join(
            f"{key}={value!r}" for key, value in sorted(attrs.items())
            if not key.startswith(cls._internal)
        )
        return f"{line} │ {extra}" if extra else line

    def export(self, spans) -> SpanExportResult:
        for span in spans:
            # logfire reports a span once when it opens and once when it
            # closes; only the closed one goes to the file
            attrs = span.attributes or {}
            if attrs.get('logfire.span_type') == 'pending_span':
                continue
            self._out.write(self.format(span) + '\n')
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        pass


class Sink(BaseConfig):
    """One log destination. Disabled sinks create nothing."""

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Minimum level for this sink; inherits logger.level when unset. "
            "Valid: spew, trace, debug, info, warn, error, fatal"
        ),
    )

    _processor: Any = PrivateAttr(default=None)

    @abstractmethod
    def create_processor(self, log_root: Path, run_name: str):
        """Span processor for this sink, or None when logfire.configure()
        handles it."""

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Terminal output through logfire's console exporter."""

    colors: str = Field(
        default="auto",
        description="Color mode: auto, always, never",
    )

    def create_processor(self, log_root: Path, run_name: str):
        return None


class OTLPSink(Sink):
    """OTLP gRPC export (Jaeger, SigNoz, ...)."""

    enabled: bool = Field(default=False, description="Enable OTLP export")
    endpoint: str = Field(
        default="http://localhost:4317",
        description="OTLP gRPC endpoint",
    )
    insecure: bool = Field(default=True, description="Skip TLS")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra headers, e.g. for authentication",
    )

    def create_processor(self, log_root: Path, run_name: str):
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        exporter = OTLPSpanExporter(
            endpoint=self.endpoint,
            insecure=self.insecure,
            headers=self.headers or None,
        )
        return BatchSpanProcessor(MinimumLevelExporter(exporter, self.level))


class FileSink(Sink):
    """Plain text log file, appended to across invocations."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{log_root}/{run_name}.log",
        description="Log file path; {log_root} and {run_name} are filled in",
    )

    _file: Any = PrivateAttr(default=None)

    def log_path(self, log_root: Path, run_name: str) -> Path:
        return Path(self.path.format(log_root=log_root, run_name=run_name))

    def create_processor(self, log_root: Path, run_name: str):
        from opentelemetry.sdk.trace.export import SimpleSpanProcessor

        path = self.log_path(log_root, run_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        return SimpleSpanProcessor(
            MinimumLevelExporter(LineExporter(self._file), self.level)
        )

    def close(self):
        super().close()
        if self._file and not self._file.closed:
            with contextlib.suppress(OSError):
                self._file.close()


class LogfireSink(Sink):
    """logfire.dev cloud; needs a token or LOGFIRE_TOKEN."""

    enabled: bool = Field(default=False, description="Send to logfire.dev")
    token: str | None = Field(default=None, description="logfire API token")

    def create_processor(self, log_root: Path, run_name: str):
        return None


class Logger(BaseConfig):
    """The configured sinks plus the logging calls used across gitlab-mr.

    Closing the logger (or leaving it as a context manager) shuts down
    every sink, which flushes and closes the log file.
    """

    level: str = Field(
        default="info",
        description="Default minimum level for sinks that set none",
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    file: FileSink = Field(default_factory=FileSink)
    otlp: OTLPSink = Field(default_factory=OTLPSink)
    logfire: LogfireSink = Field(default_factory=LogfireSink)

    @model_validator(mode='after')
    def _inherit_level(self) -> Logger:
        for sink in self.sinks:
            if sink.level is None:
                sink.level = self.level
        return self

    @property
    def sinks(self) -> list[Sink]:
        return [self.console, self.file, self.otlp, self.logfire]

    def setup(self, log_root: Path, run_name: str):
        """Open the enabled sinks and hand them to logfire.

        Args:
            log_root: Directory the file sink writes under
            run_name: Name of this invocation, used in the file name and
                the service name
        """
        import logfire

        for sink in self.sinks:
            if sink.enabled:
                sink._processor = sink.create_processor(log_root, run_name)

        processors = [
            sink._processor for sink in self.sinks
            if sink.enabled and sink._processor
        ]
        console = (
            logfire.ConsoleOptions(
                # logfire's console knows no level below trace
                min_log_level=(
                    'trace' if self.console.level == 'spew'
                    else self.console.level
                ),
                colors=self.console.colors,
                include_timestamps=True,
            )
            if self.console.enabled else False
        )
        logfire.configure(
            service_name=f"gitlab-mr-{run_name}",
            send_to_logfire=self.logfire.enabled,
            token=self.logfire.token if self.logfire.enabled else None,
            console=console,
            additional_span_processors=processors or None,
        )

    def log(self, level: str, msg: str, **kwargs):
        import logfire
        logfire.log(
            level=level_number(level),
            msg_template=msg,
            attributes=kwargs or None,
        )

    def spew(self, msg: str, **kwargs):
        self.log('spew', msg, **kwargs)

    def trace(self, msg: str, **kwargs):
        self.log('trace', msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        self.log('debug', msg, **kwargs)

    def info(self, msg: str, **kwargs):
        self.log('info', msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        self.log('warn', msg, **kwargs)

    def error(self, msg: str, **kwargs):
        self.log('error', msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Context manager timing a block, e.g. one git step."""
        import logfire
        return logfire.span(msg, **kwargs)


def setup_logger(
    log_root: Path,
    run_name: str,
    level: str = "info",
    **sinks: Sink | None,
) -> Logger:
    """Create the global logger and open its sinks.

    Config calls this once preferences are loaded; tests call it
    directly. Sinks not passed (or passed as None) keep their defaults.
    """
    global _current_logger

    _current_logger = Logger(
        level=level,
        **{name: sink for name, sink in sinks.items() if sink is not None},
    )
    _current_logger.setup(log_root, run_name)
    return _current_logger
