"""
JSONL audit trail of registry activity.

One file per process session. Every line is a JSON object with
timestamp, event_number and event_type, followed by event fields:

    session_start     session_id
    registry_loaded   version, skill_count, index
    reload_failed     error_type, error, active_version
    query             query, limit, version, results [{id, score}]
    fetch_miss        id
    session_end       event_count

Query events are what stop-word and weight tuning is done against.
"""

import datetime as _datetime
import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

_logger = _logging.getLogger(__name__)

DEFAULT_LOG_DIR = _pathlib.Path("/tmp/skillregistry-logs")


def _resolve_log_path(
    session_id: str,
    log_dir: _pathlib.Path | str | None,
    log_file: _pathlib.Path | str | None,
    private_mode: bool,
) -> _pathlib.Path:
    if log_file:
        path = _pathlib.Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    directory = _pathlib.Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    if private_mode:
        _os.chmod(directory, 0o700)
    return directory / f"skillregistry_{session_id}.jsonl"


class RegistryEventLogger:
    """
    Appends registry events to a JSONL file.

    A disabled logger accepts every call and writes nothing. Write
    failures are reported through the package logger and never reach
    the registry.

        with RegistryEventLogger(log_dir="/tmp/logs") as events:
            events.log_query("livewire session", 5, [("tall-stack", 2)])
    """

    def __init__(
        self,
        *,
        log_dir: _pathlib.Path | str | None = None,
        log_file: _pathlib.Path | str | None = None,
        private_mode: bool = True,
        enabled: bool = True,
    ) -> None:
        """
        Args:
            log_dir: Directory for the session file (default DEFAULT_LOG_DIR).
            log_file: Exact file to append to; log_dir is then ignored.
            private_mode: chmod log_dir to 0700.
            enabled: False turns every method into a no-op.
        """
        self._session_id = f"{_datetime.datetime.now():%Y%m%d_%H%M%S}"
        self._count = 0
        self._path: _pathlib.Path | None = None
        self._stream: _typing.TextIO | None = None

        if enabled:
            self._path = _resolve_log_path(self._session_id, log_dir, log_file, private_mode)
            # Closed by close()
            self._stream = self._path.open("a", encoding="utf-8")  # noqa: SIM115
            self._emit("session_start", session_id=self._session_id)

    @property
    def enabled(self) -> bool:
        return self._stream is not None

    @property
    def file_path(self) -> _pathlib.Path | None:
        return self._path

    @property
    def event_count(self) -> int:
        return self._count

    def _emit(self, event_type: str, **fields: _typing.Any) -> None:
        if self._stream is None:
            return

        self._count += 1
        line = _json.dumps(
            {
                "timestamp": _datetime.datetime.now().isoformat(),
                "event_number": self._count,
                "event_type": event_type,
                **fields,
            },
            default=str,
        )
        try:
            self._stream.write(line + "\n")
            self._stream.flush()
        except OSError as e:
            _logger.warning("Could not write %s event to %s: %s", event_type, self._path, e)

    def log_registry_loaded(
        self,
        version: int,
        skill_count: int,
        index_stats: dict[str, _typing.Any],
    ) -> None:
        self._emit("registry_loaded", version=version, skill_count=skill_count, index=index_stats)

    def log_reload_failed(self, error: BaseException, active_version: int | None) -> None:
        self._emit(
            "reload_failed",
            error_type=type(error).__name__,
            error=str(error),
            active_version=active_version,
        )

    def log_query(
        self,
        query: str,
        limit: int,
        results: list[tuple[str, int]],
        version: int | None = None,
    ) -> None:
        """Record a query with its ranked (id, score) pairs."""
        ranked = [{"id": skill_id, "score": score} for skill_id, score in results]
        self._emit("query", query=query, limit=limit, version=version, results=ranked)

    def log_fetch_miss(self, skill_id: str) -> None:
        self._emit("fetch_miss", id=skill_id)

    def log_event(self, event_type: str, **kwargs: _typing.Any) -> None:
        """Record an event of any type; values that are not JSON become strings."""
        self._emit(event_type, **kwargs)

    def close(self) -> None:
        """Write session_end and release the file. Safe to call again."""
        if self._stream is None:
            return
        self._emit("session_end", event_count=self._count)
        stream, self._stream = self._stream, None
        stream.close()

    def __enter__(self) -> "RegistryEventLogger":
        return self

    def __exit__(self, *exc_info: _typing.Any) -> None:
        self.close()
