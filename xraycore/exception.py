"""Formatting of errors and raised exceptions into trace exception records."""

from __future__ import annotations

import abc
import inspect
import itertools
import os
import secrets
import sys
import sysconfig
import traceback
from dataclasses import dataclass, field
from types import FrameType, TracebackType
from typing import Any, Iterable, Iterator

__all__ = [
    "DEFAULT_ERROR_FRAME_COUNT",
    "StackFrame",
    "ExceptionRecord",
    "MultiError",
    "XRayError",
    "FormattingStrategy",
    "DefaultFormattingStrategy",
    "convert_stack",
    "new_exception_id",
]

DEFAULT_ERROR_FRAME_COUNT = 32
_MAX_FRAME_COUNT = 32
_ROOT_PATH_KEYS = ("stdlib", "platstdlib", "purelib", "platlib")


@dataclass
class StackFrame:
    """One frame of a recorded stack."""

    path: str = ""
    line: int = 0
    label: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the frame as a mapping, leaving out empty fields."""
        return {
            key: value
            for key, value in (("path", self.path), ("line", self.line), ("label", self.label))
            if value
        }


@dataclass
class ExceptionRecord:
    """An exception as it is recorded in a segment."""

    id: str = ""
    type: str = ""
    message: str = ""
    stack: list[StackFrame] = field(default_factory=list)
    remote: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a mapping, leaving out empty fields."""
        result: dict[str, Any] = {}
        if self.id:
            result["id"] = self.id
        if self.type:
            result["type"] = self.type
        if self.message:
            result["message"] = self.message
        if self.stack:
            result["stack"] = [frame.to_dict() for frame in self.stack]
        if self.remote:
            result["remote"] = True
        return result


class MultiError(Exception):
    """Several errors reported together."""

    def __init__(self, errors: Iterable[BaseException] = ()) -> None:
        self.errors = list(errors)
        super().__init__(*self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __str__(self) -> str:
        lines = [f"{len(self.errors)} errors occurred:\n"]
        lines.extend(f"* {err}\n" for err in self.errors)
        return "".join(lines)


class XRayError(Exception):
    """An error with a type, a message and the stack it was created on."""

    def __init__(
        self,
        type: str,
        message: str,
        stack: Iterable[traceback.FrameSummary] = (),
    ) -> None:
        super().__init__(message)
        self.type = type
        self.message = message
        self.stack = list(stack)

    def stack_trace(self) -> list[traceback.FrameSummary]:
        """Return the recorded frames, innermost first."""
        return self.stack

    def __str__(self) -> str:
        return self.message


class FormattingStrategy(abc.ABC):
    """Turns messages and errors into XRayError values and exception records."""

    @abc.abstractmethod
    def error(self, message: str) -> XRayError:
        """Return an error of type ``error`` with the caller's stack."""

    @abc.abstractmethod
    def errorf(self, format_string: str, *args: Any) -> XRayError:
        """Like ``error`` with a %-formatted message."""

    @abc.abstractmethod
    def panic(self, message: str) -> XRayError:
        """Return an error of type ``panic`` with the stack of the failure."""

    @abc.abstractmethod
    def panicf(self, format_string: str, *args: Any) -> XRayError:
        """Like ``panic`` with a %-formatted message."""

    @abc.abstractmethod
    def exception_from_error(self, err: BaseException) -> ExceptionRecord:
        """Return the exception record for ``err``."""


def _format(format_string: str, args: tuple[Any, ...]) -> str:
    return format_string % args if args else format_string


class DefaultFormattingStrategy(FormattingStrategy):
    """Default strategy recording at most ``frame_count`` frames."""

    def __init__(self, frame_count: int = DEFAULT_ERROR_FRAME_COUNT) -> None:
        if frame_count > _MAX_FRAME_COUNT or frame_count < 0:
            raise ValueError("frameCount must be a non-negative integer and less than 32")
        self.frame_count = frame_count

    def _capture(self, frame: FrameType | None) -> list[traceback.FrameSummary]:
        if frame is None:
            return []
        return list(
            traceback.StackSummary.extract(traceback.walk_stack(frame), limit=self.frame_count)
        )

    def _caller_stack(self, depth: int) -> list[traceback.FrameSummary]:
        frame = inspect.currentframe()
        for _ in range(depth + 1):
            if frame is None:
                break
            frame = frame.f_back
        return self._capture(frame)

    def error(self, message: str) -> XRayError:
        return XRayError("error", message, self._caller_stack(1))

    def errorf(self, format_string: str, *args: Any) -> XRayError:
        return XRayError("error", _format(format_string, args), self._caller_stack(1))

    def _panic_stack(self, depth: int) -> list[traceback.FrameSummary]:
        active = sys.exc_info()[1]
        tb = active.__traceback__ if active is not None else None
        if tb is None:
            return self._caller_stack(depth + 1)
        return list(
            traceback.StackSummary.extract(_failure_frames(tb), limit=self.frame_count)
        )

    def panic(self, message: str) -> XRayError:
        return XRayError("panic", message, self._panic_stack(1))

    def panicf(self, format_string: str, *args: Any) -> XRayError:
        return XRayError("panic", _format(format_string, args), self._panic_stack(1))

    def exception_from_error(self, err: BaseException) -> ExceptionRecord:
        try:
            request_id = err.request_id  # type: ignore[attr-defined]
        except AttributeError:
            request_id = ""
        record = ExceptionRecord(
            id=new_exception_id(),
            type=_type_name(err),
            message=str(err),
            remote=bool(request_id),
        )
        if isinstance(err, XRayError):
            record.type = err.type

        try:
            stack_trace = err.stack_trace  # type: ignore[attr-defined]
        except AttributeError:
            stack_trace = None
        if callable(stack_trace):
            frames = list(stack_trace())
        elif err.__traceback__ is not None:
            frames = list(traceback.StackSummary.extract(_failure_frames(err.__traceback__)))
        else:
            frames = self._caller_stack(1)

        record.stack = convert_stack(frames)
        return record


def _failure_frames(tb: TracebackType) -> Iterator[tuple[FrameType, int]]:
    """Frames from where ``tb`` was raised outwards past where it was caught."""
    raised = reversed(list(traceback.walk_tb(tb)))
    return itertools.chain(raised, traceback.walk_stack(tb.tb_frame.f_back))


def _type_name(err: BaseException) -> str:
    cls = type(err)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _root_paths() -> list[str]:
    paths = sysconfig.get_paths()
    roots = [paths[key] for key in _ROOT_PATH_KEYS if paths.get(key)]
    roots.append(os.getcwd())
    return [os.path.abspath(root) for root in roots]


def _relative_path(filename: str) -> str:
    """Strip the longest installation or working-directory root from ``filename``."""
    absolute = os.path.abspath(filename)
    best = ""
    for root in _root_paths():
        if absolute.startswith(root + os.sep) and len(root) > len(best):
            best = root
    if not best:
        return filename
    return os.path.relpath(absolute, best).replace(os.sep, "/")


def convert_stack(frames: Iterable[traceback.FrameSummary]) -> list[StackFrame]:
    """Convert captured frames into recorded stack frames, keeping their order."""
    return [
        StackFrame(path=_relative_path(frame.filename), line=frame.lineno or 0, label=frame.name)
        for frame in frames
    ]


def new_exception_id() -> str:
    """Return a random 16-character hexadecimal exception ID."""
    return secrets.token_hex(8)