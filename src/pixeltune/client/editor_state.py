"""Immutable editor state and its transitions.

The client moves through ``idle -> awaiting_file -> cropping -> uploading ->
processing -> ready`` with ``error`` reachable from any request phase. Every
change goes through :func:`transition`, which returns a new state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .api_client import ProcessedFiles


class EditorPhase(StrEnum):
    IDLE = "idle"
    AWAITING_FILE = "awaiting_file"
    CROPPING = "cropping"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


class InvalidTransitionError(Exception):
    """Raised when an event is not accepted in the current phase."""

    def __init__(self, phase: EditorPhase, event: object) -> None:
        super().__init__(f"{type(event).__name__} not allowed in phase '{phase}'")
        self.phase = phase
        self.event = event


_RANGES: dict[str, tuple[float, float]] = {
    "brightness": (0.0, 2.0),
    "contrast": (0.0, 2.0),
    "saturation": (0.0, 2.0),
    "rotation": (0.0, 360.0),
}


@dataclass(frozen=True, slots=True)
class Adjustments:
    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0
    rotation: float = 0.0

    def with_value(self, name: str, value: float) -> "Adjustments":
        """Return a copy with one parameter changed."""
        if name not in _RANGES:
            raise KeyError(name)
        low, high = _RANGES[name]
        if not low <= value <= high:
            raise ValueError(f"{name} must be within [{low}, {high}], got {value}")
        return replace(self, **{name: float(value)})

    def reset(self) -> "Adjustments":
        return Adjustments()

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


CropBox = tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class SelectedFile:
    data: bytes
    filename: str
    content_type: str


@dataclass(frozen=True, slots=True)
class EditorState:
    phase: EditorPhase = EditorPhase.IDLE
    adjustments: Adjustments = field(default_factory=Adjustments)
    source: SelectedFile | None = None
    crop_box: CropBox | None = None
    source_filename: str | None = None
    result: "ProcessedFiles | None" = None
    error: str | None = None
    revision: int = 0


@dataclass(frozen=True, slots=True)
class FileRequested:
    pass


@dataclass(frozen=True, slots=True)
class FileSelected:
    file: SelectedFile


@dataclass(frozen=True, slots=True)
class CropConfirmed:
    box: CropBox | None = None


@dataclass(frozen=True, slots=True)
class UploadSucceeded:
    filename: str


@dataclass(frozen=True, slots=True)
class AdjustmentsChanged:
    adjustments: Adjustments


@dataclass(frozen=True, slots=True)
class ProcessSucceeded:
    files: "ProcessedFiles"
    revision: int


@dataclass(frozen=True, slots=True)
class RequestFailed:
    message: str
    revision: int | None = None


@dataclass(frozen=True, slots=True)
class Reset:
    pass


EditorEvent = Union[
    FileRequested,
    FileSelected,
    CropConfirmed,
    UploadSucceeded,
    AdjustmentsChanged,
    ProcessSucceeded,
    RequestFailed,
    Reset,
]


def _file_requested(state: EditorState, event: FileRequested) -> EditorState:
    return EditorState(phase=EditorPhase.AWAITING_FILE, adjustments=state.adjustments)


def _file_selected(state: EditorState, event: FileSelected) -> EditorState:
    return replace(state, phase=EditorPhase.CROPPING, source=event.file, error=None)


def _crop_confirmed(state: EditorState, event: CropConfirmed) -> EditorState:
    if event.box is not None:
        left, top, right, bottom = event.box
        if left < 0 or top < 0 or right <= left or bottom <= top:
            raise ValueError(f"invalid crop box {event.box}")
    return replace(state, phase=EditorPhase.UPLOADING, crop_box=event.box)


def _upload_succeeded(state: EditorState, event: UploadSucceeded) -> EditorState:
    return replace(
        state,
        phase=EditorPhase.PROCESSING,
        source_filename=event.filename,
        revision=state.revision + 1,
    )


def _adjustments_changed(state: EditorState, event: AdjustmentsChanged) -> EditorState:
    if state.source_filename is None or state.phase not in (
        EditorPhase.PROCESSING,
        EditorPhase.READY,
        EditorPhase.ERROR,
    ):
        return replace(state, adjustments=event.adjustments)
    return replace(
        state,
        phase=EditorPhase.PROCESSING,
        adjustments=event.adjustments,
        error=None,
        revision=state.revision + 1,
    )


def _process_succeeded(state: EditorState, event: ProcessSucceeded) -> EditorState:
    if event.revision != state.revision:
        return state
    return replace(state, phase=EditorPhase.READY, result=event.files, error=None)


def _request_failed(state: EditorState, event: RequestFailed) -> EditorState:
    if event.revision is not None and event.revision != state.revision:
        return state
    return replace(state, phase=EditorPhase.ERROR, error=event.message)


def _reset(state: EditorState, event: Reset) -> EditorState:
    return EditorState(adjustments=state.adjustments)


_ANY_PHASE = frozenset(EditorPhase)

_TRANSITIONS: dict[type, tuple[frozenset[EditorPhase], Callable[..., EditorState]]] = {
    FileRequested: (
        frozenset({EditorPhase.IDLE, EditorPhase.READY, EditorPhase.ERROR}),
        _file_requested,
    ),
    FileSelected: (frozenset({EditorPhase.AWAITING_FILE}), _file_selected),
    CropConfirmed: (frozenset({EditorPhase.CROPPING}), _crop_confirmed),
    UploadSucceeded: (frozenset({EditorPhase.UPLOADING}), _upload_succeeded),
    AdjustmentsChanged: (_ANY_PHASE, _adjustments_changed),
    ProcessSucceeded: (
        frozenset({EditorPhase.PROCESSING, EditorPhase.READY}),
        _process_succeeded,
    ),
    RequestFailed: (
        frozenset({EditorPhase.UPLOADING, EditorPhase.PROCESSING, EditorPhase.READY}),
        _request_failed,
    ),
    Reset: (_ANY_PHASE, _reset),
}


def transition(state: EditorState, event: EditorEvent) -> EditorState:
    """Apply ``event`` to ``state`` and return the resulting state."""
    try:
        allowed, handler = _TRANSITIONS[type(event)]
    except KeyError:
        raise InvalidTransitionError(state.phase, event) from None
    if state.phase not in allowed:
        raise InvalidTransitionError(state.phase, event)
    return handler(state, event)


__all__ = [
    "Adjustments",
    "AdjustmentsChanged",
    "CropBox",
    "CropConfirmed",
    "EditorEvent",
    "EditorPhase",
    "EditorState",
    "FileRequested",
    "FileSelected",
    "InvalidTransitionError",
    "ProcessSucceeded",
    "RequestFailed",
    "Reset",
    "SelectedFile",
    "UploadSucceeded",
    "transition",
]
