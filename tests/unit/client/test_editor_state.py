import pytest

from pixeltune.client.api_client import ProcessedFiles
from pixeltune.client.editor_state import (
    Adjustments,
    AdjustmentsChanged,
    CropConfirmed,
    EditorPhase,
    EditorState,
    FileRequested,
    FileSelected,
    InvalidTransitionError,
    ProcessSucceeded,
    RequestFailed,
    Reset,
    SelectedFile,
    UploadSucceeded,
    transition,
)

FILES = ProcessedFiles(
    preview="abc_preview.jpg",
    png="abc_processed.png",
    jpeg="abc_processed.jpg",
    processed="abc_processed.jpg",
)


def processing_state() -> EditorState:
    state = EditorState()
    for event in (
        FileRequested(),
        FileSelected(SelectedFile(b"data", "a.png", "image/png")),
        CropConfirmed((0, 0, 10, 10)),
        UploadSucceeded("abc"),
    ):
        state = transition(state, event)
    return state


@pytest.mark.unit
def test_happy_path_reaches_ready() -> None:
    state = processing_state()
    assert state.phase is EditorPhase.PROCESSING
    assert state.source_filename == "abc"
    assert state.crop_box == (0, 0, 10, 10)

    ready = transition(state, ProcessSucceeded(FILES, state.revision))

    assert ready.phase is EditorPhase.READY
    assert ready.result == FILES


@pytest.mark.unit
def test_transitions_return_new_objects() -> None:
    initial = EditorState()

    after = transition(initial, FileRequested())

    assert initial.phase is EditorPhase.IDLE
    assert after is not initial


@pytest.mark.unit
def test_invalid_transition_raises() -> None:
    with pytest.raises(InvalidTransitionError):
        transition(EditorState(), UploadSucceeded("abc"))


@pytest.mark.unit
def test_stale_process_result_is_ignored() -> None:
    state = processing_state()
    first_revision = state.revision
    state = transition(state, AdjustmentsChanged(Adjustments().with_value("brightness", 1.4)))

    unchanged = transition(state, ProcessSucceeded(FILES, first_revision))

    assert unchanged is state
    assert unchanged.phase is EditorPhase.PROCESSING


@pytest.mark.unit
def test_adjusting_ready_image_restarts_processing() -> None:
    state = processing_state()
    state = transition(state, ProcessSucceeded(FILES, state.revision))

    state = transition(state, AdjustmentsChanged(state.adjustments.with_value("rotation", 90)))

    assert state.phase is EditorPhase.PROCESSING
    assert state.adjustments.rotation == 90


@pytest.mark.unit
def test_adjusting_without_image_keeps_phase() -> None:
    state = transition(EditorState(), AdjustmentsChanged(Adjustments(contrast=1.5)))

    assert state.phase is EditorPhase.IDLE
    assert state.adjustments.contrast == 1.5


@pytest.mark.unit
def test_failure_moves_to_error_and_reset_keeps_sliders() -> None:
    state = processing_state()
    state = transition(state, AdjustmentsChanged(state.adjustments.with_value("saturation", 0.2)))

    failed = transition(state, RequestFailed("boom", state.revision))
    assert failed.phase is EditorPhase.ERROR
    assert failed.error == "boom"

    cleared = transition(failed, Reset())
    assert cleared.phase is EditorPhase.IDLE
    assert cleared.source_filename is None
    assert cleared.adjustments.saturation == 0.2


@pytest.mark.unit
def test_adjustment_setter_enforces_ranges() -> None:
    adjustments = Adjustments()

    with pytest.raises(ValueError):
        adjustments.with_value("brightness", 2.1)
    with pytest.raises(KeyError):
        adjustments.with_value("hue", 1)
    assert adjustments.with_value("contrast", 0.5).reset() == Adjustments()


@pytest.mark.unit
def test_invalid_crop_box_is_rejected() -> None:
    state = transition(EditorState(), FileRequested())
    state = transition(state, FileSelected(SelectedFile(b"data", "a.png", "image/png")))

    with pytest.raises(ValueError):
        transition(state, CropConfirmed((10, 10, 5, 20)))


@pytest.mark.unit
def test_processed_files_accept_single_filename_shape() -> None:
    files = ProcessedFiles.from_payload({"processedFilename": "abc_processed.png"})

    assert files.for_format("png") == "abc_processed.png"
    assert files.for_format("jpeg") == "abc_processed.png"
