"""Client-side contract: HTTP client and editor state machine."""

from .api_client import ApiClient, ApiClientError, ProcessedFiles
from .editor_session import EditorSession
from .editor_state import Adjustments, EditorPhase, EditorState, transition

__all__ = [
    "Adjustments",
    "ApiClient",
    "ApiClientError",
    "EditorPhase",
    "EditorSession",
    "EditorState",
    "ProcessedFiles",
    "transition",
]
