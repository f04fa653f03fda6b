"""Utilities for serializing OpenAI SDK responses."""

from typing import Any, Dict


def serialize_response(response: Any) -> Dict[str, Any]:
    """Convert an SDK response object into a JSON-ready dict."""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump(mode="json", exclude_none=True)
    if hasattr(response, "to_dict"):
        return response.to_dict()
    raise TypeError(f"Cannot serialize response of type {type(response).__name__}")
