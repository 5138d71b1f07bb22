"""Error types raised by the extraction pipeline.

Each error carries the HTTP status and short error name the API layer
reports, so routes can let them propagate to a single handler.
"""

from typing import Optional


class RecipeServiceError(Exception):
    status_code: int = 500
    error: str = "RecipeServiceError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(RecipeServiceError):
    status_code = 400
    error = "InvalidInput"


class UnsupportedMediaError(RecipeServiceError):
    status_code = 400
    error = "UnsupportedMediaType"

    def __init__(self, media_type: object):
        value = getattr(media_type, "value", media_type)
        super().__init__(f"Unsupported media type: {value}")
        self.media_type = value


class NoRecipeDetectedError(RecipeServiceError):
    status_code = 400
    error = "NoRecipeDetected"

    def __init__(self, url: str):
        super().__init__("No recipe detected in the provided URL")
        self.url = url


class FetchError(RecipeServiceError):
    status_code = 502
    error = "FetchFailure"

    def __init__(self, url: str, reason: str, media_type: Optional[str] = None):
        label = f"{media_type} content" if media_type else "content"
        super().__init__(f"Failed to fetch {label} from {url}: {reason}")
        self.url = url
        self.reason = reason
        self.media_type = media_type


class InferenceError(RecipeServiceError):
    status_code = 502
    error = "InferenceFailure"

    def __init__(
        self,
        operation: str,
        reason: str,
        media_type: Optional[str] = None,
        transient: bool = False,
    ):
        super().__init__(f"AI {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
        self.media_type = media_type
        # Timeouts, dropped connections, 429 and 5xx.
        self.transient = transient
