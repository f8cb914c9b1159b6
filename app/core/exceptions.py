"""
Domain errors raised by the services.

Each error carries the HTTP status the API answers with; the handler in
app.main turns them into {"detail": message} responses.
"""


class DomainError(Exception):
    status_code = 400
    default_message = "Operation rejected"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TaskNotFoundError(DomainError):
    status_code = 404
    default_message = "Task not found"


class InvalidTaskUpdateError(DomainError):
    default_message = "Invalid task update"


class TaskAlreadyCompletedError(DomainError):
    default_message = "Task is already completed"


class SuggestionUnavailableError(DomainError):
    default_message = "No date suggestion available"


class SuggestionAlreadyUsedError(DomainError):
    default_message = "Date suggestion already used"


class ProgressNotFoundError(DomainError):
    # every user gets a progress row at signup, so this is a bug, not user input
    status_code = 500
    default_message = "User progress not found"


class AIConfigurationError(DomainError):
    status_code = 503
    default_message = "OpenAI API key not configured"


# Upstream errors never reach the API as-is: the parser and the
# transcription service turn them into {"success": False, "error": ...}

class LLMError(Exception):
    pass


class LLMRateLimitError(LLMError):
    pass


class LLMUpstreamError(LLMError):
    pass
