"""Exception hierarchy for the mockup pipeline."""


class MockupPipelineError(Exception):
    """Base class for all pipeline errors."""

    pass


class DetectionError(MockupPipelineError):
    """No placeholder pixels found in a template. The template is malformed."""

    pass


class FetchError(MockupPipelineError):
    """Failed to download or decode an image."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class VariantNotFound(MockupPipelineError):
    """Catalog has no variant with the requested id."""

    pass


class ProviderError(MockupPipelineError):
    """Provider API call failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OrchestratorError(MockupPipelineError):
    """Terminal failure of a provider mockup task."""

    pass


class ProviderRejected(OrchestratorError):
    """Provider explicitly failed the job."""

    def __init__(self, detail: str, task_key: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.task_key = task_key


class MockupTimeout(OrchestratorError):
    """Provider never reported a terminal status within the polling budget."""

    def __init__(self, task_key: str, attempts: int):
        super().__init__(f"Task {task_key} did not finish after {attempts} polls")
        self.task_key = task_key
        self.attempts = attempts
