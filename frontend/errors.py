class CaptureUnavailable(Exception):
    """Camera permission denied, no device, or the device stopped delivering frames."""


class IngestionFailed(Exception):
    """An uploaded or captured image could not be read."""


class InvocationFailed(Exception):
    """The generation request failed before a result came back."""


class NoImageReturned(InvocationFailed):
    """The model answered but produced no image."""


class OperationInProgress(Exception):
    """A generation is already running for this session."""
