class RelayError(Exception):
    """Base class for failures that end an invocation with a 500."""


class MalformedNotificationError(RelayError):
    """The notification body is not JSON or is missing required fields."""


class InvalidEventTypeError(RelayError):
    """The pushed ref is not a branch."""

    def __init__(self, ref_type: str):
        super().__init__(f"Invalid event type: {ref_type}")
        self.ref_type = ref_type


class ArchiveFetchError(RelayError):
    """The branch archive could not be downloaded."""
