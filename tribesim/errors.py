"""Structured error hierarchy for tribesim."""


class TribesimError(Exception):
    """Base for all tribesim errors."""

    pass


class ConfigurationError(TribesimError):
    """World setup is invalid (unknown tribe, off-grid spawn, bad config)."""

    pass


class SerializationError(TribesimError):
    """State serialization/deserialization failed."""

    pass


class UnsupportedSchemaError(SerializationError):
    """Snapshot was written by a newer schema than this build understands."""

    def __init__(self, found: int, supported: int):
        self.found = found
        self.supported = supported
        super().__init__(f"Snapshot schema {found} is newer than supported schema {supported}")


class EngineStateError(TribesimError):
    """Engine in invalid state for requested operation."""

    pass
