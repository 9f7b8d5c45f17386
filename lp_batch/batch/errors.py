from __future__ import annotations


class BatchConfigError(RuntimeError):
    """Fatal misconfiguration: the run stops before processing any entry."""


class ManifestError(BatchConfigError):
    pass


class MissingRootError(ManifestError):
    """The manifest has no non-blank line to serve as the dataset root."""


class OutputTableError(BatchConfigError):
    pass


class EngineLoadError(BatchConfigError):
    pass
