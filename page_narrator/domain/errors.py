"""Error taxonomy for the page narrator."""


class NarratorError(RuntimeError):
    """Base class for failures raised by narrator collaborators."""


class DocumentLoadError(NarratorError):
    """Raised when a document cannot be fetched or parsed."""


class PageRenderError(NarratorError):
    """Raised when a page cannot be rendered to a raster image."""


class SynthesisError(NarratorError):
    """Raised when speech could not be synthesized or played."""


class AudioPlaybackError(SynthesisError):
    """Raised when the playback sink fails to play synthesized audio."""
