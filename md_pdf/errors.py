"""Exceptions raised by the markdown-to-PDF rendering engine."""


class DocumentRenderError(Exception):
    """Base class for all rendering errors."""


class MalformedDocumentError(DocumentRenderError):
    """The markdown input could not be tokenized."""


class RenderFailure(DocumentRenderError):
    """A write to the underlying PDF canvas failed mid-pass."""
