"""Exceptions raised by list processing."""

from __future__ import annotations

from typing import Optional


class ListeriaError(Exception):
    """Base class for every fatal list-processing error."""


class TemplateParamError(ListeriaError):
    """A required list option is missing or unusable."""


class SparqlParseError(ListeriaError):
    """The query result document is malformed or holds an unclassifiable value."""


class EntityLoadError(ListeriaError):
    """The entity store could not deliver the requested entities."""


class NoItemsError(ListeriaError):
    """The query produced no items to show."""


class WikiLookupError(ListeriaError):
    """A single page or file lookup against the wiki failed."""


class PipelineError(ListeriaError):
    """Exception raised when a patch stage fails."""

    def __init__(self, stage: str, message: str, original_error: Optional[Exception] = None):
        self.stage = stage
        self.message = message
        self.original_error = original_error
        super().__init__(f"{stage}: {message}")


class SparqlQueryError(ListeriaError):
    """The SPARQL endpoint could not run the list query."""
