"""Document state: page transforms, page order and selection."""

from pdfprep.state.metadata import MetadataStore
from pdfprep.state.pages import PageState
from pdfprep.state.selection import SelectionState

__all__ = ["MetadataStore", "PageState", "SelectionState"]
