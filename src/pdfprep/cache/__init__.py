"""Preview and thumbnail caches."""

from pdfprep.cache.preview import PagePreviewCache
from pdfprep.cache.thumbnails import ThumbnailCache

__all__ = ["PagePreviewCache", "ThumbnailCache"]
