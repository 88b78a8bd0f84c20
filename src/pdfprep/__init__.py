"""pdfprep - Page edit engine for print preparation."""

import logging

__version__ = "0.2.0"
__all__ = ["__version__"]

# Prevent "No handler found" warnings when used as a library
logging.getLogger("pdfprep").addHandler(logging.NullHandler())
