"""
WebMaker export analyzer.

Collects scripts, pages, thumbnails, logicsheet rules and binding descriptors
from exported WebMaker applications into a result tree, and reports the
database queries and data bindings found in them.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
