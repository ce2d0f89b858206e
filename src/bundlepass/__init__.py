"""
bundlepass - post-build optimizer for static web bundles.

Traces the JavaScript modules each page loads, inlines CSS proxy imports,
injects module preload hints and minifies the result.
"""

__version__ = "0.3.0"
