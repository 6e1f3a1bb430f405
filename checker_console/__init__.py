"""Web console for the proxy-scraper-checker tool.

Runs the checker, serves its results over HTTP, and streams its live output
to the browser.
"""

__version__ = "1.0.0"
