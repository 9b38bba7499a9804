"""Log tail reconciliation, log search and unified diff parsing for dev dashboards."""

__version__ = "0.1.0"
