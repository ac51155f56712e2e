"""Root pytest configuration for all tests."""

import logging

# Requests' connection pool logs every retry at DEBUG; keep test output readable.
logging.getLogger("urllib3").setLevel(logging.WARNING)
