"""Root pytest configuration for all tests."""

import logging

# Keep HTTP library noise out of test output; W traffic is mocked anyway.
logging.getLogger("urllib3").setLevel(logging.WARNING)
