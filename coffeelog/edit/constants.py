"""
Shared constants for the entry editing flow.
"""

# Seconds between the success notice and returning to the overview
NAVIGATE_DELAY_SECONDS = 1.5

# Notices auto-dismiss after this many milliseconds
NOTICE_TIMEOUT_MS = 6000

# Overview page the editor returns to
HOME_PATH = '/'

# ui.notify types
SEVERITY_SUCCESS = 'positive'
SEVERITY_ERROR = 'negative'
