"""
amsync - keeps Alertmanager notification channels in sync with credential secrets.
"""

__version__ = "0.1.0"
