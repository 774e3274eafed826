"""
Polling chat room - single shared room, in-process store, REST API
"""
__version__ = "1.0.0"
