"""logpager - page through large timestamp-delimited log files"""

__version__ = "0.1.0"
