"""
jdkkit - resolve, download and cache JDK distributions on CI runners.
"""

__version__ = "0.1.0"
