"""
kisokyu: adaptive true/false quiz scheduler for the basic-level
interior finishing trade exam.
"""

__version__ = "1.0.0"
