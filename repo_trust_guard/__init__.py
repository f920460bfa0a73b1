"""
Repo Trust Guard - trust and quality scoring for package registry admission.
"""

__version__ = "0.1.0"
