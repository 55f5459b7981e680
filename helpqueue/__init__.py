"""
Classroom Help Queue API

A small FastAPI backend that lets student groups ask for help and
lets helpers pick them up in first-come, first-served order.
"""

__version__ = "1.0.0"
