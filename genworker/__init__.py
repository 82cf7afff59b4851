"""
Muse Generative AI Worker
"""

__version__ = "1.0.0"
