"""
Simple utilities used across conmat.
"""
from .logging import get_logger
