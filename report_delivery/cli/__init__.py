"""
CLI module for Report Delivery.

This module provides command-line interface functionality
using Click and Rich for enhanced user experience.
"""

from report_delivery.cli.main import main

__all__ = ["main"]