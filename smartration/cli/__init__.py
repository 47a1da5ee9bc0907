"""Unified command-line interface for SmartRation.

Usage:
    smartration scan <image> [--json] [--save-ocr PATH]
    smartration parse <ocr.json> [--json]
    smartration serve [--host] [--port]
"""
