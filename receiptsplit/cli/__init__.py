"""Unified command-line interface for receiptsplit.

Usage:
    receiptsplit import <items.json> --member Alice --member Bob
    receiptsplit show <split>
    receiptsplit assign <split> <item> <member>
    receiptsplit mode <split> <item> ratio
    receiptsplit split-evenly <split>
    receiptsplit serve [--port]
"""
