"""Unified command-line interface for stockscan.

Usage:
    stockscan scan-delivery <image> --catalog products.json
    stockscan scan-recipe <image> --catalog products.csv
    stockscan scan-delivery <image> --catalog products.json --ocr-url http://localhost:8001
    stockscan correct "tom. cerise" p2 --catalog products.json
"""
