"""Delivery note and recipe sheet scanning: OCR, line parsing and product matching."""
