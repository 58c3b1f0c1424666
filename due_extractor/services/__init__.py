"""Extraction services: record extractor, upload processor, run reporting."""
