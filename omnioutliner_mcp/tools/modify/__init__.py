"""Outline modification tools."""
