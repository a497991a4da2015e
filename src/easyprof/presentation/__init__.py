"""Presentation layer: public API functions and pytest plugin."""
