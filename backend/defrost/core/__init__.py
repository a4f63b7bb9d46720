"""Proximity alert pipeline: feed diffing, distance matching and event handling."""
