"""Locating anchors in, and stamping signatures onto, waiver templates."""
