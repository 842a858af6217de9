"""Toolkit-independent presentation helpers for editing front-ends."""
