"""Aithor - terminal client for a remote e-book processing service."""
