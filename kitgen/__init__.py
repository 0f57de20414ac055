"""Scaffolding generator for go-kit services driven by a Go service interface."""

__version__ = "0.1.0"
