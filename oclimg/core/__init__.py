"""Core module for oclimg."""
