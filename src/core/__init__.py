"""Core configuration, constants, errors, and typed models."""
