"""Core configuration, security and authorization primitives."""
