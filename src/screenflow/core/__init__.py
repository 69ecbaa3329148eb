"""Core types: enumerations, exceptions, and data models."""
