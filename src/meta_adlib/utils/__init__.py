"""Shared utilities for the Meta Ad Library client."""
