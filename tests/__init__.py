"""Tests for the restaurant booking client."""
