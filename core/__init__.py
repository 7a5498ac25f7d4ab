"""Configuration, logging, session and date helpers."""
