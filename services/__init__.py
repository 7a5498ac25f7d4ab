"""Booking workflow services: gateway, availability, draft, wizard, board."""
