"""Bookings app package.

This app encapsulates the booking domain for every vertical: pricing,
atomic claims of tables, rooms, hall dates and cafe slots, the booking
state machine and payment hold expiry.
"""
