"""
therapyslots - expert matching and timeslot availability for therapy bookings.
"""

__version__ = "0.1.0"
