"""VenueBook booking and venue-management API"""

__version__ = "1.0.0"
