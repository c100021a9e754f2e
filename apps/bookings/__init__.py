"""Bookings app package.

This app holds the property calendars: bookings and blocked periods,
availability checks with grace periods and alternative suggestions,
occupancy statistics, CSV and batch imports, and guest availability
requests. Conflicting writes are serialised through database row locks
inside transactions.
"""
