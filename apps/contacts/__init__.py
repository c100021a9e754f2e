"""Contacts app package.

The address book of the back office: clients, owners, providers and
organisations, linked to the properties they relate to, with CSV export
and bulk import.
"""
