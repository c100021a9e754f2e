"""
Shared Kernel

Framework-free value objects and the small infrastructure pieces every
app uses: the domain error base class, pagination, upload validation and
the API exception handler.
"""
