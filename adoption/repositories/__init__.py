"""
Persistence adapters.

These modules encapsulate how records are stored/retrieved (one line per
record in users.dat, pets.dat and applications.dat). Services depend on the
repository instead of touching the files.
"""
