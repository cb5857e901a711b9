"""Student Time Tracker package.

Organised by feature modules (auth, time_entries, projects, tasks, hr, ...)
with a thin Flask controller layer over service/repository layers.
"""
