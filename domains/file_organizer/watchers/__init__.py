"""
File Organizer Watchers

- filesystem.py - watchdog observer with per-path debounce
"""
