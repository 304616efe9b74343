"""
File Organizer Domain

Watches a download directory and files every new arrival away:
- classifier.py - Magic byte and extension based categorisation
- rules.py - Category to top-level destination mapping
- similarity.py / resolver.py - Embedding based subfolder selection
- mover.py - Conflict-safe relocation
- pipeline.py / worker.py - Per-file orchestration on a single worker thread
"""

__all__ = ["preprocessors", "watchers"]
