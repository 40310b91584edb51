# plugins/__init__.py
"""
Command registries mounted by the shell.

Every subpackage ships an entrypoint.py exporting REGISTRY (or REGISTRIES).
"""
