"""Per-user bookmarks of past-paper questions."""
