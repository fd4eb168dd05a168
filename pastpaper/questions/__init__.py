"""
Past-paper question store.

Responsibilities:
- Load the seed question bank into memory.
- Admin CRUD and listing filters over stored questions.
- Bulk import of questions from CSV.
"""
