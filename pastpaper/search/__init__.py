"""
Question search.

Responsibilities:
- Score pasted question text against every stored question.
- Rank and truncate matches for display.
- Cache result lists and account searches against the user's daily quota.
"""
