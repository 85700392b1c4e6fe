"""Vocabulary spaced-repetition scheduling."""
