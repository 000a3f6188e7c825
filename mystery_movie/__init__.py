"""Daily mystery movie guessing game: selection, guess feedback, clues and sessions."""
