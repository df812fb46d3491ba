"""cardwise: spaced-repetition study engine."""
