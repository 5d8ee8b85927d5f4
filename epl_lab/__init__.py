"""
EPL Lab: match outcome probabilities, value bets and combos.

Core modules:
- models: Elo ratings, Poisson goal strengths and 1X2 outcome probabilities
- betting: Expected value against market odds and combo selection
- data: Match/odds records and JSON file I/O
- scraping: Fixture download from OpenFootball
"""

__version__ = "0.1.0"
