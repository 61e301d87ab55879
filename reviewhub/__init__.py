"""ReviewHub: product reviews with moderation, votes and comment threads."""

__version__ = "0.1.0"
