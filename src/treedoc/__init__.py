"""treedoc - hierarchical LLM documentation for source trees."""

__version__ = "0.3.0"
