"""Version-control clients."""
