"""Storage adapters: rule tables and the top-items ranking."""
