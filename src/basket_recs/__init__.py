"""basket_recs: product recommendations composed from precomputed association-rule tables."""
