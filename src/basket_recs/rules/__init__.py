"""Rule and recommendation data types plus the consequent-set decoder."""
