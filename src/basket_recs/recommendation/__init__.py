"""
Recommendation layer (basket_recs)

Composes product recommendations from precomputed association-rule tables:
  - RuleRetriever:         consequents of one seed item's rules
  - TopAggregator:         union over the top seed items (seeds kept or dropped)
  - ExtensionAugmenter:    plus the extension table at a scaled threshold
  - CrossMethodAggregator: fusion over FPGrowth / Apriori / Eclat tables
  - DiversitySampler:      random truncation of the final set

RuleRecommender wires these together over a Supabase client.
"""
from basket_recs.recommendation.recommender import RuleRecommender

__all__ = ["RuleRecommender"]
