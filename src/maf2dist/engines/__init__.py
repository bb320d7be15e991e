"""
Engines turning parsed alignment blocks into pairwise statistics and distances.
"""
