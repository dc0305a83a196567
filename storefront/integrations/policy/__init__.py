"""
Policy helpers: normalization rules applied to raw Contentstack entries.
"""
