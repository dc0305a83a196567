"""
Contracts (data models).

This folder defines the canonical shapes built from Contentstack entries.

Why this exists:
- The CMS has several field names for the same thing (product_name / title / name)
- The UI should only ever see one shape per content type
- Transformers, resolvers and routes all agree on these models, not on ad-hoc dicts
"""
