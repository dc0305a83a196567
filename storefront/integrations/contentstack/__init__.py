"""
Contentstack retrieval services.

- query.py: query-string building (filters, pagination, sort)
- entries.py: search, batch lookup by uid, catalog fallbacks
- home_page.py: modular block reference resolution for the home page
- orders.py: checkout and order notification
"""
