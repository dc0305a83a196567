"""
Real HTTP integration clients.

These clients communicate with external systems via HTTP:
- Contentstack management API (entries, search, order notifications)

Important:
- This is the ONLY place where HTTP calls to Contentstack are made.
- Callers receive plain JSON dicts; normalization happens in integrations/policy.
"""
