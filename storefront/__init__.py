"""
Multimart storefront content layer.

Fetches structured entries from the Contentstack API and maps them into the
product / banner / service / footer view models used by the storefront UI.
"""
