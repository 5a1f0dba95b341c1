"""
DirectGO Server - routes free-text queries to the most specific destination URL.
"""
