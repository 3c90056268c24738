"""
Core engine: inventory client, reference caches, resolver, refresh scheduler,
bulk import and the console service that ties them together.
"""
