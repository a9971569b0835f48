"""Code used by more than one part of the API.

Holds bearer token validation and the observation context carried by probes.
"""
