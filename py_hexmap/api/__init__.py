"""
HTTP API for generating and inspecting maps.
"""
