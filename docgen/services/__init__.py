"""
Document generation services: records, layout, exports and caching.
"""
