"""
Geocoding Module
--------------
Turns the free-text location of a campground into coordinates and a formatted address.
Uses OpenStreetMap's Nominatim search API with caching and rate limiting.
"""
