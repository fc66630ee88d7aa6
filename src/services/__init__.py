"""
Services Module
-------------
Campground and comment mutations, the like toggle and paginated search,
each taking the request's principal and a ResourceStore.
"""
