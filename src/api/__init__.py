"""
API Module
---------
Provides the HTTP endpoints for YelpCamp using FastAPI.
Features include:
- Registration, login and logout over a signed session cookie
- Password recovery by emailed reset token
- Paginated, searchable campground listing
- Campground and comment editing for owners and admins
- Liking and unliking campgrounds
"""
