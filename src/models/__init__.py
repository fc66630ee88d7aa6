"""
Data Models Module
----------------
Contains Pydantic models for data validation and serialization.
Defines accounts, principals, campgrounds, comments and the request forms for each.
"""
