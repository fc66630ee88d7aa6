"""Campground, comment and listing-page models."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthorRef(BaseModel):
    """Author snapshot: account id plus the username it had at creation time."""
    id: str
    username: str

    model_config = ConfigDict(frozen=True)


class Campground(BaseModel):
    id: str
    name: str
    image: Optional[str] = None
    price: Optional[float] = None
    description: Optional[str] = None
    author: AuthorRef
    location: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    created_at: datetime
    likes: List[str] = Field(default_factory=list, description="Account ids that liked this campground")


class Comment(BaseModel):
    id: str
    campground_id: str
    text: str
    author: AuthorRef
    created_at: datetime


class CampgroundPage(BaseModel):
    items: List[Campground]
    current_page: int
    total_pages: int
    # Set only when a search term was given and the page came back empty
    no_match: Optional[str] = None


class CampgroundForm(BaseModel):
    name: str = Field(..., min_length=1)
    image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    location: str = Field(..., min_length=1, description="Free-text address, geocoded on save")


class CommentForm(BaseModel):
    text: str = Field(..., min_length=1)
