from sqlalchemy import create_engine, Column, String, Float, Boolean, DateTime, Text, PrimaryKeyConstraint
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

# Get logger
logger = logging.getLogger(__name__)

Base = declarative_base()

class AccountDB(Base):
    __tablename__ = "accounts"
    id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    # Set together by "forgot password", cleared together on reset
    reset_token = Column(String, nullable=True, index=True)
    reset_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)

class CampgroundDB(Base):
    __tablename__ = "campgrounds"
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    image = Column(String, nullable=True)
    price = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    # Author snapshot, captured at creation and never re-joined
    author_id = Column(String, nullable=False, index=True)
    author_username = Column(String, nullable=False)
    location = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)

class CommentDB(Base):
    __tablename__ = "comments"
    id = Column(String, primary_key=True, index=True)
    # No foreign key: deleting a campground leaves its comments orphaned
    campground_id = Column(String, nullable=False, index=True)
    text = Column(Text, nullable=False)
    author_id = Column(String, nullable=False)
    author_username = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False)

class CampgroundLikeDB(Base):
    __tablename__ = "campground_likes"
    campground_id = Column(String, nullable=False)
    account_id = Column(String, nullable=False)
    __table_args__ = (PrimaryKeyConstraint("campground_id", "account_id"),)

def make_engine(database_url):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Requests run on a threadpool; wait on locks instead of failing fast
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(database_url, connect_args=connect_args)

def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

def create_tables(engine):
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created (if they didn't exist previously).")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise
