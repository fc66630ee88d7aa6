from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
import functools
import logging
from typing import Optional

from src.api.deps import get_principal, get_recovery, get_store
from src.auth import session as auth_session
from src.auth.guard import can_modify
from src.auth.recovery import CredentialRecoveryManager
from src.config import Settings
from src.db.database import make_engine, make_session_factory
from src.db.store import ResourceStore, utcnow
from src.errors import CampError, NotFound
from src.geocoding.nominatim import resolve_address
from src.models.account import AccountPublic, ForgotForm, LoginForm, Principal, RegisterForm, ResetForm
from src.models.campground import CampgroundForm, CampgroundPage, CommentForm
from src.notify.mailer import SmtpNotifier
from src.services import campgrounds as campground_service
from src.services.engagement import toggle_like
from src.services.query import query_listings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings, engine=None, notifier=None, resolver=None, clock=utcnow) -> FastAPI:
    """
    Build the YelpCamp API.

    Args:
        settings: Process-wide configuration
        engine: SQLAlchemy engine; built from settings.database_url when omitted
        notifier: Email notifier; SMTP from settings when omitted
        resolver: Address resolver; Nominatim when omitted
        clock: Source of naive-UTC "now", used for reset token expiry
    """
    app = FastAPI(
        title="YelpCamp API",
        description="Campgrounds, comments and likes behind session authentication",
        version="1.0.0"
    )
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")

    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine if engine is not None else make_engine(settings.database_url))
    app.state.notifier = notifier or SmtpNotifier(settings)
    app.state.resolver = resolver or functools.partial(resolve_address, user_agent=settings.geocoder_user_agent)
    app.state.clock = clock

    @app.exception_handler(CampError)
    async def camp_error_handler(request: Request, exc: CampError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    register_routes(app)
    return app


def register_routes(app: FastAPI):

    @app.get("/")
    def read_root():
        return {"message": "Welcome to YelpCamp"}

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @app.post("/register", status_code=status.HTTP_201_CREATED)
    def register(form: RegisterForm, request: Request, store: ResourceStore = Depends(get_store)):
        account = auth_session.register(store, request.app.state.settings, form)
        auth_session.login(request, account)
        return {
            "message": f"Welcome to YelpCamp {account.username}",
            "user": AccountPublic.from_account(account),
        }

    @app.post("/login")
    def login(form: LoginForm, request: Request, store: ResourceStore = Depends(get_store)):
        account = auth_session.authenticate(store, form.username, form.password)
        auth_session.login(request, account)
        return {"message": f"Welcome back {account.username}", "user": AccountPublic.from_account(account)}

    @app.get("/logout")
    def logout(request: Request):
        auth_session.logout(request)
        return {"message": "Logged you out!"}

    @app.post("/forgot")
    def forgot(form: ForgotForm, request: Request, recovery: CredentialRecoveryManager = Depends(get_recovery)):
        issued = recovery.request_reset(form.email, host=request.headers.get("host"))
        if issued.notified:
            message = f"An e-mail has been sent to {issued.account.email} with further instructions."
        else:
            message = "Your reset link was created, but the e-mail could not be sent. Please try again later."
        return {"message": message, "email_sent": issued.notified}

    @app.get("/reset/{token}")
    def show_reset(token: str, recovery: CredentialRecoveryManager = Depends(get_recovery)):
        recovery.validate_token(token)
        return {"token": token, "valid": True}

    @app.post("/reset/{token}")
    def reset(
        token: str,
        form: ResetForm,
        request: Request,
        recovery: CredentialRecoveryManager = Depends(get_recovery)
    ):
        consumed = recovery.consume_reset(token, form.password, form.confirm)
        # Completing a reset logs the account in
        auth_session.login(request, consumed.account)
        return {"message": "Success! Your password has been changed.", "email_sent": consumed.notified}

    @app.get("/users/{account_id}")
    def show_user(account_id: str, store: ResourceStore = Depends(get_store)):
        account = store.get_account(account_id)
        if account is None:
            raise NotFound("User not found.")
        return {
            "user": AccountPublic.from_account(account),
            "campgrounds": store.listings_by_author(account.id),
        }

    # ------------------------------------------------------------------
    # Campgrounds
    # ------------------------------------------------------------------

    @app.get("/campgrounds", response_model=CampgroundPage)
    def list_campgrounds(
        search: Optional[str] = None,
        page: Optional[str] = None,
        store: ResourceStore = Depends(get_store)
    ):
        return query_listings(store, search=search, page=page)

    @app.post("/campgrounds", status_code=status.HTTP_201_CREATED)
    def create_campground(
        form: CampgroundForm,
        request: Request,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground = campground_service.create_campground(store, request.app.state.resolver, principal, form)
        return {"message": "Campground created.", "campground": campground}

    @app.get("/campgrounds/{campground_id}")
    def show_campground(
        campground_id: str,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground = store.get_listing(campground_id)
        if campground is None:
            raise NotFound("Campground not found!")
        comments = store.comments_for(campground_id)
        return {
            "campground": campground,
            "comments": [
                {**comment.model_dump(), "can_edit": can_modify(principal, comment.author.id)}
                for comment in comments
            ],
            "can_edit": can_modify(principal, campground.author.id),
            "liked": principal is not None and principal.id in campground.likes,
        }

    @app.put("/campgrounds/{campground_id}")
    def update_campground(
        campground_id: str,
        form: CampgroundForm,
        request: Request,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground = campground_service.update_campground(
            store, request.app.state.resolver, principal, campground_id, form
        )
        return {"message": "Successfully Updated!", "campground": campground}

    @app.delete("/campgrounds/{campground_id}")
    def delete_campground(
        campground_id: str,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground_service.delete_campground(store, principal, campground_id)
        return {"message": "Campground deleted."}

    @app.post("/campgrounds/{campground_id}/like")
    def like_campground(
        campground_id: str,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground = toggle_like(store, principal, campground_id)
        return {
            "liked": principal.id in campground.likes,
            "likes": len(campground.likes),
            "campground": campground,
        }

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    @app.post("/campgrounds/{campground_id}/comments", status_code=status.HTTP_201_CREATED)
    def create_comment(
        campground_id: str,
        form: CommentForm,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        comment = campground_service.create_comment(store, principal, campground_id, form)
        return {"message": "Successfully added comment.", "comment": comment}

    @app.put("/campgrounds/{campground_id}/comments/{comment_id}")
    def update_comment(
        campground_id: str,
        comment_id: str,
        form: CommentForm,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        comment = campground_service.update_comment(store, principal, campground_id, comment_id, form)
        return {"message": "Comment updated.", "comment": comment}

    @app.delete("/campgrounds/{campground_id}/comments/{comment_id}")
    def delete_comment(
        campground_id: str,
        comment_id: str,
        store: ResourceStore = Depends(get_store),
        principal: Optional[Principal] = Depends(get_principal)
    ):
        campground_service.delete_comment(store, principal, campground_id, comment_id)
        return {"message": "Comment deleted."}
