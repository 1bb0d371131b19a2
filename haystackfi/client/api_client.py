"""
Marketplace API Client
One object exposing a method per service endpoint.

Every method returns an ApiResponse; transport and HTTP errors are reported
through it rather than raised. A 401 triggers one token refresh and a single
retry of the original request.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config.settings import get_client_settings
from .storage import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    USER_KEY,
    FileTokenStorage,
    TokenStorage,
)

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Outcome of an API call."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None


@dataclass(frozen=True)
class TokenPayload:
    access_token: str
    refresh_token: str


TokenListener = Callable[[Optional[TokenPayload]], None]


def _extract_error(data: Any) -> str:
    """Pull a human-readable message out of an error body."""
    if isinstance(data, dict):
        if isinstance(data.get("message"), str) and data["message"]:
            return data["message"]
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        detail = data.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return "Request failed"


def _drop_none(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class ApiService:
    """
    Client for the Haystack FI marketplace API.

    Args:
        base_url: API root (defaults to client settings)
        storage: Where tokens and the signed-in user are kept
        session: HTTP session; anything with a requests-style ``request``
        timeout: Per-request timeout in seconds
        on_unauthorized: Called after a 401 that could not be recovered
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        storage: Optional[TokenStorage] = None,
        session: Optional[Any] = None,
        timeout: Optional[float] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        settings = get_client_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.storage = storage if storage is not None else FileTokenStorage(settings.storage_path)
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.on_unauthorized = on_unauthorized

        self._token_listeners: List[TokenListener] = []
        self._listeners_lock = Lock()
        self._refresh_lock = Lock()
        self._refresh_future: Optional[Future] = None

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    def subscribe_to_token_updates(self, listener: TokenListener) -> Callable[[], None]:
        """Register a listener for token changes; returns an unsubscribe callable."""
        with self._listeners_lock:
            self._token_listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._token_listeners:
                    self._token_listeners.remove(listener)

        return unsubscribe

    def _notify_token_listeners(self, payload: Optional[TokenPayload]) -> None:
        with self._listeners_lock:
            listeners = list(self._token_listeners)
        for listener in listeners:
            listener(payload)

    def set_auth_tokens(self, access_token: str, refresh_token: str) -> None:
        self.storage.set_item(AUTH_TOKEN_KEY, access_token)
        self.storage.set_item(REFRESH_TOKEN_KEY, refresh_token)
        self._notify_token_listeners(TokenPayload(access_token, refresh_token))

    def clear_auth_tokens(self) -> None:
        self.storage.remove_item(AUTH_TOKEN_KEY)
        self.storage.remove_item(REFRESH_TOKEN_KEY)
        self._notify_token_listeners(None)

    def _handle_unauthorized(self) -> None:
        self.clear_auth_tokens()
        self.storage.remove_item(USER_KEY)
        if self.on_unauthorized is not None:
            self.on_unauthorized()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _make_request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        skip_auth: bool = False,
        skip_refresh: bool = False,
        retry_count: int = 0,
    ) -> ApiResponse:
        request_headers = dict(headers or {})
        token = self.storage.get_item(AUTH_TOKEN_KEY)
        if not skip_auth and token and "Authorization" not in request_headers:
            request_headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{endpoint}",
                json=json,
                params=params,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {endpoint} failed: {e}")
            return ApiResponse(success=False, error=str(e) or "Network error")

        try:
            data = response.json()
        except ValueError:
            data = {"message": response.text} if response.text else None

        if response.status_code == 401 and retry_count == 0 and not skip_refresh:
            refresh_token = self.storage.get_item(REFRESH_TOKEN_KEY)
            if refresh_token:
                refreshed = self.refresh_token(refresh_token)
                if refreshed.success:
                    retry_headers = dict(headers or {})
                    retry_headers["Authorization"] = f"Bearer {refreshed.data['access_token']}"
                    return self._make_request(
                        method,
                        endpoint,
                        json=json,
                        params=params,
                        headers=retry_headers,
                        skip_auth=skip_auth,
                        skip_refresh=skip_refresh,
                        retry_count=1,
                    )
                logger.warning(f"Token refresh failed: {refreshed.error}")

            self._handle_unauthorized()

        if not 200 <= response.status_code < 300:
            return ApiResponse(
                success=False,
                data=data,
                error=_extract_error(data),
                status_code=response.status_code,
            )

        return ApiResponse(success=True, data=data, status_code=response.status_code)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> ApiResponse:
        return self._make_request("POST", "/auth/signin", json={"email": email, "password": password})

    def sign_up(self, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("POST", "/auth/signup", json=request)

    def refresh_token(self, refresh_token: str, force: bool = False) -> ApiResponse:
        """
        Exchange a refresh token for a new token pair.

        Concurrent callers share one in-flight request unless force is set.
        A successful refresh is persisted and pushed to token listeners.
        """
        with self._refresh_lock:
            if not force and self._refresh_future is not None:
                future = self._refresh_future
                owner = False
            else:
                future = Future()
                self._refresh_future = future
                owner = True

        if not owner:
            return future.result()

        try:
            response = self._make_request(
                "POST",
                "/auth/refresh",
                json={"refreshToken": refresh_token},
                skip_auth=True,
                skip_refresh=True,
            )
            if response.success:
                self.set_auth_tokens(response.data["access_token"], response.data["refresh_token"])
            future.set_result(response)
            return response
        except Exception as e:
            future.set_exception(e)
            raise
        finally:
            with self._refresh_lock:
                if self._refresh_future is future:
                    self._refresh_future = None

    def forgot_password(self, email: str) -> ApiResponse:
        return self._make_request("POST", "/auth/forgot-password", json={"email": email})

    def reset_password(self, token: str, new_password: str) -> ApiResponse:
        return self._make_request(
            "POST", "/auth/reset-password", json={"token": token, "newPassword": new_password}
        )

    def verify_email(self, token: str) -> ApiResponse:
        return self._make_request("POST", "/auth/verify-email", json={"token": token})

    def resend_verification_email(self, email: str) -> ApiResponse:
        return self._make_request("POST", "/auth/resend-verification", params={"email": email})

    def get_current_user(self) -> ApiResponse:
        if not self.storage.get_item(AUTH_TOKEN_KEY):
            return ApiResponse(success=False, error="No token found")
        return self._make_request("GET", "/auth/profile")

    def update_profile(self, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("PUT", "/auth/profile", json=request)

    # ------------------------------------------------------------------
    # Vendors
    # ------------------------------------------------------------------

    def search_vendors(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        size: Optional[str] = None,
        status: Optional[str] = None,
        location: Optional[str] = None,
        tags: Optional[List[str]] = None,
        min_rating: Optional[float] = None,
        sort_by: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> ApiResponse:
        params = _drop_none(
            {
                "q": q or None,
                "category": category or None,
                "size": size or None,
                "status": status or None,
                "location": location or None,
                "tags": tags or None,
                "minRating": min_rating,
                "sortBy": sort_by,
                "page": page,
                "limit": limit,
            }
        )
        return self._make_request("GET", "/vendor/search", params=params)

    def get_vendor(self, vendor_id: int) -> ApiResponse:
        return self._make_request("GET", f"/vendor/{vendor_id}")

    def create_vendor(self, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("POST", "/vendor", json=request)

    def update_vendor(self, vendor_id: int, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("PUT", f"/vendor/{vendor_id}", json=request)

    def get_vendor_verification_requests(self) -> ApiResponse:
        return self._make_request("GET", "/vendor/verification-requests")

    def get_vendor_dashboard(self) -> ApiResponse:
        return self._make_request("GET", "/vendor/dashboard")

    # Research

    def start_vendor_research(self, vendor_id: int) -> ApiResponse:
        return self._make_request("POST", f"/vendor/{vendor_id}/research")

    def get_vendor_research_history(self, vendor_id: int) -> ApiResponse:
        return self._make_request("GET", f"/vendor/{vendor_id}/research")

    def get_vendor_research_by_id(self, vendor_id: int, research_id: int) -> ApiResponse:
        return self._make_request("GET", f"/vendor/{vendor_id}/research/{research_id}")

    def apply_vendor_research(self, vendor_id: int, research_id: int) -> ApiResponse:
        return self._make_request("POST", f"/vendor/{vendor_id}/research/{research_id}/apply")

    # Products

    def list_products(
        self,
        vendor_id: Optional[int] = None,
        q: Optional[str] = None,
        category: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> ApiResponse:
        params = _drop_none(
            {"vendorId": vendor_id, "q": q, "category": category, "page": page, "limit": limit}
        )
        return self._make_request("GET", "/products", params=params)

    def get_product(self, product_id: int) -> ApiResponse:
        return self._make_request("GET", f"/products/{product_id}")

    # ------------------------------------------------------------------
    # Demo requests, reviews, documents
    # ------------------------------------------------------------------

    def create_demo_request(self, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("POST", "/demo-requests", json=request)

    def get_demo_requests(self, vendor_id: Optional[int] = None) -> ApiResponse:
        return self._make_request("GET", "/demo-requests", params=_drop_none({"vendorId": vendor_id}))

    def update_demo_request(
        self, demo_id: int, status: str, scheduled_at: Optional[str] = None
    ) -> ApiResponse:
        body = _drop_none({"status": status, "scheduledAt": scheduled_at})
        return self._make_request("PATCH", f"/demo-requests/{demo_id}", json=body)

    def get_vendor_reviews(self, vendor_id: int) -> ApiResponse:
        return self._make_request("GET", f"/vendor/{vendor_id}/ratings")

    def create_review(self, vendor_id: int, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("POST", f"/vendor/{vendor_id}/ratings", json=request)

    def get_vendor_documents(self, vendor_id: int) -> ApiResponse:
        return self._make_request("GET", f"/vendor/{vendor_id}/documents")

    def request_document_access(
        self, document_id: int, justification: Optional[str] = None
    ) -> ApiResponse:
        return self._make_request(
            "POST",
            f"/documents/{document_id}/access-requests",
            json={"justification": justification},
        )

    def decide_document_access(
        self, request_id: int, approve: bool, reason: Optional[str] = None
    ) -> ApiResponse:
        return self._make_request(
            "POST",
            f"/documents/access-requests/{request_id}/decision",
            json={"approve": approve, "rejectionReason": reason},
        )

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def claim_vendor(self, vendor_id: int, request: Dict[str, Any]) -> ApiResponse:
        return self._make_request("POST", f"/vendor/{vendor_id}/claims", json=request)

    def get_vendor_claims(self, status: Optional[str] = None) -> ApiResponse:
        return self._make_request("GET", "/vendor/claims", params=_drop_none({"status": status}))

    def approve_vendor_claim(
        self, claim_id: int, approved: bool, reason: Optional[str] = None
    ) -> ApiResponse:
        return self._make_request(
            "POST",
            f"/vendor/claims/{claim_id}/decision",
            json={"approve": approved, "rejectionReason": reason},
        )

    # ------------------------------------------------------------------
    # Admin and notifications
    # ------------------------------------------------------------------

    def get_admin_metrics(self) -> ApiResponse:
        return self._make_request("GET", "/admin/metrics")

    def get_vendor_performance_metrics(self) -> ApiResponse:
        return self._make_request("GET", "/admin/vendor-performance")

    def get_notifications(self) -> ApiResponse:
        return self._make_request("GET", "/notifications")

    def mark_notification_read(self, notification_id: int) -> ApiResponse:
        return self._make_request("POST", f"/notifications/{notification_id}/read")
