"""
Form submission helpers.

Each helper validates the form, calls the API only when the input is
acceptable, and reports the outcome as a FormResult with the message to show
inline.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..db.enums import UserRole, VerificationMethod
from .api_client import ApiService
from .session import AuthenticationFailed, SessionStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"

PROFILE_TEXT_FIELDS = (
    "summary",
    "detailedDescription",
    "location",
    "founded",
    "employees",
    "phone",
    "email",
    "logoUrl",
    "priceRange",
    "pricingNotes",
    "notes",
)
PROFILE_CHOICE_FIELDS = ("category", "size", "pricingModel")
PROFILE_LIST_FIELDS = ("tags", "features", "integrations", "targetCustomers")
STATUS_FIELDS = ("status", "verificationStatus")


@dataclass
class FormResult:
    ok: bool
    error: Optional[str] = None
    data: Any = None
    next_route: Optional[str] = None
    message: Optional[str] = None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _missing(form: Mapping[str, Any], fields: Iterable[str]) -> List[str]:
    return [field for field in fields if _blank(form.get(field))]


def _empty_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def normalize_multi_value(values: Union[str, Iterable[str], None]) -> List[str]:
    """
    Normalize a multi-value input.

    Accepts a comma-separated string or a list; entries are trimmed, blanks
    dropped and duplicates removed (first occurrence wins).
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(",")

    result: List[str] = []
    for value in values:
        item = value.strip()
        if item and item not in result:
            result.append(item)
    return result


# Authentication


def submit_sign_up(session: SessionStore, form: Mapping[str, Any]) -> FormResult:
    """
    Sign up from the registration form.

    The form carries the API sign-up fields plus ``confirmPassword``.
    """
    if form.get("password") != form.get("confirmPassword"):
        return FormResult(ok=False, error="Passwords do not match")

    role = form.get("role")
    if _blank(role) or role not in {r.value for r in UserRole if r != UserRole.ADMIN}:
        return FormResult(ok=False, error="Please select an account type")

    if _missing(form, ("email", "password", "firstName", "lastName")):
        return FormResult(ok=False, error=REQUIRED_FIELDS_MESSAGE)

    payload = {k: v for k, v in form.items() if k != "confirmPassword"}
    try:
        user = session.sign_up(payload)
    except AuthenticationFailed as e:
        logger.info(f"Sign up rejected: {e}")
        return FormResult(ok=False, error=str(e) or "Sign up failed. Please try again.")

    return FormResult(ok=True, data=user, next_route=session.get_dashboard_route())


def submit_sign_in(
    session: SessionStore, email: str, password: str, redirect: Optional[str] = None
) -> FormResult:
    if _blank(email) or _blank(password):
        return FormResult(ok=False, error="Email and password are required")

    try:
        user = session.sign_in(email.strip(), password)
    except AuthenticationFailed as e:
        return FormResult(ok=False, error=str(e))

    return FormResult(ok=True, data=user, next_route=redirect or session.get_dashboard_route())


# Marketplace forms


def submit_demo_request(api: ApiService, vendor_id: int, form: Mapping[str, Any]) -> FormResult:
    required = ("firstName", "lastName", "email", "bankName", "title", "timeline", "preferredTime")
    if _missing(form, required):
        return FormResult(ok=False, error=REQUIRED_FIELDS_MESSAGE)

    payload = {k: (v.strip() if isinstance(v, str) else v) for k, v in form.items()}
    payload["vendorId"] = vendor_id
    response = api.create_demo_request(payload)
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to submit demo request")

    return FormResult(
        ok=True,
        data=response.data,
        message="Demo request submitted! The vendor will contact you shortly.",
    )


def submit_vendor_claim(api: ApiService, vendor_id: int, form: Mapping[str, Any]) -> FormResult:
    required = ("firstName", "lastName", "email", "phone", "title", "companyEmail")
    if _missing(form, required):
        return FormResult(ok=False, error=REQUIRED_FIELDS_MESSAGE)

    if form.get("verificationMethod") not in {m.value for m in VerificationMethod}:
        return FormResult(ok=False, error="Please select a verification method")

    response = api.claim_vendor(vendor_id, dict(form))
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to submit claim")

    return FormResult(
        ok=True,
        data=response.data,
        message="Claim submitted. We will review it and get back to you.",
    )


def submit_review(api: ApiService, vendor_id: int, form: Mapping[str, Any]) -> FormResult:
    rating = form.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        return FormResult(ok=False, error="Please select a rating between 1 and 5")

    if _missing(form, ("title", "content")):
        return FormResult(ok=False, error="Please add a title and a review")

    payload = {
        "rating": rating,
        "title": form["title"].strip(),
        "content": form["content"].strip(),
        "isAnonymous": bool(form.get("isAnonymous", False)),
        "tags": normalize_multi_value(form.get("tags")),
    }
    response = api.create_review(vendor_id, payload)
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to submit review")

    return FormResult(ok=True, data=response.data, message="Thanks for your review!")


def submit_claim_decision(
    api: ApiService, claim_id: int, approve: bool, reason: Optional[str] = None
) -> FormResult:
    if not approve and _blank(reason):
        return FormResult(ok=False, error="Please provide a reason for rejection")

    response = api.approve_vendor_claim(claim_id, approve, _empty_to_none(reason))
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to update claim")

    return FormResult(
        ok=True,
        data=response.data,
        message="Claim approved" if approve else "Claim rejected",
    )


def submit_document_access(
    api: ApiService, document_id: int, justification: Optional[str] = None
) -> FormResult:
    response = api.request_document_access(document_id, _empty_to_none(justification))
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to request document access")

    approved = (response.data or {}).get("status") == "approved"
    return FormResult(
        ok=True,
        data=response.data,
        message=(
            "Access granted."
            if approved
            else "Document access requested! You will be notified when approved."
        ),
    )


# Vendor editing


def build_vendor_update_payload(
    form_state: Mapping[str, Any], include_status: bool = False
) -> Dict[str, Any]:
    """
    Turn vendor edit form state into a partial update payload.

    Blank text clears the field, empty selections and lists are sent as
    null. Status fields are only included for admins (include_status).
    """
    profile: Dict[str, Any] = {}
    for field in PROFILE_TEXT_FIELDS:
        if field in form_state:
            profile[field] = _empty_to_none(form_state[field])
    for field in PROFILE_CHOICE_FIELDS:
        if field in form_state:
            profile[field] = form_state[field] or None
    for field in PROFILE_LIST_FIELDS:
        if field in form_state:
            values = normalize_multi_value(form_state[field])
            profile[field] = values or None
    if include_status:
        for field in STATUS_FIELDS:
            if form_state.get(field):
                profile[field] = form_state[field]

    payload: Dict[str, Any] = {"profile": profile}
    if "companyName" in form_state:
        payload["companyName"] = (form_state["companyName"] or "").strip()
    if "isActive" in form_state:
        payload["isActive"] = bool(form_state["isActive"])
    if "website" in form_state:
        website = _empty_to_none(form_state["website"])
        payload["website"] = website
        profile["website"] = website
    return payload


def submit_vendor_update(
    api: ApiService,
    vendor_id: int,
    form_state: Mapping[str, Any],
    include_status: bool = False,
) -> FormResult:
    if _blank(form_state.get("companyName")):
        return FormResult(ok=False, error="Company name is required.")

    response = api.update_vendor(vendor_id, build_vendor_update_payload(form_state, include_status))
    if not response.success:
        return FormResult(ok=False, error=response.error or "Failed to update vendor. Please try again.")

    return FormResult(ok=True, data=response.data, message="Vendor updated successfully.")
