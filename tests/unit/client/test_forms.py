"""
Tests for the form submission helpers.
"""

import pytest

from haystackfi.client.forms import (
    REQUIRED_FIELDS_MESSAGE,
    build_vendor_update_payload,
    normalize_multi_value,
    submit_claim_decision,
    submit_demo_request,
    submit_document_access,
    submit_review,
    submit_sign_in,
    submit_sign_up,
    submit_vendor_claim,
    submit_vendor_update,
)

from client_fakes import FakeResponse, auth_body


@pytest.fixture
def sign_up_form():
    return {
        "email": "jane@firstnational.com",
        "password": "Secur3Pass",
        "confirmPassword": "Secur3Pass",
        "role": "bank",
        "firstName": "Jane",
        "lastName": "Doe",
        "institutionName": "First National Bank",
    }


def ok_handler(body=None):
    return lambda method, path, call: FakeResponse(200, body if body is not None else {})


def test_normalize_multi_value():
    assert normalize_multi_value(" core, api ,, core,Cloud ") == ["core", "api", "Cloud"]
    assert normalize_multi_value(["a ", " ", "a", "b"]) == ["a", "b"]
    assert normalize_multi_value(None) == []


# Sign up / sign in


def test_mismatched_passwords_make_no_request(make_session, sign_up_form):
    session, _, http = make_session(ok_handler(auth_body()))
    sign_up_form["confirmPassword"] = "Different1"

    result = submit_sign_up(session, sign_up_form)

    assert result.ok is False
    assert result.error == "Passwords do not match"
    assert http.calls == []


@pytest.mark.parametrize("role", [None, "", "admin", "investor"])
def test_sign_up_requires_account_type(make_session, sign_up_form, role):
    session, _, http = make_session(ok_handler(auth_body()))
    sign_up_form["role"] = role

    result = submit_sign_up(session, sign_up_form)

    assert result.error == "Please select an account type"
    assert http.calls == []


def test_sign_up_requires_names(make_session, sign_up_form):
    session, _, _ = make_session(ok_handler(auth_body()))
    sign_up_form["lastName"] = "  "

    assert submit_sign_up(session, sign_up_form).error == REQUIRED_FIELDS_MESSAGE


def test_sign_up_success_routes_to_dashboard(make_session, sign_up_form):
    session, _, http = make_session(ok_handler(auth_body()))

    result = submit_sign_up(session, sign_up_form)

    assert result.ok is True
    assert result.next_route == "/dashboard"
    assert "confirmPassword" not in http.calls[0]["json"]


def test_sign_up_shows_server_error(make_session, sign_up_form):
    session, _, _ = make_session(
        lambda method, path, call: FakeResponse(400, {"detail": "Email address already registered"})
    )

    result = submit_sign_up(session, sign_up_form)

    assert result.ok is False
    assert result.error == "Email address already registered"


def test_sign_in_honors_redirect(make_session):
    session, _, _ = make_session(ok_handler(auth_body()))

    assert submit_sign_in(session, "", "x").error == "Email and password are required"
    result = submit_sign_in(session, " sarah@firstnational.com ", "Secur3Pass", redirect="/vendor/3")

    assert result.ok is True
    assert result.next_route == "/vendor/3"


# Marketplace forms


def test_demo_request_requires_fields(make_api):
    api, http = make_api(ok_handler())

    result = submit_demo_request(api, 3, {"firstName": "Sarah", "timeline": "3-6 months"})

    assert result.error == REQUIRED_FIELDS_MESSAGE
    assert http.calls == []


def test_demo_request_sends_vendor_id(make_api):
    api, http = make_api(ok_handler({"id": 1, "status": "pending"}))
    form = {
        "firstName": "Sarah ",
        "lastName": "Johnson",
        "email": "sarah@firstnational.com",
        "bankName": "First National Bank",
        "title": "CTO",
        "timeline": "3-6 months",
        "preferredTime": "Mornings",
    }

    result = submit_demo_request(api, 3, form)

    assert result.ok is True
    assert http.calls[0]["json"]["vendorId"] == 3
    assert http.calls[0]["json"]["firstName"] == "Sarah"


def test_vendor_claim_requires_verification_method(make_api):
    api, http = make_api(ok_handler())
    form = {
        "firstName": "Sam",
        "lastName": "Ortiz",
        "email": "sam@payflow.com",
        "phone": "555-0100",
        "title": "VP",
        "companyEmail": "sam@payflow.com",
        "verificationMethod": "",
    }

    assert submit_vendor_claim(api, 3, form).error == "Please select a verification method"
    form["verificationMethod"] = "email"
    assert submit_vendor_claim(api, 3, form).ok is True
    assert http.paths() == ["POST /vendor/3/claims"]


@pytest.mark.parametrize("rating", [None, 0, 6, True, "5"])
def test_review_rating_must_be_one_to_five(make_api, rating):
    api, http = make_api(ok_handler())

    result = submit_review(api, 3, {"rating": rating, "title": "Good", "content": "Works"})

    assert result.error == "Please select a rating between 1 and 5"
    assert http.calls == []


def test_review_payload(make_api):
    api, http = make_api(ok_handler())

    assert submit_review(api, 3, {"rating": 4, "title": " ", "content": "x"}).error == (
        "Please add a title and a review"
    )
    result = submit_review(api, 3, {"rating": 4, "title": " Good ", "content": "Works", "tags": "api, api"})

    assert result.ok is True
    assert http.calls[0]["json"] == {
        "rating": 4,
        "title": "Good",
        "content": "Works",
        "isAnonymous": False,
        "tags": ["api"],
    }


def test_claim_rejection_needs_reason(make_api):
    api, http = make_api(ok_handler({"status": "rejected"}))

    assert submit_claim_decision(api, 5, approve=False, reason=" ").error == (
        "Please provide a reason for rejection"
    )
    assert http.calls == []
    assert submit_claim_decision(api, 5, approve=True).message == "Claim approved"


def test_document_access_messages(make_api):
    api, _ = make_api(ok_handler({"status": "approved"}))
    assert submit_document_access(api, 2).message == "Access granted."

    api, http = make_api(ok_handler({"status": "pending"}))
    result = submit_document_access(api, 2, "  ")
    assert result.message.startswith("Document access requested")
    assert http.calls[0]["json"] == {"justification": None}


# Vendor editing


def test_build_vendor_update_payload():
    form_state = {
        "companyName": " CoreTech ",
        "website": " ",
        "summary": "  Cloud core ",
        "phone": "",
        "category": "",
        "tags": "core, api, core",
        "features": [],
        "status": "active",
        "isActive": 1,
    }

    payload = build_vendor_update_payload(form_state)

    assert payload["companyName"] == "CoreTech"
    assert payload["website"] is None
    assert payload["isActive"] is True
    assert payload["profile"] == {
        "summary": "Cloud core",
        "phone": None,
        "category": None,
        "tags": ["core", "api"],
        "features": None,
        "website": None,
    }

    with_status = build_vendor_update_payload(form_state, include_status=True)
    assert with_status["profile"]["status"] == "active"


def test_vendor_update_requires_company_name(make_api):
    api, http = make_api(ok_handler())

    assert submit_vendor_update(api, 3, {"companyName": "  "}).error == "Company name is required."
    assert http.calls == []

    result = submit_vendor_update(api, 3, {"companyName": "CoreTech"})
    assert result.ok is True
    assert http.paths() == ["PUT /vendor/3"]
