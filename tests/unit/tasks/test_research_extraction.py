"""
Tests for the research helpers that build profile data from a vendor record.
"""

from types import SimpleNamespace

from haystackfi.api.services.vendor_service import apply_research_to_vendor
from haystackfi.db.models import Vendor, VendorProfile, VendorResearchRecord
from haystackfi.tasks.research import (
    _normalize_url,
    build_website_snapshot,
    derive_insights,
    extract_profile,
)


def make_vendor(**profile):
    return SimpleNamespace(
        company_name="CoreTech Solutions",
        website="https://coretech.com",
        reviews=[],
        profile=SimpleNamespace(**{
            "category": None,
            "summary": None,
            "detailed_description": None,
            "rating": None,
            **profile,
        }),
    )


def test_normalize_url():
    assert _normalize_url(" coretech.com/ ") == "https://coretech.com"
    assert _normalize_url("http://coretech.com") == "http://coretech.com"


def test_extract_profile_from_category_and_description():
    vendor = make_vendor(
        category="Core, Payments & Risk",
        detailed_description="Cloud core for banks. Also payments.",
    )

    extracted = extract_profile(vendor, "https://coretech.com")

    assert extracted["summary"] == "Cloud core for banks."
    assert extracted["tags"] == ["core", "payments", "risk"]
    assert extracted["email"] == "info@coretech.com"
    assert extracted["search_hints_keywords"] == ["coretech solutions", "core, payments & risk"]


def test_extract_profile_without_profile_data():
    extracted = extract_profile(make_vendor(), "https://coretech.com")

    assert extracted["summary"] is None
    assert extracted["category"] is None
    assert extracted["tags"] == []


def test_snapshot_and_insights():
    vendor = make_vendor(category="Payments", rating=4.2)

    snapshot = build_website_snapshot(vendor, "https://coretech.com")
    insights = derive_insights(vendor, extract_profile(vendor, "https://coretech.com"))

    assert snapshot["domain"] == "coretech.com"
    assert snapshot["title"] == "CoreTech Solutions | Payments"
    assert insights["positioning"] == "CoreTech Solutions serves financial institutions in Payments"
    assert insights["current_rating"] == 4.2
    assert "email" in insights["fields_found"]


def test_apply_research_keeps_curated_values():
    vendor = Vendor(
        id=1,
        company_name="CoreTech Solutions",
        website="",
        profile=VendorProfile(summary="Curated", tags=[]),
    )
    record = VendorResearchRecord(
        id=9,
        extracted_profile={
            "summary": "Researched",
            "tags": ["core"],
            "website": "https://coretech.com",
            "email": "",
        },
        discovered_logo_url="https://coretech.com/favicon.ico",
    )

    updated = apply_research_to_vendor(vendor, record)

    assert vendor.profile.summary == "Curated"
    assert vendor.profile.tags == ["core"]
    assert vendor.profile.logo_url == "https://coretech.com/favicon.ico"
    assert vendor.website == "https://coretech.com"
    assert vendor.profile.email is None
    assert set(updated) == {"tags", "website", "logo_url"}
    assert vendor.profile.last_verified is not None
