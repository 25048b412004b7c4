"""Public link slugs."""

import pytest

from holoforms.slugs import generate_slug, is_valid_slug, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Customer Feedback", "customer-feedback"),
            ("  Q3 -- Survey!! ", "q3-survey"),
            ("Café & Bar", "caf-bar"),
            ("***", ""),
        ],
    )
    def test_slugify(self, name, expected):
        assert slugify(name) == expected


class TestGenerateSlug:
    def test_suffix(self):
        slug = generate_slug("Customer Feedback")
        base, _, suffix = slug.rpartition("-")
        assert base == "customer-feedback"
        assert len(suffix) == 6
        assert is_valid_slug(slug)

    def test_unusable_name(self):
        assert generate_slug("!!!").startswith("form-")

    def test_random(self):
        assert len({generate_slug("x") for _ in range(20)}) > 1


class TestIsValidSlug:
    @pytest.mark.parametrize("slug", ["a", "feedback-2026", "a-b-c"])
    def test_valid(self, slug):
        assert is_valid_slug(slug)

    @pytest.mark.parametrize("slug", ["", "-a", "a-", "a--b", "Upper", "with space", "a_b"])
    def test_invalid(self, slug):
        assert not is_valid_slug(slug)
