"""
Tests for the request guardrails (R-01 – R-05) and the researched-URL
guard (U-01).
"""
import pytest

from factories import make_request

from sentry_academy.guardrails import (
    GuardrailLevel,
    RequestGuardrails,
    RequestValidationError,
    ResearchUrlGuard,
    ensure_valid_request,
    is_trusted_url,
)
from sentry_academy.models import ResearchSource, ResearchSourceConfig


def codes(result):
    return [v.code for v in result.violations]


class TestRequestGuardrails:
    def setup_method(self):
        self.guard = RequestGuardrails()

    def test_default_request_passes_cleanly(self):
        result = self.guard.check(make_request())
        assert result.passed
        assert result.violations == []
        assert result.summary() == "✅ All guardrails passed."

    def test_r01_blank_keywords_block(self):
        result = self.guard.check(make_request(keywords=["  ", ""]))
        assert "R-01" in codes(result)
        assert result.blocked
        assert not result.passed

    def test_r02_no_roles_block(self):
        result = self.guard.check(make_request(roles=[]))
        assert [v.code for v in result.blocking] == ["R-02"]

    def test_r03_all_sources_disabled_block(self):
        sources = [ResearchSourceConfig(source=ResearchSource.BLOG, enabled=False)]
        result = self.guard.check(make_request(selected_sources=sources))
        assert "R-03" in codes(result)
        assert result.blocked

    def test_r04_long_keyword_warns(self):
        result = self.guard.check(make_request(keywords=["x" * 61]))
        assert codes(result) == ["R-04"]
        assert result.violations[0].level == GuardrailLevel.WARN
        assert result.passed

    def test_r04_keyword_at_limit_is_fine(self):
        assert self.guard.check(make_request(keywords=["x" * 60])).violations == []

    def test_r04_duplicates_warn_case_insensitively(self):
        result = self.guard.check(make_request(keywords=["Profiling", "profiling"]))
        assert codes(result) == ["R-04"]
        assert "profiling" in result.violations[0].message

    def test_r05_flat_priorities_warn(self):
        sources = [
            ResearchSourceConfig(source=ResearchSource.BLOG, priority=2),
            ResearchSourceConfig(source=ResearchSource.DOCS_MAIN, priority=2),
        ]
        result = self.guard.check(make_request(selected_sources=sources))
        assert codes(result) == ["R-05"]
        assert result.warnings

    def test_r05_single_source_is_fine(self):
        sources = [ResearchSourceConfig(source=ResearchSource.BLOG, priority=2)]
        assert self.guard.check(make_request(selected_sources=sources)).passed

    def test_summary_lists_every_violation(self):
        result = self.guard.check(make_request(keywords=[], roles=[]))
        summary = result.summary()
        assert "[R-01]" in summary and "[R-02]" in summary


class TestEnsureValidRequest:
    def test_blocked_request_raises(self):
        with pytest.raises(RequestValidationError) as exc:
            ensure_valid_request(make_request(roles=[]))
        assert exc.value.result.blocked
        assert "R-02" in str(exc.value)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            ensure_valid_request(make_request(keywords=[]))

    def test_warnings_do_not_raise(self):
        result = ensure_valid_request(make_request(keywords=["a", "A"]))
        assert result.passed
        assert len(result.warnings) == 1


class TestResearchUrlGuard:
    @pytest.mark.parametrize("url", [
        "https://docs.sentry.io/product/profiling/",
        "https://blog.sentry.io/how-we-profile/",
        "https://sentry.io/answers/slow-api/",
        "https://sentry.zendesk.com/hc/en-us/articles/1",
        "https://www.youtube.com/watch?v=abc123",
        "https://sentry.io",
    ])
    def test_trusted(self, url):
        assert is_trusted_url(url)
        assert ResearchUrlGuard().check_url(url).passed

    @pytest.mark.parametrize("url", [
        "https://sentry.io.evil.com/page",
        "http://docs.sentry.io/product/",
        "https://docs.sentry.io.example.com/",
        "https://www.youtube.com/@SomeoneElse/videos",
        "",
    ])
    def test_untrusted_warns(self, url):
        result = ResearchUrlGuard().check_url(url, "research_sources[0].url")
        assert codes(result) == ["U-01"]
        assert result.violations[0].level == GuardrailLevel.WARN
        assert result.violations[0].field == "research_sources[0].url"
        assert not result.passed
