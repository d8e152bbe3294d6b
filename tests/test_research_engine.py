"""
Tests for ContentResearchEngine and the scoring / extraction helpers.
"""
from datetime import timedelta

import pytest

from factories import make_request, make_research

from sentry_academy.models import GenerationStatus, ResearchSource, ResearchSourceConfig, utcnow
from sentry_academy.research_engine import (
    ContentResearchEngine,
    calculate_relevance_score,
    extract_code_examples,
    extract_key_topics,
    extract_use_cases,
    source_display_name,
    source_from_url,
)


class FakeClock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(store, clock):
    return ContentResearchEngine(store, clock=clock)


@pytest.fixture
def seeded(store):
    request = make_request()
    store.add_generation_request(request)
    return request


class TestResearchSentryContent:
    @pytest.mark.asyncio
    async def test_progress_and_final_log(self, engine, store, seeded):
        seen = []
        store.subscribe(seeded.id, lambda p: seen.append(p.progress))
        results = await engine.research_sentry_content(
            seeded.keywords, seeded.selected_sources, seeded.id,
        )
        progress = store.get_generation_progress(seeded.id)
        assert progress.status == GenerationStatus.RESEARCHING
        assert progress.progress == 35
        assert seen[0] == 10
        assert seen == sorted(seen)
        assert progress.logs[-1] == f"Research completed. Found {len(results)} relevant content pieces."
        assert results

    @pytest.mark.asyncio
    async def test_domain_limits_are_shared_across_sources(self, engine, seeded):
        results = await engine.research_sentry_content(
            seeded.keywords, seeded.selected_sources, seeded.id,
        )
        docs = [r for r in results if r.url.startswith("https://docs.sentry.io/")]
        sentry_main = [r for r in results if r.url.startswith("https://sentry.io/")]
        assert len(docs) == 5
        assert len(sentry_main) == 6

    @pytest.mark.asyncio
    async def test_results_are_ranked(self, engine, seeded):
        results = await engine.research_sentry_content(
            seeded.keywords, seeded.selected_sources, seeded.id,
        )
        scores = [r.relevance_score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_disabled_sources_are_skipped(self, engine, seeded):
        sources = [
            ResearchSourceConfig(source=ResearchSource.BLOG, priority=1),
            ResearchSourceConfig(source=ResearchSource.YOUTUBE, enabled=False),
        ]
        results = await engine.research_sentry_content(["profiling"], sources, seeded.id)
        assert {r.source for r in results} == {ResearchSource.BLOG}

    @pytest.mark.asyncio
    async def test_failing_source_is_logged_and_isolated(self, engine, store, seeded):
        async def broken(keywords):
            raise RuntimeError("connection reset")

        engine._fetchers[ResearchSource.YOUTUBE] = broken
        sources = [
            ResearchSourceConfig(source=ResearchSource.YOUTUBE, priority=1),
            ResearchSourceConfig(source=ResearchSource.BLOG, priority=2),
        ]
        results = await engine.research_sentry_content(["profiling"], sources, seeded.id)
        logs = store.get_generation_progress(seeded.id).logs
        assert "Warning: Failed to research YouTube Videos: connection reset" in logs
        assert results and all(r.source == ResearchSource.BLOG for r in results)
        assert store.get_generation_progress(seeded.id).progress == 35


class TestCache:
    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, engine):
        first = await engine.research_source(ResearchSource.SUPPORT, ["profiling"])
        # the support domain allows 3 fetches per window; a cache hit uses none
        for _ in range(5):
            again = await engine.research_source(ResearchSource.SUPPORT, ["profiling"])
        assert [r.url for r in again] == [r.url for r in first]

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, engine, clock):
        await engine.research_source(ResearchSource.BLOG, ["profiling"])
        clock.now += timedelta(hours=25)
        # blog allows 3 fetches per window and the first call used them all
        assert await engine.research_source(ResearchSource.BLOG, ["profiling"]) == []

    @pytest.mark.asyncio
    async def test_empty_results_are_not_cached(self, engine):
        assert await engine.research_source(ResearchSource.YOUTUBE, ["  "]) == []
        assert engine._cache == {}

    @pytest.mark.asyncio
    async def test_key_joins_keywords_in_order(self, engine):
        await engine.research_source(ResearchSource.SUPPORT, ["sampling", "quota"])
        assert (ResearchSource.SUPPORT, "sampling-quota") in engine._cache
        assert (ResearchSource.SUPPORT, "quota-sampling") not in engine._cache
        engine.clear_cache()
        assert engine._cache == {}


class TestFilterAndRank:
    def test_floor_and_priority_tie_break(self, engine):
        low = make_research(relevance=0.1)
        blog = make_research(source=ResearchSource.BLOG, relevance=0.8, url="https://blog.sentry.io/a/")
        docs = make_research(source=ResearchSource.DOCS_MAIN, relevance=0.8)
        top = make_research(source=ResearchSource.YOUTUBE, relevance=0.95,
                            url="https://www.youtube.com/watch?v=1")
        sources = [
            ResearchSourceConfig(source=ResearchSource.DOCS_MAIN, priority=1),
            ResearchSourceConfig(source=ResearchSource.BLOG, priority=2),
        ]
        ranked = engine.filter_and_rank_results([low, blog, docs, top], sources)
        assert [r.source for r in ranked] == [
            ResearchSource.YOUTUBE, ResearchSource.DOCS_MAIN, ResearchSource.BLOG,
        ]

    def test_keeps_at_most_max_results(self, engine, settings):
        many = [make_research(relevance=0.5) for _ in range(settings.research.max_results + 5)]
        assert len(engine.filter_and_rank_results(many)) == settings.research.max_results


class TestSynthesizeWebContent:
    @pytest.mark.asyncio
    async def test_skips_malformed_and_untrusted(self, engine):
        results = await engine.synthesize_web_content([
            "not a url",
            "https://sentry.io.evil.com/page",
            "https://docs.sentry.io/product/alerts/",
        ])
        assert len(results) == 1
        assert results[0].source == ResearchSource.DOCS_PRODUCT
        assert results[0].relevance_score == 0.7
        assert results[0].title == "Content from docs.sentry.io"

    @pytest.mark.asyncio
    async def test_rate_limited_per_hostname(self, engine):
        urls = [f"https://blog.sentry.io/post-{i}/" for i in range(7)]
        assert len(await engine.synthesize_web_content(urls)) == 5


class TestScoring:
    def test_relevance_counts_occurrences(self):
        assert calculate_relevance_score("Profiling and more profiling", ["profiling"]) == pytest.approx(0.2)

    def test_relevance_caps_at_one(self):
        assert calculate_relevance_score("api " * 30, ["api"]) == 1.0

    def test_relevance_ignores_blank_keywords(self):
        assert calculate_relevance_score("anything", ["  "]) == 0.0

    def test_key_topics_start_with_keywords(self):
        topics = extract_key_topics("We cover error tracking and React dashboards", ["replay"])
        assert topics[0] == "replay"
        assert "error tracking" in topics and "React" in topics
        assert len(extract_key_topics("x", [f"k{i}" for i in range(15)])) == 10

    def test_code_examples_prefer_fenced_blocks(self):
        assert extract_code_examples("```python\nprint(1)\n```") == ["print(1)"]
        assert extract_code_examples("see the code below")[0].startswith("import sentry_sdk")
        assert extract_code_examples("nothing here") == []

    def test_use_cases(self):
        assert extract_use_cases("error monitoring for performance") == [
            "Production application monitoring",
            "Error debugging and resolution",
            "Performance optimization",
        ]
        assert extract_use_cases("hello") == []


class TestSourceHelpers:
    @pytest.mark.parametrize("url,source", [
        ("https://docs.sentry.io/platforms/python/", ResearchSource.DOCS_MAIN),
        ("https://docs.sentry.io/product/alerts/", ResearchSource.DOCS_PRODUCT),
        ("https://blog.sentry.io/x/", ResearchSource.BLOG),
        ("https://sentry.io/customers/acme/", ResearchSource.CUSTOMERS),
        ("https://sentry.io/vs/logging/", ResearchSource.VS_LOGGING),
        ("https://sentry.io/answers/x/", ResearchSource.ANSWERS),
        ("https://sentry.io/pricing/", ResearchSource.SENTRY_MAIN),
        ("https://www.youtube.com/watch?v=1", ResearchSource.YOUTUBE),
        ("https://sentry.zendesk.com/hc/", ResearchSource.SUPPORT),
    ])
    def test_source_from_url(self, url, source):
        assert source_from_url(url) == source

    def test_display_name(self):
        assert source_display_name(ResearchSource.CUSTOMERS) == "Customer Stories"
