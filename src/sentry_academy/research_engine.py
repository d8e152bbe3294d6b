"""
research_engine.py — Keyword research across the nine Sentry sources
======================================================================
``ContentResearchEngine.research_sentry_content`` walks the enabled sources
of a request (in the order given), "fetches" each one, scores every page
for keyword relevance and returns the cross-source top results.

Fetching is simulated: every source routine renders a small set of canned
pages around the keywords.  What is real is everything around the fetch:

- a per-domain sliding-window limiter (a denied page is skipped, not an error)
- a relevance score ``min(1, Σ 0.1 × keyword occurrences)``
- per-source relevance thresholds (0.3 for docs/video, 0.2 elsewhere)
- a 24-hour cache keyed by ``(source, "-".join(keywords))``
- the trusted-URL guard (U-01): untrusted pages are dropped
- per-source failure isolation: a raising source is logged into the
  request's progress and the remaining sources still run

Progress written to the GenerationStore
---------------------------------------
  start             status=researching, 10 %
  source i of n     10 + 20·(i+1)/n %
  end               35 %, "Research completed. Found N relevant content pieces."
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Iterable, NamedTuple, Optional
from urllib.parse import urlparse

from sentry_academy.config import Settings, get_settings
from sentry_academy.generation_store import GenerationStore
from sentry_academy.guardrails import ResearchUrlGuard
from sentry_academy.models import (
    GenerationStatus,
    ResearchedContent,
    ResearchSource,
    ResearchSourceConfig,
    utcnow,
)
from sentry_academy.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


# ─── Source metadata ─────────────────────────────────────────────────────────

SOURCE_DISPLAY_NAMES: dict[ResearchSource, str] = {
    ResearchSource.DOCS_MAIN:    "Sentry Documentation",
    ResearchSource.DOCS_PRODUCT: "Product Documentation",
    ResearchSource.BLOG:         "Sentry Blog",
    ResearchSource.SENTRY_MAIN:  "Sentry Platform",
    ResearchSource.VS_LOGGING:   "Comparison Content",
    ResearchSource.ANSWERS:      "Sentry Answers",
    ResearchSource.SUPPORT:      "Support Center",
    ResearchSource.YOUTUBE:      "YouTube Videos",
    ResearchSource.CUSTOMERS:    "Customer Stories",
}

# Fetches allowed per domain in one rolling window.
DOMAIN_LIMITS: dict[str, int] = {
    "docs.sentry.io":     5,
    "blog.sentry.io":     3,
    "sentry.io":          6,
    "sentry.zendesk.com": 3,
    "youtube.com":        2,
    "web":                5,   # ad-hoc URLs, keyed by their own hostname
}

_COMMON_TOPICS = (
    "error tracking", "performance monitoring", "logging", "debugging",
    "alerts", "dashboards", "releases", "integrations", "API",
    "frontend", "backend", "JavaScript", "React", "Node.js", "Python",
)

_DEFAULT_CODE_EXAMPLE = (
    "import sentry_sdk\n\n"
    'sentry_sdk.init(dsn="YOUR_DSN_HERE", traces_sample_rate=1.0)'
)

_FENCED_CODE = re.compile(r"```[a-zA-Z]*\n(.*?)```", re.DOTALL)


class _Page(NamedTuple):
    url:   str
    title: str
    topic: str


@dataclass
class _CacheEntry:
    results:   list[ResearchedContent]
    stored_at: datetime


SourceFetcher = Callable[[list[str]], Awaitable[list[ResearchedContent]]]


# ─── Engine ──────────────────────────────────────────────────────────────────

class ContentResearchEngine:
    def __init__(
        self,
        store: GenerationStore,
        limiter: Optional[SlidingWindowRateLimiter] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        settings = settings or get_settings()
        self._store = store
        self._limiter = limiter or SlidingWindowRateLimiter(settings.research.rate_window_secs)
        self._cache_ttl = timedelta(hours=settings.research.cache_ttl_hours)
        self._max_results = settings.research.max_results
        self._min_relevance = settings.research.min_relevance
        self._clock = clock
        self._cache: dict[tuple[ResearchSource, str], _CacheEntry] = {}
        self._url_guard = ResearchUrlGuard()
        self._fetchers: dict[ResearchSource, SourceFetcher] = {
            ResearchSource.DOCS_MAIN:    self._research_docs,
            ResearchSource.DOCS_PRODUCT: self._research_product_docs,
            ResearchSource.BLOG:         self._research_blog,
            ResearchSource.SENTRY_MAIN:  self._research_sentry_main,
            ResearchSource.VS_LOGGING:   self._research_comparison,
            ResearchSource.ANSWERS:      self._research_answers,
            ResearchSource.SUPPORT:      self._research_support,
            ResearchSource.YOUTUBE:      self._research_youtube,
            ResearchSource.CUSTOMERS:    self._research_customer_stories,
        }

    # ── Public API ───────────────────────────────────────────────────────────

    async def research_sentry_content(
        self,
        keywords: list[str],
        sources: Iterable[ResearchSourceConfig],
        request_id: str,
    ) -> list[ResearchedContent]:
        enabled = [s for s in sources if s.enabled]
        self._store.update_generation_progress(
            request_id,
            status=GenerationStatus.RESEARCHING,
            current_step="Starting content research",
            progress=10,
            logs=[f"Starting research for keywords: {', '.join(keywords)}"],
        )

        results: list[ResearchedContent] = []
        for index, config in enumerate(enabled):
            name = source_display_name(config.source)
            self._store.update_generation_progress(
                request_id,
                current_step=f"Researching {name}",
                progress=10 + 20 * (index + 1) / len(enabled),
                logs=[f"Researching source: {name}"],
            )
            try:
                results.extend(await self.research_source(config.source, keywords))
            except Exception as exc:
                logger.warning("Research of %s failed for %s: %s", name, request_id, exc)
                self._store.update_generation_progress(
                    request_id,
                    logs=[f"Warning: Failed to research {name}: {exc}"],
                )

        self._store.update_generation_progress(
            request_id,
            current_step="Research completed, filtering and ranking results",
            progress=35,
            logs=[f"Research completed. Found {len(results)} relevant content pieces."],
        )
        return self.filter_and_rank_results(results, enabled)

    async def research_source(self, source: ResearchSource, keywords: list[str]) -> list[ResearchedContent]:
        """Fetch one source, serving from the cache while the entry is fresh."""
        key = (source, "-".join(keywords))
        cached = self._cache.get(key)
        if cached is not None and self._clock() - cached.stored_at < self._cache_ttl:
            logger.debug("Cache hit for %s", key)
            return list(cached.results)

        fetched = await self._fetchers[source](keywords)
        if fetched:
            self._cache[key] = _CacheEntry(results=list(fetched), stored_at=self._clock())
        return fetched

    def filter_and_rank_results(
        self,
        results: Iterable[ResearchedContent],
        sources: Iterable[ResearchSourceConfig] = (),
    ) -> list[ResearchedContent]:
        """
        Cross-source ranking: drop results under the relevance floor, sort by
        relevance (ties go to the higher-priority source) and keep the top N.
        """
        priority = {s.source: s.priority for s in sources}
        kept = [r for r in results if r.relevance_score >= self._min_relevance]
        kept.sort(key=lambda r: (-r.relevance_score, priority.get(r.source, 5)))
        return kept[: self._max_results]

    async def synthesize_web_content(self, urls: Iterable[str]) -> list[ResearchedContent]:
        """Turn ad-hoc URLs into research records (rate limited per hostname)."""
        results: list[ResearchedContent] = []
        for url in urls:
            hostname = urlparse(url).hostname
            if not hostname:
                logger.error("Skipping malformed URL %r", url)
                continue
            if not self._trusted(url):
                continue
            if not self._limiter.try_acquire(hostname, DOMAIN_LIMITS["web"]):
                logger.info("Rate limit reached for %s; skipping %s", hostname, url)
                continue
            keywords = ["monitoring", "observability"]
            content = render_doc_page(f"Information from {hostname}", keywords)
            results.append(ResearchedContent(
                source=source_from_url(url),
                url=url,
                title=f"Content from {hostname}",
                content=content,
                relevance_score=0.7,
                extracted_at=self._clock(),
                key_topics=keywords,
                code_examples=extract_code_examples(content),
                use_cases=extract_use_cases(content),
            ))
        return results

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── Source routines ──────────────────────────────────────────────────────

    async def _research_docs(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://docs.sentry.io/platforms/python/", "Python Platform Guide",
                  "Python SDK setup and configuration"),
            _Page("https://docs.sentry.io/product/explore/profiling/", "Profiling",
                  "Performance monitoring and profiling"),
            _Page("https://docs.sentry.io/product/sentry-basics/", "Sentry Basics",
                  "Fundamental Sentry concepts"),
        ]
        return await self._fetch_pages(ResearchSource.DOCS_MAIN, "docs.sentry.io", pages, keywords,
                                       render_doc_page, threshold=0.3)

    async def _research_product_docs(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://docs.sentry.io/product/alerts/", "Alerts & Notifications",
                  "Setting up alerts and notification rules"),
            _Page("https://docs.sentry.io/product/dashboards/", "Dashboards",
                  "Creating custom dashboards and widgets"),
            _Page("https://docs.sentry.io/product/releases/", "Release Management",
                  "Managing releases and tracking deployment health"),
        ]
        return await self._fetch_pages(ResearchSource.DOCS_PRODUCT, "docs.sentry.io", pages, keywords,
                                       render_doc_page, threshold=0.3)

    async def _research_blog(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://blog.sentry.io/performance-monitoring-best-practices/",
                  "Performance Monitoring Best Practices",
                  "Best practices for implementing performance monitoring"),
            _Page("https://blog.sentry.io/debugging-production-python/",
                  "Debugging Python in Production",
                  "Techniques for debugging production Python services"),
            _Page("https://blog.sentry.io/release-health-monitoring/", "Release Health Monitoring",
                  "How to monitor the health of your releases"),
        ]
        return await self._fetch_pages(ResearchSource.BLOG, "blog.sentry.io", pages, keywords,
                                       render_blog_post, threshold=0.2)

    async def _research_sentry_main(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://sentry.io/for/performance/", "Application Performance Monitoring",
                  "Sentry performance monitoring overview"),
            _Page("https://sentry.io/product/", "Sentry Product Overview",
                  "The Sentry application monitoring platform"),
        ]
        return await self._fetch_pages(ResearchSource.SENTRY_MAIN, "sentry.io", pages, keywords,
                                       render_comparison_page, threshold=0.2, with_code=False)

    async def _research_comparison(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://sentry.io/vs/logging/", "Sentry vs Traditional Logging",
                  "Comparison between Sentry and traditional logging approaches"),
        ]
        return await self._fetch_pages(ResearchSource.VS_LOGGING, "sentry.io", pages, keywords,
                                       render_comparison_page, threshold=0.2, with_code=False)

    async def _research_answers(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://sentry.io/answers/slow-transactions/", "Why are my transactions slow?",
                  "Community answers on diagnosing slow transactions"),
            _Page("https://sentry.io/answers/missing-stack-traces/", "Where did my stack trace go?",
                  "Community answers on missing stack traces"),
        ]
        return await self._fetch_pages(ResearchSource.ANSWERS, "sentry.io", pages, keywords,
                                       render_doc_page, threshold=0.2)

    async def _research_support(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://sentry.zendesk.com/hc/en-us/articles/quota-management",
                  "Managing Your Quota", "Quota and sampling configuration"),
        ]
        return await self._fetch_pages(ResearchSource.SUPPORT, "sentry.zendesk.com", pages, keywords,
                                       render_doc_page, threshold=0.2)

    async def _research_youtube(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://www.youtube.com/watch?v=sentry-performance-tutorial",
                  "Sentry Performance Monitoring Tutorial",
                  "Video tutorial on implementing performance monitoring"),
        ]
        return await self._fetch_pages(ResearchSource.YOUTUBE, "youtube.com", pages, keywords,
                                       render_video_transcript, threshold=0.3)

    async def _research_customer_stories(self, keywords: list[str]) -> list[ResearchedContent]:
        pages = [
            _Page("https://sentry.io/customers/dropbox/", "How Dropbox Uses Sentry",
                  "Dropbox case study on error monitoring and performance optimization"),
            _Page("https://sentry.io/customers/microsoft/", "Microsoft's Monitoring Strategy",
                  "Application monitoring at scale"),
        ]
        return await self._fetch_pages(ResearchSource.CUSTOMERS, "sentry.io", pages, keywords,
                                       render_customer_story, threshold=0.2, with_code=False)

    # ── Internal helpers ─────────────────────────────────────────────────────

    async def _fetch_pages(
        self,
        source: ResearchSource,
        domain: str,
        pages: list[_Page],
        keywords: list[str],
        render: Callable[[str, list[str]], str],
        threshold: float,
        with_code: bool = True,
    ) -> list[ResearchedContent]:
        results: list[ResearchedContent] = []
        for page in pages:
            if not self._limiter.try_acquire(domain, DOMAIN_LIMITS[domain]):
                logger.debug("Rate limit reached for %s; skipping %s", domain, page.url)
                continue
            if not self._trusted(page.url):
                continue
            await asyncio.sleep(0)   # yield as a real fetch would
            content = render(page.topic, keywords)
            score = calculate_relevance_score(content, keywords)
            if score < threshold:
                continue
            results.append(ResearchedContent(
                source=source,
                url=page.url,
                title=page.title,
                content=content,
                relevance_score=score,
                extracted_at=self._clock(),
                key_topics=extract_key_topics(content, keywords),
                code_examples=extract_code_examples(content) if with_code else [],
                use_cases=extract_use_cases(content),
            ))
        return results

    def _trusted(self, url: str) -> bool:
        result = self._url_guard.check_url(url)
        for violation in result.violations:
            logger.warning("[%s] %s", violation.code, violation.message)
        return result.passed


# ─── Scoring & extraction ────────────────────────────────────────────────────

def calculate_relevance_score(content: str, keywords: Iterable[str]) -> float:
    """``min(1, Σ 0.1 × occurrences)``; keywords match literally and case-insensitively."""
    lowered = content.lower()
    score = 0.0
    for keyword in keywords:
        needle = keyword.strip().lower()
        if needle:
            score += 0.1 * len(re.findall(re.escape(needle), lowered))
    return min(1.0, round(score, 4))


def extract_key_topics(content: str, keywords: Iterable[str]) -> list[str]:
    topics: list[str] = []
    for keyword in keywords:
        if keyword not in topics:
            topics.append(keyword)
    lowered = content.lower()
    for topic in _COMMON_TOPICS:
        if topic.lower() in lowered and topic not in topics:
            topics.append(topic)
    return topics[:10]


def extract_code_examples(content: str) -> list[str]:
    blocks = [b.strip() for b in _FENCED_CODE.findall(content) if b.strip()]
    if blocks:
        return blocks
    return [_DEFAULT_CODE_EXAMPLE] if "code" in content.lower() else []


def extract_use_cases(content: str) -> list[str]:
    lowered = content.lower()
    use_cases: list[str] = []
    if "monitoring" in lowered or "tracking" in lowered:
        use_cases.append("Production application monitoring")
    if "debug" in lowered or "error" in lowered:
        use_cases.append("Error debugging and resolution")
    if "performance" in lowered or "optimization" in lowered:
        use_cases.append("Performance optimization")
    return use_cases


def source_display_name(source: ResearchSource) -> str:
    return SOURCE_DISPLAY_NAMES.get(source, str(source.value))


def source_from_url(url: str) -> ResearchSource:
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    path = parsed.path or "/"
    if host == "docs.sentry.io":
        return ResearchSource.DOCS_PRODUCT if path.startswith("/product/") else ResearchSource.DOCS_MAIN
    if host == "blog.sentry.io":
        return ResearchSource.BLOG
    if host.endswith("youtube.com"):
        return ResearchSource.YOUTUBE
    if host.endswith("zendesk.com"):
        return ResearchSource.SUPPORT
    if host == "sentry.io":
        for prefix, source in (
            ("/customers/", ResearchSource.CUSTOMERS),
            ("/vs/", ResearchSource.VS_LOGGING),
            ("/answers/", ResearchSource.ANSWERS),
        ):
            if path.startswith(prefix):
                return source
        return ResearchSource.SENTRY_MAIN
    return ResearchSource.DOCS_MAIN


# ─── Simulated page renderers ────────────────────────────────────────────────

def render_doc_page(topic: str, keywords: list[str]) -> str:
    joined, first = ", ".join(keywords), keywords[0] if keywords else "monitoring"
    return f"""# {topic}

This guide covers {joined} in detail and shows how to apply monitoring and observability best practices.

## Getting Started

To begin with {first}, configure the Sentry SDK with the right initialization options and make sure your application is instrumented.

## Key Concepts

A working understanding of {" and ".join(keywords)} rests on a few ideas:

- Error tracking and issue grouping
- Performance monitoring and metrics
- Alert configuration and routing
- Dashboard creation and customization

## Implementation Examples

A minimal setup for {first} in your application:

```python
import sentry_sdk

sentry_sdk.init(
    dsn="YOUR_DSN_HERE",
    traces_sample_rate=1.0,
    profiles_sample_rate=1.0,
)
```

## Best Practices

When implementing {joined}:

1. Configure sampling rates that match your traffic
2. Set alert thresholds that reflect user impact
3. Build dashboards for each team that owns a service
4. Capture context with every error
5. Use structured logging

## Troubleshooting

Common issues you may hit while working with {joined}."""


def render_blog_post(topic: str, keywords: list[str]) -> str:
    joined, first = ", ".join(keywords), keywords[0] if keywords else "monitoring"
    return f"""# {topic}

This post walks through techniques for {joined} with Sentry, using real-world examples.

## Introduction

{topic} matters for every production team. Sentry lets you go beyond basic error tracking.

## Real-World Scenarios

Teams improved their {first} practice by adopting:

- Proactive monitoring with targeted alerts
- Dashboards for each stakeholder group
- Integration with existing development workflows
- Performance optimization driven by real user data

## Case Study

One engineering organisation cut its mean time to resolution by 60% after rolling out these {" and ".join(keywords)} practices.

## Conclusion

Effective {joined} depends on a plan that fits your team's workflows."""


def render_customer_story(topic: str, keywords: list[str]) -> str:
    joined, first = ", ".join(keywords), keywords[0] if keywords else "monitoring"
    return f"""# {topic}

How one company implemented {joined} to improve reliability and user experience.

## Challenge

The team struggled with {first}:
- High error rates hurting users
- No visibility into performance issues
- No way to prioritise engineering work

## Solution

By adopting Sentry's {" and ".join(keywords)} capabilities they achieved:
- 90% fewer unhandled errors
- 50% faster page loads
- Real-time visibility into application health

## Results

The implementation of {joined} paid off with fewer support tickets and better developer productivity.

## Key Takeaways

Success with implementing {" and ".join(keywords)} came from clear objectives, stakeholder buy-in and continuous monitoring."""


def render_comparison_page(topic: str, keywords: list[str]) -> str:
    joined, first = ", ".join(keywords), keywords[0] if keywords else "monitoring"
    return f"""# {topic}

Traditional tooling compared with Sentry's approach to {joined}.

## Traditional Approach

Traditional {first} solutions usually mean manual log analysis, reactive debugging and fragmented tooling.

## Sentry Approach

Sentry's approach to {" and ".join(keywords)} provides automatic error grouping, proactive issue detection and rich user-impact context.

| Feature          | Traditional | Sentry    |
|------------------|-------------|-----------|
| Error detection  | Manual      | Automatic |
| Resolution time  | Hours/Days  | Minutes   |

## Migration Strategy

Moving from traditional {first} to Sentry starts with an assessment of the current setup."""


def render_video_transcript(topic: str, keywords: list[str]) -> str:
    joined, first = ", ".join(keywords), keywords[0] if keywords else "monitoring"
    return f"""Video Transcript: {topic}

Welcome to this tutorial on {joined} with Sentry.

In this video we cover:
- Setting up {first} in your application
- Configuring alerts and notifications
- Building useful dashboards
- Best practices for {" and ".join(keywords)}

Key points: installation, real-world examples, common pitfalls and performance optimization tips.

See the Sentry documentation for more."""
