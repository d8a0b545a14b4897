"""Per-page GEO readiness checks.

Each check is a pure function of the parsed page (plus, for some, the page
URL, the body text, or the declared structured-data types) and returns a
``(passed, details)`` pair. :func:`run_all_checks` assembles them into the
fixed, ordered set of 19 :class:`CheckResult` records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from src.audit.document import PageDocument
from src.audit.structured_data import extract_schema_types
from src.audit.urls import hostname_of


class CheckName(str, Enum):
    """Canonical check names. Declaration order is the report order."""

    TITLE_TAG = "Title Tag"
    META_DESCRIPTION = "Meta Description"
    H1_HEADING = "H1 Heading"
    VIEWPORT = "Mobile-Friendly Viewport"
    INTERNAL_LINKING = "Internal Linking"
    IMAGE_ALT_TEXT = "Image Alt Text"
    CONVERSATIONAL_TONE = "Conversational Tone"
    LISTS = "Clear Structure (Lists)"
    READABILITY = "Readability"
    UNIQUE_DATA = "Unique Data/Insights"
    AUTHOR = "Author Byline/Bio"
    EXPERIENCE = "First-Hand Experience"
    FRESHNESS = "Content Freshness"
    CONTACT = "Contact Information"
    OUTBOUND_LINKS = "Outbound Links"
    CITED_SOURCES = "Cited Sources"
    SCHEMA_FOUND = "Schema Found"
    ARTICLE_ORG_SCHEMA = "Article or Org Schema"
    FAQ_HOWTO_SCHEMA = "FAQ or How-To Schema"


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    details: str


@dataclass(frozen=True)
class PageResult:
    url: str
    checks: tuple[CheckResult, ...]


@dataclass(frozen=True)
class PageContext:
    """Everything a check may look at, computed once per page."""

    page: PageDocument
    url: str
    text: str
    schema_types: tuple[str, ...]


Outcome = tuple[bool, str]

OK = "OK"

MIN_INTERNAL_LINKS = 2  # strictly more than this passes
MAX_WORDS_PER_SENTENCE = 25
MIN_PRONOUNS = 5  # strictly more than this passes
ALT_TEXT_SAMPLES = 2

QUESTION_WORDS = (
    "what", "how", "why", "when", "where", "is", "can",
    "do", "are", "which", "who", "does", "should",
)
VIZ_HOSTS = ("tableau", "datawrapper", "sheets.google.com", "fusiontables.google.com")

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_WORD_RE = re.compile(r"\b\w+\b")
_PRONOUN_RE = re.compile(r"\byou\b|\byour\b", re.IGNORECASE)
_RESEARCH_RE = re.compile(
    r"our data|our research|we surveyed|according to our study|we analyzed"
    r"|our findings show|in our analysis",
    re.IGNORECASE,
)
_EXPERIENCE_RE = re.compile(
    r"in our test|hands-on|my experience|we visited|I found that|our team reviewed"
    r"|we tested|firsthand|I personally|from my experience|having used|our hands-on review",
    re.IGNORECASE,
)
_FRESHNESS_RE = re.compile(r"updated|published", re.IGNORECASE)
_CITATION_RE = re.compile(r"source:|according to:|citation:", re.IGNORECASE)


# --- Helpers ---


def _hrefs(page: PageDocument, selector: str = "a[href]") -> list[str]:
    return [a["href"].strip() for a in page.select(selector) if isinstance(a.get("href"), str)]


def count_internal_links(page: PageDocument, url: str) -> int:
    """Count anchors resolving to the page's own hostname. Malformed hrefs never count."""
    page_host = hostname_of(url)
    if not page_host:
        return 0
    return sum(1 for href in _hrefs(page) if hostname_of(href, url) == page_host)


def has_external_link(page: PageDocument, url: str, selector: str = "a[href]") -> bool:
    """True if any anchor matching *selector* resolves to another, non-empty hostname."""
    page_host = hostname_of(url)
    for href in _hrefs(page, selector):
        host = hostname_of(href, url)
        if host and host != page_host:
            return True
    return False


def words_per_sentence(text: str) -> float:
    sentences = _SENTENCE_RE.findall(text)
    words = _WORD_RE.findall(text)
    if not sentences or not words:
        return 0.0
    return len(words) / len(sentences)


# --- Checks ---


def check_title(ctx: PageContext) -> Outcome:
    title = ctx.page.select_one("title")
    passed = title is not None and bool(title.get_text())
    return passed, OK if passed else "No title tag found."


def check_meta_description(ctx: PageContext) -> Outcome:
    meta = ctx.page.select_one('meta[name="description"]')
    passed = meta is not None and bool(meta.get("content"))
    return passed, OK if passed else "No meta description tag found."


def check_h1(ctx: PageContext) -> Outcome:
    count = len(ctx.page.select("h1"))
    passed = count == 1
    return passed, OK if passed else f"Found {count} h1 tags (expected 1)."


def check_viewport(ctx: PageContext) -> Outcome:
    passed = ctx.page.select_one('meta[name="viewport"]') is not None
    return passed, OK if passed else "Missing viewport meta tag."


def check_internal_links(ctx: PageContext) -> Outcome:
    count = count_internal_links(ctx.page, ctx.url)
    passed = count > MIN_INTERNAL_LINKS
    return passed, OK if passed else f"Found only {count} internal links (recommend > 2)."


def check_alt_text(ctx: PageContext) -> Outcome:
    missing = [img for img in ctx.page.select("img") if not (img.get("alt") or "").strip()]
    if not missing:
        return True, OK
    samples = []
    for img in missing[:ALT_TEXT_SAMPLES]:
        src = img.get("src") or ""
        samples.append((ctx.page.resolve(src) if src else None) or src or "(no src)")
    return False, f"Found {len(missing)} images missing alt text. e.g., {', '.join(samples)}"


def check_conversational_tone(ctx: PageContext) -> Outcome:
    for heading in ctx.page.select("h2, h3"):
        heading_text = heading.get_text().strip().lower()
        if heading_text.startswith(QUESTION_WORDS):
            return True, "OK (Found question-based subheadings)."

    pronouns = len(_PRONOUN_RE.findall(ctx.text))
    if pronouns > MIN_PRONOUNS:
        return True, f"OK (Found {pronouns} second-person pronouns)."
    return False, (
        "No question-based subheadings found, and only "
        f"{pronouns} uses of second-person pronouns (you/your); recommend > {MIN_PRONOUNS}."
    )


def check_lists(ctx: PageContext) -> Outcome:
    passed = ctx.page.select_one("ul, ol") is not None
    return passed, OK if passed else "No bulleted or numbered lists found."


def check_readability(ctx: PageContext) -> Outcome:
    score = words_per_sentence(ctx.text)
    if 0 < score < MAX_WORDS_PER_SENTENCE:
        return True, f"OK (Avg. {score:.1f} words/sentence)."
    if score == 0:
        return False, f"No sentences detected (Avg. {score:.1f} words/sentence)."
    return False, f"High (Avg. {score:.1f} words/sentence). Recommend < {MAX_WORDS_PER_SENTENCE}."


def check_unique_data(ctx: PageContext) -> Outcome:
    if _RESEARCH_RE.search(ctx.text):
        return True, "OK (Found keywords indicating original research)."
    if ctx.page.select_one("table") is not None:
        return True, "OK (Found an HTML table)."
    for iframe in ctx.page.select("iframe"):
        src = iframe.get("src") or ""
        if any(host in src for host in VIZ_HOSTS):
            return True, "OK (Found an embedded data visualization)."
    return False, "No signals of original data, research, tables, or embedded visualizations found."


def check_author(ctx: PageContext) -> Outcome:
    passed = ctx.page.select_one('a[href*="author/"], a[rel="author"]') is not None
    return passed, OK if passed else "No link to an author bio page found."


def check_experience(ctx: PageContext) -> Outcome:
    passed = _EXPERIENCE_RE.search(ctx.text) is not None
    return passed, OK if passed else "No phrases indicating first-hand experience found."


def check_freshness(ctx: PageContext) -> Outcome:
    passed = (
        _FRESHNESS_RE.search(ctx.text) is not None
        or ctx.page.select_one('meta[property*="time"]') is not None
    )
    return passed, OK if passed else "No published or last-updated date found."


def check_contact(ctx: PageContext) -> Outcome:
    passed = ctx.page.select_one('a[href*="contact"], a[href*="about"]') is not None
    return passed, OK if passed else "No link to a Contact or About page found."


def check_outbound_links(ctx: PageContext) -> Outcome:
    passed = has_external_link(ctx.page, ctx.url)
    return passed, OK if passed else "No links to external websites found."


def check_citations(ctx: PageContext) -> Outcome:
    if _CITATION_RE.search(ctx.text):
        return True, "OK (Found citation keywords)."
    if has_external_link(ctx.page, ctx.url, "p a[href]"):
        return True, "OK (Found outbound links within paragraph text)."
    return False, "No cited sources or contextual outbound links found in paragraphs."


def check_schema_found(ctx: PageContext) -> Outcome:
    if ctx.schema_types:
        return True, f"OK (Found: {', '.join(ctx.schema_types)})."
    return False, "No structured data found."


def check_article_org_schema(ctx: PageContext) -> Outcome:
    passed = "Article" in ctx.schema_types or "Organization" in ctx.schema_types
    return passed, OK if passed else "Missing essential Article or Organization schema."


def check_faq_howto_schema(ctx: PageContext) -> Outcome:
    passed = "FAQPage" in ctx.schema_types or "HowTo" in ctx.schema_types
    return passed, OK if passed else "Missing high-value FAQ or How-To schema."


CHECKS: dict[CheckName, Callable[[PageContext], Outcome]] = {
    CheckName.TITLE_TAG: check_title,
    CheckName.META_DESCRIPTION: check_meta_description,
    CheckName.H1_HEADING: check_h1,
    CheckName.VIEWPORT: check_viewport,
    CheckName.INTERNAL_LINKING: check_internal_links,
    CheckName.IMAGE_ALT_TEXT: check_alt_text,
    CheckName.CONVERSATIONAL_TONE: check_conversational_tone,
    CheckName.LISTS: check_lists,
    CheckName.READABILITY: check_readability,
    CheckName.UNIQUE_DATA: check_unique_data,
    CheckName.AUTHOR: check_author,
    CheckName.EXPERIENCE: check_experience,
    CheckName.FRESHNESS: check_freshness,
    CheckName.CONTACT: check_contact,
    CheckName.OUTBOUND_LINKS: check_outbound_links,
    CheckName.CITED_SOURCES: check_citations,
    CheckName.SCHEMA_FOUND: check_schema_found,
    CheckName.ARTICLE_ORG_SCHEMA: check_article_org_schema,
    CheckName.FAQ_HOWTO_SCHEMA: check_faq_howto_schema,
}


def run_all_checks(page: PageDocument, url: str) -> list[CheckResult]:
    """Run every check against *page* and return one result per :class:`CheckName`, in order."""
    ctx = PageContext(
        page=page,
        url=url,
        text=page.body_text,
        schema_types=tuple(extract_schema_types(page)),
    )
    results = []
    for name in CheckName:
        passed, details = CHECKS[name](ctx)
        results.append(CheckResult(name=name.value, passed=passed, details=details))
    return results


def check_page(page: PageDocument, url: str) -> PageResult:
    return PageResult(url=url, checks=tuple(run_all_checks(page, url)))
