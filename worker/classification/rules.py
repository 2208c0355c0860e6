"""Ordered rule tables mapping text patterns to business categories.

Rules are evaluated top to bottom and the first match wins. Domain rules
run against the domain's local part; content rules run against page
excerpts and end with a catch-all category.
"""

import re
from dataclasses import dataclass

FALLBACK_CATEGORY = "professional services"

_TLD_RE = re.compile(r"\.(com|net|org|io|ai|co|biz).*")


@dataclass(frozen=True)
class CategoryRule:
    """A single pattern -> category rule."""

    pattern: re.Pattern[str]
    category: str

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


def _rule(pattern: str, category: str) -> CategoryRule:
    return CategoryRule(pattern=re.compile(pattern), category=category)


# Substring matching; compound domain names have no word boundaries
DOMAIN_RULES: list[CategoryRule] = [
    _rule(r"bakery|bakeries|bread|pastry", "bakery"),
    _rule(r"restaurant|cafe|diner|bistro|pizza|sushi|burger|eatery", "restaurant / food service"),
    _rule(r"dental|dentist|orthodon", "dental / medical practice"),
    _rule(r"fitness|gym|yoga|wellness", "fitness / wellness"),
    _rule(r"lawyer|attorney|legal|lawfirm", "legal services"),
    _rule(r"accounting|taxprep|bookkeep|cpa", "accounting / tax"),
    _rule(r"realty|realtor|realestate|homes4sale", "real estate"),
    _rule(r"plumbing|hvac|roofing|handyman", "home services"),
    _rule(r"hotel|resort|travel|vacation", "travel / hospitality"),
    _rule(r"school|academy|tutor|elearning", "education"),
    _rule(r"autorepair|mechanic|autoshop", "automotive"),
    _rule(r"marketing|seoagency", "marketing agency"),
    _rule(r"recruit|staffing|talen", "recruitment / HR"),
]

CONTENT_RULES: list[CategoryRule] = [
    # Food & hospitality
    _rule(r"\b(bakery|bakeries|bread|pastry|cake|cupcake)\b", "bakery"),
    _rule(r"restaurant|cafe|food|menu|dining|pizza|sushi|burger|bistro", "restaurant / food service"),
    _rule(r"hotel|travel|vacation|booking|hospitality|airbnb|resort", "travel / hospitality"),
    # Health
    _rule(r"dental|dentist|orthodon", "dental / medical practice"),
    _rule(r"doctor|clinic|medical|hospital|therapy|therapist|chiro", "healthcare provider"),
    _rule(r"fitness|gym|yoga|wellness|personal train", "fitness / wellness"),
    # Professional
    _rule(r"lawyer|attorney|legal|law firm", "legal services"),
    _rule(r"accounting|tax|cpa|bookkeep", "accounting / tax"),
    _rule(r"recruit|hiring|staffing|talent|\bhr\b", "recruitment / HR"),
    # Real estate & home
    _rule(r"real estate|realty|homes for sale|property|realtor", "real estate"),
    _rule(r"plumb|electric|hvac|roofing|contractor|home service|handyman", "home services"),
    _rule(r"insurance|coverage|policy", "insurance"),
    # Tech
    _rule(r"\bai\b|machine learning|nlp|llm|gpt|artificial intelligence", "AI/ML tools"),
    _rule(r"saas|software|platform|\bapp\b|api|cloud", "SaaS"),
    _rule(r"marketing|seo|ads|campaign|social media", "marketing agency"),
    # Commerce
    _rule(r"ecommerce|e-commerce|shop|store|buy|checkout|cart", "e-commerce"),
    _rule(r"school|university|course|learn|tutor|education", "education"),
    _rule(r"consult|advisory|strategy|management", "consulting firm"),
    _rule(r"automotive|car|auto|vehicle|mechanic", "automotive"),
    _rule(r"photo|photography|videograph|creative|design", "photography / creative"),
    # Catch-all
    _rule(r"", FALLBACK_CATEGORY),
]


def first_match(rules: list[CategoryRule], text: str) -> str | None:
    """Return the category of the first matching rule, or None."""
    for rule in rules:
        if rule.matches(text):
            return rule.category
    return None


def domain_local_part(domain: str) -> str:
    """Lowercase the domain and strip a common TLD and anything after it."""
    return _TLD_RE.sub("", domain.lower(), count=1)


def category_from_domain(domain: str) -> str | None:
    return first_match(DOMAIN_RULES, domain_local_part(domain))


def category_from_content(text: str) -> str:
    return first_match(CONTENT_RULES, text.lower()) or FALLBACK_CATEGORY


def resolve_category(domain: str, text: str) -> str:
    """
    Pick a category from domain and content rules.

    A domain match wins unless it is the catch-all category.
    """
    domain_category = category_from_domain(domain)
    if domain_category and domain_category != FALLBACK_CATEGORY:
        return domain_category
    return category_from_content(text)
