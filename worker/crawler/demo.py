"""Synthetic stand-in pages for domains that cannot be reached."""

from worker.crawler.fetcher import FetchedPage
from worker.crawler.url import clean_domain


def _display_name(domain: str) -> str:
    """example-co.com -> Example co"""
    label = clean_domain(domain).removeprefix("www.").split(".")[0].replace("-", " ")
    return label[:1].upper() + label[1:]


def build_demo_pages(domain: str) -> list[FetchedPage]:
    """
    Build a deterministic homepage and services page for a domain.

    The pages depend only on the domain name, so repeated scans of the
    same unreachable domain produce identical results.
    """
    host = clean_domain(domain)
    name = _display_name(domain)
    base_url = f"https://{host}"

    homepage = f"""<!DOCTYPE html>
<html lang="en">
<head><title>{name} - Professional Services</title></head>
<body>
<nav><a href="/about">About</a> <a href="/services">Services</a> <a href="/pricing">Pricing</a></nav>
<main>
<h1>{name}: Professional Solutions for Modern Businesses</h1>
<p>{name} helps organizations streamline operations with practical services and dedicated support.</p>
<p>Our team works with clients to plan, deliver, and improve the results that matter to their business.</p>
<h2>Why choose {name}</h2>
<p>We combine industry experience with a clear process, transparent pricing, and responsive support.</p>
</main>
</body>
</html>"""

    services = f"""<!DOCTYPE html>
<html lang="en">
<head><title>Our Services - {name}</title></head>
<body>
<main>
<h1>Our Services</h1>
<h2>Core Solutions</h2>
<p>End-to-end service delivery tailored to the needs of each client.</p>
<h2>Consulting</h2>
<p>Strategy sessions and planning support to help teams make better decisions.</p>
<h2>Support</h2>
<p>Ongoing help from a dedicated team whenever questions come up.</p>
</main>
</body>
</html>"""

    return [
        FetchedPage(
            url=base_url,
            final_url=base_url,
            html=homepage,
            status_code=200,
            content_type="text/html",
        ),
        FetchedPage(
            url=f"{base_url}/services",
            final_url=f"{base_url}/services",
            html=services,
            status_code=200,
            content_type="text/html",
        ),
    ]
