"""Canned buyer personas for known categories."""

from worker.classification.models import Persona

PERSONAS: dict[str, Persona] = {
    "SaaS": Persona(
        title="Product Manager / Operations Lead",
        goal="Streamline workflows and reduce operational friction",
        pain_points=["tool fragmentation", "lack of visibility", "manual processes"],
    ),
    "AI/ML tools": Persona(
        title="Innovation Lead / Product Manager",
        goal="Reduce decision ambiguity and document decision rationale",
        pain_points=["lack of reproducible rationale", "fragmented team decisions"],
    ),
    "marketing agency": Persona(
        title="Marketing Director / CMO",
        goal="Maximize ROI on marketing spend and prove attribution",
        pain_points=["rising ad costs", "attribution complexity", "agency trust"],
    ),
    "real estate": Persona(
        title="Home Buyer / Seller",
        goal="Find the right property or sell quickly at best price",
        pain_points=["market uncertainty", "agent trust", "process complexity"],
    ),
    "restaurant / food service": Persona(
        title="Local Customer",
        goal="Find a great meal nearby quickly and easily",
        pain_points=["too many options", "reliability concerns", "parking/convenience"],
    ),
    "bakery": Persona(
        title="Local Customer",
        goal="Find fresh, quality baked goods nearby",
        pain_points=["freshness concerns", "limited hours", "finding the right specialty items"],
    ),
    "dental / medical practice": Persona(
        title="Patient / Caregiver",
        goal="Find trusted care nearby, book quickly",
        pain_points=["insurance complexity", "wait times", "trust"],
    ),
    "healthcare provider": Persona(
        title="Patient / Caregiver",
        goal="Get reliable medical care without long waits",
        pain_points=[
            "finding available providers",
            "insurance coverage",
            "appointment availability",
        ],
    ),
    "legal services": Persona(
        title="Individual or Business Owner",
        goal="Get expert legal help without overpaying",
        pain_points=["high costs", "complexity", "finding trustworthy counsel"],
    ),
    "home services": Persona(
        title="Homeowner",
        goal="Fix the problem fast with a reliable pro",
        pain_points=["finding reliable contractors", "pricing uncertainty", "scheduling"],
    ),
    "fitness / wellness": Persona(
        title="Health-Conscious Consumer",
        goal="Find quality fitness or wellness services nearby",
        pain_points=["membership costs", "schedule flexibility", "finding the right fit"],
    ),
    "accounting / tax": Persona(
        title="Small Business Owner / Individual",
        goal="Minimize tax burden and stay compliant",
        pain_points=[
            "regulatory complexity",
            "finding trustworthy accountants",
            "cost",
        ],
    ),
    "automotive": Persona(
        title="Vehicle Owner",
        goal="Keep their car running reliably at fair prices",
        pain_points=["finding honest mechanics", "unexpected costs", "wait times"],
    ),
}

GENERIC_TITLES = {
    "businesses": "Business Owner / Decision Maker",
    "consumers": "Consumer / Buyer",
    "niche": "Specialist Buyer / Practitioner",
}
GENERIC_GOAL = "Find the best solution for their specific need quickly"
GENERIC_PAIN_POINTS = ["too many options", "lack of trust signals", "unclear pricing"]


def persona_for(category: str, audience: str) -> Persona:
    """Return a fresh persona for a category, generic when unknown."""
    known = PERSONAS.get(category)
    if known is not None:
        return Persona(title=known.title, goal=known.goal, pain_points=list(known.pain_points))

    return Persona(
        title=GENERIC_TITLES.get(audience, GENERIC_TITLES["consumers"]),
        goal=GENERIC_GOAL,
        pain_points=list(GENERIC_PAIN_POINTS),
    )
