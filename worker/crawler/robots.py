"""Robots.txt parser and handler."""

import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class RobotsRule:
    """A single robots.txt rule."""

    path: str
    allowed: bool

    def matches(self, url_path: str) -> bool:
        """Check if this rule matches a URL path."""
        # Handle wildcard patterns
        if "*" in self.path or self.path.endswith("$"):
            anchored = self.path.endswith("$")
            body = self.path[:-1] if anchored else self.path
            pattern = "^" + ".*".join(re.escape(part) for part in body.split("*"))
            if anchored:
                pattern += "$"
            return bool(re.match(pattern, url_path))
        return url_path.startswith(self.path)


@dataclass
class RobotsParser:
    """Parser for robots.txt files.

    Only groups that name ``*`` or our own agent token apply. A group
    containing ``Disallow: /`` or an empty ``Disallow:`` blocks the whole
    site; we treat the latter as a refusal too rather than as the
    conventional allow-all.
    """

    rules: list[RobotsRule] = field(default_factory=list)
    blocks_all: bool = False

    @classmethod
    def parse(cls, content: str, agent_token: str = "*") -> "RobotsParser":
        """
        Parse robots.txt content.

        Args:
            content: The robots.txt file content
            agent_token: Our crawler's name as matched in User-agent lines

        Returns:
            RobotsParser instance with the rules that apply to us
        """
        parser = cls()
        token = agent_token.lower()
        group_agents: list[str] = []
        in_rules = False  # True once the current group has seen a directive

        for raw_line in content.splitlines():
            line = raw_line.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue

            directive, _, value = line.partition(":")
            directive = directive.strip().lower()
            value = value.strip()

            if directive == "user-agent":
                # Consecutive User-agent lines share one group
                if in_rules:
                    group_agents = []
                    in_rules = False
                group_agents.append(value.lower())
                continue

            in_rules = True
            applies = any(agent == "*" or agent == token for agent in group_agents)
            if not applies:
                continue

            if directive == "disallow":
                if value in ("", "/"):
                    parser.blocks_all = True
                else:
                    parser.rules.append(RobotsRule(path=value, allowed=False))
            elif directive == "allow" and value:
                parser.rules.append(RobotsRule(path=value, allowed=True))

        return parser

    def is_allowed(self, url: str) -> bool:
        """
        Check if a URL is allowed to be crawled.

        Args:
            url: The URL to check

        Returns:
            True if crawling is allowed, False otherwise
        """
        if self.blocks_all:
            return False

        parsed = urlparse(url)
        path = parsed.path or "/"

        # Longest matching rule wins
        for rule in sorted(self.rules, key=lambda r: len(r.path), reverse=True):
            if rule.matches(path):
                return rule.allowed

        return True


class RobotsChecker:
    """Fetches robots.txt for a site and answers policy questions."""

    def __init__(
        self,
        user_agent: str,
        agent_token: str,
        timeout: float = 3.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.user_agent = user_agent
        self.agent_token = agent_token
        self.timeout = timeout
        self._transport = transport

    async def fetch(self, base_url: str) -> RobotsParser:
        """
        Fetch and parse robots.txt for a base URL.

        Any failure to retrieve the file means crawling is allowed.
        """
        robots_url = f"{base_url.rstrip('/')}/robots.txt"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(robots_url, headers={"User-Agent": self.user_agent})

            if response.status_code == 200:
                return RobotsParser.parse(response.text, self.agent_token)

            # No robots.txt or error - allow all
            return RobotsParser()

        except httpx.HTTPError as e:
            logger.warning("robots_fetch_failed", url=robots_url, error=str(e))
            return RobotsParser()
