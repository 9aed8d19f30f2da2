"""
Robots.txt rules for a single host.

The group addressed to the crawler's product token is applied, or the ``*``
group when there is none. The longest matching pattern decides, with allow
winning ties; ``*`` and a trailing ``$`` are supported in patterns.
"""

import asyncio
import re
from typing import List, Tuple
from urllib.parse import urlsplit

import aiohttp

from .log import get_logger


# (allow, pattern) pairs of one user-agent group
Rules = List[Tuple[bool, str]]


class RobotsHandler:
    """
    Loads a host's robots.txt and answers whether a URL may be fetched.

    Until rules are loaded, every URL is allowed.
    """

    def __init__(self, base_url: str, user_agent: str = "*"):
        """
        Args:
            base_url: Any URL on the host
            user_agent: Full user agent string, e.g. ``CrawlDown/1.0``
        """
        self.base_url = base_url
        # "CrawlDown/1.0" is addressed as "crawldown" in robots.txt
        self.agent_token = user_agent.split('/', 1)[0].strip().lower() or "*"
        self.logger = get_logger("robots")

        parts = urlsplit(base_url)
        self.robots_url = f"{parts.scheme}://{parts.netloc}/robots.txt"

        self._rules: Rules = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self, session: aiohttp.ClientSession) -> bool:
        """
        Fetch and apply the host's robots.txt.

        A missing, failing or unreachable robots.txt leaves every URL allowed.

        Returns:
            True if rules were loaded
        """
        try:
            async with session.get(self.robots_url, allow_redirects=True) as response:
                if response.status != 200:
                    log = self.logger.debug if response.status == 404 else self.logger.warning
                    log(f"No usable robots.txt at {self.robots_url} (HTTP {response.status})")
                    return False
                self.parse(await response.text(errors='replace'))
        except aiohttp.ClientError as e:
            self.logger.warning(f"Could not fetch {self.robots_url}: {e}")
            return False
        except asyncio.TimeoutError:
            self.logger.warning(f"Timed out fetching {self.robots_url}")
            return False

        self.logger.info(f"Loaded {len(self._rules)} robots.txt rules from {self.robots_url}")
        return True

    def parse(self, content: str) -> None:
        """
        Apply the rules of robots.txt content addressed to this crawler.

        A group naming the crawler replaces the ``*`` group entirely.
        """
        own: Rules = []
        generic: Rules = []
        addressed = False

        for agents, rules in self._split_groups(content):
            if self.agent_token in agents:
                addressed = True
                own.extend(rules)
            elif '*' in agents:
                generic.extend(rules)

        chosen = own if addressed else generic
        self._rules = [(allow, pattern) for allow, pattern in chosen if pattern]
        self._loaded = True

    @staticmethod
    def _split_groups(content: str) -> List[Tuple[List[str], Rules]]:
        """
        Split robots.txt into user-agent groups.

        Consecutive user-agent lines share the rules that follow them.
        """
        groups: List[Tuple[List[str], Rules]] = []
        agents: List[str] = []
        rules: Rules = []

        for raw_line in content.splitlines():
            field, sep, value = raw_line.split('#', 1)[0].partition(':')
            if not sep:
                continue
            field = field.strip().lower()
            value = value.strip()

            if field == 'user-agent':
                if rules:
                    groups.append((agents, rules))
                    agents, rules = [], []
                agents.append(value.lower())
            elif field in ('allow', 'disallow') and agents:
                rules.append((field == 'allow', value))

        if agents:
            groups.append((agents, rules))
        return groups

    def is_allowed(self, url: str) -> bool:
        """
        Check whether robots.txt permits fetching the URL.

        The longest matching pattern wins; on equal length allow wins.
        """
        if not self._loaded:
            return True

        parts = urlsplit(url)
        target = parts.path or '/'
        if parts.query:
            target += '?' + parts.query

        matches = [
            (len(pattern), allow, pattern)
            for allow, pattern in self._rules
            if self._matches_pattern(target, pattern)
        ]
        if not matches:
            return True

        _, allow, pattern = max(matches)
        if not allow:
            self.logger.debug(f"{url} blocked by robots.txt rule {pattern}")
        return allow

    @staticmethod
    def _matches_pattern(target: str, pattern: str) -> bool:
        anchored = pattern.endswith('$')
        if anchored:
            pattern = pattern[:-1]

        if '*' not in pattern and not anchored:
            return target.startswith(pattern)

        regex = '.*'.join(re.escape(piece) for piece in pattern.split('*'))
        return re.match(regex + ('$' if anchored else ''), target) is not None
