"""Bottle resolver orchestrating cache probe, lookup and fetch.

Each needed formula ends in exactly one state:

1. UNKNOWN: no definition with that name was loaded
2. CACHED: a non-empty bottle for an acceptable distro is already local
3. DOWNLOADED: a hosted bottle for some acceptable distro was fetched
4. MISSING: nothing could be fetched; the formula needs a fallback build

Distros are tried in preference order, and for each distro every host
listing the filename is tried in manifest order before moving on.
"""

import asyncio
import logging
from typing import Optional

from bottle_wrangler.cache import BottleCache
from bottle_wrangler.config import WranglerConfig
from bottle_wrangler.fetchers.base import BaseFetcher
from bottle_wrangler.fetchers.bottle import BottleFetcher
from bottle_wrangler.models import Formula, ResolutionOutcome, ResolutionState
from bottle_wrangler.naming import MissingVersionError, candidate_filenames

logger = logging.getLogger(__name__)


class BottleResolver:
    """Resolves needed formulas to local bottles.

    Formulas are resolved concurrently up to ``config.max_concurrency``.
    Resolutions of the same name are serialized, so duplicate entries in
    the needed list behave as they would when processed one after another.

    Attributes:
        config: Immutable run configuration.
        fetcher: Fetcher used to download hosted bottles.
        cache: Probe over the destination directory.
    """

    def __init__(
        self,
        config: WranglerConfig,
        fetcher: Optional[BaseFetcher] = None,
        cache: Optional[BottleCache] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Run configuration bundle.
            fetcher: Optional custom fetcher. Defaults to a BottleFetcher over
                the configured hosts.
            cache: Optional custom cache probe. Defaults to a BottleCache over
                the configured destination directory.
        """
        self.config = config
        self.fetcher = fetcher or BottleFetcher(
            config.availability.hosts, verify=config.verify
        )
        self.cache = cache or BottleCache(
            config.dest_dir, llvm_version=config.llvm_version
        )
        self._name_locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, name: str) -> asyncio.Lock:
        lock = self._name_locks.get(name)
        if lock is None:
            lock = self._name_locks[name] = asyncio.Lock()
        return lock

    async def resolve(self, name: str) -> ResolutionOutcome:
        """Resolve one formula name to a terminal state.

        Never raises: every failure is recorded on the returned outcome.

        Args:
            name: Formula name from the platform manifest.

        Returns:
            The resolution outcome.
        """
        async with self._lock_for(name):
            try:
                return await self._resolve(name)
            except Exception as e:
                logger.error("Unexpected error resolving %s: %s", name, e)
                formula = self.config.formulas.get(name)
                return ResolutionOutcome(
                    name=name,
                    state=(
                        ResolutionState.MISSING
                        if formula is not None
                        else ResolutionState.UNKNOWN
                    ),
                    formula=formula,
                    error=str(e),
                )

    async def _resolve(self, name: str) -> ResolutionOutcome:
        formula = self.config.formulas.get(name)
        if formula is None:
            logger.error("Formula file not found for '%s'", name)
            return ResolutionOutcome(
                name=name,
                state=ResolutionState.UNKNOWN,
                error="formula file not found",
            )

        distros = self.config.distros
        try:
            cached = self.cache.find_cached(formula, distros)
        except MissingVersionError as e:
            logger.error("%s", e)
            return ResolutionOutcome(
                name=name, state=ResolutionState.MISSING, formula=formula, error=str(e)
            )

        if cached is not None:
            return ResolutionOutcome(
                name=name,
                state=ResolutionState.CACHED,
                formula=formula,
                filename=cached.name,
            )

        outcome = ResolutionOutcome(
            name=name, state=ResolutionState.MISSING, formula=formula
        )
        for distro, filename in candidate_filenames(
            formula, distros, self.config.llvm_version
        ):
            outcome.attempted.append(filename)
            records = self.config.availability.lookup_all(filename)
            if not records:
                logger.debug("No hosted bottle %s for %s", filename, distro)
                continue

            for record in records:
                if await self.fetcher.fetch(record, self.config.dest_dir):
                    outcome.state = ResolutionState.DOWNLOADED
                    outcome.filename = filename
                    return outcome
                logger.warning(
                    "Fetching %s from host '%s' failed", filename, record.host
                )

        logger.warning("Bottle not found for %s", formula.summary)
        return outcome

    async def resolve_batch(self, names: list[str]) -> list[ResolutionOutcome]:
        """Resolve needed formulas concurrently, preserving input order.

        Duplicate names are processed as given.

        Args:
            names: Needed formula names.

        Returns:
            One outcome per input name, in input order.
        """
        logger.info("Starting resolution of %d formulas", len(names))
        self.cache.ensure()

        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def bounded(name: str) -> ResolutionOutcome:
            async with semaphore:
                return await self.resolve(name)

        results = await asyncio.gather(
            *(bounded(name) for name in names), return_exceptions=True
        )

        outcomes: list[ResolutionOutcome] = []
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error("Exception resolving %s: %s", name, result)
                formula = self.config.formulas.get(name)
                outcomes.append(
                    ResolutionOutcome(
                        name=name,
                        state=(
                            ResolutionState.MISSING
                            if formula is not None
                            else ResolutionState.UNKNOWN
                        ),
                        formula=formula,
                        error=str(result),
                    )
                )
            else:
                outcomes.append(result)

        missing = sum(1 for outcome in outcomes if outcome.is_missing)
        logger.info(
            "Resolution complete: %d/%d resolved, %d missing",
            len(outcomes) - missing,
            len(outcomes),
            missing,
        )
        return outcomes

    @staticmethod
    def missing(outcomes: list[ResolutionOutcome]) -> list[Formula]:
        """Return the formulas that ended Missing, in outcome order."""
        return [
            outcome.formula
            for outcome in outcomes
            if outcome.is_missing and outcome.formula is not None
        ]

    async def close(self) -> None:
        """Close the fetcher's resources."""
        await self.fetcher.close()

    async def __aenter__(self) -> "BottleResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
