"""Abstract interface for the bundler."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from polyrepo.core.bundle_types import BundleDescriptor, BundleResult


class Bundler(ABC):
    """Abstract interface for producing bundles from compiled output."""

    @abstractmethod
    async def generate(self, descriptors: Sequence[BundleDescriptor]) -> list[BundleResult]:
        """Generate every descriptor's bundle in one batched pass.

        Nothing is written to the descriptors' output locations; callers write
        the returned chunks and close each result afterwards.

        Returns:
            One BundleResult per descriptor, in descriptor order

        Raises:
            BundleError: If any bundle in the batch fails
        """
        ...
