"""In-memory fake implementation of Bundler for testing."""

from collections.abc import Sequence

from polyrepo.core.bundle_types import BundleDescriptor, BundleResult, OutputChunk
from polyrepo.core.errors import BundleError
from polyrepo.integrations.rollup.abc import Bundler


class FakeBundler(Bundler):
    """In-memory fake producing one chunk per descriptor.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        failing_packages: set[str] | None = None,
        failure_message: str = "Simulated bundling failure",
        warnings: list[str] | None = None,
    ) -> None:
        """Create FakeBundler.

        Args:
            failing_packages: Package names whose bundles raise BundleError
            failure_message: Message of the raised BundleError
            warnings: Warnings attached to every result
        """
        self._failing_packages = failing_packages or set()
        self._failure_message = failure_message
        self._warnings = warnings or []
        self._batches: list[list[BundleDescriptor]] = []
        self._results: list[BundleResult] = []

    @property
    def batches(self) -> list[list[BundleDescriptor]]:
        """Read-only access to the descriptor batches passed to generate()."""
        return [list(batch) for batch in self._batches]

    @property
    def results(self) -> list[BundleResult]:
        """Every result handed out, for asserting they were closed."""
        return self._results.copy()

    async def generate(self, descriptors: Sequence[BundleDescriptor]) -> list[BundleResult]:
        self._batches.append(list(descriptors))
        for descriptor in descriptors:
            if descriptor.package_name in self._failing_packages:
                raise BundleError(f"{self._failure_message} ({descriptor.package_name})")

        results = [self._result_for(descriptor) for descriptor in descriptors]
        self._results.extend(results)
        return results

    def _result_for(self, descriptor: BundleDescriptor) -> BundleResult:
        file_name = descriptor.output_file.name
        source_map = None
        if descriptor.source_map:
            source_map = f'{{"version":3,"file":"{file_name}","mappings":""}}'
        chunk = OutputChunk(
            file_name=file_name,
            code=f"// {descriptor.kind.value} bundle of {descriptor.package_name}\n",
            source_map=source_map,
        )
        return BundleResult(descriptor, [chunk], warnings=list(self._warnings))
