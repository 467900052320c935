"""Exception hierarchy for polyrepo operations."""


class PolyrepoError(Exception):
    """Base class for errors that abort a polyrepo command with exit code 1."""


class ConfigurationError(PolyrepoError):
    """Project layout or configuration is unusable.

    Raised before any build work starts: ambiguous or missing package entry
    points, a missing compiler configuration, an invalid polyrepo.toml.
    """


class BuildError(PolyrepoError):
    """The compiler skipped emitting output."""


class BundleError(PolyrepoError):
    """The bundler failed to produce or write an artifact."""


class ReleaseError(PolyrepoError):
    """Release bookkeeping could not proceed."""
