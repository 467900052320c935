"""Bundler integration."""

from polyrepo.integrations.rollup.abc import Bundler
from polyrepo.integrations.rollup.fake import FakeBundler

__all__ = ["Bundler", "FakeBundler"]
