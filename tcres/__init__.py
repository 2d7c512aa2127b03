# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
tcres: type class resolution engine.

Packages:
  core: type terms, type notation parser, diagnostics
  classes: declaration registry, coherence, default completion, structural
           synthesis and dictionary resolution

The CLI entrypoint is `tcres.cli:main`.
"""

__all__ = ["core", "classes"]
