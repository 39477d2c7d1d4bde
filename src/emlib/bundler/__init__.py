# Copyright 2026 emlib Contributors
# SPDX-License-Identifier: Apache-2.0

"""Flattening of ES module graphs into a single module."""

from emlib.bundler.bundle import BundleError, BundleOptions, Bundler, LoadHook, ModuleBundler, Plugin, ResolveHook

__all__ = [
    "Bundler",
    "ModuleBundler",
    "BundleOptions",
    "Plugin",
    "ResolveHook",
    "LoadHook",
    "BundleError",
]
