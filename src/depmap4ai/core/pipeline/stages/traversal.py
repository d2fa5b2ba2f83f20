from __future__ import annotations

"""
Dependency Traversal Stage.

Visits the files reachable from an entry file by following project-local
references, depth first, with an explicit worklist instead of call-stack
recursion. Per file the state machine is:

    Unvisited -> Cached          (already in the Visited Cache, no I/O)
              -> DepthExceeded   (depth > max_depth; not cached, may be
                                  reached again on a shallower path)
              -> Rejected        (Resource Guard skip; cached)
              -> Materialized    (cached, artifact written, references
                                  resolved and scheduled at depth + 1)

All per-file problems are logged and counted; none of them ends the run.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from depmap4ai.core.pipeline.components.classifier import classify, classify_symbol
from depmap4ai.core.pipeline.components.extractor import (
    KIND_SOURCE,
    REF_CLASS,
    REF_IMPORT,
    REF_LAYOUT,
    detect_file_kind,
    extract_references,
)
from depmap4ai.core.pipeline.components.guard import ResourceGuard
from depmap4ai.core.pipeline.components.resolver import FileResolver
from depmap4ai.core.pipeline.components.writer import materialize
from depmap4ai.core.services.visited_cache import VisitedCache
from depmap4ai.domain.analysis_models import (
    SKIP_COLLISION,
    SKIP_UNREADABLE,
    ImportReference,
    ResolvedDependency,
    VisitRecord,
)
from depmap4ai.domain.constants import MEMORY_POLICY_ABORT

logger = logging.getLogger(__name__)

COUNTER_KEYS = (
    "materialized",
    "cached",
    "rejected",
    "depth_exceeded",
    "external",
    "unresolved",
    "errors",
)


# -----------------------------------------------------------------------------
# TRAVERSAL STATE
# -----------------------------------------------------------------------------

@dataclass
class TraversalContext:
    """
    Explicit state of one traversal, passed to every step.

    Attributes:
        project_root: Absolute project root.
        output_dir: Directory receiving per-file artifacts.
        max_depth: Depth bound; negative means unbounded.
        project_package: Namespace prefix of followed imports.
        external_prefixes: Denylisted namespaces.
        source_extensions: Extensions whose imports are followed and stripped.
        markup_extensions: Extensions scanned for layout/class references.
        build_extensions: Extensions recognized but not scanned.
        memory_policy: 'warn' or 'abort'.
        guard: Resource Guard instance.
        resolver: File Resolver instance.
        cache: Visited Cache instance.
        counters: Outcome counters.
        halted: Set when the memory policy stopped the traversal.
    """
    project_root: str
    output_dir: str
    max_depth: int
    project_package: str
    external_prefixes: List[str]
    source_extensions: List[str]
    markup_extensions: List[str]
    build_extensions: List[str]
    memory_policy: str
    guard: ResourceGuard
    resolver: FileResolver
    cache: VisitedCache = field(default_factory=VisitedCache)
    counters: Dict[str, int] = field(default_factory=lambda: {k: 0 for k in COUNTER_KEYS})
    halted: bool = False

    def depth_exceeded(self, depth: int) -> bool:
        return self.max_depth >= 0 and depth > self.max_depth

    def bump(self, counter: str) -> None:
        self.counters[counter] = self.counters.get(counter, 0) + 1


def build_context(cfg: Dict[str, Any], project_root: str, output_dir: str, project_package: str) -> TraversalContext:
    """
    Assemble a TraversalContext from a validated configuration.

    Args:
        cfg: Validated configuration dictionary.
        project_root: Normalized project root.
        output_dir: Per-file artifact directory.
        project_package: Effective project namespace prefix.

    Returns:
        TraversalContext: Fresh context with an empty Visited Cache.
    """
    guard = ResourceGuard(
        exclude_patterns=cfg["exclude_patterns"],
        max_file_size=cfg["max_file_size"],
        max_memory=cfg["max_memory"],
    )
    resolver = FileResolver(
        project_root,
        source_roots=cfg["source_roots"],
        source_extensions=cfg["source_extensions"],
        markup_extensions=cfg["markup_extensions"],
        prune_dirs=cfg["prune_dirs"],
    )
    return TraversalContext(
        project_root=project_root,
        output_dir=output_dir,
        max_depth=int(cfg["max_depth"]),
        project_package=project_package,
        external_prefixes=list(cfg["external_prefixes"]),
        source_extensions=list(cfg["source_extensions"]),
        markup_extensions=list(cfg["markup_extensions"]),
        build_extensions=list(cfg["build_extensions"]),
        memory_policy=cfg["memory_policy"],
        guard=guard,
        resolver=resolver,
    )


# -----------------------------------------------------------------------------
# REFERENCE RESOLUTION
# -----------------------------------------------------------------------------

def resolve_reference(ctx: TraversalContext, ref: ImportReference) -> ResolvedDependency:
    """
    Classify and resolve one extracted reference.

    Args:
        ctx: Traversal context.
        ref: Reference found in a visited file.

    Returns:
        ResolvedDependency: The reference and its file, if any.
    """
    if ref.kind == REF_LAYOUT:
        return ResolvedDependency(ref, ctx.resolver.resolve_layout(ref.statement))

    if ref.kind == REF_IMPORT:
        verdict = classify(ref.statement, ctx.project_package, ctx.external_prefixes)
        if not verdict.internal:
            logger.debug(f"Skipping non-project import: {ref.statement}")
            ctx.bump("external")
            return ResolvedDependency(ref)
        logger.debug(f"Processing project import: {ref.statement}")
    elif ref.kind == REF_CLASS:
        verdict = classify_symbol(ref.statement, ctx.project_package, ctx.external_prefixes)
        if not verdict.internal:
            ctx.bump("external")
            return ResolvedDependency(ref)
        logger.debug(f"Processing project class reference: {ref.statement}")
    else:
        return ResolvedDependency(ref)

    path = ctx.resolver.resolve(verdict.symbol)
    if path is None:
        ctx.bump("unresolved")
    return ResolvedDependency(ref, path)


# -----------------------------------------------------------------------------
# TRAVERSAL LOOP
# -----------------------------------------------------------------------------

def _process_one(ctx: TraversalContext, path: str, depth: int, parent: Optional[str]) -> List[str]:
    """
    Run the state machine for a single file.

    Returns:
        List[str]: Resolved dependency paths to schedule at depth + 1.
    """
    if path in ctx.cache:
        logger.debug(f"File already processed (cached): {path}")
        ctx.bump("cached")
        return []

    logger.debug(f"Starting to process file: {path} at depth {depth}")

    if ctx.depth_exceeded(depth):
        logger.debug(f"Maximum depth reached for: {path}")
        ctx.bump("depth_exceeded")
        return []

    if ctx.guard.memory_exceeded() and ctx.memory_policy == MEMORY_POLICY_ABORT:
        logger.warning(f"Memory budget exceeded, halting traversal before: {path}")
        ctx.halted = True
        return []

    decision = ctx.guard.should_process(path)
    if not decision.proceed:
        ctx.cache.mark_rejected(path, decision.reason)
        ctx.bump("rejected")
        return []

    kind = detect_file_kind(path, ctx.source_extensions, ctx.markup_extensions, ctx.build_extensions)

    try:
        artifact = materialize(
            path, depth, ctx.project_root, ctx.output_dir,
            strip_imports=(kind == KIND_SOURCE),
        )
    except OSError as e:
        logger.error(f"Failed to materialize {path}: {e}")
        ctx.cache.mark_rejected(path, SKIP_UNREADABLE)
        ctx.bump("errors")
        return []

    if artifact is None:
        ctx.cache.mark_rejected(path, SKIP_COLLISION)
        ctx.bump("rejected")
        return []

    ctx.cache.record_visit(path, depth, parent)
    ctx.bump("materialized")

    try:
        references = extract_references(path, kind)
    except OSError as e:
        logger.error(f"Failed to scan references in {path}: {e}")
        ctx.bump("errors")
        return []

    children: List[str] = []
    for ref in references:
        dep = resolve_reference(ctx, ref)
        if dep.resolved and dep.path:
            logger.debug(f"Found dependency: {dep.path}")
            children.append(dep.path)
    return children


def visit(ctx: TraversalContext, path: str, depth: int = 0) -> List[VisitRecord]:
    """
    Traverse every file reachable from 'path'.

    Children are pushed in reverse so they are popped in reference order,
    reproducing the order of a recursive depth-first walk.

    Args:
        ctx: Traversal context (its cache is shared across calls).
        path: Absolute path of the starting file.
        depth: Depth assigned to the starting file.

    Returns:
        List[VisitRecord]: All visit records of the context, discovery order.
    """
    stack: List[Tuple[str, int, Optional[str]]] = [(path, depth, None)]

    while stack:
        current, current_depth, parent = stack.pop()

        children = _process_one(ctx, current, current_depth, parent)
        if ctx.halted:
            logger.warning(f"Traversal halted with {len(stack)} file(s) still pending")
            break
        for child in reversed(children):
            stack.append((child, current_depth + 1, current))

    return ctx.cache.records
