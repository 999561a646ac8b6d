"""Unit tests for pkgworld.core.queue.

Covers the whole world-building pipeline:

- DependencyQueue push/free semantics
- compile_queue filling the world's public list
- collect_dependents copying records into the world
- flatten_dependency_set deduplication, ordering and release of rejects
- verify_queue / apply_queue / validate_queue orchestration, depth
  limiting, error propagation and world release
"""

from __future__ import annotations

import logging
from typing import Any, List
from unittest.mock import patch

import pytest

from pkgworld.core import (
    Client,
    ClientFlags,
    DependencyQueue,
    ResolveFlags,
    apply_queue,
    collect_dependents,
    compile_queue,
    flatten_dependency_set,
    queue_free,
    queue_push,
    traverse,
    validate_queue,
    verify_queue,
)
from pkgworld.exceptions import InternalDefectError
from pkgworld.models import Dependency, Package, create_world
from pkgworld.core import queue as queue_module


def _queue(*atoms: str) -> DependencyQueue:
    queue = DependencyQueue()
    for atom in atoms:
        queue.push(atom)
    return queue


def _ids(deps: List[Dependency]) -> List[str]:
    return [dep.match.id for dep in deps]


@pytest.fixture
def chain(make_package, make_client) -> Client:
    """pkgA -> pkgC -> pkgD, public edges only."""
    return make_client(
        make_package("pkgA", requires="pkgC"),
        make_package("pkgC", requires="pkgD"),
        make_package("pkgD"),
    )


@pytest.mark.unit
class TestDependencyQueue:
    """Tests for DependencyQueue."""

    def test_push_preserves_insertion_order(self) -> None:
        """Atoms come back in the order they were pushed."""
        queue = _queue("zlib", "glib-2.0 >= 2.50", "libpng")

        assert list(queue) == ["zlib", "glib-2.0 >= 2.50", "libpng"]
        assert len(queue) == 3

    def test_push_keeps_duplicates(self) -> None:
        """Duplicates are kept; flattening resolves them later."""
        queue = _queue("zlib", "zlib")

        assert list(queue) == ["zlib", "zlib"]

    def test_push_does_not_validate(self) -> None:
        """Garbage is stored verbatim."""
        queue = _queue(">= >= ,,")

        assert list(queue) == [">= >= ,,"]

    def test_free_releases_entries(self) -> None:
        """free() empties the queue."""
        queue = _queue("zlib", "libpng")

        queue.free()

        assert len(queue) == 0
        assert list(queue) == []

    def test_free_on_empty_queue(self) -> None:
        """free() on an empty queue is harmless."""
        queue = DependencyQueue()

        queue.free()

        assert len(queue) == 0

    def test_module_level_helpers(self) -> None:
        """queue_push/queue_free mirror the methods."""
        queue = DependencyQueue()

        queue_push(queue, "zlib")
        queue_push(queue, "libpng")
        assert list(queue) == ["zlib", "libpng"]

        queue_free(queue)
        assert list(queue) == []


@pytest.mark.unit
class TestCompileQueue:
    """Tests for compile_queue."""

    def test_compiles_atoms_in_order(self, make_client) -> None:
        """Every atom becomes a record on world.required, in order."""
        client = make_client()
        world = create_world()

        ok = compile_queue(client, world, _queue("zlib", "glib-2.0 >= 2.50 gio-2.0"))

        assert ok is True
        assert [dep.to_string() for dep in world.required] == [
            "zlib",
            "glib-2.0 >= 2.50",
            "gio-2.0",
        ]
        assert world.requires_private == []

    def test_empty_queue_compiles_to_nothing(self, make_client) -> None:
        """An empty queue leaves world.required empty and reports False."""
        world = create_world()

        assert compile_queue(make_client(), world, DependencyQueue()) is False
        assert world.required == []

    def test_malformed_atoms_are_skipped(self, make_client) -> None:
        """Atoms the parser cannot use contribute nothing."""
        world = create_world()

        ok = compile_queue(make_client(), world, _queue("zlib >=", ">= 1.0", "libpng"))

        assert ok is True
        assert [dep.package for dep in world.required] == ["libpng"]

    def test_only_malformed_atoms_fail(self, make_client) -> None:
        """A queue of unusable atoms compiles to an empty world."""
        world = create_world()

        assert compile_queue(make_client(), world, _queue("zlib =<= 1")) is False

    def test_compiling_twice_appends_twice(self, make_client) -> None:
        """compile_queue is not idempotent."""
        client = make_client()
        world = create_world()
        queue = _queue("zlib")

        compile_queue(client, world, queue)
        compile_queue(client, world, queue)

        assert [dep.package for dep in world.required] == ["zlib", "zlib"]


@pytest.mark.unit
class TestCollectDependents:
    """Tests for the collect_dependents traversal visitor."""

    def test_world_is_skipped(self, make_client) -> None:
        """Visiting the world itself copies nothing."""
        world = create_world()
        world.required.append(Dependency(package="zlib"))

        collect_dependents(make_client(), world, world)

        assert [dep.package for dep in world.required] == ["zlib"]
        assert world.requires_private == []

    def test_copies_public_and_private_lists(self, make_package, make_client) -> None:
        """Both lists are copied into the matching world lists, in order."""
        package = make_package(
            "gtk", requires="glib-2.0 >= 2.50, pango", requires_private="zlib"
        )
        world = create_world()
        world.required.append(Dependency(package="gtk"))

        collect_dependents(make_client(package), package, world)

        assert [dep.to_string() for dep in world.required] == [
            "gtk",
            "glib-2.0 >= 2.50",
            "pango",
        ]
        assert [dep.package for dep in world.requires_private] == ["zlib"]

    def test_copies_are_independent_records(self, make_package, make_client) -> None:
        """Copies are new objects sharing the same match."""
        target = make_package("glib-2.0")
        package = make_package("gtk", requires="glib-2.0")
        package.required[0].match = target
        world = create_world()

        collect_dependents(make_client(package, target), package, world)

        copied = world.required[0]
        assert copied is not package.required[0]
        assert copied.match is target
        assert package.required[0].match is target


@pytest.mark.unit
class TestFlattenDependencySet:
    """Tests for flatten_dependency_set."""

    def test_removes_duplicate_packages(self, make_package, make_client) -> None:
        """Records naming the same package collapse to one."""
        client = make_client(make_package("zlib"), make_package("libpng"))
        deps = [
            Dependency(package="zlib"),
            Dependency(package="libpng"),
            Dependency(package="zlib"),
        ]
        client.next_serial()

        flatten_dependency_set(client, deps)

        assert sorted(_ids(deps)) == ["libpng", "zlib"]

    def test_sorts_by_descending_hits(self, make_package, make_client) -> None:
        """More frequently resolved packages come first."""
        rare = make_package("rare")
        popular = make_package("popular")
        popular.hits = 10
        client = make_client(rare, popular)
        deps = [Dependency(package="rare"), Dependency(package="popular")]

        flatten_dependency_set(client, deps)

        assert _ids(deps) == ["popular", "rare"]

    def test_ties_keep_scan_order(self, make_package, make_client) -> None:
        """Equal hit counts keep their relative order."""
        client = make_client(
            make_package("c"), make_package("a"), make_package("b")
        )
        deps = [Dependency(package=name) for name in ("c", "a", "b")]

        flatten_dependency_set(client, deps)

        assert _ids(deps) == ["c", "a", "b"]

    def test_unresolvable_records_are_dropped(self, make_package, make_client) -> None:
        """Records that resolve to nothing contribute nothing."""
        client = make_client(make_package("zlib"))
        missing = Dependency(package="missing")
        deps = [missing, Dependency(package="zlib")]

        flatten_dependency_set(client, deps)

        assert _ids(deps) == ["zlib"]

    def test_version_mismatch_is_dropped(self, make_package, make_client) -> None:
        """A record whose constraint no longer holds is dropped."""
        client = make_client(make_package("zlib", "1.2.11"))
        deps = [Dependency(package="zlib")] + _parse("zlib >= 2.0")

        flatten_dependency_set(client, deps)

        assert [dep.to_string() for dep in deps] == ["zlib"]

    def test_alias_and_real_name_collapse(self, make_package, make_client) -> None:
        """An alias and the real name of one package keep a single record."""
        client = make_client(make_package("libfoo", "2.0", provides="foo = 2.0"))
        via_alias = Dependency(package="foo")
        direct = Dependency(package="libfoo")
        deps = [via_alias, direct]

        flatten_dependency_set(client, deps)

        assert deps == [via_alias]
        assert via_alias.match.id == "libfoo"

    def test_rejected_records_are_released(self, make_package, make_client) -> None:
        """Duplicates rejected by flatten lose their match reference."""
        zlib = make_package("zlib")
        client = make_client(zlib)
        first = Dependency(package="zlib")
        second = Dependency(package="zlib", match=zlib)
        deps = [first, second]

        flatten_dependency_set(client, deps)

        assert deps == [first]
        assert deps[0] is first
        assert first.match is zlib
        assert second.match is None

    def test_kept_packages_are_stamped(self, make_package, make_client) -> None:
        """Kept packages carry the serial of the flatten pass."""
        zlib = make_package("zlib")
        client = make_client(zlib)
        serial = client.next_serial()

        flatten_dependency_set(client, [Dependency(package="zlib")])

        assert zlib.serial == serial

    def test_stale_serial_does_not_hide_package(self, make_package, make_client) -> None:
        """A package stamped by an earlier pass is still kept."""
        zlib = make_package("zlib")
        client = make_client(zlib)
        zlib.serial = client.serial
        deps = [Dependency(package="zlib")]

        flatten_dependency_set(client, deps)

        assert _ids(deps) == ["zlib"]

    def test_flatten_is_stable_on_flattened_input(self, make_package, make_client) -> None:
        """Flattening an already flat, sorted list changes nothing."""
        a = make_package("a")
        b = make_package("b")
        a.hits = 5
        client = make_client(a, b)
        deps = [Dependency(package="a"), Dependency(package="b")]

        client.next_serial()
        flatten_dependency_set(client, deps)
        before = list(deps)

        client.next_serial()
        flatten_dependency_set(client, deps)

        assert deps == before
        assert [d is o for d, o in zip(deps, before)] == [True, True]

    def test_empty_list(self, make_client) -> None:
        """Flattening an empty list is a no-op."""
        deps: List[Dependency] = []

        flatten_dependency_set(make_client(), deps)

        assert deps == []

    def test_match_missing_after_resolution_is_internal_defect(
        self, make_package, make_client
    ) -> None:
        """A resolved record without a match is an internal defect."""
        zlib = make_package("zlib")
        client = make_client(zlib)

        with patch.object(
            queue_module,
            "verify_dependency",
            return_value=(zlib, ResolveFlags.OK),
        ):
            with pytest.raises(InternalDefectError) as exc_info:
                flatten_dependency_set(client, [Dependency(package="zlib")])

        assert exc_info.value.package == "zlib"

    def test_list_is_rewritten_in_place(self, make_package, make_client) -> None:
        """The caller's list object is updated, not replaced."""
        client = make_client(make_package("zlib"))
        deps = [Dependency(package="zlib"), Dependency(package="zlib")]
        original = deps

        flatten_dependency_set(client, deps)

        assert deps is original
        assert len(original) == 1

    def test_traces_slots(self, make_package, make_client, caplog) -> None:
        """The final table is traced at DEBUG level."""
        client = make_client(make_package("zlib"))
        caplog.set_level(logging.DEBUG, logger="pkgworld")

        flatten_dependency_set(client, [Dependency(package="zlib")])

        assert "slot 0: dep zlib matched to zlib" in caplog.text


def _parse(text: str) -> List[Dependency]:
    from pkgworld.core.dependency import parse_dependency_string

    return parse_dependency_string(text)


@pytest.mark.unit
class TestVerifyQueue:
    """Tests for verify_queue."""

    def test_empty_queue_is_graph_break(self, make_client) -> None:
        """Nothing requested means a broken graph."""
        world = create_world()

        result = verify_queue(make_client(), world, DependencyQueue(), -1)

        assert result == ResolveFlags.DEPGRAPH_BREAK
        assert world.required == []

    def test_resolves_transitive_chain(self, chain: Client) -> None:
        """All transitive public dependencies end up in world.required.

        pkgC and pkgD are resolved once below their parent and once more as
        collected records, so they outrank the requested pkgA."""
        world = create_world()

        result = verify_queue(chain, world, _queue("pkgA"), -1)

        assert result == ResolveFlags.OK
        assert _ids(world.required) == ["pkgC", "pkgD", "pkgA"]
        assert world.requires_private == []

    def test_missing_package_propagates_traversal_error(self, make_client) -> None:
        """Traversal errors are returned unchanged and skip flattening."""
        world = create_world()

        result = verify_queue(make_client(), world, _queue("missing"), -1)

        assert result == ResolveFlags.PACKAGE_NOT_FOUND
        assert [dep.package for dep in world.required] == ["missing"]

    def test_version_mismatch_propagates(self, make_package, make_client) -> None:
        """An unsatisfied constraint fails the resolve."""
        client = make_client(make_package("pkgA", "1.0"))

        result = verify_queue(client, create_world(), _queue("pkgA >= 2.0"), -1)

        assert result == ResolveFlags.PACKAGE_VER_MISMATCH

    def test_transitive_missing_package_fails(self, make_package, make_client) -> None:
        """A missing package deep in the graph fails the resolve."""
        client = make_client(make_package("pkgA", requires="ghost"))

        result = verify_queue(client, create_world(), _queue("pkgA"), -1)

        assert result & ResolveFlags.PACKAGE_NOT_FOUND

    def test_skip_errors_tolerates_missing_packages(
        self, make_package, make_client
    ) -> None:
        """With SKIP_ERRORS the missing package is simply dropped."""
        client = make_client(
            make_package("pkgA", requires="ghost"), flags=ClientFlags.SKIP_ERRORS
        )
        world = create_world()

        result = verify_queue(client, world, _queue("pkgA"), -1)

        assert result == ResolveFlags.OK
        assert _ids(world.required) == ["pkgA"]

    def test_advances_serial_per_list(self, chain: Client) -> None:
        """Traversal and each flatten run under their own serial."""
        start = chain.serial

        verify_queue(chain, create_world(), _queue("pkgA"), -1)

        assert chain.serial == start + 3

    def test_world_serial_is_never_stamped(self, chain: Client) -> None:
        """The world node keeps its initial generation marker."""
        world = create_world()

        verify_queue(chain, world, _queue("pkgA"), -1)

        assert world.serial == 0

    def test_world_never_lists_itself(self, chain: Client) -> None:
        """The world never appears among its own dependencies."""
        world = create_world()

        for _ in range(3):
            verify_queue(chain, world, _queue("pkgA"), -1)

        matches = [dep.match for dep in world.required + world.requires_private]
        assert all(match is not world for match in matches)

    def test_shared_dependency_ranks_first(self, make_package, make_client) -> None:
        """A dependency shared by several requests outranks them."""
        client = make_client(
            make_package("pkgX", requires="pkgZ"),
            make_package("pkgY", requires="pkgZ"),
            make_package("pkgZ"),
        )
        world = create_world()

        verify_queue(client, world, _queue("pkgX", "pkgY"), -1)

        assert _ids(world.required) == ["pkgZ", "pkgX", "pkgY"]
        hits = [dep.hits for dep in world.required]
        assert hits == sorted(hits, reverse=True)

    def test_public_and_private_split(self, make_package, make_client) -> None:
        """A package public for one request and private for another
        appears once in each list."""
        client = make_client(
            make_package("pkgA", requires="pkgC"),
            make_package("pkgB", requires_private="pkgC"),
            make_package("pkgC"),
        )
        world = create_world()

        result = verify_queue(client, world, _queue("pkgA", "pkgB"), -1)

        assert result == ResolveFlags.OK
        assert _ids(world.required) == ["pkgC", "pkgA", "pkgB"]
        assert _ids(world.requires_private) == ["pkgC"]
        assert world.requires_private[0].is_private

    def test_private_edges_are_walked_with_search_private(
        self, make_package, make_client
    ) -> None:
        """SEARCH_PRIVATE collects what private dependencies require."""
        packages = (
            make_package("pkgB", requires_private="pkgC"),
            make_package("pkgC", requires="pkgD"),
            make_package("pkgD"),
        )

        shallow = create_world()
        verify_queue(make_client(*packages), shallow, _queue("pkgB"), -1)
        assert _ids(shallow.required) == ["pkgB"]

        for package in packages:
            package.serial = 0

        deep = create_world()
        client = make_client(*packages, flags=ClientFlags.SEARCH_PRIVATE)
        verify_queue(client, deep, _queue("pkgB"), -1)
        assert _ids(deep.required) == ["pkgD", "pkgB"]
        assert _ids(deep.requires_private) == ["pkgC"]

    def test_duplicate_requests_collapse(self, chain: Client) -> None:
        """The same atom requested twice appears once."""
        world = create_world()

        verify_queue(chain, world, _queue("pkgA", "pkgA >= 1.0"), -1)

        assert _ids(world.required) == ["pkgA", "pkgC", "pkgD"]

    def test_alias_request_collapses_with_direct_request(
        self, make_package, make_client
    ) -> None:
        """Requesting a package by alias and by name keeps one record."""
        client = make_client(make_package("libfoo", "2.0", provides="foo = 2.0"))
        world = create_world()

        result = verify_queue(client, world, _queue("foo", "libfoo"), -1)

        assert result == ResolveFlags.OK
        assert [dep.package for dep in world.required] == ["foo"]
        assert _ids(world.required) == ["libfoo"]

    def test_cycle_terminates(self, make_package, make_client) -> None:
        """Cyclic graphs are walked once and flatten to unique entries."""
        client = make_client(
            make_package("pkgA", requires="pkgB"),
            make_package("pkgB", requires="pkgA"),
        )
        world = create_world()

        result = verify_queue(client, world, _queue("pkgA"), -1)

        assert result == ResolveFlags.OK
        assert sorted(_ids(world.required)) == ["pkgA", "pkgB"]

    def test_diamond_is_collected_once(self, make_package, make_client) -> None:
        """A node reached through two paths is only visited once."""
        client = make_client(
            make_package("top", requires="left right"),
            make_package("left", requires="bottom"),
            make_package("right", requires="bottom"),
            make_package("bottom", requires="leaf"),
            make_package("leaf"),
        )
        visits: List[str] = []
        world = create_world()
        compile_queue(client, world, _queue("top"))

        def visitor(client: Client, package: Package, data: Any) -> None:
            visits.append(package.id)
            collect_dependents(client, package, data)

        traverse(client, world, visitor, world, -1)

        assert visits.count("bottom") == 1
        assert [dep.package for dep in world.required].count("leaf") == 1

    def test_conflict_fails_resolve(self, make_package, make_client) -> None:
        """A declared conflict satisfied by a requirement fails the resolve."""
        client = make_client(
            make_package("pkgA", requires="pkgC", conflicts="pkgC < 2.0"),
            make_package("pkgC", "1.5"),
        )

        result = verify_queue(client, create_world(), _queue("pkgA"), -1)

        assert result & ResolveFlags.PACKAGE_CONFLICT

    def test_unsatisfied_conflict_is_ignored(self, make_package, make_client) -> None:
        """A conflict rule that does not match is harmless."""
        client = make_client(
            make_package("pkgA", requires="pkgC", conflicts="pkgC < 2.0"),
            make_package("pkgC", "2.1"),
        )

        result = verify_queue(client, create_world(), _queue("pkgA"), -1)

        assert result == ResolveFlags.OK

    def test_deterministic_across_sessions(self, make_package, make_client) -> None:
        """Identical inputs produce identical flattened lists."""

        def run() -> List[Any]:
            client = make_client(
                make_package("app", requires="gtk glib"),
                make_package("gtk", requires="glib pango"),
                make_package("pango", requires="glib", requires_private="harfbuzz"),
                make_package("glib"),
                make_package("harfbuzz"),
            )
            world = create_world()
            verify_queue(client, world, _queue("app", "pango"), -1)
            return [
                [(dep.package, dep.hits) for dep in world.required],
                [(dep.package, dep.hits) for dep in world.requires_private],
            ]

        assert run() == run()

    def test_deterministic_on_one_client(self, make_package, make_client) -> None:
        """Repeated passes on one client flatten to the same order and hits."""
        client = make_client(
            make_package("pkgA", requires="pkgC"),
            make_package("pkgB", requires_private="pkgC"),
            make_package("pkgC"),
        )
        runs: List[Any] = []

        for _ in range(3):
            world = create_world()
            verify_queue(client, world, _queue("pkgA", "pkgB"), -1)
            runs.append([(dep.match.id, dep.hits) for dep in world.required])
            world.release()

        assert runs[0] == [("pkgC", 4), ("pkgA", 2), ("pkgB", 2)]
        assert runs[1] == runs[0]
        assert runs[2] == runs[0]

    def test_hits_start_from_zero(self, make_package, make_client) -> None:
        """Counts left over from earlier work do not leak into a pass."""
        stale = make_package("pkgA")
        stale.hits = 50
        client = make_client(stale, make_package("pkgB"))
        world = create_world()

        verify_queue(client, world, _queue("pkgB", "pkgA"), -1)

        assert _ids(world.required) == ["pkgB", "pkgA"]
        assert stale.hits == 2


@pytest.mark.unit
class TestDepthLimit:
    """Tests for traversal depth limiting through verify_queue."""

    def test_depth_one_collects_nothing(self, chain: Client) -> None:
        """Depth 1 stops right below the world: only requested packages."""
        world = create_world()

        verify_queue(chain, world, _queue("pkgA"), 1)

        assert _ids(world.required) == ["pkgA"]

    def test_depth_two_walks_collected_records(self, chain: Client) -> None:
        """Collected records are walked from the world with budget 1, so
        depth 2 reaches what they require as well."""
        world = create_world()

        verify_queue(chain, world, _queue("pkgA"), 2)

        assert _ids(world.required) == ["pkgC", "pkgD", "pkgA"]

    def test_negative_depth_is_unlimited(self, chain: Client) -> None:
        """A negative budget walks the whole graph."""
        world = create_world()

        verify_queue(chain, world, _queue("pkgA"), -1)

        assert _ids(world.required) == ["pkgC", "pkgD", "pkgA"]


@pytest.mark.unit
class TestApplyQueue:
    """Tests for apply_queue."""

    def test_passes_flattened_world_to_callback(self, chain: Client) -> None:
        """The callback sees the flattened world and the opaque data."""
        seen: List[Any] = []

        def callback(client: Client, world: Package, data: Any, maxdepth: int) -> bool:
            seen.append((client, world.id, _ids(world.required), data, maxdepth))
            return True

        token = object()
        ok = apply_queue(chain, _queue("pkgA"), callback, 3, token)

        assert ok is True
        assert seen == [(chain, "virtual:world", ["pkgC", "pkgD", "pkgA"], token, 3)]

    def test_zero_depth_is_normalized_to_unlimited(self, chain: Client) -> None:
        """maxdepth=0 reaches the callback as -1."""
        depths: List[int] = []

        def callback(client: Client, world: Package, data: Any, maxdepth: int) -> bool:
            depths.append(maxdepth)
            return True

        apply_queue(chain, _queue("pkgA"), callback, 0)

        assert depths == [-1]

    def test_callback_result_is_returned(self, chain: Client) -> None:
        """A failing callback makes apply_queue fail."""
        ok = apply_queue(chain, _queue("pkgA"), lambda *args: False, 0)

        assert ok is False

    def test_callback_not_called_on_failure(self, make_client) -> None:
        """Resolution failures never reach the callback."""
        calls: List[Any] = []

        def callback(*args: Any) -> bool:
            calls.append(args)
            return True

        assert apply_queue(make_client(), _queue("missing"), callback, 0) is False
        assert apply_queue(make_client(), DependencyQueue(), callback, 0) is False
        assert calls == []

    def test_world_is_released_after_callback(self, chain: Client) -> None:
        """The world's records are destroyed once apply_queue returns."""
        captured: List[Package] = []
        records: List[Dependency] = []

        def callback(client: Client, world: Package, data: Any, maxdepth: int) -> bool:
            captured.append(world)
            records.extend(world.required)
            return True

        apply_queue(chain, _queue("pkgA"), callback, 0)

        world = captured[0]
        assert world.required == []
        assert world.requires_private == []
        assert all(dep.match is None for dep in records)

    def test_registry_packages_survive_release(self, chain: Client) -> None:
        """Releasing the world does not touch registry packages."""
        apply_queue(chain, _queue("pkgA"), lambda *args: True, 0)

        pkg_a = chain.registry.find("pkgA")
        assert pkg_a is not None
        assert [dep.package for dep in pkg_a.required] == ["pkgC"]

    def test_world_is_released_when_callback_raises(self, chain: Client) -> None:
        """The world is released even if the callback blows up."""
        captured: List[Package] = []

        def callback(client: Client, world: Package, data: Any, maxdepth: int) -> bool:
            captured.append(world)
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            apply_queue(chain, _queue("pkgA"), callback, 0)

        assert captured[0].required == []

    def test_world_is_released_on_failure(self, make_client) -> None:
        """A failed resolve still releases the world."""
        worlds: List[Package] = []

        def tracking_world() -> Package:
            world = create_world()
            worlds.append(world)
            return world

        with patch.object(queue_module, "create_world", side_effect=tracking_world):
            apply_queue(make_client(), _queue("missing"), lambda *args: True, 0)

        assert len(worlds) == 1
        assert worlds[0].required == []

    def test_scenario_public_and_private(self, make_package, make_client) -> None:
        """pkgA needs pkgC publicly, pkgB needs it privately.

        pkgC is resolved below pkgA and again as a collected record, so it
        outranks the requested packages."""
        client = make_client(
            make_package("pkgA", requires="pkgC"),
            make_package("pkgB", requires_private="pkgC"),
            make_package("pkgC"),
        )
        result: dict = {}

        def callback(client: Client, world: Package, data: dict, maxdepth: int) -> bool:
            data["required"] = [(dep.match.id, dep.hits) for dep in world.required]
            data["private"] = [(dep.match.id, dep.hits) for dep in world.requires_private]
            return True

        assert apply_queue(client, _queue("pkgA", "pkgB"), callback, 0, result)

        assert result["required"] == [("pkgC", 4), ("pkgA", 2), ("pkgB", 2)]
        assert result["private"] == [("pkgC", 4)]

    def test_repeated_runs_on_one_client_agree(self, make_package, make_client) -> None:
        """Running the same queue twice on one client gives the same world."""
        client = make_client(
            make_package("pkgA", requires="pkgC"),
            make_package("pkgB", requires_private="pkgC"),
            make_package("pkgC"),
        )
        runs: List[Any] = []

        def callback(client: Client, world: Package, data: Any, maxdepth: int) -> bool:
            runs.append(
                (
                    [(dep.match.id, dep.hits) for dep in world.required],
                    [(dep.match.id, dep.hits) for dep in world.requires_private],
                )
            )
            return True

        assert apply_queue(client, _queue("pkgA", "pkgB"), callback, 0)
        assert apply_queue(client, _queue("pkgA", "pkgB"), callback, 0)

        assert runs[0] == runs[1]
        assert runs[0][0][0] == ("pkgC", 4)


@pytest.mark.unit
class TestValidateQueue:
    """Tests for validate_queue."""

    def test_valid_queue(self, chain: Client) -> None:
        """A resolvable queue validates."""
        assert validate_queue(chain, _queue("pkgA"), 0) is True

    def test_empty_queue(self, chain: Client) -> None:
        """An empty queue does not validate."""
        assert validate_queue(chain, DependencyQueue(), 0) is False

    def test_missing_package(self, chain: Client) -> None:
        """An unknown package does not validate."""
        assert validate_queue(chain, _queue("pkgA", "ghost"), 0) is False

    def test_depth_limit_hides_deep_errors(self, make_package, make_client) -> None:
        """Packages below the depth budget are never resolved."""
        client = make_client(make_package("pkgA", requires="ghost"))

        assert validate_queue(client, _queue("pkgA"), 1) is True
        assert validate_queue(client, _queue("pkgA"), 0) is False

    def test_world_is_always_released(self, chain: Client) -> None:
        """validate_queue releases the world on success and failure."""
        worlds: List[Package] = []

        def tracking_world() -> Package:
            world = create_world()
            worlds.append(world)
            return world

        with patch.object(queue_module, "create_world", side_effect=tracking_world):
            validate_queue(chain, _queue("pkgA"), 0)
            validate_queue(chain, _queue("ghost"), 0)

        assert len(worlds) == 2
        assert all(w.required == [] and w.requires_private == [] for w in worlds)
