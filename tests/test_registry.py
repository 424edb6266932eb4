"""
Unit tests for suite registration and hook resolution.
"""

import pytest

from mockingbird.errors import HookError
from mockingbird.hooks import HookKind, HookSet, resolve_after_each, resolve_before_each, run_hook
from mockingbird.registry import DescribeRegistrar, SuiteRegistry, TestRegistrar


@pytest.fixture
def reports():
    return []


@pytest.fixture
def registry(reports):
    return SuiteRegistry(report=reports.append)


class TestSuiteRegistry:
    """Test building the suite tree."""

    def test_nested_describe_builds_tree_in_order(self, registry):
        def outer():
            registry.test("first", lambda: None)
            registry.describe("inner", lambda: registry.test("nested", lambda: None))
            registry.test("second", lambda: None)

        registry.describe("outer", outer)

        assert [s.description for s in registry.roots] == ["outer"]
        outer_suite = registry.roots[0]
        assert [t.description for t in outer_suite.tests] == ["first", "second"]
        inner = outer_suite.suites[0]
        assert inner.description == "inner"
        assert inner.parent is outer_suite
        assert [t.description for t in inner.tests] == ["nested"]
        assert registry.active is None

    def test_top_level_tests_share_one_implicit_suite(self, registry):
        registry.test("a", lambda: None)
        registry.describe("group", lambda: None)
        registry.test("b", lambda: None)

        names = [s.description for s in registry.roots]
        assert names == ["Root", "group"]
        assert [t.description for t in registry.roots[0].tests] == ["a", "b"]

    def test_implicit_suite_name_is_configurable(self, reports):
        registry = SuiteRegistry(report=reports.append, implicit_suite_name="Top")
        registry.test("a", lambda: None)
        assert registry.roots[0].description == "Top"

    def test_failing_builder_is_reported_and_partial_suite_kept(self, registry, reports):
        def builder():
            registry.test("registered before error", lambda: None)
            raise RuntimeError("broken")

        registry.describe("bad", builder)
        registry.describe("good", lambda: registry.test("ok", lambda: None))

        assert reports == ["Error in describe block 'bad': broken"]
        assert [t.description for t in registry.roots[0].tests] == ["registered before error"]
        assert registry.roots[1].description == "good"
        assert registry.active is None

    def test_async_builder_is_rejected(self, registry, reports):
        async def builder():
            registry.test("never", lambda: None)

        registry.describe("async", builder)

        assert reports == ["Error in describe block 'async': describe builders must be synchronous"]
        assert registry.roots[0].tests == []

    def test_ids_are_unique(self, registry):
        registry.describe("s", lambda: [registry.test(str(i), lambda: None) for i in range(20)])
        ids = [t.id for t in registry.roots[0].tests] + [registry.roots[0].id]
        assert len(set(ids)) == len(ids)


class TestRegistrars:
    """Test the describe/test bindings and their variants."""

    def test_skip_and_todo(self, registry):
        test = TestRegistrar(registry)
        test.skip("skipped", lambda: None)
        test.todo("later")

        skipped, todo = registry.roots[0].tests
        assert skipped.skip and todo.skip
        assert todo.body is None

    def test_each_formats_titles_and_binds_rows(self, registry):
        test = TestRegistrar(registry)
        seen = []
        test.each([(1, 1, 2), (2, 3, 5)])("add(%d, %d) == %d", lambda a, b, c: seen.append(a + b == c))

        tests = registry.roots[0].tests
        assert [t.description for t in tests] == ["add(1, 1) == 2", "add(2, 3) == 5"]
        for t in tests:
            t.body()
        assert seen == [True, True]

    def test_each_with_dict_rows(self, registry):
        test = TestRegistrar(registry)
        test.each([{"name": "ada"}])("greets %(name)s", lambda name: None)
        assert registry.roots[0].tests[0].description == "greets ada"

    def test_describe_skip_marks_descendant_tests(self, registry):
        describe = DescribeRegistrar(registry)
        describe.skip("off", lambda: describe("child", lambda: registry.test("t", lambda: None)))

        off = registry.roots[0]
        assert off.skip
        assert off.suites[0].skipped
        assert off.suites[0].tests[0].skip

    def test_describe_each(self, registry):
        describe = DescribeRegistrar(registry)
        describe.each(["json", "yaml"])("format %s", lambda fmt: registry.test(fmt, lambda: None))

        assert [s.description for s in registry.roots] == ["format json", "format yaml"]
        assert registry.roots[1].tests[0].description == "yaml"


class TestHooks:
    """Test hook storage, ordering and error wrapping."""

    def test_hookset_rejects_non_callables(self):
        with pytest.raises(TypeError):
            HookSet().add(HookKind.BEFORE_EACH, "nope")

    def test_add_hook_targets_active_suite_or_run(self, registry):
        top = registry.add_hook(HookKind.BEFORE_ALL, lambda: "top")
        registry.describe("s", lambda: registry.add_hook(HookKind.AFTER_ALL, lambda: None))

        assert registry.root_hooks.before_all == [top]
        assert len(registry.roots[0].hooks.after_all) == 1

    def test_each_hooks_resolve_along_ancestry(self, registry):
        order = []

        def outer():
            registry.add_hook(HookKind.BEFORE_EACH, lambda: order.append("outer-before"))
            registry.add_hook(HookKind.AFTER_EACH, lambda: order.append("outer-after"))
            registry.describe("inner", inner)

        def inner():
            registry.add_hook(HookKind.BEFORE_EACH, lambda: order.append("inner-before"))
            registry.add_hook(HookKind.AFTER_EACH, lambda: order.append("inner-after"))

        registry.add_hook(HookKind.BEFORE_EACH, lambda: order.append("root-before"))
        registry.add_hook(HookKind.AFTER_EACH, lambda: order.append("root-after"))
        registry.describe("outer", outer)

        leaf = registry.roots[0].suites[0]
        for hook in resolve_before_each(leaf, registry.root_hooks):
            hook()
        for hook in resolve_after_each(leaf, registry.root_hooks):
            hook()

        assert order == [
            "root-before", "outer-before", "inner-before",
            "inner-after", "outer-after", "root-after",
        ]

    @pytest.mark.asyncio
    async def test_run_hook_awaits_and_wraps_errors(self):
        calls = []

        async def async_hook():
            calls.append("ran")

        await run_hook(async_hook)
        assert calls == ["ran"]

        def failing():
            raise ValueError("setup broke")

        with pytest.raises(HookError, match="Error in hook: setup broke"):
            await run_hook(failing)
