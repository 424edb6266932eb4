"""
Unit tests for mock functions, spies and module mocks.
"""

import pytest

from mockingbird.errors import MockError
from mockingbird.mocks import AutoModule, MockFunction, RejectedValue, as_mock


class Greeter:
    def __init__(self, name):
        self.name = name

    def greet(self, punctuation="!"):
        return f"hello {self.name}{punctuation}"


class TestMockFunction:
    """Test call logging and implementation priority."""

    def test_calls_and_results_are_logged_in_order(self):
        fn = MockFunction()
        fn.mock_return_value(7)

        fn(1, 2)
        fn("a", key="v")

        assert fn.mock.calls == [(1, 2), ("a", {"key": "v"})]
        assert [r.outcome for r in fn.mock.results] == ["return", "return"]
        assert [r.value for r in fn.mock.results] == [7, 7]
        assert fn.mock.last_call == ("a", {"key": "v"})

    def test_no_implementation_returns_none(self):
        fn = MockFunction()
        assert fn() is None
        assert fn.mock.results[0].outcome == "return"

    def test_once_implementations_are_fifo_before_persistent(self):
        fn = MockFunction(lambda: "default")
        fn.mock_return_value("persistent")
        fn.mock_return_value_once("first").mock_return_value_once("second")

        assert [fn(), fn(), fn()] == ["first", "second", "persistent"]

    def test_default_used_without_configuration(self):
        fn = MockFunction(lambda x: x * 2)
        assert fn(21) == 42

    def test_throw_is_recorded_and_reraised(self):
        def fail():
            raise ValueError("nope")

        fn = MockFunction(fail)

        with pytest.raises(ValueError, match="nope"):
            fn()

        assert len(fn.mock.calls) == 1
        result = fn.mock.results[0]
        assert result.outcome == "throw"
        assert isinstance(result.value, ValueError)

    def test_mock_clear_keeps_implementation(self):
        fn = MockFunction()
        fn.mock_return_value(1)
        fn()

        fn.mock_clear()

        assert fn.mock.calls == []
        assert fn.mock.results == []
        assert fn() == 1

    def test_mock_reset_drops_implementations(self):
        fn = MockFunction()
        fn.mock_return_value(1).mock_return_value_once(2)
        fn()

        fn.mock_reset()

        assert fn.mock.calls == []
        assert fn() is None

    def test_mock_name(self):
        fn = MockFunction()
        assert fn.get_mock_name() == "jest.fn()"
        assert fn.mock_name("fetchUser").get_mock_name() == "fetchUser"


class TestAsyncValues:
    """Test resolved and rejected values."""

    @pytest.mark.asyncio
    async def test_resolved_value(self):
        fn = MockFunction().mock_resolved_value({"id": 1})
        assert await fn() == {"id": 1}

    @pytest.mark.asyncio
    async def test_rejected_exception_is_raised_as_is(self):
        fn = MockFunction().mock_rejected_value(RuntimeError("down"))
        with pytest.raises(RuntimeError, match="down"):
            await fn()

    @pytest.mark.asyncio
    async def test_rejected_plain_value_is_wrapped(self):
        fn = MockFunction().mock_rejected_value_once("oops")
        with pytest.raises(RejectedValue) as info:
            await fn()
        assert info.value.value == "oops"
        assert await fn() is None


class TestSpyOn:
    """Test spies on objects, classes and modules."""

    def test_spy_calls_through_and_restores(self, mocks):
        greeter = Greeter("ada")
        spy = mocks.spy_on(greeter, "greet")

        assert greeter.greet("?") == "hello ada?"
        assert spy.mock.calls == [("?",)]
        assert spy.get_mock_name() == "Greeter.greet"

        spy.mock_restore()

        assert "greet" not in vars(greeter)
        assert greeter.greet() == "hello ada!"

    def test_spy_on_class_binds_instances(self, mocks):
        spy = mocks.spy_on(Greeter, "greet")
        try:
            first = Greeter("ada")
            assert first.greet() == "hello ada!"
            assert spy.mock.contexts == [first]
            assert as_mock(first.greet) is spy
        finally:
            spy.mock_restore()

        assert Greeter.greet is vars(Greeter)["greet"]
        assert not isinstance(Greeter.__dict__["greet"], MockFunction)

    def test_spy_implementation_can_be_replaced(self, mocks):
        greeter = Greeter("ada")
        spy = mocks.spy_on(greeter, "greet")
        spy.mock_implementation(lambda *args: "stubbed")

        assert greeter.greet() == "stubbed"

    def test_spy_on_non_function_raises(self, mocks):
        greeter = Greeter("ada")
        with pytest.raises(MockError, match="Cannot spy on name property of object"):
            mocks.spy_on(greeter, "name")

    def test_restore_all_only_touches_spies(self, mocks):
        greeter = Greeter("ada")
        plain = mocks.fn()
        plain.mock_return_value(1)
        mocks.spy_on(greeter, "greet")

        mocks.restore_all()

        assert plain() == 1
        assert greeter.greet() == "hello ada!"
        assert not isinstance(greeter.greet, MockFunction)

    def test_clear_and_reset_all(self, mocks):
        a = mocks.fn()
        b = mocks.fn()
        a.mock_return_value("a")
        a()
        b()

        mocks.clear_all()
        assert a.mock.calls == [] and b.mock.calls == []
        assert a() == "a"

        mocks.reset_all()
        assert a() is None


class TestModuleMocks:
    """Test require, jest.mock and automatic module mocks."""

    def test_factory_result_is_returned(self, mocks):
        mocks.mock_module("config", lambda: {"debug": True})
        assert mocks.require("config") == {"debug": True}

    def test_auto_module_members_are_cached_mocks(self, mocks):
        api = mocks.require("api")

        get_user = api["get_user"]
        assert isinstance(get_user, MockFunction)
        assert api.get("get_user") is get_user
        assert get_user.get_mock_name() == "api.get_user"
        assert "get_user" in api
        assert mocks.require("api") is api

    def test_auto_module_default_member(self):
        module = AutoModule("logger", MockFunction)
        module.default("x")
        assert module.default.mock.calls == [("x",)]
        assert module.members() == ["default"]

    def test_unmock(self, mocks):
        mocks.mock_module("config", lambda: "mocked")
        mocks.unmock("config")
        assert isinstance(mocks.require("config"), AutoModule)

    def test_require_actual_imports_real_module(self, mocks):
        import json

        mocks.mock_module("json")
        assert mocks.require_actual("json") is json
