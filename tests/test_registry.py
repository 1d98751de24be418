from lbasic.environment import Environment
from lbasic.interpreter import Interpreter
from lbasic.registry import FunctionSetRegistry


def test_register_and_lookup():
    registry = FunctionSetRegistry()
    env = Environment('main')
    registry.register(env)
    assert registry.lookup('main') is env
    assert registry.lookup('other') is None
    assert 'main' in registry
    assert 'other' not in registry
    assert len(registry) == 1


def test_first_registered_wins():
    registry = FunctionSetRegistry()
    first = Environment('main')
    second = Environment('main')
    registry.register(first)
    registry.register(second)
    assert registry.lookup('main') is first


def test_interpreter_registers_its_environment():
    registry = FunctionSetRegistry()
    interp = Interpreter(registry, 'game')
    assert registry.lookup('game') is interp.env
    child = Interpreter(registry, 'game', is_new=False)
    assert child.env is interp.env
    assert len(registry) == 1
