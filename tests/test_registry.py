from dataclasses import dataclass

import pytest

import envcfg.common.compat_typing as t
from envcfg import ConversionError, DuplicateConversionError, RegistrationError, Registry
from envcfg.parsers import DEFAULT_PARSERS


@dataclass
class Foo:
    value: str = ''


@dataclass
class Endpoint:
    host: str
    port: int


def parse_foo(s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(s), None


def parse_endpoint(host: str, port: str) -> t.Tuple[Endpoint, t.Optional[ValueError]]:
    if not port.isdigit():
        return Endpoint('', 0), ValueError(f'invalid port: {port}')
    return Endpoint(host, int(port)), None


def no_args() -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(), None


def int_arg(i: int) -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(), None


def mixed_args(s: str, i: int) -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(), None


def unannotated_arg(s) -> t.Tuple[Foo, t.Optional[Exception]]:  # type: ignore
    return Foo(), None


def var_args(*args: str) -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(), None


def keyword_only(s: str, *, sep: str = ',') -> t.Tuple[Foo, t.Optional[Exception]]:
    return Foo(), None


def no_return(s: str):  # type: ignore
    return Foo(), None


def single_return(s: str) -> Foo:
    return Foo()


def three_returns(s: str) -> t.Tuple[Foo, str, t.Optional[Exception]]:
    return Foo(), '', None


def variable_returns(s: str) -> t.Tuple[Foo, ...]:
    return (Foo(),)


def second_not_error(s: str) -> t.Tuple[Foo, str]:
    return Foo(), ''


SHAPE_ERRORS = [
    ("I can't even", "envcfg: \"I can't even\" is not callable"),
    (no_args, 'accepts 0 arguments'),
    (int_arg, 'accepts a int argument "i"'),
    (mixed_args, 'accepts a int argument "i"'),
    (unannotated_arg, 'accepts an unannotated argument "s"'),
    (var_args, 'variadic positional parameter "args"'),
    (keyword_only, 'keyword-only parameter "sep"'),
    (no_return, 'has no return annotation'),
    (single_return, f'returns {__name__}.Foo'),
    (three_returns, 'returns 3 values'),
    (variable_returns, 'returns a variable number of values'),
    (second_not_error, "last return value is str"),
]


@pytest.mark.parametrize('func, message', SHAPE_ERRORS)
def test_register_wrong_shape(func: t.Any, message: str) -> None:
    registry = Registry()
    with pytest.raises(RegistrationError) as e:
        registry.register(func)
    assert message in str(e.value)
    assert not isinstance(e.value, DuplicateConversionError)
    # nothing registered
    assert len(registry) == 0


def test_register_shape_messages_are_distinct() -> None:
    messages = set()
    for func, _ in SHAPE_ERRORS:
        with pytest.raises(RegistrationError) as e:
            Registry().register(func)
        messages.add(str(e.value))
    assert len(messages) == len(SHAPE_ERRORS)


def test_register_and_lookup() -> None:
    registry = Registry()
    entry = registry.register(parse_foo)
    assert entry.arity == 1
    assert entry.produces is Foo
    assert entry.name == f'{__name__}.parse_foo'
    assert registry.lookup(Foo) is entry
    assert Foo in registry
    assert registry.lookup(Endpoint) is None
    assert entry.invoke('bar') == Foo('bar')


def test_register_duplicate() -> None:
    def another_parse_foo(s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
        return Foo('another'), None

    registry = Registry()
    registry.register(parse_foo)
    with pytest.raises(DuplicateConversionError) as e:
        registry.register(another_parse_foo)
    assert f'already been registered for the {__name__}.Foo type' in str(e.value)
    assert 'another_parse_foo' in str(e.value)
    # registering the same function again is rejected too
    with pytest.raises(DuplicateConversionError):
        registry.register(parse_foo)
    # first registration wins
    assert registry.lookup(Foo).invoke('x') == Foo('x')  # type: ignore
    assert len(registry) == 1


def test_register_subclass_is_a_different_type() -> None:
    class SubFoo(Foo):
        pass

    def parse_sub_foo(s: str) -> t.Tuple[SubFoo, t.Optional[Exception]]:
        return SubFoo(s), None

    registry = Registry()
    registry.register(parse_foo)
    assert registry.lookup(SubFoo) is None
    registry.register(parse_sub_foo)
    assert isinstance(registry.lookup(SubFoo).invoke('x'), SubFoo)  # type: ignore


def test_register_callable_object() -> None:
    class FooParser:
        def __init__(self, prefix: str) -> None:
            self.prefix = prefix

        def __call__(self, s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
            return Foo(self.prefix + s), None

    registry = Registry()
    entry = registry.register(FooParser('>'))
    assert entry.arity == 1
    assert entry.invoke('a') == Foo('>a')


def test_multi_arity_conversion() -> None:
    registry = Registry()
    entry = registry.register(parse_endpoint)
    assert entry.arity == 2
    assert entry.invoke('localhost', '8080') == Endpoint('localhost', 8080)
    with pytest.raises(ValueError):
        entry.invoke('localhost')


def test_invoke_returned_error() -> None:
    entry = Registry().register(parse_endpoint)
    with pytest.raises(ConversionError) as e:
        entry.invoke('localhost', 'http')
    assert str(e.value) == 'invalid port: http'


def test_invoke_contains_exceptions() -> None:
    def parse_broken(s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
        raise RuntimeError('I crashed')

    def parse_wrong_result(s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
        return Foo()  # type: ignore

    registry = Registry()
    entry = registry.register(parse_broken)
    with pytest.raises(ConversionError) as e:
        entry.invoke('x')
    assert str(e.value) == (
        f'{__name__}.test_invoke_contains_exceptions.<locals>.parse_broken raised RuntimeError: I crashed'
    )
    assert isinstance(e.value.__cause__, RuntimeError)

    registry = Registry()
    entry = registry.register(parse_wrong_result)
    with pytest.raises(ConversionError) as e:
        entry.invoke('x')
    assert str(e.value).endswith('parse_wrong_result returned a Foo, not a (value, error) tuple')


@pytest.mark.parametrize('result', [[Foo(), None], 'ok', (Foo(), None, None), None])
def test_invoke_rejects_non_pair_results(result: t.Any) -> None:
    def parse_odd(s: str) -> t.Tuple[Foo, t.Optional[Exception]]:
        return result  # type: ignore

    entry = Registry().register(parse_odd)
    with pytest.raises(ConversionError) as e:
        entry.invoke('x')
    assert f'parse_odd returned a {type(result).__name__}, not a (value, error) tuple' in str(e.value)


def test_invoke_unprintable_error() -> None:
    class UnprintableError(Exception):
        def __str__(self) -> str:
            raise RuntimeError('no text')

    def parse_returns_it(s: str) -> t.Tuple[Foo, t.Optional[UnprintableError]]:
        return Foo(), UnprintableError()

    def parse_raises_it(s: str) -> t.Tuple[Foo, t.Optional[UnprintableError]]:
        raise UnprintableError()

    registry = Registry()
    with pytest.raises(ConversionError) as e:
        registry.register(parse_returns_it).invoke('x')
    assert str(e.value) == '<UnprintableError str() failed: RuntimeError>'

    registry = Registry()
    with pytest.raises(ConversionError) as e:
        registry.register(parse_raises_it).invoke('x')
    assert str(e.value).endswith('parse_raises_it raised UnprintableError: <UnprintableError str() failed: RuntimeError>')


def test_registry_with_defaults() -> None:
    registry = Registry.with_defaults()
    assert len(registry) == len(DEFAULT_PARSERS)
    assert registry.lookup(int).invoke('-2') == -2  # type: ignore
    assert registry.lookup(str).invoke('hi') == 'hi'  # type: ignore
    assert registry.lookup(bool).invoke('true') is True  # type: ignore


if __name__ == '__main__':
    # Breakpoints do not work with coverage, disable coverage for debugging
    pytest.main([__file__, '--no-cov', '--log-cli-level=DEBUG'])
