import unittest

from nestbind import Container


class TestVariadicConstructorInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_get_ignores_inherited_variadic_args_and_kwargs(self):
        class Base:
            def __init__(self, value: int = 7, *args, **kwargs):
                self.value = value
                self.args = args
                self.kwargs = kwargs

        class Derived(Base):
            ...
            # No explicit __init__; inherits Base.__init__ with *args/**kwargs

        child = self.cont.get(Derived)  # should ignore *args/**kwargs and use default for 'value'
        assert isinstance(child, Derived)
        assert child.value == 7
        assert child.args == ()
        assert child.kwargs == {}

    def test_get_injects_inherited_annotated_dependencies(self):
        class DB: ...

        class Base:
            def __init__(self, db: DB, **kwargs):
                self.db = db
                self.kwargs = kwargs

        class Derived(Base): ...

        child = self.cont.get(Derived)

        assert child.db is self.cont.get(DB)
        assert child.kwargs == {}

    def test_get_passes_positional_only_and_keyword_only_dependencies(self):
        class DB: ...

        class Cache: ...

        class Service:
            def __init__(self, db: DB, /, *, cache: Cache):
                self.db = db
                self.cache = cache

        svc = self.cont.get(Service)

        assert svc.db is self.cont.get(DB)
        assert svc.cache is self.cont.get(Cache)
