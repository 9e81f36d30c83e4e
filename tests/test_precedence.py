import unittest
from typing import NewType

from nestbind import Container


DatabaseUrl = NewType("DatabaseUrl", str)


class TestResolutionPrecedence(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_get_uses_type_annotation_not_parameter_name(self):
        class DB: ...

        class AnotherDB: ...

        class Repo:
            def __init__(self, db: DB):
                self.db = db

        self.cont.map_factory("db", lambda _: AnotherDB())

        obj = self.cont.get(Repo)

        assert isinstance(obj.db, DB)
        assert not isinstance(obj.db, AnotherDB)

    def test_get_uses_type_mapping_for_annotated_dependency(self):
        class Repo: ...

        class NamedRepo(Repo):
            def __init__(self, name: str = ""):
                super().__init__()
                self.name = name

        class Service:
            def __init__(self, repo: Repo):
                self.repo = repo

        self.cont.map_type(Repo, NamedRepo)

        obj = self.cont.get(Service)

        assert type(obj.repo) is NamedRepo

    def test_get_injects_mapped_non_class_annotation(self):
        class Service:
            def __init__(self, dsn: DatabaseUrl):
                self.dsn = dsn

        self.cont.map_instance(DatabaseUrl, DatabaseUrl("sqlite://"))

        assert self.cont.get(Service).dsn == "sqlite://"

    def test_cached_instance_wins_over_later_lookups(self):
        class Service: ...

        first = self.cont.get(Service)
        child = self.cont.create_child()

        assert child.get(Service) is first


class TestHierarchyPrecedence(unittest.TestCase):
    root: Container
    middle: Container
    leaf: Container

    def setUp(self):
        self.root = Container()
        self.middle = self.root.create_child()
        self.leaf = self.middle.create_child()

    def test_local_mapping_wins_over_ancestors(self):
        class Service: ...

        root_instance, leaf_instance = Service(), Service()
        self.root.map_instance(Service, root_instance)
        self.leaf.map_instance(Service, leaf_instance)

        assert self.leaf.get(Service) is leaf_instance

    def test_nearest_ancestor_wins(self):
        class Service: ...

        root_instance, middle_instance = Service(), Service()
        self.root.map_instance(Service, root_instance)
        self.middle.map_instance(Service, middle_instance)

        assert self.leaf.get(Service) is middle_instance
        assert self.root.get(Service) is root_instance

    def test_ancestor_mapping_wins_over_auto_construction(self):
        class Base: ...

        class Derived(Base): ...

        self.root.map_type(Base, Derived)

        assert type(self.leaf.get(Base)) is Derived

    def test_ancestor_cached_singleton_wins_over_auto_construction(self):
        class Service: ...

        cached = self.root.get(Service)

        assert self.leaf.get(Service) is cached
