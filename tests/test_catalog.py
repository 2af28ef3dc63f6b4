import locale
import logging

from routeconv import catalog
from routeconv.catalog import PLACEHOLDER_NAME, CategoryComparator, use_default_collation


class Category:
    def __init__(self, name=None, error=None):
        self.name = name
        self.error = error

    def get_name(self):
        if self.error is not None:
            raise self.error
        return self.name

    def __repr__(self):
        return f"Category({self.name!r})"


def test_sorts_by_name():
    comparator = CategoryComparator()
    categories = [Category("b"), Category("c"), Category("a")]
    assert [c.name for c in comparator.sort(categories)] == ["a", "b", "c"]


def test_compare_sign():
    comparator = CategoryComparator()
    assert comparator.compare(Category("a"), Category("b")) < 0
    assert comparator.compare(Category("b"), Category("a")) > 0
    assert comparator.compare(Category("a"), Category("a")) == 0


def test_unreadable_name_uses_placeholder(caplog):
    comparator = CategoryComparator()
    broken = Category(error=OSError("connection reset"))
    with caplog.at_level(logging.WARNING):
        assert comparator.get_name(broken) == PLACEHOLDER_NAME
        assert comparator.compare(broken, Category(PLACEHOLDER_NAME)) == 0
    assert "connection reset" in caplog.text


def test_unreadable_name_does_not_abort_sort():
    comparator = CategoryComparator()
    categories = [Category("b"), Category(error=OSError("gone")), Category("a")]
    assert len(comparator.sort(categories)) == 3


def test_default_collation_comes_from_environment(monkeypatch):
    calls = []

    def setlocale(*args):
        calls.append(args)
        return "de_DE.UTF-8"

    monkeypatch.setattr(catalog.locale, "setlocale", setlocale)
    use_default_collation()
    assert calls == [(locale.LC_COLLATE, "")]


def test_unsupported_environment_locale_is_logged(monkeypatch, caplog):
    def unsupported(*args):
        raise locale.Error("unsupported locale setting")

    monkeypatch.setattr(catalog.locale, "setlocale", unsupported)
    with caplog.at_level(logging.WARNING):
        use_default_collation()
    assert "unsupported locale setting" in caplog.text
