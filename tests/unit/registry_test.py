from datetime import datetime, timezone

import pytest

from mockforge.core.errors import MacroResolutionError
from mockforge.core.registry import GeneratorRegistry, create_faker


def _luhn_valid(digits: str) -> bool:
    total = 0
    for idx, ch in enumerate(reversed(digits)):
        digit = int(ch)
        if idx % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


class TestGeneratorRegistry:
    def test_register_and_resolve(self) -> None:
        registry = GeneratorRegistry()
        registry.register("demo", "answer", lambda: 42)
        assert registry.resolve(["demo", "answer"])() == 42
        assert ("demo", "answer") in registry
        assert len(registry) == 1

    @pytest.mark.parametrize("path", [["demo"], ["demo", "answer", "extra"], ["demo", "missing"]])
    def test_resolve_rejects_bad_paths(self, path: list[str]) -> None:
        registry = GeneratorRegistry()
        registry.register("demo", "answer", lambda: 42)
        with pytest.raises(MacroResolutionError):
            registry.resolve(path)

    def test_register_validates_name_and_callable(self) -> None:
        registry = GeneratorRegistry()
        with pytest.raises(ValueError):
            registry.register("bad-name", "x", lambda: 1)
        with pytest.raises(TypeError):
            registry.register("demo", "x", 1)  # type: ignore[arg-type]

    def test_alias_copies_methods(self) -> None:
        registry = GeneratorRegistry()
        registry.register("name", "first", lambda: "Ada")
        registry.alias("person", "name")
        assert registry.resolve(["person", "first"])() == "Ada"
        assert registry.namespaces() == ["name", "person"]


class TestDefaultRegistry:
    def test_catalogue_covers_editor_namespaces(self, registry: GeneratorRegistry) -> None:
        for namespace in ("internet", "name", "person", "phone", "address", "location", "lorem", "date", "number"):
            assert registry.methods(namespace), namespace

    def test_number_int_single_argument_is_max(self, registry: GeneratorRegistry) -> None:
        gen = registry.resolve(["number", "int"])
        assert all(0 <= gen(5) <= 5 for _ in range(50))

    def test_number_int_min_max_positional_and_options(self, registry: GeneratorRegistry) -> None:
        gen = registry.resolve(["number", "int"])
        assert all(18 <= gen(18, 80) <= 80 for _ in range(50))
        assert all(1 <= gen({"min": 1, "max": 2}) <= 2 for _ in range(50))

    def test_number_float_respects_fraction_digits(self, registry: GeneratorRegistry) -> None:
        value = registry.resolve(["number", "float"])({"min": 1, "max": 5, "fractionDigits": 1})
        assert 1 <= value <= 5
        assert round(value, 1) == value

    def test_imei_is_luhn_valid(self, registry: GeneratorRegistry) -> None:
        imei = registry.resolve(["phone", "imei"])()
        assert len(imei) == 15
        assert _luhn_valid(imei)

    def test_date_between(self, registry: GeneratorRegistry) -> None:
        start = datetime(2020, 1, 1, tzinfo=timezone.utc)
        end = datetime(2021, 1, 1, tzinfo=timezone.utc)
        value = registry.resolve(["date", "between"])({"from": start, "to": end})
        assert start <= value <= end

    def test_string_helpers(self, registry: GeneratorRegistry) -> None:
        assert len(registry.resolve(["string", "alpha"])(5)) == 5
        assert registry.resolve(["string", "numeric"])(4).isdigit()
        assert registry.resolve(["helpers", "arrayElement"])(["a", "b"]) in ("a", "b")


class TestCreateFaker:
    def test_locale_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKFORGE_FAKER_LOCALE", "de_DE")
        assert create_faker().locales == ["de_DE"]

    def test_explicit_seed_wins_over_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKFORGE_FAKER_SEED", "1")
        assert create_faker(5).name() == create_faker(5).name()
        assert create_faker().name() == create_faker(1).name()
