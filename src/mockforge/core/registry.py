"""Generator registry: the ``(namespace, method)`` functions templates may call.

The default catalogue wraps a ``faker.Faker`` instance behind the
camelCase names the template editor offers (``internet.userName``,
``number.int`` ...). Every wrapper accepts either positional arguments or a
single options dict, so ``$number.int(1, 10)`` and
``$number.int({min: 1, max: 10})`` are equivalent.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterator, Sequence
from datetime import datetime, timezone
from typing import Any

from faker import Faker

from mockforge.core.errors import MacroResolutionError

Generator = Callable[..., Any]

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class GeneratorRegistry:
    def __init__(self) -> None:
        self._generators: dict[tuple[str, str], Generator] = {}

    def register(self, namespace: str, method: str, func: Generator) -> None:
        if not _NAME_PATTERN.match(namespace) or not _NAME_PATTERN.match(method):
            raise ValueError(f"Invalid generator name: {namespace}.{method}")
        if not callable(func):
            raise TypeError(f"Generator {namespace}.{method} is not callable")
        self._generators[(namespace, method)] = func

    def alias(self, namespace: str, target: str) -> None:
        """Expose every method of ``target`` under ``namespace`` as well."""
        for (ns, method), func in list(self._generators.items()):
            if ns == target:
                self.register(namespace, method, func)

    def resolve(self, path: Sequence[str]) -> Generator:
        if len(path) != 2:
            raise MacroResolutionError(f"Invalid generator path: {'.'.join(path)}")
        func = self._generators.get((path[0], path[1]))
        if func is None:
            raise MacroResolutionError(f"Unknown generator: {'.'.join(path)}")
        return func

    def namespaces(self) -> list[str]:
        return sorted({ns for ns, _ in self._generators})

    def methods(self, namespace: str) -> list[str]:
        return sorted(method for ns, method in self._generators if ns == namespace)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, tuple) and path in self._generators

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._generators)

    def __len__(self) -> int:
        return len(self._generators)


def _options(args: tuple[Any, ...], *names: str) -> dict[str, Any]:
    """Map positional arguments, or a single options dict, onto ``names``."""
    if len(args) == 1 and isinstance(args[0], dict):
        return {k: v for k, v in args[0].items() if k in names}
    return {name: value for name, value in zip(names, args, strict=False)}


def _int_option(args: tuple[Any, ...], name: str, default: int) -> int:
    return int(_options(args, name).get(name, default))


def _imei(fake: Faker) -> str:
    digits = [int(d) for d in fake.numerify("##############")]
    total = 0
    for idx, digit in enumerate(digits):
        if idx % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    check = (10 - total % 10) % 10
    return "".join(str(d) for d in digits) + str(check)


def create_faker(seed: int | None = None) -> Faker:
    """Faker for ``MOCKFORGE_FAKER_LOCALE``, seeded by ``seed`` or ``MOCKFORGE_FAKER_SEED``."""
    fake = Faker(os.getenv("MOCKFORGE_FAKER_LOCALE", "en_US"))
    if seed is None and os.getenv("MOCKFORGE_FAKER_SEED"):
        seed = int(os.environ["MOCKFORGE_FAKER_SEED"])
    if seed is not None:
        fake.seed_instance(seed)
    return fake


def build_default_registry(fake: Faker | None = None) -> GeneratorRegistry:
    """Build the registry used by the API, backed by ``fake`` or a new Faker."""
    if fake is None:
        fake = create_faker()

    registry = GeneratorRegistry()
    reg = registry.register

    # internet
    reg("internet", "userName", lambda *a: fake.user_name())
    reg("internet", "email", lambda *a: fake.email())
    reg("internet", "password", lambda *a: fake.password(length=_int_option(a, "length", 15)))
    reg("internet", "url", lambda *a: fake.url())
    reg("internet", "domainName", lambda *a: fake.domain_name())
    reg("internet", "ip", lambda *a: fake.ipv4())
    reg("internet", "ipv6", lambda *a: fake.ipv6())
    reg("internet", "avatar", lambda *a: fake.image_url(width=128, height=128))

    # person
    reg("name", "firstName", lambda *a: fake.first_name())
    reg("name", "lastName", lambda *a: fake.last_name())
    reg("name", "fullName", lambda *a: fake.name())
    reg("name", "jobTitle", lambda *a: fake.job())
    registry.alias("person", "name")

    # phone
    reg("phone", "number", lambda *a: fake.phone_number())
    reg("phone", "imei", lambda *a: _imei(fake))

    # address
    reg("address", "streetAddress", lambda *a: fake.street_address())
    reg("address", "city", lambda *a: fake.city())
    reg("address", "state", lambda *a: fake.state())
    reg("address", "country", lambda *a: fake.country())
    reg("address", "zipCode", lambda *a: fake.postcode())
    registry.alias("location", "address")

    # company
    reg("company", "name", lambda *a: fake.company())
    reg("company", "catchPhrase", lambda *a: fake.catch_phrase())
    reg("company", "bs", lambda *a: fake.bs())

    # lorem
    reg("lorem", "word", lambda *a: fake.word())
    reg("lorem", "words", lambda *a: " ".join(fake.words(nb=_int_option(a, "count", 3))))
    reg("lorem", "sentence", lambda *a: fake.sentence(nb_words=_int_option(a, "wordCount", 6)))
    reg("lorem", "paragraph", lambda *a: fake.paragraph(nb_sentences=_int_option(a, "sentenceCount", 3)))

    # date
    def _past(*a: Any) -> datetime:
        years = _options(a, "years").get("years", 1)
        return fake.date_time_between(start_date=f"-{int(years)}y", end_date="now", tzinfo=timezone.utc)

    def _future(*a: Any) -> datetime:
        years = _options(a, "years").get("years", 1)
        return fake.date_time_between(start_date="now", end_date=f"+{int(years)}y", tzinfo=timezone.utc)

    def _recent(*a: Any) -> datetime:
        days = _options(a, "days").get("days", 1)
        return fake.date_time_between(start_date=f"-{int(days)}d", end_date="now", tzinfo=timezone.utc)

    def _between(*a: Any) -> datetime:
        opts = _options(a, "from", "to")
        return fake.date_time_between(start_date=opts["from"], end_date=opts["to"], tzinfo=timezone.utc)

    reg("date", "past", _past)
    reg("date", "future", _future)
    reg("date", "recent", _recent)
    reg("date", "between", _between)

    # number
    def _int(*a: Any) -> int:
        if len(a) == 1 and not isinstance(a[0], dict):
            return fake.random_int(min=0, max=int(a[0]))
        opts = _options(a, "min", "max")
        return fake.random_int(min=int(opts.get("min", 0)), max=int(opts.get("max", 99999)))

    def _float(*a: Any) -> float:
        opts = _options(a, "min", "max", "fractionDigits")
        digits = int(opts.get("fractionDigits", 2))
        value = fake.pyfloat(min_value=opts.get("min", 0), max_value=opts.get("max", 1000))
        return round(value, digits)

    reg("number", "int", _int)
    reg("number", "float", _float)

    # string / datatype / helpers
    reg("string", "uuid", lambda *a: fake.uuid4())
    reg("string", "alpha", lambda *a: fake.lexify("?" * _int_option(a, "length", 1)))
    reg("string", "numeric", lambda *a: fake.numerify("#" * _int_option(a, "length", 1)))
    reg("datatype", "boolean", lambda *a: fake.pybool())
    reg("helpers", "arrayElement", lambda *a: fake.random_element(list(a[0])) if a else None)

    return registry
