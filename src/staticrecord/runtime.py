"""
staticrecord.runtime  ──  Host-framework compatibility hooks.

A persistence framework that reflects over its models expects a few class
level answers (cache key, base class, polymorphic name, a transaction block).
`ModelCompat` provides them so a `Record` can sit next to real models:

    with Country.transaction():
        Country.create(name="Narnia")
        raise Rollback  # absorbed; nothing is actually rolled back
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import structlog

logger = structlog.get_logger(__name__)


class Rollback(Exception):
    """The host's "abort this transaction" signal. Absorbed by `transaction()`."""


# helpers
def _snake(name: str) -> str:
    """CamelCase ➜ snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _pluralize(word: str) -> str:
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def tableize(class_name: str) -> str:
    """`CountryCode` ➜ `country_codes`."""
    return _pluralize(_snake(class_name))


class ModelCompat:
    """Class-level hooks consumed by host reflection."""

    @classmethod
    def model_cache_key(cls) -> str:
        """Type part of every instance cache key."""
        return cls._context.config.cache_key or tableize(cls.__name__)

    @classmethod
    def base_class(cls) -> type:
        # the first ancestor that is not itself a concrete model
        for klass in cls.__mro__:
            if "_context" not in vars(klass) and isinstance(klass, type(cls)):
                return klass
        return cls

    @classmethod
    def polymorphic_name(cls) -> str:
        base = cls.base_class()
        return f"{base.__module__}.{base.__qualname__}"

    @classmethod
    def compute_type(cls, type_name: str) -> type:
        return cls

    @classmethod
    def composite_primary_key(cls) -> bool:
        return False

    @classmethod
    def has_query_constraints(cls) -> bool:
        return False

    @classmethod
    @contextmanager
    def transaction(cls) -> Iterator[None]:
        """Run the block; swallow `Rollback`, re-raise everything else."""
        try:
            yield
        except Rollback:
            logger.debug("transaction_rolled_back", model=cls.__name__)
