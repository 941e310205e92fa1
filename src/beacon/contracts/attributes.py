# src/beacon/contracts/attributes.py
"""Ordered, typed key/value attributes attached to telemetry.

Attributes are the leaf data type of the whole package: every metric,
span, event and batch carries one. Values are restricted to the JSON
scalars the wire format understands (str, int, float, bool).

Insertion order is preserved so that encoding is deterministic. Re-putting
an existing key replaces its value but keeps its original position.

Ownership:
    Entities and batches never hold the caller's instance. They take a
    frozen copy on construction (copy-on-attach), so mutating the original
    afterwards cannot change a batch that is already being sent.
"""

from __future__ import annotations

from collections.abc import ItemsView, Iterator, Mapping
from typing import Union

AttributeValue = Union[str, int, float, bool]

_VALUE_TYPES = (str, int, float, bool)


class Attributes:
    """Ordered mapping from string keys to scalar values.

    Example:
        attrs = Attributes().put("host", "web-1").put("cpu", 4)
        attrs.frozen()  # immutable copy, safe to attach to a batch
    """

    __slots__ = ("_data", "_frozen")

    def __init__(self, initial: Mapping[str, AttributeValue] | None = None) -> None:
        self._data: dict[str, AttributeValue] = {}
        self._frozen = False
        if initial is not None:
            self.put_all(initial)

    def put(self, key: str, value: AttributeValue) -> Attributes:
        """Set ``key`` to ``value`` and return self for chaining.

        Raises:
            TypeError: If the instance is frozen, the key is not a string,
                or the value is not a str/int/float/bool.
        """
        if self._frozen:
            raise TypeError("Attributes are frozen and cannot be modified")
        if not isinstance(key, str):
            raise TypeError(f"Attribute keys must be str, got {type(key).__name__}")
        if not isinstance(value, _VALUE_TYPES):
            raise TypeError(f"Attribute '{key}' has unsupported value type {type(value).__name__}")
        self._data[key] = value
        return self

    def put_all(self, other: Mapping[str, AttributeValue]) -> Attributes:
        """Copy every item of ``other`` in its iteration order."""
        for key, value in other.items():
            self.put(key, value)
        return self

    def frozen(self) -> Attributes:
        """Return an immutable copy of these attributes."""
        copy = Attributes(self._data)
        copy._frozen = True
        return copy

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def is_empty(self) -> bool:
        return not self._data

    def as_dict(self) -> dict[str, AttributeValue]:
        """Return a plain (mutable) dict copy in insertion order."""
        return dict(self._data)

    def items(self) -> ItemsView[str, AttributeValue]:
        return self._data.items()

    def get(self, key: str, default: AttributeValue | None = None) -> AttributeValue | None:
        return self._data.get(key, default)

    def __getitem__(self, key: str) -> AttributeValue:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Attributes):
            return list(self._data.items()) == list(other._data.items())
        return NotImplemented

    def __hash__(self) -> int:
        if not self._frozen:
            raise TypeError("unhashable type: mutable 'Attributes'")
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        state = "frozen " if self._frozen else ""
        return f"<{state}Attributes {self._data!r}>"


EMPTY_ATTRIBUTES = Attributes().frozen()


def attach(attributes: Attributes | Mapping[str, AttributeValue] | None) -> Attributes:
    """Return a frozen private copy suitable for storing on an entity or batch.

    Accepts an Attributes instance, any mapping of scalar values, or None.
    """
    if attributes is None:
        return EMPTY_ATTRIBUTES
    if isinstance(attributes, Attributes):
        return attributes.frozen()
    return Attributes(attributes).frozen()
