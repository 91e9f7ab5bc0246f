"""Abstract base for nnet2 network components.

WHY: An nnet2 network is a list of heterogeneous components, each with
its own on-disk fields. The loader needs one uniform way to decode any
of them once it has read the component's opening tag.

HOW: NnetComponent is an ABC with a ``kind`` class attribute (the tag
name without angle brackets) and a ``read`` classmethod that decodes
the component's fields from the stream. Concrete components are frozen
dataclasses.

To add a new component kind:
1. Create (or extend) a module in components/
2. Subclass NnetComponent as a frozen dataclass
3. Set ``kind`` and implement ``read()``
4. Register it in COMPONENTS in components/__init__.py

RULES:
- read() starts right after the opening tag and stops right before the
  closing tag; the loader handles both tags
- Components are never mutated after read() returns
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO, ClassVar


class NnetComponent(ABC):
    """Abstract base for all decodable nnet2 components."""

    kind: ClassVar[str] = ""

    @classmethod
    @abstractmethod
    def read(cls, stream: BinaryIO) -> "NnetComponent":
        """Decode this component's fields from ``stream``.

        Args:
            stream: Binary stream positioned just after ``<Kind>``.

        Returns:
            The decoded component.
        """
