from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class Locator:
    """
    Identity of a plugin or asset artifact.

    Ordering is (group, product, version); every listing and error message
    built from a set of locators is sorted with it.
    """

    group: str
    product: str
    version: str

    @classmethod
    def parse(cls, value: str) -> Locator:
        parts = value.split(":")
        if len(parts) != 3 or any(not part.strip() for part in parts):
            raise ValueError(f"locator must be of the form 'group:product:version', got {value!r}")
        return cls(group=parts[0], product=parts[1], version=parts[2])

    @property
    def group_path(self) -> str:
        return self.group.replace(".", "/")

    def same_product(self, other: Locator) -> bool:
        return self.group == other.group and self.product == other.product

    def __str__(self) -> str:
        return f"{self.group}:{self.product}:{self.version}"
